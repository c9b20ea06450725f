from __future__ import annotations

from typing import Tuple

import cv2
import numpy as np

from gorsky.services.planes import Plane

PYRAMID_FLOOR = 100

Pyramid = Tuple[Plane, ...]


def _downsample(plane: Plane) -> Plane:
	# Area resampling to exactly half size (floor); pyrDown would round up.
	size = (plane.width // 2, plane.height // 2)
	return Plane(cv2.resize(np.array(plane.pixels), size, interpolation=cv2.INTER_AREA))


def build_pyramid(plane: Plane, floor: int = PYRAMID_FLOOR) -> Pyramid:
	"""
	Build pyramid from finest (level 0, the source plane) to coarsest (last).
	A level is added while the smaller side of the current coarsest level exceeds floor.
	"""
	if floor < 1:
		raise ValueError(f"Pyramid floor must be >= 1, got {floor}")
	levels = [plane]
	while min(levels[-1].width, levels[-1].height) > floor:
		levels.append(_downsample(levels[-1]))
	return tuple(levels)
