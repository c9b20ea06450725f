from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np

from gorsky.errors import NoOverlap
from gorsky.services.planes import ZERO_SHIFT, Plane, Shift

OPAQUE = np.uint16(65535)


def overlap_box(planes: Sequence[Plane], shifts: Sequence[Shift]) -> Tuple[int, int, int, int]:
	"""
	Intersection of the shifted planes in output coordinates, as (x0, y0, x1, y1).
	Plane p covers output x in [-dx_p, w_p - dx_p).
	"""
	x0 = max(-s.dx for s in shifts)
	y0 = max(-s.dy for s in shifts)
	x1 = min(p.width - s.dx for p, s in zip(planes, shifts))
	y1 = min(p.height - s.dy for p, s in zip(planes, shifts))
	if x1 <= x0 or y1 <= y0:
		raise NoOverlap(f"Shifted planes share no common region: x [{x0}, {x1}), y [{y0}, {y1})")
	return x0, y0, x1, y1


def composite(
	red: Plane,
	green: Plane,
	blue: Plane,
	green_shift: Shift,
	blue_shift: Shift,
	red_shift: Shift = ZERO_SHIFT,
) -> np.ndarray:
	"""
	Merge three planes into an RGBA uint16 image [H,W,4] cropped to their common overlap.
	Output (x, y) takes each channel from (x + dx, y + dy) of its plane.
	"""
	planes = (red, green, blue)
	shifts = (red_shift, green_shift, blue_shift)
	x0, y0, x1, y1 = overlap_box(planes, shifts)

	out = np.empty((y1 - y0, x1 - x0, 4), dtype=np.uint16)
	for c, (p, s) in enumerate(zip(planes, shifts)):
		out[..., c] = p.pixels[y0 + s.dy:y1 + s.dy, x0 + s.dx:x1 + s.dx]
	out[..., 3] = OPAQUE
	return out
