from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np


@dataclass(frozen=True)
class Plane:
	"""
	Immutable single-channel grid of 16-bit intensity samples.
	pixels is indexed [y, x] (row-major) and is flagged read-only on construction.
	"""
	pixels: np.ndarray

	def __post_init__(self) -> None:
		if self.pixels.ndim != 2:
			raise ValueError(f"Expected a 2-D sample grid, got shape {self.pixels.shape}")
		arr = np.array(self.pixels, dtype=np.uint16, copy=True)
		arr.setflags(write=False)
		object.__setattr__(self, "pixels", arr)

	@property
	def width(self) -> int:
		return int(self.pixels.shape[1])

	@property
	def height(self) -> int:
		return int(self.pixels.shape[0])

	@property
	def shape(self) -> Tuple[int, int]:
		return self.pixels.shape[:2]

	def __getitem__(self, xy: Tuple[int, int]) -> int:
		x, y = xy
		return int(self.pixels[y, x])


@dataclass(frozen=True)
class Shift:
	dx: int
	dy: int
	level_scores: Tuple[int, ...] = ()

	def as_tuple(self) -> Tuple[int, int]:
		return (self.dx, self.dy)


ZERO_SHIFT = Shift(dx=0, dy=0)
