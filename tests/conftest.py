from __future__ import annotations

from typing import Callable, Tuple

import numpy as np
import pytest


def _blob_canvas(size: int, lo: int, hi: int, n_blobs: int, sigma: float, seed: int) -> np.ndarray:
	rng = np.random.default_rng(seed)
	yy, xx = np.mgrid[0:size, 0:size].astype(np.float64)
	canvas = np.zeros((size, size), dtype=np.float64)
	for _ in range(n_blobs):
		cx, cy = rng.uniform(lo, hi, size=2)
		amp = rng.uniform(20000.0, 60000.0)
		canvas += amp * np.exp(-((xx - cx) ** 2 + (yy - cy) ** 2) / (2.0 * sigma ** 2))
	return np.clip(canvas, 0, 65535).astype(np.uint16)


@pytest.fixture
def blob_canvas() -> Callable[..., np.ndarray]:
	"""Dark 16-bit canvas with Gaussian spots whose centres lie in [lo, hi)."""

	def factory(size: int = 460, lo: int = 140, hi: int = 320, n_blobs: int = 14,
				sigma: float = 4.0, seed: int = 7) -> np.ndarray:
		return _blob_canvas(size, lo, hi, n_blobs, sigma, seed)

	return factory


def _crop(canvas: np.ndarray, top: int, left: int, size: int, shift: Tuple[int, int]) -> np.ndarray:
	# Crop whose sample at (x + dx, y + dy) equals the reference crop's sample at (x, y).
	dx, dy = shift
	return canvas[top - dy:top - dy + size, left - dx:left - dx + size]


@pytest.fixture
def shifted_crop() -> Callable[..., np.ndarray]:
	return _crop


@pytest.fixture
def make_triptych(blob_canvas) -> Callable[..., np.ndarray]:
	"""
	Stack blue, green and red bands (top to bottom) cut from one canvas.
	Green and blue are displaced so that the aligner should report exactly
	green_shift / blue_shift against red.
	"""

	def factory(green_shift=(5, -7), blue_shift=(-9, 4), band: int = 300, seed: int = 7,
				canvas_size: int = 460) -> np.ndarray:
		offset = (canvas_size - band) // 2
		lo = offset + int(band * 0.2)
		hi = offset + band - int(band * 0.2)
		canvas = blob_canvas(size=canvas_size, lo=lo, hi=hi, seed=seed)
		red = _crop(canvas, offset, offset, band, (0, 0))
		green = _crop(canvas, offset, offset, band, green_shift)
		blue = _crop(canvas, offset, offset, band, blue_shift)
		return np.vstack([blue, green, red])

	return factory
