from __future__ import annotations

import logging
from typing import Tuple

import numpy as np

from gorsky.errors import UnsupportedFormat
from gorsky.services.planes import Plane

logger = logging.getLogger(__name__)

CUT_WIDTH_COEFF = 0.1
CUT_HEIGHT_COEFF = 0.1


def to_luma(frame: np.ndarray) -> np.ndarray:
	"""
	Convert a decoded frame to a 16-bit single-channel array [H,W].
	Colour frames are accepted only when every colour channel carries the same samples.
	"""
	if frame.ndim == 3:
		if frame.shape[2] == 1:
			frame = frame[..., 0]
		elif frame.shape[2] in (3, 4):
			color = frame[..., :3]
			if not (np.array_equal(color[..., 0], color[..., 1]) and np.array_equal(color[..., 0], color[..., 2])):
				raise UnsupportedFormat("Frame holds colour data; expected a grayscale negative")
			frame = color[..., 0]
		else:
			raise UnsupportedFormat(f"Unsupported channel count: {frame.shape[2]}")
	elif frame.ndim != 2:
		raise UnsupportedFormat(f"Unsupported frame shape: {frame.shape}")

	if frame.dtype == np.uint16:
		return frame
	if frame.dtype == np.uint8:
		return frame.astype(np.uint16) * 257
	if np.issubdtype(frame.dtype, np.floating):
		return (np.clip(frame, 0.0, 1.0) * 65535.0 + 0.5).astype(np.uint16)
	raise UnsupportedFormat(f"Unsupported sample type: {frame.dtype}")


def split_channels(
	frame: np.ndarray,
	cut_width_coeff: float = CUT_WIDTH_COEFF,
	cut_height_coeff: float = CUT_HEIGHT_COEFF,
) -> Tuple[Plane, Plane, Plane]:
	"""
	Slice a triptych frame into (red, green, blue) Planes.
	Bands run top to bottom as blue, green, red; each is trimmed by the cut margins on every side.
	"""
	luma = to_luma(frame)
	h, w = luma.shape[:2]
	third = h // 3
	cut_w = int(w * cut_width_coeff)
	cut_h = int(third * cut_height_coeff)
	out_w = w - 2 * cut_w
	out_h = third - 2 * cut_h
	if out_w <= 0 or out_h <= 0:
		raise UnsupportedFormat(f"Frame {w}x{h} is too small to split into three bands")

	bands = []
	for k in range(3):
		top = k * third + cut_h
		bands.append(Plane(luma[top:top + out_h, cut_w:cut_w + out_w]))
	blue, green, red = bands
	logger.debug(f"Split {w}x{h} frame into bands of {out_w}x{out_h} (cut {cut_w}, {cut_h})")
	return red, green, blue
