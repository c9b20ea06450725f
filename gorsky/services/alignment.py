from __future__ import annotations

import logging
from typing import List, Sequence, Tuple

import numpy as np

from gorsky.errors import AlignmentError
from gorsky.services.planes import Plane, Shift

logger = logging.getLogger(__name__)

SEARCH_RADIUS = 30
REFINE_RADIUS = 2


def _overlap(stay: np.ndarray, mov: np.ndarray, dx: int, dy: int) -> Tuple[np.ndarray, np.ndarray]:
	"""
	Return the views of stay and mov that pair stay[y, x] with mov[y + dy, x + dx].
	Views are empty when the shift leaves no overlap.
	"""
	h, w = stay.shape[:2]
	xs0 = max(0, -dx)
	ys0 = max(0, -dy)
	xs1 = min(w, w - dx)
	ys1 = min(h, h - dy)
	if xs1 <= xs0 or ys1 <= ys0:
		return stay[:0, :0], mov[:0, :0]
	return (
		stay[ys0:ys1, xs0:xs1],
		mov[ys0 + dy:ys1 + dy, xs0 + dx:xs1 + dx],
	)


def correlation_score(stay: np.ndarray, mov: np.ndarray, dx: int, dy: int) -> int:
	"""
	Unnormalized cross-correlation of stay with mov translated by (dx, dy).
	Both arrays must already be int64 so the sum cannot overflow on 16-bit samples.
	"""
	a, b = _overlap(stay, mov, dx, dy)
	if a.size == 0:
		return 0
	return int(np.einsum("ij,ij->", a, b))


def _search_level(
	stay: np.ndarray,
	mov: np.ndarray,
	x_range: Tuple[int, int],
	y_range: Tuple[int, int],
) -> Tuple[int, int, int]:
	best_score = -1
	best_dx = best_dy = 0
	# dx outer, dy inner; strict > keeps the first maximum found
	for dx in range(x_range[0], x_range[1] + 1):
		for dy in range(y_range[0], y_range[1] + 1):
			score = correlation_score(stay, mov, dx, dy)
			if score > best_score:
				best_score = score
				best_dx = dx
				best_dy = dy
	return best_dx, best_dy, best_score


def _check_pyramids(stay: Sequence[Plane], shift: Sequence[Plane]) -> None:
	if len(stay) == 0 or len(stay) != len(shift):
		raise AlignmentError(f"Pyramid depth mismatch: {len(stay)} vs {len(shift)}")
	for level, (a, b) in enumerate(zip(stay, shift)):
		if a.shape != b.shape:
			raise AlignmentError(f"Level {level} shape mismatch: {a.shape} vs {b.shape}")


def align(
	stay: Sequence[Plane],
	shift: Sequence[Plane],
	search_radius: int = SEARCH_RADIUS,
	refine_radius: int = REFINE_RADIUS,
) -> Shift:
	"""
	Estimate the integer translation (dx, dy) that best matches shift onto stay.
	Pyramids are ordered finest (index 0) to coarsest. The search starts with a
	[-search_radius, search_radius] window at the coarsest level; each finer level
	searches +-refine_radius around twice the previous best.
	Sampling shift at (x + dx, y + dy) lines it up with stay at (x, y).
	"""
	_check_pyramids(stay, shift)
	levels = len(stay)

	x_range = (-search_radius, search_radius)
	y_range = (-search_radius, search_radius)
	dx = dy = 0
	level_scores: List[int] = []

	for li in range(levels - 1, -1, -1):  # coarse -> fine
		a = stay[li].pixels.astype(np.int64)
		b = shift[li].pixels.astype(np.int64)
		dx, dy, score = _search_level(a, b, x_range, y_range)
		level_scores.append(score)
		logger.debug(f"Level {li} ({a.shape[1]}x{a.shape[0]}): best ({dx}, {dy}) score={score}")
		if li != 0:
			x_range = (2 * dx - refine_radius, 2 * dx + refine_radius)
			y_range = (2 * dy - refine_radius, 2 * dy + refine_radius)

	return Shift(dx=int(dx), dy=int(dy), level_scores=tuple(level_scores))
