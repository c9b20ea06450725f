from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple, Union

import numpy as np

from gorsky.config import Settings
from gorsky.errors import BatchError, DirectoryError, GorskyError
from gorsky.services.alignment import align
from gorsky.services.compositor import composite
from gorsky.services.image_io import DecodedImage, decode_file, encode_file
from gorsky.services.planes import Shift
from gorsky.services.pyramid import build_pyramid
from gorsky.services.splitter import split_channels

logger = logging.getLogger(__name__)

Decoder = Callable[[Path], DecodedImage]
Encoder = Callable[[np.ndarray, str, Path], Path]


@dataclass
class FileOutcome:
	path: str
	output: Optional[str] = None
	error: Optional[str] = None
	green_shift: Optional[Tuple[int, int]] = None
	blue_shift: Optional[Tuple[int, int]] = None

	@property
	def ok(self) -> bool:
		return self.error is None

	def to_dict(self) -> dict:
		return {
			"path": self.path,
			"output": self.output,
			"error": self.error,
			"green_shift": list(self.green_shift) if self.green_shift else None,
			"blue_shift": list(self.blue_shift) if self.blue_shift else None,
		}


@dataclass
class BatchReport:
	total: int
	outcomes: List[FileOutcome] = field(default_factory=list)

	@property
	def succeeded(self) -> int:
		return sum(1 for o in self.outcomes if o.ok)

	@property
	def failed(self) -> int:
		return self.total - self.succeeded


class _Progress:
	"""Thread-safe success counter."""

	def __init__(self, total: int):
		self.total = total
		self._done = 0
		self._ok = 0
		self._lock = threading.Lock()

	def record(self, ok: bool) -> Tuple[int, int]:
		with self._lock:
			self._done += 1
			if ok:
				self._ok += 1
			return self._ok, self._done


def colorize_frame(frame: np.ndarray, settings: Optional[Settings] = None) -> Tuple[np.ndarray, Shift, Shift]:
	"""
	Run split -> pyramids -> align -> composite on one decoded triptych.
	The three pyramids are built in parallel, then green and blue are aligned
	against red in parallel; compositing waits for both.
	Returns (rgba_composite, green_shift, blue_shift).
	"""
	settings = settings or Settings()
	red, green, blue = split_channels(
		frame,
		cut_width_coeff=settings.cut_width_coeff,
		cut_height_coeff=settings.cut_height_coeff,
	)
	with ThreadPoolExecutor(max_workers=3) as pool:
		pyr_futures = [pool.submit(build_pyramid, p, settings.pyramid_floor) for p in (red, green, blue)]
		pyr_r, pyr_g, pyr_b = [f.result() for f in pyr_futures]
		green_future = pool.submit(align, pyr_r, pyr_g, settings.search_radius, settings.refine_radius)
		blue_future = pool.submit(align, pyr_r, pyr_b, settings.search_radius, settings.refine_radius)
		green_shift = green_future.result()
		blue_shift = blue_future.result()
	rgba = composite(red, green, blue, green_shift, blue_shift)
	return rgba, green_shift, blue_shift


def colorize_file(
	path: Union[str, Path],
	output_dir: Path,
	decoder: Decoder = decode_file,
	encoder: Encoder = encode_file,
	settings: Optional[Settings] = None,
) -> FileOutcome:
	path = Path(path)
	decoded = decoder(path)
	rgba, green_shift, blue_shift = colorize_frame(decoded.pixels, settings)
	destination = output_dir / path.name
	written = encoder(rgba, decoded.format, destination)
	logger.info(
		f"{path.name}: G shift ({green_shift.dx}, {green_shift.dy}), "
		f"B shift ({blue_shift.dx}, {blue_shift.dy}) -> {written}"
	)
	return FileOutcome(
		path=str(path),
		output=str(written),
		green_shift=green_shift.as_tuple(),
		blue_shift=blue_shift.as_tuple(),
	)


def _create_dir(path: Union[str, Path]) -> Path:
	try:
		abs_path = Path(path).resolve()
		abs_path.mkdir(parents=True, exist_ok=True)
	except OSError as e:
		raise DirectoryError(f"Could not create result directory {path}: {e}") from e
	return abs_path


def process(
	paths: Sequence[Union[str, Path]],
	output_dir: Union[str, Path],
	max_workers: int,
	*,
	decoder: Decoder = decode_file,
	encoder: Encoder = encode_file,
	settings: Optional[Settings] = None,
) -> BatchReport:
	"""
	Colorize every path into output_dir with at most max_workers files in flight.
	Per-file failures are logged and counted; BatchError is raised after the whole
	backlog has run if any file failed. DirectoryError aborts before any work.
	"""
	if max_workers < 1:
		raise ValueError(f"max_workers must be >= 1, got {max_workers}")
	out_dir = _create_dir(output_dir)
	report = BatchReport(total=len(paths))
	if not paths:
		return report

	progress = _Progress(len(paths))

	def _run(p: Union[str, Path]) -> FileOutcome:
		try:
			outcome = colorize_file(p, out_dir, decoder=decoder, encoder=encoder, settings=settings)
		except GorskyError as e:
			logger.error(f"Error processing file {p}: {e}")
			outcome = FileOutcome(path=str(p), error=f"{type(e).__name__}: {e}")
		except Exception as e:
			logger.exception(f"Unexpected error processing file {p}")
			outcome = FileOutcome(path=str(p), error=f"{type(e).__name__}: {e}")
		ok, done = progress.record(outcome.ok)
		logger.info(f"[{done}/{progress.total}] {p} {'ok' if outcome.ok else 'failed'} ({ok} succeeded)")
		return outcome

	workers = min(max_workers, len(paths))
	with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="gorsky") as executor:
		future_map = {executor.submit(_run, p): i for i, p in enumerate(paths)}
		outcomes: List[Optional[FileOutcome]] = [None] * len(paths)
		for future in as_completed(future_map):
			outcomes[future_map[future]] = future.result()
	report.outcomes = [o for o in outcomes if o is not None]

	logger.info(f"Job is done: {report.succeeded} of {report.total} files succeeded")
	if report.failed:
		raise BatchError(report)
	return report
