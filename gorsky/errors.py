from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
	from gorsky.services.batch import BatchReport


class GorskyError(Exception):
	"""Base class for every error raised by the colorizer."""


class NotFound(GorskyError, FileNotFoundError):
	pass


class DecodeError(GorskyError):
	pass


class UnsupportedFormat(DecodeError):
	"""Decoded frame cannot be represented as single-channel luma."""


class AlignmentError(GorskyError, ValueError):
	pass


class NoOverlap(GorskyError):
	pass


class EncodeError(GorskyError):
	pass


class DirectoryError(GorskyError):
	pass


class BatchError(GorskyError):
	def __init__(self, report: "BatchReport"):
		self.report = report
		super().__init__(
			f"{report.failed} of {report.total} files failed; see log for per-file diagnostics"
		)
