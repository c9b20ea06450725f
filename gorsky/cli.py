from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from gorsky.config import get_settings
from gorsky.errors import BatchError, DirectoryError
from gorsky.logging_setup import configure_logging
from gorsky.services.batch import process

logger = logging.getLogger(__name__)


def build_parser(default_workers: int) -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(
		prog="gorsky",
		description="Make colour photos from Prokudin-Gorsky style triptych negatives.",
		epilog="examples:\n  gorsky image.tif\n  gorsky image.png --outdir processed_images",
		formatter_class=argparse.RawDescriptionHelpFormatter,
	)
	parser.add_argument("paths", nargs="+", help="Triptych negatives to colorize")
	parser.add_argument("--outdir", default=None, help="Result images will be stored in this folder (default: result)")
	parser.add_argument("--workers", type=int, default=default_workers, help="Maximum number of files processed at once")
	parser.add_argument("-v", "--verbose", action="store_true", help="Log alignment details")
	return parser


def main(argv: Optional[List[str]] = None) -> int:
	settings = get_settings()
	parser = build_parser(settings.max_workers)
	args = parser.parse_args(argv)
	if args.workers < 1:
		parser.error("--workers must be at least 1")

	configure_logging("DEBUG" if args.verbose else settings.log_level)
	outdir = Path(args.outdir) if args.outdir else settings.result_dir
	try:
		process(args.paths, outdir, args.workers, settings=settings)
	except DirectoryError as e:
		logger.error(str(e))
		return 1
	except BatchError as e:
		logger.error(str(e))
		return 1
	return 0


if __name__ == "__main__":
	sys.exit(main())
