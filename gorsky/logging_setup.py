import logging

LOG_FORMAT = '%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s'


def configure_logging(level: str = "INFO") -> None:
	"""Centralized logging configuration; call once from an entry point."""
	logging.basicConfig(
		level=getattr(logging, level.upper(), logging.INFO),
		format=LOG_FORMAT,
		datefmt='%H:%M:%S',
	)
