from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from gorsky.services.alignment import REFINE_RADIUS, SEARCH_RADIUS
from gorsky.services.pyramid import PYRAMID_FLOOR
from gorsky.services.splitter import CUT_HEIGHT_COEFF, CUT_WIDTH_COEFF

# Load environment variables
load_dotenv()


def _env_float(name: str, default: float) -> float:
	value = os.getenv(name)
	return float(value) if value else default


def _env_int(name: str, default: int) -> int:
	value = os.getenv(name)
	return int(value) if value else default


@dataclass(frozen=True)
class Settings:
	cut_width_coeff: float = CUT_WIDTH_COEFF
	cut_height_coeff: float = CUT_HEIGHT_COEFF
	pyramid_floor: int = PYRAMID_FLOOR
	search_radius: int = SEARCH_RADIUS
	refine_radius: int = REFINE_RADIUS
	max_workers: int = os.cpu_count() or 4
	result_dir: Path = Path("result")
	input_dir: Path = Path("input")
	jobs_dir: Path = Path("jobs")
	log_level: str = "INFO"

	def __post_init__(self) -> None:
		for name in ("cut_width_coeff", "cut_height_coeff"):
			if not 0.0 <= getattr(self, name) < 0.5:
				raise ValueError(f"{name} must be in [0, 0.5), got {getattr(self, name)}")
		if self.pyramid_floor < 1:
			raise ValueError(f"pyramid_floor must be >= 1, got {self.pyramid_floor}")
		if self.search_radius < 0 or self.refine_radius < 0:
			raise ValueError(f"Search radii must be >= 0, got {self.search_radius} / {self.refine_radius}")
		if self.max_workers < 1:
			raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")

	@classmethod
	def from_env(cls) -> "Settings":
		base = cls()
		return cls(
			cut_width_coeff=_env_float("GORSKY_CUT_WIDTH_COEFF", base.cut_width_coeff),
			cut_height_coeff=_env_float("GORSKY_CUT_HEIGHT_COEFF", base.cut_height_coeff),
			pyramid_floor=_env_int("GORSKY_PYRAMID_FLOOR", base.pyramid_floor),
			search_radius=_env_int("GORSKY_SEARCH_RADIUS", base.search_radius),
			refine_radius=_env_int("GORSKY_REFINE_RADIUS", base.refine_radius),
			max_workers=_env_int("GORSKY_MAX_WORKERS", base.max_workers),
			result_dir=Path(os.getenv("GORSKY_RESULT_DIR", str(base.result_dir))),
			input_dir=Path(os.getenv("GORSKY_INPUT_DIR", str(base.input_dir))),
			jobs_dir=Path(os.getenv("GORSKY_JOBS_DIR", str(base.jobs_dir))),
			log_level=os.getenv("GORSKY_LOG_LEVEL", base.log_level).upper(),
		)


def get_settings() -> Settings:
	return Settings.from_env()
