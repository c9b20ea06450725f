from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Any, Dict, Optional

from gorsky.config import get_settings

_LOCK = threading.Lock()


def _status_path(job_id: str, jobs_dir: Optional[Path]) -> Path:
	jobs_dir = jobs_dir or get_settings().jobs_dir
	return Path(jobs_dir) / f"{job_id}.json"


def write_status(job_id: str, data: Dict[str, Any], jobs_dir: Optional[Path] = None) -> None:
	status_path = _status_path(job_id, jobs_dir)
	with _LOCK:
		status_path.parent.mkdir(parents=True, exist_ok=True)
		with status_path.open("w", encoding="utf-8") as f:
			json.dump(data, f, indent=2)


def read_status(job_id: str, jobs_dir: Optional[Path] = None) -> Dict[str, Any]:
	status_path = _status_path(job_id, jobs_dir)
	with _LOCK:
		if not status_path.exists():
			return {"job_id": job_id, "status": "unknown"}
		with status_path.open("r", encoding="utf-8") as f:
			return json.load(f)
