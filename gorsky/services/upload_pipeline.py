from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List

from gorsky.config import Settings
from gorsky.errors import BatchError
from gorsky.services.batch import process
from gorsky.services.status_store import write_status

logger = logging.getLogger(__name__)


def run_pipeline(job_id: str, files_meta: List[Dict[str, Any]], settings: Settings) -> None:
	try:
		# 1) Save originals to <input_dir>/<job_id>/
		write_status(job_id, {"job_id": job_id, "status": "saving", "step": "Save Images"}, settings.jobs_dir)
		in_dir = settings.input_dir / job_id
		in_dir.mkdir(parents=True, exist_ok=True)
		saved: List[Path] = []
		for fm in files_meta:
			p = in_dir / Path(fm["filename"]).name
			with p.open("wb") as f:
				f.write(fm["data"])
			saved.append(p)

		# 2) Colorize the whole upload as one batch
		write_status(job_id, {
			"job_id": job_id,
			"status": "processing",
			"step": "Align and Composite",
			"inputs": [p.name for p in saved],
		}, settings.jobs_dir)
		out_dir = settings.result_dir / job_id
		try:
			report = process(saved, out_dir, settings.max_workers, settings=settings)
		except BatchError as e:
			report = e.report

		# 3) Complete
		write_status(job_id, {
			"job_id": job_id,
			"status": "failed" if report.failed else "completed",
			"step": "Done",
			"succeeded": report.succeeded,
			"total": report.total,
			"files": [o.to_dict() for o in report.outcomes],
		}, settings.jobs_dir)
	except Exception as e:
		logger.exception(f"Job {job_id} aborted")
		write_status(job_id, {"job_id": job_id, "status": "error", "error": str(e)}, settings.jobs_dir)
