from __future__ import annotations

import re
import uuid
from datetime import datetime
from pathlib import Path
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, File, HTTPException, UploadFile

from gorsky.config import Settings, get_settings
from gorsky.services.status_store import read_status, write_status
from gorsky.services.upload_pipeline import run_pipeline


router = APIRouter(prefix="/colorize", tags=["colorize"])


_UNSAFE = re.compile(r"[^a-z0-9_-]+")
_JOB_ID = re.compile(r"[a-z0-9][a-z0-9_-]*")


def _file_slug(filename: str) -> str:
	# Lower-cased stem with anything outside [a-z0-9_-] collapsed to one dash
	return _UNSAFE.sub("-", Path(filename).stem.lower()).strip("-_")


def _new_job_id(filenames: List[str]) -> str:
	"""<first file stem>_<ddmmyyyy_hhmmss>_<8 hex chars>; the random suffix keeps same-second uploads apart."""
	stem = _file_slug(filenames[0]) if filenames else ""
	stamp = datetime.now().strftime("%d%m%Y_%H%M%S")
	return f"{stem or 'job'}_{stamp}_{uuid.uuid4().hex[:8]}"


def _checked_job_id(job_id: str) -> str:
	if not _JOB_ID.fullmatch(job_id):
		raise HTTPException(status_code=400, detail="Invalid job id")
	return job_id


@router.post("/upload", summary="Upload triptych negatives and start background colorizing")
async def upload(
	background_tasks: BackgroundTasks,
	files: List[UploadFile] = File(...),
	settings: Settings = Depends(get_settings),
):
	files_meta = []
	for f in files:
		data = await f.read()
		files_meta.append({"filename": f.filename or "negative.png", "data": data})
	filenames = [m["filename"] for m in files_meta]
	job_id = _new_job_id(filenames)
	write_status(job_id, {"job_id": job_id, "status": "queued", "step": "Queued"}, settings.jobs_dir)
	background_tasks.add_task(run_pipeline, job_id, files_meta, settings)
	return {
		"job_id": job_id,
		"status": "queued",
		"num_files": len(files_meta),
		"filenames": filenames,
		"status_endpoint": f"/colorize/status/{job_id}",
		"result_endpoint": f"/colorize/result/{job_id}",
	}


@router.get("/status/{job_id}", summary="Get job status")
def status(job_id: str, settings: Settings = Depends(get_settings)):
	return read_status(_checked_job_id(job_id), settings.jobs_dir)


@router.get("/result/{job_id}", summary="Get colorized outputs and channel shifts")
def result(job_id: str, settings: Settings = Depends(get_settings)):
	data = read_status(_checked_job_id(job_id), settings.jobs_dir)
	if data.get("status") not in ("completed", "failed"):
		return {"job_id": job_id, "status": data.get("status"), "message": "not completed yet"}
	return {
		"job_id": job_id,
		"status": data.get("status"),
		"succeeded": data.get("succeeded"),
		"total": data.get("total"),
		"files": data.get("files", []),
	}
