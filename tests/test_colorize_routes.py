from __future__ import annotations

import cv2
import pytest
from fastapi.testclient import TestClient

from gorsky.config import Settings, get_settings
from gorsky.main import create_app


@pytest.fixture
def settings(tmp_path) -> Settings:
	return Settings(
		max_workers=2,
		result_dir=tmp_path / "result",
		input_dir=tmp_path / "input",
		jobs_dir=tmp_path / "jobs",
	)


@pytest.fixture
def client(settings):
	app = create_app()
	app.dependency_overrides[get_settings] = lambda: settings
	with TestClient(app) as client:
		yield client


@pytest.fixture
def plate_bytes(make_triptych) -> bytes:
	ok, buf = cv2.imencode(".png", make_triptych(band=150, canvas_size=260, green_shift=(3, 1), blue_shift=(-1, -2)))
	assert ok
	return buf.tobytes()


def test_upload_runs_job_to_completion(client, settings, plate_bytes) -> None:
	resp = client.post("/colorize/upload", files=[("files", ("Plate One.png", plate_bytes, "image/png"))])

	assert resp.status_code == 200
	body = resp.json()
	assert body["status"] == "queued"
	assert body["num_files"] == 1
	assert body["job_id"].startswith("plate-one_")

	status = client.get(body["status_endpoint"]).json()
	assert status["status"] == "completed"
	assert (status["succeeded"], status["total"]) == (1, 1)

	result = client.get(body["result_endpoint"]).json()
	files = result["files"]
	assert files[0]["green_shift"] == [3, 1]
	assert files[0]["blue_shift"] == [-1, -2]
	assert (settings.result_dir / body["job_id"] / "Plate One.png").exists()


def test_job_with_bad_file_reports_failure(client, plate_bytes) -> None:
	resp = client.post(
		"/colorize/upload",
		files=[
			("files", ("good.png", plate_bytes, "image/png")),
			("files", ("bad.png", b"not an image", "image/png")),
		],
	)
	job_id = resp.json()["job_id"]

	result = client.get(f"/colorize/result/{job_id}").json()

	assert result["status"] == "failed"
	assert (result["succeeded"], result["total"]) == (1, 2)
	errors = {f["path"].rsplit("/", 1)[-1]: f["error"] for f in result["files"]}
	assert errors["good.png"] is None
	assert errors["bad.png"].startswith("DecodeError")


def test_unknown_job_status(client) -> None:
	assert client.get("/colorize/status/nothing_here").json() == {"job_id": "nothing_here", "status": "unknown"}
	result = client.get("/colorize/result/nothing_here").json()
	assert result["message"] == "not completed yet"


def test_malformed_job_id_is_rejected(client) -> None:
	assert client.get("/colorize/status/Not.A.Job").status_code == 400


def test_same_filename_uploads_get_separate_jobs(client, settings, plate_bytes) -> None:
	first = client.post("/colorize/upload", files=[("files", ("plate.png", plate_bytes, "image/png"))]).json()
	second = client.post("/colorize/upload", files=[("files", ("plate.png", b"junk", "image/png"))]).json()

	assert first["job_id"] != second["job_id"]
	assert first["job_id"].startswith("plate_")

	kept = client.get(first["result_endpoint"]).json()
	assert kept["status"] == "completed"
	assert kept["succeeded"] == 1
	assert kept["files"][0]["error"] is None
	assert (settings.result_dir / first["job_id"] / "plate.png").exists()

	broken = client.get(second["result_endpoint"]).json()
	assert broken["status"] == "failed"
	assert broken["files"][0]["error"].startswith("DecodeError")
