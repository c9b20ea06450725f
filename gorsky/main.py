from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from gorsky.config import get_settings
from gorsky.logging_setup import configure_logging
from gorsky.routers.colorize import router as colorize_router


def create_app() -> FastAPI:
	configure_logging(get_settings().log_level)
	app = FastAPI(title="Gorsky - Triptych Colorizer API", version="0.1.0")

	# Upload clients may be served from any origin; no cookies are exchanged
	app.add_middleware(
		CORSMiddleware,
		allow_origins=["*"],
		allow_credentials=False,
		allow_methods=["GET", "POST"],
		allow_headers=["*"],
	)
	app.include_router(colorize_router)
	return app


app = create_app()


if __name__ == "__main__":
	import uvicorn

	settings = get_settings()
	uvicorn.run("gorsky.main:app", host="127.0.0.1", port=8000, log_level=settings.log_level.lower())
