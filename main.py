# main.py
# Run with:  python main.py
#       or:  uvicorn --factory main:create_app --port 3000

import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import db
from api import router
from config import AppConfig, configure_logging, load_config
from errors import FormHouseError, InternalError
from repository import record_submission
from storage import build_storage
from storage_base import StorageAdapter
from submission import SubmissionHandler

logger = logging.getLogger(__name__)


def create_app(config: Optional[AppConfig] = None, storage: Optional[StorageAdapter] = None) -> FastAPI:
    """
    Build the FormHouse API. `storage` overrides the backend chosen from
    `config` (tests pass an in-memory one).
    """
    config = config or load_config()
    configure_logging(config.log_level)
    db.configure(config.database_url)

    if storage is None:
        storage = build_storage(config)
    if storage is None:
        logger.warning("Storage backend %r not configured - file uploads will fail", config.storage_provider)
    else:
        logger.info("Using %s storage for file uploads", storage.name)

    app = FastAPI(title="FormHouse API")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.config = config
    app.state.handler = SubmissionHandler(
        storage,
        config.max_file_size,
        provider=config.storage_provider,
        recorder=record_submission,
    )
    app.include_router(router)

    @app.exception_handler(FormHouseError)
    async def formhouse_error_handler(request: Request, exc: FormHouseError):
        if exc.status_code >= 500:
            logger.error("Error submitting form: %s: %s", exc.kind, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content=InternalError(str(exc)).to_dict())

    return app


if __name__ == "__main__":
    settings = load_config()
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port)
