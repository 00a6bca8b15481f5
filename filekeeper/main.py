"""
filekeeper
- /upload : store a file plus optional custom metadata
- /files, /files/search : list and filter stored files
- /files/{filename}/metadata : read / merge-update metadata
- /download/{filename}, DELETE /files/{filename}
- /health
"""

import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException
from starlette.requests import Request
from starlette.responses import JSONResponse

from filekeeper.api.routes.files import router as files_router
from filekeeper.api.routes.health import router as health_router
from filekeeper.core.config import Settings, settings as default_settings
from filekeeper.core.errors import FileKeeperError
from filekeeper.core.logging import configure_logging
from filekeeper.services.filestore import FileRepository
from filekeeper.services.metadata import MetadataStore


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "Invalid request"


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings
    configure_logging(settings)

    app = FastAPI(title="filekeeper", version="0.1.0")
    app.state.settings = settings
    app.state.repository = FileRepository(settings.STORAGE_DIR)
    app.state.metadata = MetadataStore()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list, allow_credentials=True,
        allow_methods=["*"], allow_headers=["*"],
    )

    @app.exception_handler(FileKeeperError)
    async def _filekeeper_error(request: Request, exc: FileKeeperError):
        if exc.status_code >= 500:
            logging.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(HTTPException)
    async def _http_error(request: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)},
                            headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": _validation_message(exc)})

    app.include_router(files_router, tags=["files"])
    app.include_router(health_router, tags=["health"])
    return app


app = create_app()


def run():
    uvicorn.run(app, host=default_settings.HOST, port=default_settings.PORT)


if __name__ == "__main__":
    run()
