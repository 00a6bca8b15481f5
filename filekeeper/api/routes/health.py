import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from starlette.responses import JSONResponse

from filekeeper.api.deps import get_repository
from filekeeper.core.errors import StorageError
from filekeeper.services.filestore import FileRepository

router = APIRouter()


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@router.get("/health")
def health(repo: FileRepository = Depends(get_repository)):
    # also (re)creates the storage directory so uploads cannot fail on it
    try:
        created = repo.ensure_dir()
    except StorageError as e:
        logging.exception("Health check error")
        return JSONResponse(status_code=500, content={"status": "unhealthy", "error": e.message})
    if created:
        logging.info("Created storage directory for health check")
    return {"status": "healthy", "timestamp": _now_iso()}
