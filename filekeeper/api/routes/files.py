import json
import logging
import mimetypes
import os
from typing import Any, BinaryIO, Dict, Optional
from urllib.parse import quote

from fastapi import APIRouter, Body, Depends, File, Form, HTTPException, Query, UploadFile
from starlette.responses import StreamingResponse

from filekeeper.api.deps import get_metadata_store, get_repository
from filekeeper.core.errors import BadRequest, NotFound, StorageError
from filekeeper.services.filestore import FileRepository, file_type
from filekeeper.services.metadata import FileMetadata, MetadataStore
from filekeeper.services.search import SearchCriteria, filter_files, join_listing

router = APIRouter()

_CHUNK = 64 * 1024


def _parse_custom_metadata(raw: Optional[str]) -> Dict[str, Any]:
    if not raw:
        return {}
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as e:
        raise BadRequest(f"Invalid metadata JSON: {e.msg}") from e
    if not isinstance(value, dict):
        raise BadRequest("Metadata must be a JSON object")
    return value


def _attachment(name: str) -> str:
    quoted = quote(name)
    if quoted != name:
        return f"attachment; filename*=utf-8''{quoted}"
    return f'attachment; filename="{name}"'


def _iter_file(fh: BinaryIO):
    with fh:
        while True:
            chunk = fh.read(_CHUNK)
            if not chunk:
                break
            yield chunk


def _require_file(repo: FileRepository, filename: str) -> None:
    if not repo.exists(filename):
        raise NotFound("File not found")


@router.post("/upload")
def upload(
    file: Optional[UploadFile] = File(None),
    metadata: Optional[str] = Form(None, description="JSON object merged into customMetadata"),
    repo: FileRepository = Depends(get_repository),
    store: MetadataStore = Depends(get_metadata_store),
):
    if file is None or not file.filename:
        raise BadRequest("No file uploaded")
    custom = _parse_custom_metadata(metadata)

    try:
        stored = repo.save(file.filename, file.file)
        stat = repo.stat(stored)
    except StorageError:
        logging.exception("Upload error")
        raise HTTPException(status_code=500, detail="Error uploading file")

    record = FileMetadata(
        **stat,
        type=file_type(stored),
        original_name=file.filename,
        custom_metadata=custom,
    )
    store.put(stored, record)
    logging.info(f"File uploaded: {stored}")
    return {
        "message": "File uploaded successfully",
        "filename": stored,
        "metadata": record.to_json(),
    }


@router.get("/files")
def list_files(
    repo: FileRepository = Depends(get_repository),
    store: MetadataStore = Depends(get_metadata_store),
):
    try:
        names = repo.list()
    except StorageError:
        logging.exception("Error listing files")
        raise HTTPException(status_code=500, detail="Error listing files")
    return join_listing(names, store.all())


@router.get("/files/search")
def search_files(
    query: Optional[str] = Query(None),
    type: Optional[str] = Query(None),
    min_size: Optional[str] = Query(None, alias="minSize"),
    max_size: Optional[str] = Query(None, alias="maxSize"),
    date_from: Optional[str] = Query(None, alias="dateFrom"),
    date_to: Optional[str] = Query(None, alias="dateTo"),
    repo: FileRepository = Depends(get_repository),
    store: MetadataStore = Depends(get_metadata_store),
):
    criteria = SearchCriteria.from_params(query, type, min_size, max_size, date_from, date_to)
    try:
        entries = join_listing(repo.list(), store.all())
        return filter_files(entries, criteria)
    except Exception:
        logging.exception("Search error")
        raise HTTPException(status_code=500, detail="Error searching files")


@router.get("/files/{filename}/metadata")
def get_metadata(
    filename: str,
    repo: FileRepository = Depends(get_repository),
    store: MetadataStore = Depends(get_metadata_store),
):
    _require_file(repo, filename)
    record = store.get(filename)
    if record is None:
        raise NotFound("File metadata not found")
    return record.to_json()


@router.patch("/files/{filename}/metadata")
def update_metadata(
    filename: str,
    body: Optional[Dict[str, Any]] = Body(None, description="Partial customMetadata, shallow-merged"),
    repo: FileRepository = Depends(get_repository),
    store: MetadataStore = Depends(get_metadata_store),
):
    _require_file(repo, filename)
    record = store.merge(filename, body or {})
    logging.info(f"Updated metadata for file: {filename}")
    return record.to_json()


@router.get("/download/{filename}")
def download(filename: str, repo: FileRepository = Depends(get_repository)):
    fh = repo.open(filename)
    try:
        size = os.fstat(fh.fileno()).st_size
    except OSError as e:
        fh.close()
        raise StorageError(f"Could not read {filename}: {e}") from e
    headers = {
        "Content-Disposition": _attachment(filename),
        "Content-Length": str(size),
    }
    media_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"
    return StreamingResponse(_iter_file(fh), media_type=media_type, headers=headers)


@router.delete("/files/{filename}")
def delete_file(
    filename: str,
    repo: FileRepository = Depends(get_repository),
    store: MetadataStore = Depends(get_metadata_store),
):
    repo.delete(filename)
    store.delete(filename)
    logging.info(f"File deleted: {filename}")
    return {"message": "File deleted successfully"}
