from fastapi import Request

from filekeeper.services.filestore import FileRepository
from filekeeper.services.metadata import MetadataStore


def get_repository(request: Request) -> FileRepository:
    return request.app.state.repository


def get_metadata_store(request: Request) -> MetadataStore:
    return request.app.state.metadata
