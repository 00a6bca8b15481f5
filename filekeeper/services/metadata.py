# filekeeper/services/metadata.py
import threading
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from filekeeper.core.errors import NotFound


class FileMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    size: int = Field(ge=0)
    created: datetime
    modified: datetime
    type: str
    original_name: str = Field(alias="originalName")
    custom_metadata: Dict[str, Any] = Field(default_factory=dict, alias="customMetadata")

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class MetadataStore:
    """
    In-memory map: stored filename -> FileMetadata.

    Nothing is persisted, so the store starts empty on every process start
    and entries for files already on disk are simply missing (orphans).
    All access goes through one lock; reads hand out copies.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._records: Dict[str, FileMetadata] = {}

    def put(self, name: str, record: FileMetadata) -> None:
        with self._lock:
            self._records[name] = record.model_copy(deep=True)

    def get(self, name: str) -> Optional[FileMetadata]:
        with self._lock:
            record = self._records.get(name)
            return record.model_copy(deep=True) if record is not None else None

    def merge(self, name: str, custom: Dict[str, Any]) -> FileMetadata:
        """Shallow-merge `custom` into the record's customMetadata."""
        with self._lock:
            current = self._records.get(name)
            if current is None:
                raise NotFound("File metadata not found")
            updated = current.model_copy(
                update={"custom_metadata": {**current.custom_metadata, **custom}},
                deep=True,
            )
            self._records[name] = updated
            return updated.model_copy(deep=True)

    def delete(self, name: str) -> None:
        with self._lock:
            self._records.pop(name, None)

    def all(self) -> Dict[str, FileMetadata]:
        with self._lock:
            return {k: v.model_copy(deep=True) for k, v in self._records.items()}

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._records
