# filekeeper/services/filestore.py
import logging
import os
import shutil
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO, Dict, List

from filekeeper.core.errors import BadRequest, NotFound, StorageError

_CHUNK = 1024 * 1024


def is_safe_name(name: str) -> bool:
    """
    A stored or original filename must be a single path component:
    no separators, no NUL, not '.' or '..'.
    """
    if not name or name in (".", ".."):
        return False
    return not any(c in name for c in ("/", "\\", "\x00"))


def file_type(name: str) -> str:
    return Path(name).suffix[1:] or "unknown"


def _utc(ts: float) -> datetime:
    return datetime.fromtimestamp(ts, tz=timezone.utc)


class FileRepository:
    """Flat directory of uploaded files, named "<epochMillis>-<originalName>"."""

    def __init__(self, root):
        self.root = Path(root)

    def ensure_dir(self) -> bool:
        if self.root.is_dir():
            return False
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Could not create storage directory: {e}") from e
        return True

    def path_for(self, name: str) -> Path:
        if not is_safe_name(name):
            raise NotFound("File not found")
        return self.root / name

    def save(self, original_name: str, stream: BinaryIO) -> str:
        if not is_safe_name(original_name):
            raise BadRequest(f"Invalid filename: {original_name!r}")
        self.ensure_dir()
        stored = f"{time.time_ns() // 1_000_000}-{original_name}"
        path = self.root / stored
        try:
            # "xb" refuses to clobber a same-millisecond upload of the same name
            with open(path, "xb") as out:
                shutil.copyfileobj(stream, out, _CHUNK)
        except OSError as e:
            logging.error(f"Write failed for {stored}: {e}")
            raise StorageError(f"Could not store {original_name}") from e
        return stored

    def list(self) -> List[str]:
        try:
            return os.listdir(self.root)
        except FileNotFoundError:
            return []
        except OSError as e:
            raise StorageError(f"Could not list storage directory: {e}") from e

    def exists(self, name: str) -> bool:
        return is_safe_name(name) and (self.root / name).is_file()

    def delete(self, name: str) -> None:
        path = self.path_for(name)
        try:
            path.unlink()
        except (FileNotFoundError, IsADirectoryError) as e:
            raise NotFound("File not found") from e
        except OSError as e:
            raise StorageError(f"Could not delete {name}: {e}") from e

    def open(self, name: str) -> BinaryIO:
        path = self.path_for(name)
        try:
            return open(path, "rb")
        except (FileNotFoundError, IsADirectoryError) as e:
            raise NotFound("File not found") from e
        except OSError as e:
            raise StorageError(f"Could not read {name}: {e}") from e

    def stat(self, name: str) -> Dict[str, object]:
        path = self.path_for(name)
        try:
            st = path.stat()
        except FileNotFoundError as e:
            raise NotFound("File not found") from e
        except OSError as e:
            raise StorageError(f"Could not stat {name}: {e}") from e
        # st_birthtime only exists where the filesystem tracks it
        created = getattr(st, "st_birthtime", None) or st.st_ctime
        return {
            "size": st.st_size,
            "created": _utc(created),
            "modified": _utc(st.st_mtime),
        }
