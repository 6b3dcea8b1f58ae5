from __future__ import annotations
import asyncio
import base64
import re
import time
from typing import Protocol
from urllib.parse import quote
from minio.error import S3Error
from urllib3.exceptions import HTTPError as Urllib3HTTPError
from gateway.errors import FileStorageError
from gateway.schemas.submission import StoredFile
from gateway.services.storage import ObjectStore
from gateway.services.validation import IncomingFile

INLINE_MAX_FILE_BYTES = 200 * 1024  # keeps base64 payloads inside a single document row
OBJECT_MAX_FILE_BYTES = 5 * 1024 * 1024

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class FileStorageBackend(Protocol):
    max_file_bytes: int

    async def store(self, submission_id: str, upload: IncomingFile) -> StoredFile: ...

    async def read(self, stored: StoredFile) -> tuple[bytes, str]: ...

    async def delete(self, stored: StoredFile) -> None: ...


def safe_filename(name: str) -> str:
    base = name.replace("\\", "/").rsplit("/", 1)[-1]
    cleaned = _UNSAFE_CHARS.sub("_", base).strip("._")
    return cleaned or "file"


def object_key(submission_id: str, filename: str, now_ms: int | None = None) -> str:
    ts = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"submissions/{submission_id}/{ts}_{safe_filename(filename)}"


class InlineFileStorage:
    """Attachments live on the submission itself as data URIs."""

    def __init__(self, max_file_bytes: int = INLINE_MAX_FILE_BYTES):
        self.max_file_bytes = max_file_bytes

    async def store(self, submission_id: str, upload: IncomingFile) -> StoredFile:
        payload = base64.b64encode(upload.data).decode("ascii")
        return StoredFile(
            name=upload.name,
            size=upload.size,
            type=upload.type,
            content=f"data:{upload.type};base64,{payload}",
        )

    async def read(self, stored: StoredFile) -> tuple[bytes, str]:
        if not stored.content or not stored.content.startswith("data:"):
            raise FileStorageError(f"{stored.name} has no inline content")
        header, _, payload = stored.content.partition(",")
        mime = header[len("data:"):].split(";", 1)[0] or stored.type
        try:
            return base64.b64decode(payload, validate=True), mime
        except ValueError as e:
            raise FileStorageError(f"{stored.name} has corrupt inline content") from e

    async def delete(self, stored: StoredFile) -> None:
        # nothing outside the document
        return None


class ObjectFileStorage:
    """Attachments uploaded to an S3 bucket; the document keeps only a URL and object path."""

    def __init__(self, store: ObjectStore, public_base_url: str, max_file_bytes: int = OBJECT_MAX_FILE_BYTES):
        self.store_client = store
        self.public_base_url = public_base_url.rstrip("/")
        self.max_file_bytes = max_file_bytes

    def url_for(self, key: str) -> str:
        return f"{self.public_base_url}/{self.store_client.bucket}/{quote(key)}"

    async def store(self, submission_id: str, upload: IncomingFile) -> StoredFile:
        key = object_key(submission_id, upload.name)
        try:
            await asyncio.to_thread(self.store_client.put_bytes, key, upload.data, upload.type)
        except (S3Error, Urllib3HTTPError) as e:
            raise FileStorageError(f"upload failed for {key}") from e
        return StoredFile(name=upload.name, size=upload.size, type=upload.type, url=self.url_for(key), path=key)

    async def read(self, stored: StoredFile) -> tuple[bytes, str]:
        if not stored.path:
            raise FileStorageError(f"{stored.name} has no object path")
        try:
            return await asyncio.to_thread(self.store_client.get_bytes, stored.path)
        except (FileNotFoundError, S3Error, Urllib3HTTPError) as e:
            raise FileStorageError(f"read failed for {stored.path}") from e

    async def delete(self, stored: StoredFile) -> None:
        if not stored.path:
            return
        try:
            await asyncio.to_thread(self.store_client.remove, stored.path)
        except (S3Error, Urllib3HTTPError) as e:
            raise FileStorageError(f"delete failed for {stored.path}") from e
