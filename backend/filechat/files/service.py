"""File storage service for FileChat.

Handles upload naming and chunked storage on disk.
Files are stored in: {upload_dir}/{unix_millis}-{random}{ext}
"""
import logging
import os
import secrets
import time
from pathlib import Path
from typing import Optional
from urllib.parse import quote

from fastapi.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from ..errors import InternalError, UploadTooLargeError
from .schemas import DEFAULT_MIME_TYPE, MAX_FILE_SIZE_BYTES, UploadedFile

logger = logging.getLogger(__name__)

BASE36_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"
RANDOM_SUFFIX_LENGTH = 6
PARTIAL_SUFFIX = ".part"


def generate_upload_name(original_name: str, now_ms: Optional[int] = None) -> str:
    """Build a collision-resistant filename for an upload.

    The millisecond prefix keeps names sortable by upload time and the
    random base-36 suffix separates uploads landing in the same millisecond.
    Only the extension of the original filename is kept.

    Examples:
        >>> generate_upload_name("photo.PNG", now_ms=1700000000000)  # doctest: +SKIP
        '1700000000000-k3j9x2.PNG'
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    suffix = "".join(secrets.choice(BASE36_ALPHABET) for _ in range(RANDOM_SUFFIX_LENGTH))
    ext = file_extension(original_name)
    return f"{now_ms}-{suffix}{ext}"


def file_extension(original_name: Optional[str]) -> str:
    """Extension of the basename, from the last dot to the end.

    A dot that only opens the name (``.bashrc``) starts no extension, but
    further leading dots do not hide one: ``..png`` gives ``.png``.
    """
    base = os.path.basename(original_name or "")
    dot = base.rfind(".")
    if dot <= 0 or base == "..":
        return ""
    return base[dot:]


def build_public_url(origin: str, url_prefix: str, generated_name: str) -> str:
    """Join origin, static prefix and stored filename into a public URL."""
    return f"{origin.rstrip('/')}{url_prefix}/{quote(generated_name)}"


class UploadDirectory:
    """Handle on the directory uploads are written to and served from.

    In-progress uploads are staged in a sibling directory that is never
    served (``.<name>.partial`` next to ``path`` unless given), so partial
    bytes have no public URL. Both live on the same filesystem for the
    final rename.

    Created once at application start; ``ensure()`` is idempotent.
    """

    def __init__(self, path, staging_path=None) -> None:
        self.path = Path(path).resolve()
        if staging_path is None:
            self.staging_path = self.path.with_name(f".{self.path.name}.partial")
        else:
            self.staging_path = Path(staging_path).resolve()

    def ensure(self) -> "UploadDirectory":
        for directory in (self.path, self.staging_path):
            directory.mkdir(parents=True, exist_ok=True)
            if not directory.is_dir():
                raise NotADirectoryError(f"Upload path is not a directory: {directory}")
        return self

    def file_path(self, generated_name: str) -> Path:
        return self.path / generated_name

    def partial_path(self, generated_name: str) -> Path:
        return self.staging_path / (generated_name + PARTIAL_SUFFIX)

    def __repr__(self) -> str:
        return f"UploadDirectory({str(self.path)!r})"


class FileStorageService:
    """Service for storing uploads under generated names."""

    def __init__(
        self,
        directory: UploadDirectory,
        max_size_bytes: int = MAX_FILE_SIZE_BYTES,
        chunk_size: int = 1024 * 1024,
        url_prefix: str = "/uploads",
    ) -> None:
        self.directory = directory
        self.max_size_bytes = max_size_bytes
        self.chunk_size = chunk_size
        self.url_prefix = url_prefix

    async def save_upload(self, file: UploadFile, origin: str) -> UploadedFile:
        """Copy an uploaded file to disk and describe where it can be fetched.

        Bytes go to a ``.part`` file in the unserved staging directory and
        are renamed into place only after the whole file is written, so a
        failed, oversized or in-progress upload is never reachable by URL.

        Args:
            file: The multipart file part.
            origin: Scheme and host the public URL is built on.

        Returns:
            UploadedFile describing the stored upload.

        Raises:
            UploadTooLargeError: If the file exceeds ``max_size_bytes``.
            InternalError: If the filesystem write fails.
        """
        original_name = file.filename or ""
        generated_name = generate_upload_name(original_name)
        final_path = self.directory.file_path(generated_name)
        part_path = self.directory.partial_path(generated_name)

        try:
            size_bytes = await self._save_file_chunks(file, part_path)
            await run_in_threadpool(os.replace, part_path, final_path)
        except UploadTooLargeError:
            await self._discard(part_path)
            logger.info("Rejected upload %r: exceeds %d bytes", original_name, self.max_size_bytes)
            raise
        except OSError as exc:
            await self._discard(part_path)
            logger.error("Failed to store upload %r: %s", original_name, exc)
            raise InternalError("Failed to store file", detail=str(exc)) from exc
        except BaseException:
            await self._discard(part_path)
            raise

        logger.info("Saved upload: %s (%d bytes) as %s", original_name, size_bytes, generated_name)

        return UploadedFile(
            generated_name=generated_name,
            original_name=original_name,
            mime_type=file.content_type or DEFAULT_MIME_TYPE,
            size_bytes=size_bytes,
            storage_path=str(final_path),
            public_url=build_public_url(origin, self.url_prefix, generated_name),
        )

    async def _save_file_chunks(self, file: UploadFile, path: Path) -> int:
        total_size = 0
        fh = await run_in_threadpool(open, path, "wb")
        try:
            while True:
                chunk = await file.read(self.chunk_size)
                if not chunk:
                    break
                total_size += len(chunk)
                if total_size > self.max_size_bytes:
                    raise UploadTooLargeError(self.max_size_bytes)
                await run_in_threadpool(fh.write, chunk)
        finally:
            await run_in_threadpool(fh.close)
        return total_size

    @staticmethod
    async def _discard(path: Path) -> None:
        try:
            await run_in_threadpool(path.unlink, missing_ok=True)
        except OSError as exc:
            logger.warning("Could not remove partial upload %s: %s", path, exc)
