"""File upload and storage module for FileChat.

Uploads are written to a single directory under generated names and served
back unauthenticated from the static ``/uploads`` mount. Any file type is
accepted up to 50MB. Nothing is deduplicated or cleaned up here.
"""
from .schemas import MAX_FILE_SIZE_BYTES, UploadedFile, UploadResponse
from .service import (
    FileStorageService,
    UploadDirectory,
    build_public_url,
    file_extension,
    generate_upload_name,
)

__all__ = [
    "MAX_FILE_SIZE_BYTES",
    "UploadedFile",
    "UploadResponse",
    "FileStorageService",
    "UploadDirectory",
    "build_public_url",
    "file_extension",
    "generate_upload_name",
]
