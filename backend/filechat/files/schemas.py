"""Pydantic schemas for file upload functionality.

- UploadedFile: complete information about a stored upload
- UploadResponse: API response after a successful upload

Uploads are stored flat in the upload directory under a generated name of the
form ``{unix_millis}-{random base36}{ext}``. The generated name is the only
value trusted for storage; the client's filename and MIME type are echoed
back for display.
"""
from pydantic import BaseModel, Field


# File size limit: 50MB
MAX_FILE_SIZE_BYTES = 50 * 1024 * 1024

# Slack allowed on the whole request body for multipart boundaries and part
# headers on top of the file ceiling.
MULTIPART_OVERHEAD_BYTES = 64 * 1024

DEFAULT_MIME_TYPE = "application/octet-stream"


class UploadedFile(BaseModel):
    """Metadata for a stored upload.

    Immutable once created; the file itself is owned by the filesystem.
    """
    generated_name: str = Field(..., description="Server-assigned filename on disk")
    original_name: str = Field(..., description="Filename supplied by the client")
    mime_type: str = Field(..., description="Client-declared MIME type")
    size_bytes: int = Field(..., description="File size in bytes")
    storage_path: str = Field(..., description="Absolute path of the stored file")
    public_url: str = Field(..., description="URL the file is served from")

    model_config = {"frozen": True}


class UploadResponse(BaseModel):
    """Response after successful file upload."""
    url: str = Field(..., description="Public URL of the stored file")
    name: str = Field(..., description="Original filename")
    type: str = Field(..., description="Client-declared MIME type")
