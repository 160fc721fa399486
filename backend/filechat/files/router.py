"""FastAPI router for the file upload endpoint."""
import logging

from fastapi import APIRouter, Request
from starlette.datastructures import FormData, UploadFile

from ..errors import InternalError, RelayError, ValidationError
from .schemas import UploadResponse
from .service import FileStorageService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["files"])

FILE_FIELD = "file"


def get_storage_service(request: Request) -> FileStorageService:
    """Return the storage service built at application start."""
    return request.app.state.storage_service


def get_public_origin(request: Request) -> str:
    """Origin public URLs are built on.

    A configured ``public_base_url`` wins; otherwise the scheme and host
    observed on the inbound request are reflected.
    """
    configured = getattr(request.app.state, "public_base_url", None)
    if configured:
        return configured
    return f"{request.url.scheme}://{request.url.netloc}"


def get_single_file(form: FormData) -> UploadFile:
    """Pick the one file part named ``file`` out of a parsed form.

    Plain text fields under that name and parts without a filename are not
    files. More than one file part is rejected rather than dropping one.
    """
    files = [
        value for value in form.getlist(FILE_FIELD)
        if isinstance(value, UploadFile) and value.filename
    ]
    if not files:
        raise ValidationError("No file")
    if len(files) > 1:
        raise ValidationError("Only one file may be uploaded per request")
    return files[0]


@router.post("/upload", response_model=UploadResponse)
async def upload_file(request: Request):
    """Store a single file and return its public URL.

    Expects a multipart body with exactly one file part named ``file``.

    Returns:
        UploadResponse with the public URL, original filename and MIME type.

    Raises:
        ValidationError 400: If there is no file part, or more than one.
        UploadTooLargeError 413: If the file exceeds the size ceiling.
        InternalError 500: If the file cannot be written.
    """
    async with request.form() as form:
        file = get_single_file(form)

        service = get_storage_service(request)
        try:
            stored = await service.save_upload(file, get_public_origin(request))
        except RelayError:
            raise
        except Exception as exc:
            logger.exception("Upload failed: %s", exc)
            raise InternalError("Upload failed", detail=str(exc)) from exc

    return UploadResponse(
        url=stored.public_url,
        name=stored.original_name,
        type=stored.mime_type,
    )
