"""FileChat Backend Application.

Accepts file uploads, serves them back from a public static path, and relays
chat requests (optionally listing those files) to an OpenAI-compatible
completion service.

Modules:
    - files: multipart upload ingestion, naming and storage
    - chat: chat relay endpoint
    - ai_provider: prompt composition and the upstream HTTP client
    - errors: error taxonomy and JSON error payloads
    - config: YAML settings/secrets with environment overrides

Run with:
    uvicorn filechat.main:create_app --factory --port 3000
or:
    python -m filechat.main
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from filechat.ai_provider import CompletionProvider, OpenAIProvider
from filechat.chat.router import router as chat_router
from filechat.chat.service import ChatRelay
from filechat.config import AppConfig, get_config, resolve_api_key
from filechat.errors import UploadTooLargeError, install_error_handlers
from filechat.files.middleware import BodySizeLimitMiddleware
from filechat.files.router import router as files_router
from filechat.files.schemas import MULTIPART_OVERHEAD_BYTES
from filechat.files.service import FileStorageService, UploadDirectory

# Load environment variables from .env file
load_dotenv()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

# httpx/httpcore log every connection and request line.
for _noisy in ("httpx", "httpcore", "httpcore.http11", "httpcore.connection"):
    logging.getLogger(_noisy).setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


def _build_provider(config: AppConfig) -> OpenAIProvider:
    completion = config.completion
    return OpenAIProvider(
        base_url=completion.base_url,
        model=completion.model,
        max_tokens=completion.max_tokens,
        temperature=completion.temperature,
        timeout=completion.timeout_seconds,
    )


def create_app(
    config: Optional[AppConfig] = None,
    provider: Optional[CompletionProvider] = None,
) -> FastAPI:
    """Build the FastAPI application.

    The upload directory is created here, once, before the static mount that
    serves it. A missing API key is logged but does not stop startup; every
    chat request fails with a configuration error until one is set.
    """
    config = config or get_config()

    # Apply configured log level to root logger so that
    # `logging.level: "debug"` in filechat.settings.yaml activates DEBUG output.
    configured_level = getattr(logging, config.logging.level.upper(), None)
    if configured_level is not None:
        logging.getLogger().setLevel(configured_level)

    upload_dir = UploadDirectory(config.uploads.dir).ensure()
    logger.info("Upload directory ready: %s", upload_dir.path)

    if not resolve_api_key(config):
        logger.warning("Warning: OPENAI_API_KEY not set. /api/chat will fail without it.")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "Server running on http://%s:%s",
            config.server.host, config.server.port,
        )
        yield
        logger.info("Application shutdown complete")

    app = FastAPI(
        title="FileChat API",
        description="File uploads and an attachment-aware chat relay",
        version="0.1.0",
        lifespan=lifespan,
    )

    uploads = config.uploads
    app.state.config = config
    app.state.upload_directory = upload_dir
    app.state.public_base_url = uploads.public_base_url
    app.state.expose_error_detail = config.server.expose_error_detail
    app.state.storage_service = FileStorageService(
        upload_dir,
        max_size_bytes=uploads.max_file_size_bytes,
        chunk_size=uploads.chunk_size_bytes,
        url_prefix=uploads.url_prefix,
    )
    app.state.chat_relay = ChatRelay(
        provider or _build_provider(config),
        credential_provider=lambda: resolve_api_key(config),
    )

    install_error_handlers(app)

    app.add_middleware(
        BodySizeLimitMiddleware,
        path="/api/upload",
        max_body_bytes=uploads.max_file_size_bytes + MULTIPART_OVERHEAD_BYTES,
        error_factory=lambda: UploadTooLargeError(uploads.max_file_size_bytes),
    )
    app.add_middleware(
        BodySizeLimitMiddleware,
        path="/api/chat",
        max_body_bytes=config.chat.max_body_bytes,
    )

    app.include_router(files_router)
    app.include_router(chat_router)

    @app.get("/health")
    async def health() -> dict:
        """Health check endpoint.

        Returns:
            dict: Status object indicating the server is running.
        """
        return {"status": "ok"}

    app.mount(uploads.url_prefix, StaticFiles(directory=str(upload_dir.path)), name="uploads")

    return app


def main() -> None:
    import uvicorn

    config = get_config()
    uvicorn.run(
        "filechat.main:create_app",
        factory=True,
        host=config.server.host,
        port=config.server.port,
    )


if __name__ == "__main__":
    main()
