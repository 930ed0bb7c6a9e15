"""HTTP server for media upload/download conversion."""

from __future__ import annotations

import argparse
import logging
import os
from typing import TYPE_CHECKING
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict

from media_converter import __version__
from media_converter.converter.core import UploadOutcome, convert_upload
from media_converter.errors import ConversionError, ErrorKind
from media_converter.router import ConversionRouter, create_default_router

logger = logging.getLogger(__name__)

try:
    import fastapi
    from fastapi import File, Form, HTTPException, UploadFile, status
    from fastapi.responses import Response
except ModuleNotFoundError:  # pragma: no cover
    fastapi = None

try:
    import uvicorn
except ModuleNotFoundError:  # pragma: no cover
    uvicorn = None

if TYPE_CHECKING:
    from fastapi import FastAPI

MAX_DIAGNOSTICS_CHARS = 4000

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.UNSUPPORTED_CONVERSION: 415,
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.TIMEOUT: 504,
    ErrorKind.ENCODING_FAILED: 422,
    ErrorKind.IO_FAILURE: 500,
}


def _require_http_runtime() -> None:
    """Ensure HTTP server runtime dependencies are available."""
    if fastapi is None:
        raise RuntimeError(
            "fastapi is required to run media-converter-http. Install with extra: .[server]"
        )


class HealthResponse(BaseModel):
    """Health response payload."""

    model_config = ConfigDict(extra="forbid")

    status: str


class ReadyResponse(BaseModel):
    """Readiness response payload."""

    model_config = ConfigDict(extra="forbid")

    status: str
    strategies: list[str]


class FormatResponse(BaseModel):
    """One supported conversion target."""

    model_config = ConfigDict(extra="forbid")

    strategy: str
    source_family: str
    target_mime_type: str
    extension: str


class ErrorDetail(BaseModel):
    """Typed failure payload returned in ``detail``."""

    model_config = ConfigDict(extra="forbid")

    kind: ErrorKind
    message: str
    diagnostics: str = ""


def content_disposition(filename: str) -> str:
    """Build an attachment header safe for non-ASCII filenames."""
    ascii_name = filename.encode("ascii", "ignore").decode("ascii").replace('"', "")
    return (
        f'attachment; filename="{ascii_name or "converted"}"; '
        f"filename*=UTF-8''{quote(filename)}"
    )


def _error_detail(exc: ConversionError) -> dict[str, object]:
    return ErrorDetail(
        kind=exc.kind,
        message=exc.message,
        diagnostics=exc.diagnostics[-MAX_DIAGNOSTICS_CHARS:],
    ).model_dump(mode="json")


def _artifact_response(outcome: UploadOutcome) -> Response:
    artifact = outcome.artifact
    return Response(
        content=artifact.data,
        media_type=artifact.mime_type,
        headers={
            "Content-Disposition": content_disposition(artifact.filename),
            "X-Input-SHA256": outcome.input_sha256,
            "X-Output-SHA256": outcome.output_sha256,
        },
    )


def create_app(router: ConversionRouter | None = None) -> FastAPI:
    """Create converter daemon HTTP application.

    Parameters
    ----------
    router : ConversionRouter | None, optional
        Router shared by all requests; the default registry is built from
        environment settings when omitted.
    """
    _require_http_runtime()
    router = router or create_default_router()
    app = fastapi.FastAPI(
        title="Media Converter",
        version=__version__,
        description="Upload audio, video or image files and download them converted.",
    )
    app.state.router = router

    @app.get("/healthz", response_model=HealthResponse)
    async def healthz() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.get("/readyz", response_model=ReadyResponse)
    async def readyz() -> ReadyResponse:
        return ReadyResponse(status="ready", strategies=router.names())

    @app.get("/api/formats", response_model=list[FormatResponse])
    async def formats() -> list[FormatResponse]:
        return [
            FormatResponse(
                strategy=row.strategy,
                source_family=row.source_family,
                target_mime_type=row.target_mime_type,
                extension=row.extension,
            )
            for row in router.capabilities()
        ]

    # Sync handler: FastAPI runs it in the threadpool while the encoder blocks.
    @app.post("/api/convert")
    def convert_media(
        file: UploadFile = File(...),
        target_type: str = Form(..., alias="targetType"),
        source_type: str | None = Form(default=None, alias="sourceType"),
    ) -> Response:
        """Convert an uploaded file and return the converted bytes."""
        payload = file.file.read()
        if not payload:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=ErrorDetail(
                    kind=ErrorKind.INVALID_INPUT, message="uploaded file is empty"
                ).model_dump(mode="json"),
            )
        try:
            outcome = convert_upload(
                router,
                payload,
                target_type,
                source_mime_type=source_type or file.content_type,
                filename=file.filename,
            )
        except ConversionError as exc:
            raise HTTPException(
                status_code=STATUS_BY_KIND.get(exc.kind, 500),
                detail=_error_detail(exc),
            ) from exc
        except Exception as exc:  # pragma: no cover
            logger.exception("unexpected error during HTTP conversion upload")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="internal server error",
            ) from exc
        return _artifact_response(outcome)

    return app


def main() -> None:
    """Run converter daemon HTTP entrypoint."""
    _require_http_runtime()
    if uvicorn is None:
        raise RuntimeError("uvicorn is required to run media-converter-http")
    parser = argparse.ArgumentParser(description="Media converter HTTP server.")
    parser.add_argument(
        "--host",
        default=os.getenv("CONVERTER_HTTP_HOST", "0.0.0.0"),
    )
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.getenv("CONVERTER_HTTP_PORT", "8090")),
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("CONVERTER_LOG_LEVEL", "info"),
        choices=["debug", "info", "warning", "error"],
    )
    args = parser.parse_args()
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "media_converter.converter.http_server:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        log_level=args.log_level,
        reload=False,
    )


if __name__ == "__main__":
    main()
