"""FastAPI surface for GIF2SpriteSheet processing."""

from __future__ import annotations

import io
import json
import logging
import os
from dataclasses import dataclass
from typing import Optional

from fastapi import FastAPI, File, Form, HTTPException, Request, Response, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator
from starlette.concurrency import run_in_threadpool

from ..core import DEFAULT_OUTPUT_NAME, RenderConfig, SpriteSheet
from ..core import gif_loader, spritesheet_builder
from ..core.errors import InvalidImageError, ProcessingError, ValidationError
from ..utils import validators

logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 50 * 1024 * 1024  # 50MB guardrail
MAX_OUTPUT_SIZE = 8192
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("G2S_ALLOWED_ORIGINS", "http://localhost:8000").split(",")
    if origin.strip()
]


class GenerationRequest(BaseModel):
    """Incoming settings payload for spritesheet generation."""

    output_size: int = Field(1024, ge=1, le=MAX_OUTPUT_SIZE)
    columns: Optional[int] = Field(None, ge=1)
    frame_skip: int = Field(0, ge=0)
    preserve_aspect: bool = False
    pixel_perfect: bool = False
    background_color: Optional[tuple[int, int, int, int]] = None

    @field_validator("background_color", mode="before")
    @classmethod
    def _parse_color(cls, value):
        if value in (None, "", "null"):
            return None
        if isinstance(value, (list, tuple)):
            if len(value) == 3:
                return (*value, 255)
            return tuple(value)
        if isinstance(value, str):
            return validators.parse_background(value)
        raise ValueError("Color must be 'transparent', a color name or R,G,B[,A]")

    @field_validator("columns", mode="before")
    @classmethod
    def _normalize_columns(cls, value):
        if value == "":
            return None
        return value

    def to_config(self) -> RenderConfig:
        return RenderConfig(
            output_size=self.output_size,
            columns=self.columns,
            frame_skip=self.frame_skip,
            preserve_aspect=self.preserve_aspect,
            pixel_perfect=self.pixel_perfect,
            background_color=self.background_color,
        )


@dataclass
class GenerationResult:
    png: bytes
    sheet: SpriteSheet


def create_app() -> FastAPI:
    app = FastAPI(title="GIF2SpriteSheet Web", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition", "X-Grid-Columns", "X-Grid-Rows", "X-Frame-Count"],
    )

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/spritesheet")
    async def generate_spritesheet(
        request: Request,
        file: UploadFile = File(...),
        settings: str = Form("{}"),
    ) -> Response:
        try:
            payload = json.loads(settings) if settings else {}
        except json.JSONDecodeError as exc:
            raise HTTPException(status_code=400, detail=f"Invalid settings JSON: {exc}") from exc

        try:
            request_settings = GenerationRequest.model_validate(payload)
        except (PydanticValidationError, ValidationError) as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc

        if not validators.is_gif_name(file.filename):
            raise HTTPException(status_code=400, detail="Please upload a GIF file")
        _enforce_size_limit(request)
        data = _read_upload(file)

        try:
            result = await run_in_threadpool(_run_generation, data, file.filename, request_settings.to_config())
        except (InvalidImageError, ValidationError, ProcessingError) as exc:
            logger.info("Rejected %s: %s", file.filename, exc)
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        return Response(
            content=result.png,
            media_type="image/png",
            headers={
                "Content-Disposition": f'attachment; filename="{DEFAULT_OUTPUT_NAME}"',
                "X-Grid-Columns": str(result.sheet.layout.columns),
                "X-Grid-Rows": str(result.sheet.layout.rows),
                "X-Frame-Count": str(result.sheet.frame_count),
            },
        )

    return app


def _run_generation(data: bytes, filename: str, config: RenderConfig) -> GenerationResult:
    """Whole pass in one unit so callers never observe a partial sheet."""

    source = gif_loader.open_gif_bytes(data, filename)
    try:
        sheet = spritesheet_builder.compose_sprite_sheet(source, config)
    finally:
        source.close()
    buffer = io.BytesIO()
    sheet.image.save(buffer, format="PNG")
    logger.info("Generated %s-frame sheet from %s", sheet.frame_count, filename)
    return GenerationResult(png=buffer.getvalue(), sheet=sheet)


def _read_upload(file: UploadFile) -> bytes:
    """Read the upload into memory, refusing anything over the size cap."""

    chunks = []
    written = 0
    while True:
        chunk = file.file.read(1024 * 1024)
        if not chunk:
            break
        written += len(chunk)
        if written > MAX_UPLOAD_BYTES:
            raise HTTPException(status_code=413, detail="File too large")
        chunks.append(chunk)
    return b"".join(chunks)


def _enforce_size_limit(request: Request) -> None:
    """Simple guardrail on upload size based on Content-Length."""

    content_length = request.headers.get("content-length")
    if not content_length:
        return
    try:
        size = int(content_length)
    except ValueError:
        return
    if size > MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=413, detail="Upload exceeds limit")


app = create_app()


if __name__ == "__main__":  # pragma: no cover
    import uvicorn

    uvicorn.run("gif2spritesheet.web.server:app", host="0.0.0.0", port=8000, reload=True)
