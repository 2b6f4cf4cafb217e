"""Range-aware delivery of uploaded model files."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import AsyncIterator

import anyio
from fastapi import HTTPException, Request, status
from fastapi.responses import Response, StreamingResponse
from fastapi.staticfiles import StaticFiles

from .exceptions import DeliveryError, RangeNotSatisfiableError
from .ranges import parse_range
from .variants import SelectedFile, VariantResolver, is_safe_name

logger = logging.getLogger(__name__)

OPTIMIZED_HEADER = "X-Optimized"


async def iter_file_range(path: Path, start: int, length: int, chunk_size: int) -> AsyncIterator[bytes]:
    """Yield ``length`` bytes of ``path`` from ``start`` in bounded chunks.

    The handle is closed on every exit path, including cancellation when the
    client disconnects. Read errors end the stream early and are logged.
    """
    remaining = length
    try:
        async with await anyio.open_file(path, "rb") as handle:
            await handle.seek(start)
            while remaining > 0:
                chunk = await handle.read(min(chunk_size, remaining))
                if not chunk:
                    logger.warning("%s ended with %d bytes still expected", path.name, remaining)
                    break
                remaining -= len(chunk)
                yield chunk
    except OSError:
        logger.exception("Streaming %s failed with %d bytes outstanding", path.name, remaining)


class AssetDelivery:
    """Serves model files, preferring optimized variants, with Range support.

    Requests for other file types, or for models that exist in neither root,
    are handed to ``fallback`` (a static file responder over the upload root).
    """

    def __init__(
        self,
        resolver: VariantResolver,
        fallback: StaticFiles,
        *,
        cache_max_age: int = 60 * 60 * 24 * 365,
        chunk_size: int = 1024 * 1024,
    ) -> None:
        self.resolver = resolver
        self.fallback = fallback
        self.cache_max_age = cache_max_age
        self.chunk_size = chunk_size

    async def respond(self, file_name: str, request: Request) -> Response:
        if not self.resolver.is_model(file_name):
            return await self.fallback.get_response(file_name, request.scope)
        if not is_safe_name(file_name):
            logger.info("Refusing model path %r", file_name)
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)

        selected = self.resolver.resolve(file_name)
        if selected is None:
            return await self.fallback.get_response(file_name, request.scope)

        try:
            size = selected.path.stat().st_size
        except OSError as exc:
            raise DeliveryError(f"cannot stat {file_name}") from exc

        headers = self._base_headers(selected)
        try:
            byte_range = parse_range(request.headers.get("range"), size)
        except RangeNotSatisfiableError:
            headers["Content-Range"] = f"bytes */{size}"
            return Response(status_code=416, headers=headers, media_type=selected.content_type)

        headers["Cache-Control"] = f"public, max-age={self.cache_max_age}, immutable"
        if byte_range is None:
            status_code, start, length = 200, 0, size
        else:
            status_code, start, length = 206, byte_range.start, byte_range.length
            headers["Content-Range"] = byte_range.content_range(size)
        headers["Content-Length"] = str(length)

        logger.debug(
            "Serving %s (%s) status=%d start=%d length=%d",
            file_name,
            "optimized" if selected.optimized else "original",
            status_code,
            start,
            length,
        )
        if request.method == "HEAD":
            return Response(status_code=status_code, headers=headers, media_type=selected.content_type)
        return StreamingResponse(
            iter_file_range(selected.path, start, length, self.chunk_size),
            status_code=status_code,
            headers=headers,
            media_type=selected.content_type,
        )

    def _base_headers(self, selected: SelectedFile) -> dict[str, str]:
        return {
            "Accept-Ranges": "bytes",
            OPTIMIZED_HEADER: "true" if selected.optimized else "false",
        }
