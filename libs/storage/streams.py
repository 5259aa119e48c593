"""
Bridges between HTTP bodies and storage streams.

``RequestBodyReader`` turns an async request body into the blocking
file-like object the MinIO SDK reads from a worker thread.
``ObjectStream`` wraps an open storage response and yields it in chunks.
Neither ever holds more than one chunk of the payload.
"""
import logging
from typing import AsyncIterator, Iterator, Optional

import anyio.from_thread
from urllib3.exceptions import HTTPError

from ..common.exceptions import StorageReadError

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


class RequestBodyReader:
    """
    Synchronous ``read(size)`` over an async byte iterator.

    Must be read from a worker thread started by anyio (for example via
    ``run_in_threadpool``); each refill hops back onto the event loop.
    """

    def __init__(self, chunks: AsyncIterator[bytes]):
        self._chunks = chunks.__aiter__()
        self._buffer = bytearray()
        self._eof = False
        self.bytes_read = 0

    async def _next_chunk(self) -> Optional[bytes]:
        try:
            return await self._chunks.__anext__()
        except StopAsyncIteration:
            return None

    def _fill(self) -> None:
        # skip empty chunks; starlette emits a trailing b""
        while not self._buffer and not self._eof:
            chunk = anyio.from_thread.run(self._next_chunk)
            if chunk is None:
                self._eof = True
            else:
                self._buffer += chunk

    def read(self, size: int = -1) -> bytes:
        if size == 0:
            return b""
        if size < 0:
            parts = []
            while True:
                self._fill()
                if not self._buffer:
                    break
                parts.append(bytes(self._buffer))
                self._buffer.clear()
            data = b"".join(parts)
        else:
            self._fill()
            data = bytes(self._buffer[:size])
            del self._buffer[:size]
        self.bytes_read += len(data)
        return data

    def readable(self) -> bool:
        return True


class ObjectStream:
    """An open object download. Close it, or drain ``iter_chunks``, to free the connection."""

    def __init__(
        self,
        body,
        bucket: str,
        object_name: str,
        content_type: Optional[str] = None,
        content_length: Optional[int] = None,
    ):
        self._body = body
        self.bucket = bucket
        self.object_name = object_name
        self.content_type = content_type or "application/octet-stream"
        self.content_length = content_length
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def iter_chunks(self, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[bytes]:
        try:
            while True:
                try:
                    chunk = self._body.read(chunk_size)
                except HTTPError as e:
                    logger.error(f"[fetch] Stream interrupted for {self.bucket}/{self.object_name}: {e}")
                    raise StorageReadError(
                        f"Stream interrupted: {e}",
                        operation="get_object",
                        bucket=self.bucket,
                        object_name=self.object_name,
                    ) from e
                if not chunk:
                    break
                yield chunk
        finally:
            self.close()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._body.close()
        release = getattr(self._body, "release_conn", None)
        if release is not None:
            release()
