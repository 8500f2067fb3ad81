"""HTTP file provider using httpx: streamed GET for reads, streamed PUT for writes."""

import asyncio
import logging
from typing import AsyncIterator, Optional

import httpx

logger = logging.getLogger(__name__)


class HTTPBlockSource:
    """Body of a streamed GET response, one block per received chunk."""

    def __init__(self, response: httpx.Response):
        self._response: Optional[httpx.Response] = response
        self._chunks = response.aiter_bytes()
        self.reads_issued = 0

    def __aiter__(self):
        return self

    async def __anext__(self) -> bytes:
        if self._response is None:
            raise StopAsyncIteration
        self.reads_issued += 1
        try:
            block = await self._chunks.__anext__()
        except StopAsyncIteration:
            await self.aclose()
            raise
        except httpx.HTTPError as e:
            await self.aclose()
            raise IOError(f"GET body read failed: {e}")
        return block

    async def aclose(self) -> None:
        if self._response is not None:
            response, self._response = self._response, None
            await response.aclose()


class HTTPBlockSink:
    """Feeds blocks into the body of a streamed PUT request.

    The body is fed through a one-slot queue, so write() returns only once the
    uploader has taken the previous block.
    """

    def __init__(self, client: httpx.AsyncClient, url: str):
        self.url = url
        self._client = client
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=1)
        self._task: Optional[asyncio.Task] = asyncio.create_task(self._upload())
        self._closed = False
        self.writes_issued = 0

    async def _body(self) -> AsyncIterator[bytes]:
        while True:
            block = await self._queue.get()
            if block is None:
                return
            yield block

    async def _upload(self) -> None:
        try:
            response = await self._client.put(self.url, content=self._body())
        except httpx.RequestError as e:
            raise IOError(f"PUT request failed: {e}")
        if response.status_code >= 400:
            raise IOError(f"PUT request failed with status {response.status_code}")

    async def _offer(self, item: Optional[bytes]) -> None:
        """Hand an item to the uploader, failing if the upload ends first."""
        put = asyncio.ensure_future(self._queue.put(item))
        done, _ = await asyncio.wait({put, self._task}, return_when=asyncio.FIRST_COMPLETED)
        if put not in done:
            put.cancel()
            self._task.result()  # raises the upload error, if any
            raise IOError("PUT request finished before the body was complete")

    async def write(self, block: bytes) -> None:
        if self._closed:
            raise IOError("Write after close")
        self.writes_issued += 1
        await self._offer(block)

    async def abort(self) -> None:
        """Cancel the upload without terminating the body, so the server never sees it complete."""
        if self._closed:
            return
        self._closed = True
        self._task.cancel()
        await asyncio.wait({self._task})
        if not self._task.cancelled() and self._task.exception() is not None:
            logger.debug("PUT %s had already failed: %s", self.url, self._task.exception())
        logger.debug("PUT %s aborted after %d writes", self.url, self.writes_issued)

    async def close(self) -> None:
        """Terminate the body and wait for the server's response."""
        if self._closed:
            return
        self._closed = True
        if not self._task.done():
            await self._offer(None)
        await self._task
        logger.debug("PUT %s completed after %d writes", self.url, self.writes_issued)


class HTTPFileProvider:
    """Provider for http:// and https:// locations.

    open_write() only starts the PUT in the background; it does not wait for a
    connection. Connection and DNS errors therefore surface from the first
    write() (or from close() for an empty body), i.e. as WriteFailure in save().
    """

    def __init__(self, client: Optional[httpx.AsyncClient] = None, timeout: float = 60.0):
        self._client = client
        self._owns_client = client is None
        self.timeout = timeout

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def open_read(self, url: str) -> HTTPBlockSource:
        client = self._get_client()
        request = client.build_request("GET", str(url))
        try:
            response = await client.send(request, stream=True)
        except httpx.RequestError as e:
            raise IOError(f"GET request failed: {e}")

        if response.status_code >= 400:
            await response.aclose()
            raise IOError(f"GET request failed with status {response.status_code}")
        return HTTPBlockSource(response)

    async def open_write(self, url: str) -> HTTPBlockSink:
        return HTTPBlockSink(self._get_client(), str(url))

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self) -> None:
        """Close the client if this provider created it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None


def open_http_provider(client: Optional[httpx.AsyncClient] = None, timeout: float = 60.0) -> HTTPFileProvider:
    """Create an HTTP file provider."""
    return HTTPFileProvider(client=client, timeout=timeout)
