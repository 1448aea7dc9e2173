"""Completion-callback bridge between engine tasks and awaiting callers."""

import asyncio
import logging
from collections.abc import Callable
from functools import partial
from typing import Any

import aiohttp
from multidict import CIMultiDict
from yarl import URL

from src.adapters.driven.config.settings import DEFAULT_MAX_CONTENT_LENGTH
from src.core.errors import RequestCancelledError, RequestFailure
from src.ports.http_input import RequestDescriptor, ResponseBody

__all__ = ["execute"]

logger = logging.getLogger(__name__)

# Result marker for a request cancelled on the engine side.
_CANCELLED = object()

READ_CHUNK_SIZE = 64 * 1024


async def execute(
    session: aiohttp.ClientSession,
    descriptor: RequestDescriptor,
    *,
    max_content_length: int = DEFAULT_MAX_CONTENT_LENGTH,
    track: Callable[[asyncio.Task[Any]], None] | None = None,
) -> ResponseBody:
    """Run one GET on ``session`` and suspend until it settles.

    The request runs as its own task; its done-callback resumes the caller
    through a waiter future. Whichever of success, failure or cancellation
    happens first resumes the caller, exactly once.

    Args:
        session: Shared session executing the request.
        descriptor: Request to perform.
        max_content_length: Largest accepted body in bytes.
        track: Registers the request task with its owner, which may cancel
            it on shutdown.

    Returns:
        Raw response.

    Raises:
        RequestFailure: On network, protocol, timeout or size failure.
        RequestCancelledError: If the caller or the engine cancelled the request.
    """
    loop = asyncio.get_running_loop()
    waiter: asyncio.Future[Any] = loop.create_future()
    task = loop.create_task(_perform(session, descriptor, max_content_length))
    task.add_done_callback(partial(_resume, waiter))
    if track is not None:
        track(task)

    try:
        outcome = await waiter
    except asyncio.CancelledError as e:
        # Caller gave up: stop the request before reporting it.
        task.cancel()
        await asyncio.wait([task])
        logger.debug(f"GET {descriptor.url} cancelled by caller")
        raise RequestCancelledError("Request cancelled") from e

    if outcome is _CANCELLED:
        logger.debug(f"GET {descriptor.url} cancelled by engine")
        raise RequestCancelledError("Request cancelled")
    return outcome


def _resume(waiter: "asyncio.Future[Any]", task: "asyncio.Task[ResponseBody]") -> None:
    """Done-callback of the request task."""
    if task.cancelled():
        if not waiter.done():
            waiter.set_result(_CANCELLED)
        return

    # Marks the exception retrieved even when the waiter is already done.
    exc = task.exception()
    if waiter.done():
        return
    if exc is not None:
        waiter.set_exception(exc)
    else:
        waiter.set_result(task.result())


async def _perform(
    session: aiohttp.ClientSession,
    descriptor: RequestDescriptor,
    max_content_length: int,
) -> ResponseBody:
    url = descriptor.url
    logger.debug(f"{descriptor.method} {url}")
    try:
        async with session.request(
            descriptor.method,
            url,
            headers=dict(descriptor.headers),
            timeout=descriptor.client_timeout(session.timeout),
        ) as resp:
            if resp.content_length is not None and resp.content_length > max_content_length:
                raise RequestFailure(
                    f"GET {url} response too large: {resp.content_length} bytes"
                )
            body = await _read_limited(resp, url, max_content_length)
            status = resp.status
            headers = CIMultiDict(resp.headers)
    except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
        raise RequestFailure(f"GET {url} failed: {e!r}") from e

    return ResponseBody(url=url, status=status, headers=headers, body=body)


async def _read_limited(
    resp: aiohttp.ClientResponse,
    url: URL,
    max_content_length: int,
) -> bytes:
    """Read the body chunk by chunk, failing as soon as it exceeds the limit."""
    chunks: list[bytes] = []
    size = 0
    async for chunk in resp.content.iter_chunked(READ_CHUNK_SIZE):
        size += len(chunk)
        if size > max_content_length:
            raise RequestFailure(
                f"GET {url} response too large: over {max_content_length} bytes"
            )
        chunks.append(chunk)
    return b"".join(chunks)
