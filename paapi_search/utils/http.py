from __future__ import annotations

import json
import logging
from typing import Any, Dict, Tuple

import aiohttp
from aiohttp import ClientSession, ClientTimeout

logger = logging.getLogger(__name__)


async def post_json(
    session: ClientSession,
    url: str,
    body: str,
    *,
    headers: Dict[str, str],
) -> Tuple[int, Any, str]:
    """
    POST a JSON document and return (status, decoded body, reason).

    The body is decoded but otherwise untouched; non-JSON bodies come back as text.
    No retries here: a failed call surfaces to the caller as-is.
    """
    async with session.post(url, data=body.encode("utf-8"), headers=headers) as resp:
        text = await resp.text()
        logger.debug("POST %s -> %s (%s bytes)", url, resp.status, len(text))
        try:
            payload = json.loads(text) if text else None
        except json.JSONDecodeError:
            payload = text
        return resp.status, payload, resp.reason or ""


def create_session(timeout: float = 15.0) -> ClientSession:
    """
    Create a shared aiohttp ClientSession.
    """
    # Note: caller is responsible for closing the session (await session.close()).
    connector = aiohttp.TCPConnector(limit=1)  # one request in flight; batches are sequential
    return aiohttp.ClientSession(connector=connector, timeout=ClientTimeout(total=timeout))
