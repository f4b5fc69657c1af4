from __future__ import annotations

import asyncio
import logging
import math
import random
from typing import Optional

logger = logging.getLogger(__name__)

#: Upper bound for random jitter when none is configured (milliseconds).
DEFAULT_MAX_JITTER_MS = 500


def compute_delay(
    index: int,
    request_delay: Optional[int],
    *,
    jitter: bool = False,
    max_jitter: Optional[int] = None,
    rng: random.Random | None = None,
) -> int:
    """
    Milliseconds to wait before processing the item at ``index`` of a batch.

    The first item never waits. Jitter adds a uniform extra delay in
    [0, max_jitter) on top of a positive base delay.
    """
    if index <= 0 or not request_delay or request_delay <= 0:
        return 0

    delay = int(request_delay)
    if jitter:
        bound = max_jitter if max_jitter and max_jitter > 0 else DEFAULT_MAX_JITTER_MS
        delay += math.floor((rng or random).random() * bound)
    return delay


async def pace(
    index: int,
    request_delay: Optional[int],
    *,
    jitter: bool = False,
    max_jitter: Optional[int] = None,
    rng: random.Random | None = None,
) -> int:
    """
    Suspend (without blocking the event loop) before item ``index``.
    Returns the delay applied in milliseconds.
    """
    delay = compute_delay(index, request_delay, jitter=jitter, max_jitter=max_jitter, rng=rng)
    if delay > 0:
        logger.debug("Pacing item %s: sleeping %sms", index, delay)
        await asyncio.sleep(delay / 1000)
    return delay
