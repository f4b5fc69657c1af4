from __future__ import annotations

import asyncio
import logging
import random
from typing import Any, Mapping, Sequence

from .base import ItemResult, SearchEngine, SearchReport
from ..apis.paapi import SearchClient
from ..config import SearchConfig
from ..errors import PaapiSearchError, RemoteError, UnknownError
from ..request.builder import build_common_parameters, build_request_parameters, resolve_partner_tag
from ..request.options import SearchOptions
from ..utils.loader import load_symbol
from ..utils.pacing import pace

logger = logging.getLogger(__name__)

FAILURE_PREFIX = "Failed to execute Amazon PA API operation"


class SequentialSearchEngine(SearchEngine):
    """
    Runs one SearchItems call per input item, strictly in order.
    - Item N is paced, built and sent only after item N-1 completed.
    - Build failures are raised before the client is touched.
    - With ``continue_on_fail`` failures are recorded per item instead of aborting.
    """
    def __init__(
        self,
        config: SearchConfig,
        client: SearchClient | None = None,
        *,
        rng: random.Random | None = None,
    ) -> None:
        self.config = config
        self.credentials = config.credentials
        self._client = client
        self._rng = rng

    def _create_client(self) -> SearchClient:
        client_cls = load_symbol(self.config.client)
        return client_cls(self.config)

    async def run(self, items: Sequence[SearchOptions]) -> SearchReport:
        report = SearchReport()
        owns_client = self._client is None
        client = self._client or self._create_client()
        try:
            for index, options in enumerate(items):
                try:
                    payload = await self.process_item(client, index, options)
                except PaapiSearchError as exc:
                    if not self.config.continue_on_fail:
                        raise
                    logger.warning("Item %s failed: %s", index, exc)
                    report.results.append(ItemResult(index=index, error=str(exc)))
                    continue
                report.results.append(ItemResult(index=index, json=payload))
        finally:
            if owns_client:
                await client.close()

        logger.info("Batch finished: %s succeeded, %s failed", report.succeeded, report.failed)
        return report

    async def process_item(self, client: SearchClient, index: int, options: SearchOptions) -> Any:
        extra = options.additional_options
        await pace(
            index,
            extra.request_delay,
            jitter=extra.jitter_delay,
            max_jitter=extra.max_jitter,
            rng=self._rng,
        )

        partner_tag = resolve_partner_tag(options.partner_tag, self.credentials)
        request = build_request_parameters(options)
        common = build_common_parameters(self.credentials, partner_tag)
        logger.debug("Item %s: sending SearchItems with partner tag %s", index, partner_tag)
        return await invoke(client, common, request)


async def invoke(client: SearchClient, common: Mapping[str, str], request: Mapping[str, Any]) -> Any:
    """
    Call the client and normalise whatever it raises into RemoteError.
    Configuration/validation errors raised by the client pass through unchanged.
    No retry is attempted.
    """
    try:
        return await client.search_items(common, request)
    except PaapiSearchError as exc:
        if not isinstance(exc, RemoteError):
            raise
        raise _remote_error(exc) from exc
    except Exception as exc:
        raise _remote_error(exc) from exc
    except BaseException as exc:
        if isinstance(exc, (KeyboardInterrupt, SystemExit, GeneratorExit, asyncio.CancelledError)):
            raise
        # Something raised that is not an Exception at all.
        raise UnknownError(f"{FAILURE_PREFIX} due to an unknown error.") from exc


def _remote_error(exc: Exception) -> RemoteError:
    # Timeouts and similar carry no message; name the exception type instead.
    message = str(exc) or type(exc).__name__
    return RemoteError(
        f"{FAILURE_PREFIX}: {message}",
        status=getattr(exc, "status", None),
        code=getattr(exc, "code", None),
    )
