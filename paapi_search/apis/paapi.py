from __future__ import annotations

import json
import logging
from typing import Any, Dict, Mapping, Optional, Protocol, Tuple

from aiohttp import ClientSession
from botocore.auth import SigV4Auth
from botocore.awsrequest import AWSRequest
from botocore.credentials import Credentials

from ..config import SearchConfig
from ..errors import ConfigurationError, RemoteError
from ..utils.http import create_session, post_json

logger = logging.getLogger(__name__)

SERVICE = "ProductAdvertisingAPI"
SEARCH_ITEMS_PATH = "/paapi5/searchitems"
SEARCH_ITEMS_TARGET = "com.amazon.paapi5.v1.ProductAdvertisingAPIv1.SearchItems"

#: Marketplace host -> (API host, signing region).
ENDPOINTS: Dict[str, Tuple[str, str]] = {
    "www.amazon.com": ("webservices.amazon.com", "us-east-1"),
    "www.amazon.ca": ("webservices.amazon.ca", "us-east-1"),
    "www.amazon.com.mx": ("webservices.amazon.com.mx", "us-east-1"),
    "www.amazon.com.br": ("webservices.amazon.com.br", "us-east-1"),
    "www.amazon.co.uk": ("webservices.amazon.co.uk", "eu-west-1"),
    "www.amazon.de": ("webservices.amazon.de", "eu-west-1"),
    "www.amazon.fr": ("webservices.amazon.fr", "eu-west-1"),
    "www.amazon.it": ("webservices.amazon.it", "eu-west-1"),
    "www.amazon.es": ("webservices.amazon.es", "eu-west-1"),
    "www.amazon.in": ("webservices.amazon.in", "eu-west-1"),
    "www.amazon.co.jp": ("webservices.amazon.co.jp", "us-west-2"),
    "www.amazon.com.au": ("webservices.amazon.com.au", "us-west-2"),
    "www.amazon.cn": ("webservices.amazon.cn", "us-west-2"),
}


class SearchClient(Protocol):
    """
    Anything able to perform a SearchItems call.
    ``common`` carries AccessKey, SecretKey, PartnerTag, Marketplace and PartnerType.
    """

    async def search_items(self, common: Mapping[str, str], request: Mapping[str, Any]) -> Any:
        ...

    async def close(self) -> None:
        ...


def endpoint_for(marketplace: str) -> Tuple[str, str]:
    try:
        return ENDPOINTS[marketplace]
    except KeyError:
        raise ConfigurationError(f"No PA-API endpoint known for marketplace {marketplace!r}") from None


def sign_request(
    url: str,
    body: str,
    headers: Dict[str, str],
    *,
    access_key: str,
    secret_key: str,
    region: str,
) -> Dict[str, str]:
    """Return ``headers`` plus the AWS Signature V4 headers for a POST of ``body``."""
    request = AWSRequest(method="POST", url=url, data=body.encode("utf-8"), headers=headers)
    SigV4Auth(Credentials(access_key, secret_key), SERVICE, region).add_auth(request)
    return dict(request.headers.items())


def error_message(payload: Any, reason: str) -> Tuple[str, Optional[str]]:
    """Pull (message, code) out of a PA-API error document."""
    if isinstance(payload, dict):
        errors = payload.get("Errors") or []
        if errors and isinstance(errors[0], dict):
            first = errors[0]
            return first.get("Message") or reason, first.get("Code")
    return reason, None


class PaapiClient:
    """
    Minimal PA-API 5 transport: signs and POSTs one SearchItems request,
    returning the decoded response body untouched.
    """

    def __init__(self, config: SearchConfig | None = None, *, session: ClientSession | None = None) -> None:
        self.timeout = config.request_timeout if config else 15.0
        self._session = session
        self._owns_session = session is None

    def _get_session(self) -> ClientSession:
        if self._session is None:
            self._session = create_session(self.timeout)
        return self._session

    async def search_items(self, common: Mapping[str, str], request: Mapping[str, Any]) -> Any:
        host, region = endpoint_for(common["Marketplace"])
        url = f"https://{host}{SEARCH_ITEMS_PATH}"

        body = dict(request)
        body["PartnerTag"] = common["PartnerTag"]
        body["PartnerType"] = common["PartnerType"]
        body["Marketplace"] = common["Marketplace"]
        data = json.dumps(body)

        headers = sign_request(
            url,
            data,
            {
                "content-encoding": "amz-1.0",
                "content-type": "application/json; charset=utf-8",
                "x-amz-target": SEARCH_ITEMS_TARGET,
            },
            access_key=common["AccessKey"],
            secret_key=common["SecretKey"],
            region=region,
        )
        logger.debug("SearchItems -> %s (%s)", host, ", ".join(request))

        status, payload, reason = await post_json(self._get_session(), url, data, headers=headers)
        if status >= 400:
            message, code = error_message(payload, reason)
            raise RemoteError(message or f"HTTP {status}", status=status, code=code)
        return payload

    async def close(self) -> None:
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None
