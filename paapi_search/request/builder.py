from __future__ import annotations

import logging
from typing import Any, Dict, Iterable

from ..config import PaapiCredentials
from ..errors import ConfigurationError, ValidationError
from .mapping import RULES, SEARCH_CRITERIA_FIELDS, MappingRule
from .options import SearchOptions

logger = logging.getLogger(__name__)

PARTNER_TYPE = "Associates"


def build_request_parameters(
    options: SearchOptions,
    rules: Iterable[MappingRule] = RULES,
) -> Dict[str, Any]:
    """
    Map SearchOptions onto the SearchItems request body.

    Only fields that pass their inclusion rule are present in the result.
    Raises ValidationError when no search criterion survives the mapping.
    """
    params: Dict[str, Any] = {}
    for rule in rules:
        value = rule.read(options)
        if rule.include(value):
            params[rule.target] = rule.transform(value)

    if not any(field in params for field in SEARCH_CRITERIA_FIELDS):
        raise ValidationError(
            "At least one search criteria (e.g., Keywords, Title, Author, etc.) must be provided."
        )
    logger.debug("SearchItems request fields: %s", ", ".join(params))
    return params


def resolve_partner_tag(override: str | None, credentials: PaapiCredentials) -> str:
    """Per-item override wins over the credential default."""
    tag = override or credentials.partner_tag
    if not tag:
        raise ConfigurationError(
            "PartnerTag is required but was not provided in both the request and credentials."
        )
    return tag


def build_common_parameters(credentials: PaapiCredentials, partner_tag: str) -> Dict[str, str]:
    return {
        "AccessKey": credentials.access_key,
        "SecretKey": credentials.secret_key,
        "PartnerTag": partner_tag,
        "Marketplace": credentials.marketplace,
        "PartnerType": PARTNER_TYPE,
    }
