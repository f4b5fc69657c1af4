from __future__ import annotations

from dataclasses import dataclass, field, asdict
from typing import Dict, Any
from pathlib import Path
import os
import json

from .errors import ConfigurationError
from .version import CONFIG_SCHEMA_VERSION

#: Supported marketplaces, keyed by the short name shown to users.
MARKETPLACES: Dict[str, str] = {
    "US": "www.amazon.com",
    "UK": "www.amazon.co.uk",
    "Germany": "www.amazon.de",
    "Japan": "www.amazon.co.jp",
    "Canada": "www.amazon.ca",
    "France": "www.amazon.fr",
    "Italy": "www.amazon.it",
    "Spain": "www.amazon.es",
    "Mexico": "www.amazon.com.mx",
    "Brazil": "www.amazon.com.br",
    "India": "www.amazon.in",
    "Australia": "www.amazon.com.au",
    "China": "www.amazon.cn",
}

DEFAULT_MARKETPLACE = MARKETPLACES["US"]


def resolve_marketplace(value: str) -> str:
    """
    Accept either a marketplace host ("www.amazon.de") or its short name ("Germany").
    """
    value = (value or "").strip()
    if value in MARKETPLACES.values():
        return value
    for name, host in MARKETPLACES.items():
        if name.lower() == value.lower():
            return host
    raise ConfigurationError(
        f"Unsupported marketplace {value!r}; expected one of: {', '.join(MARKETPLACES.values())}"
    )


@dataclass(frozen=True)
class PaapiCredentials:
    """Account credentials; immutable for the duration of a run."""

    access_key: str
    secret_key: str
    partner_tag: str = ""
    marketplace: str = DEFAULT_MARKETPLACE

    def __repr__(self) -> str:
        # Never leak the secret into logs or tracebacks.
        return (f"PaapiCredentials(access_key={self.access_key[:4]}..., partner_tag={self.partner_tag!r}, "
                f"marketplace={self.marketplace!r})")


@dataclass
class SearchConfig:
    """
    Canonical configuration object passed throughout the system.
    Keep it dataclass-only (no heavy deps) to stay upgrade-friendly.
    """
    schema_version: int = CONFIG_SCHEMA_VERSION
    access_key: str = ""
    secret_key: str = ""
    partner_tag: str = ""
    marketplace: str = DEFAULT_MARKETPLACE
    # Record per-item failures instead of aborting the batch on the first one.
    continue_on_fail: bool = False
    # Total timeout handed to the HTTP session of the default client.
    request_timeout: float = 15.0
    # Dotted paths for client/exporter to allow runtime swapping without code changes.
    client: str = "paapi_search.apis.paapi:PaapiClient"
    exporter: str = "paapi_search.export.json_exporter:JSONExporter"
    # Where to write results
    output_path: str = "output/search_results.json"

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["secret_key"] = "***" if self.secret_key else ""
        return data

    @property
    def credentials(self) -> PaapiCredentials:
        return PaapiCredentials(
            access_key=self.access_key,
            secret_key=self.secret_key,
            partner_tag=self.partner_tag,
            marketplace=self.marketplace,
        )

    # ---------- Loaders ----------

    @classmethod
    def from_env(cls) -> "SearchConfig":
        """
        Build config from environment variables (all optional).
        """
        def _get(name: str, default: str) -> str:
            return os.getenv(name, default)

        try:
            request_timeout = float(_get("PAAPI_REQUEST_TIMEOUT", "15.0"))
        except ValueError as exc:
            raise ConfigurationError(f"PAAPI_REQUEST_TIMEOUT must be a number: {exc}") from exc

        return cls(
            access_key=_get("PAAPI_ACCESS_KEY", ""),
            secret_key=_get("PAAPI_SECRET_KEY", ""),
            partner_tag=_get("PAAPI_PARTNER_TAG", ""),
            marketplace=_get("PAAPI_MARKETPLACE", DEFAULT_MARKETPLACE),
            continue_on_fail=_get("PAAPI_CONTINUE_ON_FAIL", "false").strip().lower() in ("1", "true", "yes"),
            request_timeout=request_timeout,
            client=_get("PAAPI_CLIENT", "paapi_search.apis.paapi:PaapiClient"),
            exporter=_get("PAAPI_EXPORTER", "paapi_search.export.json_exporter:JSONExporter"),
            output_path=_get("PAAPI_OUTPUT_PATH", "output/search_results.json"),
        )

    @classmethod
    def from_file(cls, path: str | os.PathLike[str]) -> "SearchConfig":
        """
        Load configuration from a JSON file. Supports schema migration for future versions.
        """
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ConfigurationError(f"{path}: expected a JSON object")
        data = migrate_config(data)
        try:
            return cls(**data)
        except TypeError as exc:
            raise ConfigurationError(f"{path}: {exc}") from exc

    # ---------- Validation ----------

    def validate(self) -> None:
        if not self.access_key:
            raise ConfigurationError("access_key is required; set PAAPI_ACCESS_KEY or provide it in the config file.")
        if not self.secret_key:
            raise ConfigurationError("secret_key is required; set PAAPI_SECRET_KEY or provide it in the config file.")
        self.marketplace = resolve_marketplace(self.marketplace)
        if not isinstance(self.request_timeout, (int, float)) or self.request_timeout <= 0:
            raise ConfigurationError("request_timeout must be > 0")
        # Validate output path parent exists or is creatable
        parent = Path(self.output_path).parent
        parent.mkdir(parents=True, exist_ok=True)


def migrate_config(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Migrate config dict to the latest schema version.
    Keep this pure and additive. Add migrations here as you bump schema.
    """
    raw = dict(raw)
    # Early config files nested the account fields under "credentials".
    creds = raw.pop("credentials", None)
    if isinstance(creds, dict):
        for key in ("access_key", "secret_key", "partner_tag", "marketplace"):
            if key in creds:
                raw.setdefault(key, creds[key])

    raw.setdefault("schema_version", CONFIG_SCHEMA_VERSION)
    return raw
