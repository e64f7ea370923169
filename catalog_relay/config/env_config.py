"""
Environment configuration loader for the catalog relay.
Loads Shopify credentials and fetch/match tuning from the environment (.env supported).
"""

import os
from typing import Dict, Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from catalog_relay.services.system.logger_service import get_logger

logger = get_logger(__name__)

PAGINATION_MODES = ("cursor", "since_id")
PARTIAL_POLICIES = ("raise", "return")

# Environment variable -> settings field
ENV_FIELDS: Dict[str, str] = {
    'SHOPIFY_STORE_URL': 'store_url',
    'SHOPIFY_ACCESS_TOKEN': 'access_token',
    'SHOPIFY_API_VERSION': 'api_version',
    'SHOPIFY_TIMEOUT_SECONDS': 'timeout_seconds',
    'CATALOG_PAGE_SIZE': 'page_size',
    'CATALOG_PAGE_CAP': 'page_cap',
    'CATALOG_PAGINATION': 'pagination',
    'CATALOG_THROTTLE_EVERY': 'throttle_every',
    'CATALOG_THROTTLE_SECONDS': 'throttle_seconds',
    'CATALOG_PARTIAL_POLICY': 'partial_policy',
    'CATALOG_CACHE_TTL_SECONDS': 'cache_ttl_seconds',
    'MATCH_BRAND_PREFIX': 'brand_prefix',
    'MATCH_MIN_SCORE': 'min_score',
}


class ConfigError(ValueError):
    """Invalid relay configuration."""


class RelaySettings(BaseModel):
    store_url: str = ""
    access_token: str = Field(default="", repr=False)
    api_version: str = "2023-10"
    timeout_seconds: float = Field(default=30.0, gt=0)

    page_size: int = Field(default=250, ge=1, le=250)
    page_cap: Optional[int] = Field(default=None, ge=1)
    pagination: str = "cursor"
    throttle_every: int = Field(default=10, ge=0)
    throttle_seconds: float = Field(default=1.0, ge=0)
    partial_policy: str = "raise"
    cache_ttl_seconds: int = Field(default=300, ge=0)

    brand_prefix: str = "LOFT"
    min_score: int = Field(default=50, ge=0)

    @field_validator('store_url')
    def strip_scheme(cls, v):
        # Accept "https://shop.myshopify.com/" as well as the bare host
        v = (v or '').strip()
        for scheme in ('https://', 'http://'):
            if v.startswith(scheme):
                v = v[len(scheme):]
        return v.rstrip('/')

    @field_validator('pagination')
    def known_pagination(cls, v):
        v = (v or '').strip().lower()
        if v not in PAGINATION_MODES:
            raise ValueError(f"must be one of {PAGINATION_MODES}")
        return v

    @field_validator('partial_policy')
    def known_policy(cls, v):
        v = (v or '').strip().lower()
        if v not in PARTIAL_POLICIES:
            raise ValueError(f"must be one of {PARTIAL_POLICIES}")
        return v

    @property
    def has_credentials(self) -> bool:
        return bool(self.store_url and self.access_token)

    @property
    def api_base_url(self) -> str:
        return f"https://{self.store_url}/admin/api/{self.api_version}"


def load_settings(environ: Optional[Mapping[str, str]] = None, env_path: Optional[str] = None) -> RelaySettings:
    """
    Build RelaySettings from the environment.

    Args:
        environ: Mapping to read instead of os.environ (tests pass a dict)
        env_path: Optional .env file; only consulted when reading os.environ

    Returns:
        Validated settings

    Raises:
        ConfigError: if any variable fails validation
    """
    if environ is None:
        load_dotenv(env_path)
        environ = os.environ

    raw = {}
    for env_key, field_name in ENV_FIELDS.items():
        value = environ.get(env_key)
        if value is None or value.strip() == '':
            continue
        raw[field_name] = value.strip()

    try:
        settings = RelaySettings(**raw)
    except ValidationError as e:
        field_to_env = {v: k for k, v in ENV_FIELDS.items()}
        problems = []
        for err in e.errors():
            loc = err['loc'][0] if err.get('loc') else '?'
            problems.append(f"{field_to_env.get(loc, loc)}: {err['msg']}")
        raise ConfigError("Invalid configuration - " + "; ".join(problems)) from e

    if not settings.has_credentials:
        logger.warning("Shopify credentials missing; remote calls will fail",
                       extra={"store_url_set": bool(settings.store_url)})
    else:
        logger.info("Relay configuration loaded", extra={
            "store_url": settings.store_url,
            "api_version": settings.api_version,
            "pagination": settings.pagination,
            "page_cap": settings.page_cap,
            "partial_policy": settings.partial_policy,
        })
    return settings
