"""
Environment configuration for the CORS policy.

All variables are optional:

  CORS_ENABLED               install the middleware at all (default: true)
  CORS_ALLOWED_ORIGINS       comma-separated origins, matched exactly
  CORS_ALLOWED_METHODS       comma-separated methods allowed in preflight
  CORS_ALLOWED_HEADERS       comma-separated request headers allowed in preflight
  CORS_EXPOSED_HEADERS       comma-separated headers exposed to the browser
  CORS_MAX_AGE               preflight cache lifetime in seconds
  CORS_SUPPORTS_CREDENTIALS  emit Access-Control-Allow-Credentials (default: false)
"""

import os
from typing import List, Mapping, Optional

from cors_middleware import PolicyConfig


def split_list(value: Optional[str]) -> List[str]:
    """Split a comma-separated value, dropping blank entries."""
    if not value:
        return []
    return [item.strip() for item in value.split(',') if item.strip()]


def env_flag(name: str, default: bool = False, environ: Optional[Mapping[str, str]] = None) -> bool:
    environ = os.environ if environ is None else environ
    return environ.get(name, 'true' if default else 'false').strip().lower() == 'true'


def cors_enabled(environ: Optional[Mapping[str, str]] = None) -> bool:
    return env_flag('CORS_ENABLED', True, environ)


def _max_age(environ: Mapping[str, str]) -> Optional[int]:
    raw = environ.get('CORS_MAX_AGE', '').strip()
    if not raw:
        return None
    try:
        max_age = int(raw)
    except ValueError:
        raise ValueError(f"CORS_MAX_AGE must be an integer number of seconds, got {raw!r}")
    if max_age < 0:
        raise ValueError(f"CORS_MAX_AGE must not be negative, got {max_age}")
    return max_age


def load_policy_config(environ: Optional[Mapping[str, str]] = None) -> PolicyConfig:
    """Build the CORS policy from environment variables."""
    environ = os.environ if environ is None else environ

    exposed = split_list(environ.get('CORS_EXPOSED_HEADERS'))

    return PolicyConfig(
        allowed_headers=split_list(environ.get('CORS_ALLOWED_HEADERS')),
        allowed_methods=split_list(environ.get('CORS_ALLOWED_METHODS')),
        allowed_origins=split_list(environ.get('CORS_ALLOWED_ORIGINS')),
        exposed_headers=exposed or None,
        max_age=_max_age(environ),
        supports_credentials=env_flag('CORS_SUPPORTS_CREDENTIALS', False, environ),
    )
