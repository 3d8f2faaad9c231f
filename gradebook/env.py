"""Typed reads of ``GRADEBOOK_*`` / ``DJANGO_*`` environment variables.

Used by ``config/settings.py``. A value that does not parse falls back to
the default instead of failing at import time.
"""

import os

_TRUTHY = {"1", "true", "yes", "on"}


def _raw(name: str, default) -> str:
    return str(os.environ.get(name, default)).strip()


def env_bool(name: str, default: bool = False) -> bool:
    return _raw(name, "1" if default else "0").lower() in _TRUTHY


def env_int(name: str, default: int) -> int:
    try:
        return int(_raw(name, default))
    except ValueError:
        return int(default)


def env_float(name: str, default: float) -> float:
    try:
        return float(_raw(name, default))
    except ValueError:
        return float(default)


def env_str(name: str, default: str = "") -> str:
    return str(os.environ.get(name, default))


def env_list(name: str, default: str = "") -> list[str]:
    """Comma-separated list, blanks dropped (``DJANGO_ALLOWED_HOSTS``)."""
    return [part.strip() for part in env_str(name, default).split(",") if part.strip()]
