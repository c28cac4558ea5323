"""
Settings for the boards app.

Configure with a ``LINKSTACKS`` dict in your Django settings, e.g.::

    LINKSTACKS = {
        "MAX_TAGS_PER_LINK": 20,
    }

Any key you leave out uses the default below.
"""
from __future__ import annotations

from typing import Any

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.core.signals import setting_changed
from django.dispatch import receiver

from linkstacks.lib.cache import lru_cache

DEFAULTS: dict[str, Any] = {
    # How many tag paths a single link may be filed under.
    "MAX_TAGS_PER_LINK": 100,
    # Search queries shorter than this return nothing.
    "SEARCH_MIN_LENGTH": 1,
}


@lru_cache(maxsize=None)
def _get_settings() -> dict[str, Any]:
    overrides = getattr(settings, "LINKSTACKS", None) or {}
    if not isinstance(overrides, dict):
        raise ImproperlyConfigured("The LINKSTACKS setting must be a dict.")
    unknown = set(overrides) - set(DEFAULTS)
    if unknown:
        raise ImproperlyConfigured(f"Unknown LINKSTACKS settings: {', '.join(sorted(unknown))}")
    return {**DEFAULTS, **overrides}


def get_setting(name: str) -> Any:
    """
    Return the configured value for ``name``.
    """
    return _get_settings()[name]


@receiver(setting_changed)
def _reset_settings_cache(setting, **kwargs):  # pylint: disable=unused-argument
    if setting == "LINKSTACKS":
        _get_settings.cache_clear()
