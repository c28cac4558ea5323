"""
Test-friendly helpers for caching.

Parsed tag paths and the LINKSTACKS settings lookups are pure functions of
their input, so we cache them in-process. Tests change settings and expect
those changes to be seen, so every cache made here is registered and can be
reset from one place.
"""
from __future__ import annotations

import functools
from typing import Callable

# Cached functions, keyed by "module.qualname".
_registry: dict[str, Callable] = {}


def lru_cache(*args, **kwargs):
    """
    ``functools.lru_cache`` that registers the wrapped function so that
    ``clear_lru_caches()`` can find it.
    """
    def decorator(fn):
        cached_fn = functools.lru_cache(*args, **kwargs)(fn)
        _registry[f"{fn.__module__}.{fn.__qualname__}"] = cached_fn
        return cached_fn
    return decorator


def clear_lru_caches() -> None:
    for cached_fn in _registry.values():
        cached_fn.cache_clear()
