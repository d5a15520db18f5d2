# app/core/cache_decorators.py
"""Cache decorators for FastAPI endpoints."""
import functools
from typing import Callable
from .cache import cache_manager
from .config import settings

_SKIPPED_PARAMS = {"request", "db", "session", "principal"}

def cache_response(key_prefix: str, ttl: int = None, include_params: bool = True):
    """Cache decorator for FastAPI endpoints returning JSON-compatible data."""
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            key_parts = [key_prefix]

            if include_params:
                for key, value in sorted(kwargs.items()):
                    if key not in _SKIPPED_PARAMS:
                        key_parts.append(f"{key}={value}")

            cache_key = cache_manager.make_key(*key_parts)

            cached_result = await cache_manager.get(cache_key)
            if cached_result is not None:
                return cached_result

            result = await func(*args, **kwargs)

            await cache_manager.set(cache_key, result, ttl=ttl or settings.cache_ttl_seconds)
            return result

        return wrapper
    return decorator

def invalidate_cache_pattern(*patterns: str):
    """Decorator to invalidate cache patterns after function execution."""
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            result = await func(*args, **kwargs)
            for pattern in patterns:
                await cache_manager.delete_pattern(pattern)
            return result
        return wrapper
    return decorator
