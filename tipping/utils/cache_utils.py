"""
Cache helpers for leaderboard reads

Leaderboards are recomputed from every scored pick, so their payloads are
cached and the whole cache is dropped whenever a pick, fixture, result or
odds row changes.
"""

import functools

from flask import current_app, request

from tipping import cache


def make_cache_key(key_prefix, *args, **kwargs):
    """Generate a cache key from the request path, query string and arguments"""
    path = request.path
    query = request.query_string.decode("utf-8")
    args_str = "_".join(str(arg) for arg in args)
    kwargs_str = "_".join(f"{k}_{v}" for k, v in sorted(kwargs.items()))
    return f"{key_prefix}_{path}_{query}_{args_str}_{kwargs_str}".replace("/", "_")


def cached_payload(timeout=300, key_prefix="view"):
    """
    Cache the JSON-serialisable payload a view builds

    The wrapped function returns plain data; the caller wraps it in jsonify.

    Args:
        timeout: Cache timeout in seconds (default 5 minutes)
        key_prefix: Prefix for cache key
    """

    def decorator(f):
        @functools.wraps(f)
        def wrapped(*args, **kwargs):
            cache_key = make_cache_key(key_prefix, *args, **kwargs)

            result = cache.get(cache_key)
            if result is not None:
                current_app.logger.debug(f"Cache hit for key: {cache_key}")
                return result

            result = f(*args, **kwargs)
            cache.set(cache_key, result, timeout=timeout)
            current_app.logger.debug(f"Cache set for key: {cache_key}")

            return result

        return wrapped

    return decorator


def invalidate_leaderboards(reason):
    """Drop cached leaderboards after a scoring-relevant write"""
    # SimpleCache cannot delete by pattern, so everything goes
    cache.clear()
    current_app.logger.info(f"Leaderboard cache cleared: {reason}")
