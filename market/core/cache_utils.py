"""
Caching helpers for the product catalogue and the admin dashboard

Keys are ``<prefix>:<md5 of arguments>`` so a whole family can be dropped
by prefix. With django-redis that is a pattern delete; other backends are
cleared entirely.
"""
from django.core.cache import cache
from functools import wraps
import hashlib
import logging

logger = logging.getLogger(__name__)

# Cache TTLs (in seconds)
PRODUCTS_LIST_CACHE_TTL = 120
DASHBOARD_CACHE_TTL = 300
CATEGORY_TREE_CACHE_TTL = 600

PRODUCTS_LIST_PREFIX = 'products_list'
CATEGORY_TREE_PREFIX = 'category_tree'
DASHBOARD_PREFIX = 'dashboard_stats'


def make_cache_key(prefix, *args, **kwargs):
    raw = f"{args}:{sorted(kwargs.items())}"
    return f"{prefix}:{hashlib.md5(raw.encode()).hexdigest()}"


def cache_get(cache_key):
    """Read a key; a failing cache backend behaves like a miss"""
    try:
        return cache.get(cache_key)
    except Exception as e:
        logger.warning(f"Cache unavailable, proceeding without cache: {e}")
        return None


def cache_set(cache_key, data, ttl):
    try:
        cache.set(cache_key, data, ttl)
    except Exception as e:
        logger.warning(f"Unable to cache {cache_key}: {e}")


def cached_query(cache_ttl=60, key_prefix="query"):
    """
    Decorator caching a function's return value per argument set

    Usage:
        @cached_query(cache_ttl=CATEGORY_TREE_CACHE_TTL, key_prefix=CATEGORY_TREE_PREFIX)
        def get_category_tree():
            ...
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            cache_key = make_cache_key(key_prefix, *args, **kwargs)
            data = cache_get(cache_key)
            if data is None:
                data = func(*args, **kwargs)
                cache_set(cache_key, data, cache_ttl)
            return data
        return wrapper
    return decorator


def invalidate_cache_pattern(prefix):
    """Drop every key of a prefix family"""
    delete_pattern = getattr(cache, 'delete_pattern', None)
    if delete_pattern is None:
        cache.clear()
        logger.debug(f"Cache backend has no pattern support, cleared all keys for: {prefix}")
        return
    try:
        deleted = delete_pattern(f"{prefix}:*")
        logger.info(f"Invalidated {deleted} cache keys for: {prefix}")
    except Exception as e:
        logger.warning(f"Could not invalidate cache keys for {prefix}: {e}")


def get_cached_products_list(filters_dict):
    """Returns (cached_data, cache_key) for a product list query"""
    cache_key = make_cache_key(PRODUCTS_LIST_PREFIX, **filters_dict)
    return cache_get(cache_key), cache_key


def cache_products_list(cache_key, data, ttl=PRODUCTS_LIST_CACHE_TTL):
    cache_set(cache_key, data, ttl)


def get_cached_dashboard_stats(day):
    """Returns (cached_data, cache_key) for the dashboard of a day"""
    cache_key = make_cache_key(DASHBOARD_PREFIX, str(day))
    return cache_get(cache_key), cache_key


def cache_dashboard_stats(cache_key, data, ttl=DASHBOARD_CACHE_TTL):
    cache_set(cache_key, data, ttl)


def invalidate_products_cache():
    invalidate_cache_pattern(PRODUCTS_LIST_PREFIX)
    invalidate_cache_pattern(CATEGORY_TREE_PREFIX)


def invalidate_dashboard_cache():
    invalidate_cache_pattern(DASHBOARD_PREFIX)
