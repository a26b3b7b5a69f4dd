"""
Cache invalidation signals
Automatically invalidate cache when catalogue or order data changes
"""
from django.db import transaction
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
import logging
import threading
from contextlib import contextmanager

from .cache_utils import invalidate_products_cache, invalidate_dashboard_cache

logger = logging.getLogger(__name__)

# Thread-local storage to track signal suspension
_thread_locals = threading.local()

PRODUCT_MODELS = ('Product', 'ProductOption', 'Category', 'Review')
ORDER_MODELS = ('Order', 'OrderItem')


@contextmanager
def suspend_cache_signals():
    """
    Context manager to temporarily suspend cache invalidation signals.
    Used by bulk operations; invalidate manually after the block.
    """
    try:
        _thread_locals.suspended = True
        yield
    finally:
        _thread_locals.suspended = False


def is_suspended():
    return getattr(_thread_locals, 'suspended', False)


def _invalidate_on_commit(invalidate):
    def run():
        try:
            invalidate()
        except Exception as e:
            logger.warning(f"Error invalidating cache: {e}")
    transaction.on_commit(run)


@receiver([post_save, post_delete])
def invalidate_catalog_cache(sender, instance, **kwargs):
    """Invalidate product list caches when catalogue data changes"""
    if is_suspended():
        return
    if sender.__name__ in PRODUCT_MODELS and sender._meta.app_label in ('catalog', 'reviews'):
        _invalidate_on_commit(invalidate_products_cache)


@receiver([post_save, post_delete])
def invalidate_order_cache(sender, instance, **kwargs):
    """Invalidate dashboard cache when orders change"""
    if is_suspended():
        return
    if sender.__name__ in ORDER_MODELS and sender._meta.app_label == 'orders':
        _invalidate_on_commit(invalidate_dashboard_cache)
