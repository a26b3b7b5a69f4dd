"""Stock levels, statistics and bulk updates for the admin inventory screen"""
import logging

from django.db import transaction
from django.db.models import Q
from decimal import Decimal

from market.catalog.models import Product, ProductOption, get_stock_status
from market.core.exceptions import BusinessError, NotFoundError
from market.core.pricing import apply_stock_delta
from .models import StockAdjustment

logger = logging.getLogger(__name__)

ITEM_TYPES = (StockAdjustment.ITEM_PRODUCT, StockAdjustment.ITEM_OPTION)


def _check_non_negative(value, label):
    if value is None:
        raise BusinessError(f'{label} is required')
    try:
        value = int(value)
    except (TypeError, ValueError):
        raise BusinessError(f'{label} must be an integer')
    if value < 0:
        raise BusinessError(f'{label} cannot be negative')
    return value


def _record(item_type, product, option, previous_stock, new_stock, reason, user):
    return StockAdjustment.objects.create(
        item_type=item_type,
        product=product,
        product_option=option,
        previous_stock=previous_stock,
        new_stock=new_stock,
        change=new_stock - previous_stock,
        reason=reason or '',
        created_by=user if user is not None and user.is_authenticated else None,
    )


def set_product_stock(product, new_stock, reason='', user=None):
    new_stock = _check_non_negative(new_stock, 'Stock')
    previous_stock = product.stock
    product.stock = new_stock
    product.save(update_fields=['stock', 'updated_at'])
    return _record(StockAdjustment.ITEM_PRODUCT, product, None, previous_stock, new_stock, reason, user)


def set_option_stock(option, new_stock, reason='', user=None):
    new_stock = _check_non_negative(new_stock, 'Stock')
    previous_stock = option.stock
    option.stock = new_stock
    option.save(update_fields=['stock', 'updated_at'])
    return _record(StockAdjustment.ITEM_OPTION, option.product, option, previous_stock, new_stock, reason, user)


def set_low_stock_threshold(product, threshold):
    product.low_stock_threshold = _check_non_negative(threshold, 'Threshold')
    product.save(update_fields=['low_stock_threshold', 'updated_at'])
    return product


def _locked_item(item_type, item_id):
    if item_type == StockAdjustment.ITEM_PRODUCT:
        item = Product.objects.select_for_update().filter(pk=item_id).first()
    elif item_type == StockAdjustment.ITEM_OPTION:
        item = ProductOption.objects.select_for_update().select_related('product').filter(pk=item_id).first()
    else:
        raise BusinessError(f'Unknown item type: {item_type}')
    if item is None:
        raise NotFoundError(f'{item_type} {item_id} not found')
    return item


def _set_item_stock(item_type, item, new_stock, reason, user):
    if item_type == StockAdjustment.ITEM_PRODUCT:
        return set_product_stock(item, new_stock, reason, user)
    return set_option_stock(item, new_stock, reason, user)


def bulk_set_stock(items, reason='', user=None):
    """
    Set absolute stock levels for several products/options in one transaction.

    Each item is {'id', 'type', 'new_stock'}; any invalid item rolls back the whole batch.
    """
    adjustments = []
    with transaction.atomic():
        for entry in items:
            item = _locked_item(entry['type'], entry['id'])
            adjustments.append(_set_item_stock(entry['type'], item, entry.get('new_stock'), reason, user))
    logger.info(f"Bulk stock update: {len(adjustments)} items")
    return adjustments


def bulk_adjust_stock(items, delta=None, reason='', user=None):
    """
    Add a delta to the stock of several products/options in one transaction.

    The item's own 'delta' overrides the shared one; stock never drops below zero.
    """
    adjustments = []
    with transaction.atomic():
        for entry in items:
            item_delta = entry.get('delta', delta)
            if item_delta is None:
                raise BusinessError('delta is required')
            item = _locked_item(entry['type'], entry['id'])
            new_stock = apply_stock_delta(item.stock, item_delta)
            adjustments.append(_set_item_stock(entry['type'], item, new_stock, reason, user))
    logger.info(f"Bulk stock adjust: {len(adjustments)} items, delta={delta}")
    return adjustments


def inventory_statistics():
    products = list(Product.objects.only('id', 'price', 'stock', 'low_stock_threshold'))
    thresholds = {product.id: product.low_stock_threshold for product in products}
    prices = {product.id: product.price for product in products}
    options = list(ProductOption.objects.only('id', 'product_id', 'additional_price', 'stock'))

    counts = {'in_stock': 0, 'low_stock': 0, 'sold_out': 0}
    total_value = Decimal('0')
    for product in products:
        counts[get_stock_status(product.stock, product.low_stock_threshold)] += 1
        total_value += product.price * product.stock
    for option in options:
        counts[get_stock_status(option.stock, thresholds[option.product_id])] += 1
        total_value += (prices[option.product_id] + option.additional_price) * option.stock

    return {
        'total_products': len(products),
        'total_options': len(options),
        'in_stock_count': counts['in_stock'],
        'low_stock_count': counts['low_stock'],
        'sold_out_count': counts['sold_out'],
        'total_stock_value': total_value,
    }


def _product_row(product):
    return {
        'id': product.id,
        'type': StockAdjustment.ITEM_PRODUCT,
        'product_id': product.id,
        'option_id': None,
        'name': product.name,
        'price': product.price,
        'stock': product.stock,
        'low_stock_threshold': product.low_stock_threshold,
        'stock_status': product.stock_status,
        'is_active': product.is_active,
    }


def _option_row(product, option):
    return {
        'id': option.id,
        'type': StockAdjustment.ITEM_OPTION,
        'product_id': product.id,
        'option_id': option.id,
        'name': f"{product.name} - {option.option_name}",
        'price': product.price + option.additional_price,
        'stock': option.stock,
        'low_stock_threshold': product.low_stock_threshold,
        'stock_status': get_stock_status(option.stock, product.low_stock_threshold),
        'is_active': product.is_active and option.is_available,
    }


def inventory_items(stock_status=None, keyword=None):
    """Flat list of products each followed by its options, optionally filtered"""
    products = Product.objects.prefetch_related('options').order_by('id')
    keyword = (keyword or '').strip()
    if keyword:
        products = products.filter(
            Q(name__icontains=keyword) | Q(options__option_name__icontains=keyword)
        ).distinct()
    stock_status = (stock_status or '').strip().lower() or None

    rows = []
    for product in products:
        candidates = [_product_row(product)]
        candidates.extend(_option_row(product, option) for option in product.options.all())
        for row in candidates:
            if stock_status and row['stock_status'] != stock_status:
                continue
            if keyword and keyword.lower() not in row['name'].lower():
                continue
            rows.append(row)
    return rows
