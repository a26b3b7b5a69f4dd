"""
Price arithmetic shared by cart, checkout, coupons, inventory and settlements

Amounts are Decimals in whole currency units unless noted otherwise.
"""
import math
from collections import OrderedDict
from decimal import Decimal, ROUND_HALF_UP

WHOLE_UNIT = Decimal('1')
CENT = Decimal('0.01')

FIXED_AMOUNT = 'FIXED_AMOUNT'
PERCENTAGE = 'PERCENTAGE'


def to_decimal(value):
    if value is None:
        return Decimal('0')
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def calculate_discounted_price(price, discount_rate):
    """Price after a percentage discount, rounded half-up to a whole unit"""
    price = to_decimal(price)
    rate = to_decimal(discount_rate)
    if rate <= 0:
        return price
    rate = min(rate, Decimal('100'))
    discount = price * rate / Decimal('100')
    return (price - discount).quantize(WHOLE_UNIT, rounding=ROUND_HALF_UP)


def calculate_shipping_fee(quantity, per_box_fee, can_combine_shipping=False, combine_shipping_unit=None):
    """
    Shipping fee for one product line.

    With combined shipping, up to ``combine_shipping_unit`` items share a box:
    fee = ceil(quantity / unit) * per_box_fee. Otherwise every item ships in
    its own box: fee = quantity * per_box_fee.
    """
    fee = to_decimal(per_box_fee)
    quantity = int(quantity or 0)
    if quantity <= 0 or fee <= 0:
        return Decimal('0')
    if can_combine_shipping and combine_shipping_unit and combine_shipping_unit > 0:
        boxes = math.ceil(quantity / combine_shipping_unit)
        return fee * boxes
    return fee * quantity


def calculate_product_shipping(product, quantity):
    return calculate_shipping_fee(
        quantity,
        product.shipping_fee,
        product.can_combine_shipping,
        product.combine_shipping_unit,
    )


def calculate_order_shipping(lines):
    """
    Shipping fee for a whole cart or order.

    ``lines`` is an iterable of (product, quantity). Quantities of the same
    product are summed before boxing; different products never share a box.
    """
    grouped = OrderedDict()
    for product, quantity in lines:
        if product.pk in grouped:
            grouped[product.pk] = (product, grouped[product.pk][1] + int(quantity))
        else:
            grouped[product.pk] = (product, int(quantity))
    total = Decimal('0')
    for product, quantity in grouped.values():
        total += calculate_product_shipping(product, quantity)
    return total


def calculate_coupon_discount(amount, discount_type, discount_value, max_discount_amount=None):
    """
    Discount granted by a coupon on ``amount``.

    FIXED_AMOUNT grants ``discount_value``; PERCENTAGE grants
    ``amount * value / 100`` capped by ``max_discount_amount``. The result
    never exceeds the amount it applies to.
    """
    amount = to_decimal(amount)
    value = to_decimal(discount_value)
    if amount <= 0 or value <= 0:
        return Decimal('0')
    if discount_type == PERCENTAGE:
        discount = (amount * value / Decimal('100')).quantize(WHOLE_UNIT, rounding=ROUND_HALF_UP)
        if max_discount_amount is not None and discount > to_decimal(max_discount_amount):
            discount = to_decimal(max_discount_amount)
    elif discount_type == FIXED_AMOUNT:
        discount = value
    else:
        raise ValueError(f"Unknown discount type: {discount_type}")
    return min(max(discount, Decimal('0')), amount)


def apply_stock_delta(stock, delta):
    """New stock after adding ``delta``; stock never goes below zero"""
    return max(0, int(stock) + int(delta))


def calculate_commission(amount, rate):
    """Commission on ``amount`` at ``rate`` percent, rounded half-up to cents"""
    commission = to_decimal(amount) * to_decimal(rate) / Decimal('100')
    return commission.quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_growth_rate(current, previous):
    """Percentage growth of current over previous, one decimal place"""
    current = to_decimal(current)
    previous = to_decimal(previous)
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    growth = (current - previous) / previous * Decimal('100')
    return float(growth.quantize(Decimal('0.1'), rounding=ROUND_HALF_UP))
