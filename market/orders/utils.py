"""
Cart and checkout operations

Views call these helpers; business rule violations raise BusinessError so
the view can answer with {'error': ...}.
"""
import logging
import uuid

from django.db import transaction
from django.utils import timezone
from decimal import Decimal

from market.catalog.models import Product, ProductOption
from market.core.exceptions import BusinessError, NotFoundError, PermissionDeniedError
from market.core.pricing import calculate_order_shipping
from market.coupons.utils import get_user_coupon_for_order, mark_coupon_used, release_coupons_for_order
from .models import Cart, CartItem, Order, OrderItem

logger = logging.getLogger(__name__)


class OrderLine:
    """A validated product/option/quantity with its unit price"""

    def __init__(self, product, option, quantity):
        self.product = product
        self.option = option
        self.quantity = quantity

    @property
    def unit_price(self):
        price = self.product.discounted_price
        if self.option is not None:
            price += self.option.additional_price
        return price

    @property
    def line_total(self):
        return self.unit_price * self.quantity

    @property
    def line_discount(self):
        return (self.product.price - self.product.discounted_price) * self.quantity

    @property
    def option_name(self):
        return self.option.display_name if self.option is not None else ''


def parse_quantity(value):
    try:
        quantity = int(value)
    except (TypeError, ValueError):
        raise BusinessError('Quantity must be an integer')
    if quantity < 1:
        raise BusinessError('Quantity must be at least 1')
    return quantity


def check_order_quantity(product, quantity):
    if quantity < product.min_order_quantity:
        raise BusinessError(f'Minimum order quantity for {product.name} is {product.min_order_quantity}')
    if product.max_order_quantity is not None and quantity > product.max_order_quantity:
        raise BusinessError(f'Maximum order quantity for {product.name} is {product.max_order_quantity}')


def check_stock(product, option, quantity):
    if product.stock < quantity:
        raise BusinessError(f'Insufficient stock for {product.name} (available: {product.stock})')
    if option is not None and option.stock < quantity:
        raise BusinessError(f'Insufficient stock for {product.name} - {option.option_name} (available: {option.stock})')


def resolve_option(product, option_id):
    if not option_id:
        return None
    option = ProductOption.objects.filter(pk=option_id).first()
    if option is None:
        raise NotFoundError('Product option not found')
    if option.product_id != product.id:
        raise BusinessError('Option does not belong to this product')
    if not option.is_available:
        raise BusinessError(f'Option {option.option_name} is not available')
    return option


def resolve_line(product_id, option_id, quantity):
    """Validate one requested item and return an OrderLine"""
    product = Product.objects.select_related('category').filter(pk=product_id, is_active=True).first()
    if product is None:
        raise NotFoundError(f'Product {product_id} not found')
    quantity = parse_quantity(quantity)
    check_order_quantity(product, quantity)
    option = resolve_option(product, option_id)
    check_stock(product, option, quantity)
    return OrderLine(product, option, quantity)


def lines_from_request(items):
    if not isinstance(items, list) or not items:
        raise BusinessError('Order must contain at least one item')
    lines = []
    for item in items:
        if not isinstance(item, dict):
            raise BusinessError('Invalid order item')
        lines.append(resolve_line(item.get('product_id'), item.get('option_id'), item.get('quantity')))
    return lines


def lines_from_cart(user):
    cart = Cart.objects.filter(user=user).first()
    if cart is None or not cart.items.exists():
        raise BusinessError('Cart is empty')
    return [
        resolve_line(item.product_id, item.product_option_id, item.quantity)
        for item in cart.items.all()
    ]


def calculate_amounts(lines, user_coupon=None):
    """Totals for a set of order lines and an optional user coupon"""
    total_amount = sum((line.line_total for line in lines), Decimal('0'))
    product_discount = sum((line.line_discount for line in lines), Decimal('0'))
    shipping_fee = calculate_order_shipping((line.product, line.quantity) for line in lines)

    coupon_discount = Decimal('0')
    if user_coupon is not None:
        coupon = user_coupon.coupon
        if not coupon.meets_min_order_amount(total_amount):
            raise BusinessError(f'Minimum order amount for this coupon is {coupon.min_order_amount}')
        applicable_total = sum(
            (line.line_total for line in lines if coupon.is_applicable_to(line.product)), Decimal('0')
        )
        if applicable_total <= 0:
            raise BusinessError('Coupon is not applicable to the items in this order')
        coupon_discount = coupon.calculate_discount(applicable_total)

    return {
        'total_amount': total_amount,
        'product_discount_amount': product_discount,
        'coupon_discount_amount': coupon_discount,
        'shipping_fee': shipping_fee,
        'final_amount': total_amount - coupon_discount + shipping_fee,
    }


def generate_order_number():
    order_number = f"ORD-{timezone.now().strftime('%Y%m%d')}-{uuid.uuid4().hex[:8].upper()}"
    while Order.objects.filter(order_number=order_number).exists():
        order_number = f"ORD-{timezone.now().strftime('%Y%m%d')}-{uuid.uuid4().hex[:8].upper()}"
    return order_number


def preview_order(user, items=None, user_coupon_id=None):
    """Compute order totals without creating anything"""
    lines = lines_from_request(items) if items is not None else lines_from_cart(user)
    user_coupon = get_user_coupon_for_order(user, user_coupon_id) if user_coupon_id else None
    amounts = calculate_amounts(lines, user_coupon)
    amounts['items'] = [
        {
            'product_id': line.product.id,
            'product_name': line.product.name,
            'option_id': line.option.id if line.option else None,
            'option_name': line.option_name,
            'quantity': line.quantity,
            'price': line.unit_price,
            'line_total': line.line_total,
        }
        for line in lines
    ]
    return amounts


def create_order(user, shipping, items=None, user_coupon_id=None):
    """
    Create a PENDING_PAYMENT order from request items (or the cart).
    Stock is checked here but only deducted when payment completes.
    """
    lines = lines_from_request(items) if items is not None else lines_from_cart(user)

    with transaction.atomic():
        user_coupon = None
        if user_coupon_id:
            user_coupon = get_user_coupon_for_order(user, user_coupon_id, for_update=True)
        amounts = calculate_amounts(lines, user_coupon)

        order = Order.objects.create(
            order_number=generate_order_number(),
            user=user,
            recipient_name=shipping['recipient_name'],
            recipient_phone=shipping['recipient_phone'],
            shipping_postcode=shipping.get('shipping_postcode', ''),
            shipping_address_line1=shipping['shipping_address_line1'],
            shipping_address_line2=shipping.get('shipping_address_line2', ''),
            sender_name=shipping.get('sender_name') or user.get_display_name(),
            sender_phone=shipping.get('sender_phone') or user.phone or '',
            delivery_message=shipping.get('delivery_message', ''),
            coupon_code=user_coupon.coupon.code if user_coupon else '',
            **amounts
        )
        OrderItem.objects.bulk_create([
            OrderItem(
                order=order,
                product=line.product,
                product_option=line.option,
                product_name=line.product.name,
                option_name=line.option_name,
                quantity=line.quantity,
                price=line.unit_price,
                courier_company=line.product.courier_company,
            )
            for line in lines
        ])
        if user_coupon is not None:
            mark_coupon_used(user_coupon, order)

    logger.info(f"Order created: {order.order_number}, user={user.id}, final_amount={order.final_amount}")
    return order


def lock_order(order):
    """Re-read an order under a row lock; must run inside transaction.atomic()"""
    return Order.objects.select_for_update().get(pk=order.pk)


def lock_stock_rows(items):
    """Lock the product and option rows behind order (or return) lines, keyed by id"""
    product_ids = {item.product_id for item in items if item.product_id}
    option_ids = {item.product_option_id for item in items if item.product_option_id}
    products = {p.id: p for p in Product.objects.select_for_update().filter(id__in=product_ids)}
    options = {o.id: o for o in ProductOption.objects.select_for_update().filter(id__in=option_ids)}
    return products, options


def save_stock_rows(products, options):
    # save() rather than update() so the catalogue cache signals fire
    for product in products.values():
        product.save(update_fields=['stock', 'updated_at'])
    for option in options.values():
        option.save(update_fields=['stock', 'updated_at'])


def complete_payment(order):
    """Deduct stock, clear purchased cart lines and mark the order PAID"""
    with transaction.atomic():
        locked = lock_order(order)
        if locked.order_status not in Order.UNPAID_STATUSES:
            raise BusinessError(f'Order cannot be paid in status {locked.order_status}')

        items = list(locked.items.all())
        products, options = lock_stock_rows(items)
        for item in items:
            product = products.get(item.product_id)
            if product is None:
                raise BusinessError(f'Product {item.product_name} is no longer available')
            option = options.get(item.product_option_id) if item.product_option_id else None
            check_stock(product, option, item.quantity)
            product.stock -= item.quantity
            if option is not None:
                option.stock -= item.quantity
        save_stock_rows(products, options)

        CartItem.objects.filter(
            cart__user_id=locked.user_id,
            product_id__in=[item.product_id for item in items],
        ).delete()

        locked.order_status = Order.STATUS_PAID
        locked.paid_at = timezone.now()
        locked.save(update_fields=['order_status', 'paid_at', 'updated_at'])

    order.refresh_from_db()
    logger.info(f"Order paid: {order.order_number}")
    return order


def fail_payment(order):
    with transaction.atomic():
        locked = lock_order(order)
        if locked.order_status != Order.STATUS_PENDING_PAYMENT:
            raise BusinessError(f'Order cannot be marked as payment failed in status {locked.order_status}')
        locked.order_status = Order.STATUS_PAYMENT_FAILED
        locked.save(update_fields=['order_status', 'updated_at'])
    order.refresh_from_db()
    logger.warning(f"Payment failed for order {order.order_number}")
    return order


def restore_stock(items):
    """Give back the quantities of order (or return) lines to product and option stock"""
    products, options = lock_stock_rows(items)
    for item in items:
        if item.product_id in products:
            products[item.product_id].stock += item.quantity
        if item.product_option_id in options:
            options[item.product_option_id].stock += item.quantity
    save_stock_rows(products, options)


def check_cancellable(order):
    if order.order_status == Order.STATUS_CANCELLED:
        raise BusinessError('Order is already cancelled')
    if order.order_status in (Order.STATUS_SHIPPED, Order.STATUS_DELIVERED):
        raise BusinessError('Shipped or delivered orders cannot be cancelled')
    if order.order_status in Order.RETURN_STATUSES:
        raise BusinessError('Orders in a return process cannot be cancelled')


def cancel_order(order, reason='', user=None):
    """
    Cancel an order. When ``user`` is given only the owner may cancel.
    Stock is returned only if it was deducted at payment.
    """
    if user is not None and order.user_id != user.id:
        raise PermissionDeniedError('You can only cancel your own orders')

    with transaction.atomic():
        locked = lock_order(order)
        check_cancellable(locked)
        if locked.order_status in Order.STOCK_DEDUCTED_STATUSES:
            restore_stock(list(locked.items.all()))
        release_coupons_for_order(locked)
        locked.order_status = Order.STATUS_CANCELLED
        locked.cancellation_reason = reason or ''
        locked.cancelled_at = timezone.now()
        locked.save(update_fields=['order_status', 'cancellation_reason', 'cancelled_at', 'updated_at'])

    order.refresh_from_db()
    logger.info(f"Order cancelled: {order.order_number}, reason={reason}")
    return order


def confirm_order(order, user):
    """Customer confirms receipt of a delivered order"""
    if order.user_id != user.id:
        raise PermissionDeniedError('You can only confirm your own orders')
    if order.order_status != Order.STATUS_DELIVERED:
        raise BusinessError('Only delivered orders can be confirmed')
    if order.confirmed_at is not None:
        raise BusinessError('Order is already confirmed')
    order.confirmed_at = timezone.now()
    order.save(update_fields=['confirmed_at', 'updated_at'])
    return order


def update_order_status(order, new_status, reason=''):
    """Admin status change with timestamp bookkeeping"""
    valid_statuses = dict(Order.STATUS_CHOICES)
    if new_status not in valid_statuses:
        raise BusinessError(f'Invalid order status: {new_status}')

    with transaction.atomic():
        locked = lock_order(order)
        current = locked.order_status
        if current == Order.STATUS_CANCELLED:
            raise BusinessError('Cancelled orders cannot be changed')
        if new_status == current:
            return order
        if current in Order.RETURN_STATUSES or new_status in Order.RETURN_STATUSES:
            raise BusinessError('Return statuses are managed through return requests')
        if new_status == Order.STATUS_CANCELLED:
            cancel_order(locked, reason or 'Cancelled by admin')
        elif current in Order.UNPAID_STATUSES:
            if new_status == Order.STATUS_PAID:
                complete_payment(locked)
            elif new_status in Order.SOLD_STATUSES:
                raise BusinessError('Order must be paid first')
            else:
                locked.order_status = new_status
                locked.save(update_fields=['order_status', 'updated_at'])
        elif new_status in Order.UNPAID_STATUSES:
            # stock was already taken; going back would let it be taken again
            raise BusinessError(f'A {current} order cannot return to {new_status}')
        else:
            now = timezone.now()
            locked.order_status = new_status
            if new_status == Order.STATUS_SHIPPED and locked.shipped_at is None:
                locked.shipped_at = now
            elif new_status == Order.STATUS_DELIVERED:
                if locked.shipped_at is None:
                    locked.shipped_at = now
                locked.delivered_at = now
            locked.save()

    order.refresh_from_db()
    logger.info(f"Order {order.order_number} status changed to {order.order_status}")
    return order


def update_tracking_number(order, tracking_number, courier_company=''):
    """Register a tracking number; paid orders move to SHIPPED"""
    if not tracking_number:
        raise BusinessError('Tracking number is required')
    if order.order_status in (Order.STATUS_CANCELLED, Order.STATUS_PENDING_PAYMENT, Order.STATUS_PAYMENT_FAILED):
        raise BusinessError(f'Cannot ship an order in status {order.order_status}')

    now = timezone.now()
    order.tracking_number = tracking_number
    if courier_company:
        order.courier_company = courier_company
    if order.order_status in (Order.STATUS_PAID, Order.STATUS_PREPARING):
        order.order_status = Order.STATUS_SHIPPED
        order.shipped_at = now
    order.save()
    order.items.update(
        tracking_number=tracking_number,
        courier_company=order.courier_company,
        shipped_at=order.shipped_at,
    )
    return order


def bulk_update_order_status(order_ids, new_status):
    """Apply a status to many orders; failures do not stop the rest"""
    result = {'success_count': 0, 'failure_count': 0, 'success_ids': [], 'failed_orders': []}
    for order_id in order_ids:
        order = Order.objects.filter(pk=order_id).first()
        if order is None:
            result['failed_orders'].append({'id': order_id, 'reason': 'Order not found'})
            continue
        try:
            with transaction.atomic():
                update_order_status(order, new_status)
        except BusinessError as e:
            result['failed_orders'].append({'id': order_id, 'reason': str(e)})
            continue
        result['success_ids'].append(order_id)
    result['success_count'] = len(result['success_ids'])
    result['failure_count'] = len(result['failed_orders'])
    logger.info(f"Bulk status update to {new_status}: {result['success_count']} ok, {result['failure_count']} failed")
    return result


# Cart operations
def get_or_create_cart(user):
    cart, _ = Cart.objects.get_or_create(user=user)
    return cart


def add_to_cart(user, product_id, option_id=None, quantity=1):
    """Add a product to the cart, merging with an existing line for the same product and option"""
    product = Product.objects.filter(pk=product_id, is_active=True).first()
    if product is None:
        raise NotFoundError('Product not found')
    quantity = parse_quantity(quantity)
    option = resolve_option(product, option_id)

    cart = get_or_create_cart(user)
    item = CartItem.objects.filter(cart=cart, product=product, product_option=option).first()
    new_quantity = quantity + (item.quantity if item else 0)
    check_order_quantity(product, new_quantity)
    check_stock(product, option, new_quantity)

    unit_price = product.discounted_price + (option.additional_price if option else Decimal('0'))
    if item is not None:
        item.quantity = new_quantity
        item.price = unit_price
        item.save(update_fields=['quantity', 'price', 'updated_at'])
    else:
        item = CartItem.objects.create(
            cart=cart, product=product, product_option=option, quantity=quantity, price=unit_price
        )
    return item


def get_cart_item_for_user(user, item_id):
    item = CartItem.objects.select_related('cart', 'product', 'product_option').filter(pk=item_id).first()
    if item is None:
        raise NotFoundError('Cart item not found')
    if item.cart.user_id != user.id:
        raise PermissionDeniedError('This cart item does not belong to you')
    return item


def update_cart_item(user, item_id, quantity):
    item = get_cart_item_for_user(user, item_id)
    quantity = parse_quantity(quantity)
    check_order_quantity(item.product, quantity)
    check_stock(item.product, item.product_option, quantity)
    item.quantity = quantity
    item.save(update_fields=['quantity', 'updated_at'])
    return item


def remove_cart_item(user, item_id):
    item = get_cart_item_for_user(user, item_id)
    item.delete()


def clear_cart(user):
    return CartItem.objects.filter(cart__user=user).delete()[0]
