"""
Return requests: eligibility, creation by the customer and admin processing

Order status follows the request: RETURN_REQUESTED while it waits,
RETURN_APPROVED once accepted, back to DELIVERED when rejected or withdrawn,
and RETURN_COMPLETED or PARTIALLY_RETURNED once the goods are back in stock.
"""
import logging
from datetime import timedelta

from django.db import transaction
from django.db.models import Count, Sum
from django.utils import timezone
from decimal import Decimal

from market.core.exceptions import BusinessError, NotFoundError, PermissionDeniedError
from market.orders.models import Order
from market.orders.utils import lock_order, restore_stock
from .models import ReturnItem, ReturnRequest

logger = logging.getLogger(__name__)

RETURN_WINDOW_DAYS = 7


def check_eligibility(order, user):
    """Whether ``user`` may open a return for ``order``, with the reason when not"""
    if order.user_id != user.id:
        raise PermissionDeniedError('You can only return your own orders')

    result = {
        'order_id': order.id,
        'eligible': False,
        'reason': '',
        'delivered_at': order.delivered_at,
        'return_deadline': None,
    }
    if order.order_status != Order.STATUS_DELIVERED:
        result['reason'] = 'Only delivered orders can be returned'
        return result
    if order.delivered_at is None:
        result['reason'] = 'Delivery date is unknown'
        return result

    deadline = order.delivered_at + timedelta(days=RETURN_WINDOW_DAYS)
    result['return_deadline'] = deadline
    if timezone.now() > deadline:
        result['reason'] = f'The return period ({RETURN_WINDOW_DAYS} days after delivery) has passed'
        return result
    existing = order.return_requests.first()
    if existing is not None:
        result['reason'] = f'A return request already exists (status: {existing.status})'
        return result

    result['eligible'] = True
    result['reason'] = 'Order can be returned'
    return result


def create_return_request(user, order, reason_category, items, detailed_reason='', proof_image_urls=None):
    """
    Open a return for some or all lines of a delivered order.

    ``items`` is a list of {'order_item_id', 'quantity', 'reason'}. Each line is
    refunded at the unit price paid; shipping is refunded only when the reason
    is the seller's fault.
    """
    with transaction.atomic():
        locked = lock_order(order)
        eligibility = check_eligibility(locked, user)
        if not eligibility['eligible']:
            raise BusinessError(eligibility['reason'])

        return_request = ReturnRequest.objects.create(
            order=locked,
            reason_category=reason_category,
            detailed_reason=detailed_reason or '',
            proof_image_urls=proof_image_urls or [],
        )

        order_items = {item.id: item for item in locked.items.all()}
        return_items = []
        items_refund = Decimal('0')
        for entry in items:
            order_item = order_items.get(entry['order_item_id'])
            if order_item is None:
                raise NotFoundError(f"Order item {entry['order_item_id']} is not part of this order")
            if any(ri.order_item_id == order_item.id for ri in return_items):
                raise BusinessError(f'Order item {order_item.id} is listed more than once')
            quantity = entry['quantity']
            if quantity < 1 or quantity > order_item.quantity:
                raise BusinessError(
                    f'Return quantity for {order_item.product_name} must be between 1 and {order_item.quantity}'
                )
            refund = order_item.price * quantity
            return_items.append(ReturnItem(
                return_request=return_request,
                order_item=order_item,
                quantity=quantity,
                refund_amount=refund,
                item_reason=entry.get('reason', ''),
            ))
            items_refund += refund
        ReturnItem.objects.bulk_create(return_items)

        shipping_refund = locked.shipping_fee if return_request.is_seller_fault else Decimal('0')
        return_request.items_refund_amount = items_refund
        return_request.shipping_refund_amount = shipping_refund
        return_request.total_refund_amount = items_refund + shipping_refund
        return_request.save(update_fields=[
            'items_refund_amount', 'shipping_refund_amount', 'total_refund_amount', 'updated_at'
        ])

        locked.order_status = Order.STATUS_RETURN_REQUESTED
        locked.save(update_fields=['order_status', 'updated_at'])

    logger.info(
        f"Return requested: order={locked.order_number}, reason={reason_category}, "
        f"refund={return_request.total_refund_amount}"
    )
    return return_request


def _lock_return(return_request):
    return ReturnRequest.objects.select_for_update().get(pk=return_request.pk)


def _set_order_status(order, new_status):
    locked = lock_order(order)
    locked.order_status = new_status
    locked.save(update_fields=['order_status', 'updated_at'])
    return locked


def cancel_return_request(return_request, user):
    """The customer withdraws a request that has not been processed yet"""
    if return_request.order.user_id != user.id:
        raise PermissionDeniedError('You can only cancel your own return requests')
    with transaction.atomic():
        locked = _lock_return(return_request)
        if locked.status != ReturnRequest.STATUS_REQUESTED:
            raise BusinessError('Only pending return requests can be cancelled')
        _set_order_status(locked.order, Order.STATUS_DELIVERED)
        locked.delete()
    logger.info(f"Return request {return_request.pk} withdrawn by user {user.id}")


def approve_return(return_request, user, note=''):
    with transaction.atomic():
        locked = _lock_return(return_request)
        if locked.status != ReturnRequest.STATUS_REQUESTED:
            raise BusinessError('Only pending return requests can be approved')
        locked.status = ReturnRequest.STATUS_APPROVED
        locked.approved_at = timezone.now()
        locked.admin_note = note or ''
        locked.processed_by = user
        locked.save(update_fields=['status', 'approved_at', 'admin_note', 'processed_by', 'updated_at'])
        _set_order_status(locked.order, Order.STATUS_RETURN_APPROVED)
    return locked


def reject_return(return_request, user, reason):
    if not (reason or '').strip():
        raise BusinessError('A rejection reason is required')
    with transaction.atomic():
        locked = _lock_return(return_request)
        if locked.status != ReturnRequest.STATUS_REQUESTED:
            raise BusinessError('Only pending return requests can be rejected')
        locked.status = ReturnRequest.STATUS_REJECTED
        locked.rejected_at = timezone.now()
        locked.admin_note = reason.strip()
        locked.processed_by = user
        locked.save(update_fields=['status', 'rejected_at', 'admin_note', 'processed_by', 'updated_at'])
        _set_order_status(locked.order, Order.STATUS_DELIVERED)
    return locked


def complete_return(return_request, user):
    """Goods are back: restock the returned quantities and record the refund"""
    with transaction.atomic():
        locked = _lock_return(return_request)
        if locked.status != ReturnRequest.STATUS_APPROVED:
            raise BusinessError('Only approved return requests can be completed')

        return_items = list(locked.items.select_related('order_item'))
        restore_stock(return_items)

        now = timezone.now()
        locked.status = ReturnRequest.STATUS_COMPLETED
        locked.completed_at = now
        locked.refunded_at = now
        locked.processed_by = user
        locked.save(update_fields=['status', 'completed_at', 'refunded_at', 'processed_by', 'updated_at'])

        returned = {ri.order_item_id: ri.quantity for ri in return_items}
        order_items = list(locked.order.items.all())
        fully_returned = all(returned.get(item.id) == item.quantity for item in order_items)
        _set_order_status(
            locked.order,
            Order.STATUS_RETURN_COMPLETED if fully_returned else Order.STATUS_PARTIALLY_RETURNED,
        )

    logger.info(f"Return {locked.pk} completed, refund={locked.total_refund_amount}")
    return locked


def return_stats():
    rows = ReturnRequest.objects.order_by().values('status').annotate(
        count=Count('id'), amount=Sum('total_refund_amount')
    )
    stats = {
        status: {'count': 0, 'amount': Decimal('0.00')}
        for status, _ in ReturnRequest.STATUS_CHOICES
    }
    for row in rows:
        stats[row['status']] = {'count': row['count'], 'amount': row['amount'] or Decimal('0.00')}
    return {
        'total_count': sum(entry['count'] for entry in stats.values()),
        'pending_count': stats[ReturnRequest.STATUS_REQUESTED]['count'],
        'refunded_amount': stats[ReturnRequest.STATUS_COMPLETED]['amount'],
        'by_status': stats,
    }
