"""Coupon issuing, validation and usage bookkeeping"""
import logging

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import F
from django.utils import timezone
from decimal import Decimal

from market.core.exceptions import BusinessError, NotFoundError
from .models import Coupon, UserCoupon

logger = logging.getLogger(__name__)

User = get_user_model()


def check_issuable(coupon, user):
    """Raise BusinessError when the coupon cannot be issued to the user"""
    if not coupon.is_active:
        raise BusinessError('Coupon is not active')
    if coupon.is_expired:
        raise BusinessError('Coupon has expired')
    if not coupon.has_stock:
        raise BusinessError('Coupon is out of stock')
    if coupon.usage_type == Coupon.USAGE_SINGLE and UserCoupon.objects.filter(user=user, coupon=coupon).exists():
        raise BusinessError('Coupon has already been issued to this user')


def issue_coupon_to_user(coupon, user):
    check_issuable(coupon, user)
    user_coupon = UserCoupon.objects.create(user=user, coupon=coupon, expires_at=coupon.end_date)
    logger.info(f"Coupon {coupon.code} issued to user {user.id}")
    return user_coupon


def issue_coupon_to_all_users(coupon):
    """Issue to every active user who does not hold the coupon yet; returns the number issued"""
    if not coupon.is_active or coupon.is_expired:
        raise BusinessError('Coupon is not active or has expired')

    holders = UserCoupon.objects.filter(coupon=coupon).values_list('user_id', flat=True)
    users = User.objects.filter(is_active=True).exclude(id__in=holders)
    user_coupons = [
        UserCoupon(user=user, coupon=coupon, expires_at=coupon.end_date)
        for user in users
    ]
    UserCoupon.objects.bulk_create(user_coupons)
    logger.info(f"Coupon {coupon.code} issued to {len(user_coupons)} users")
    return len(user_coupons)


def download_coupon(user, code):
    """A user claims a coupon by its code"""
    coupon = Coupon.objects.filter(code=(code or '').strip().upper()).first()
    if coupon is None:
        raise NotFoundError('Coupon not found')
    if not coupon.is_started:
        raise BusinessError('Coupon is not available yet')
    return issue_coupon_to_user(coupon, user)


def validate_coupon(code, order_amount):
    """
    Check a coupon code against an order amount.
    Returns a dict with valid, message, discount_amount and final_amount.
    """
    order_amount = Decimal(str(order_amount))
    result = {
        'valid': False,
        'message': '',
        'discount_amount': Decimal('0'),
        'final_amount': order_amount,
    }
    coupon = Coupon.objects.filter(code=(code or '').strip().upper()).first()
    if coupon is None:
        result['message'] = 'Coupon not found'
    elif not coupon.is_active:
        result['message'] = 'Coupon is not active'
    elif not coupon.is_started:
        result['message'] = 'Coupon is not available yet'
    elif coupon.is_expired:
        result['message'] = 'Coupon has expired'
    elif not coupon.has_stock:
        result['message'] = 'Coupon is out of stock'
    elif not coupon.meets_min_order_amount(order_amount):
        result['message'] = f'Minimum order amount is {coupon.min_order_amount}'
    else:
        discount = coupon.calculate_discount(order_amount)
        result.update({
            'valid': True,
            'message': 'Coupon can be applied',
            'discount_amount': discount,
            'final_amount': order_amount - discount,
        })
    return result


def get_available_coupons(user):
    now = timezone.now()
    return UserCoupon.objects.filter(
        user=user,
        used_at__isnull=True,
        expires_at__gte=now,
        coupon__is_active=True,
    ).select_related('coupon')


def get_available_coupons_for_order(user, order_amount):
    order_amount = Decimal(str(order_amount))
    return [
        user_coupon for user_coupon in get_available_coupons(user)
        if user_coupon.coupon.is_started and user_coupon.coupon.meets_min_order_amount(order_amount)
    ]


def get_user_coupon_for_order(user, user_coupon_id, for_update=False):
    """
    Load and check a user's coupon for checkout.
    ``for_update`` locks the row so two orders cannot spend it; call inside a transaction.
    """
    queryset = UserCoupon.objects.select_related('coupon')
    if for_update:
        queryset = queryset.select_for_update()
    user_coupon = queryset.filter(pk=user_coupon_id).first()
    if user_coupon is None:
        raise NotFoundError('Coupon not found')
    if user_coupon.user_id != user.id:
        raise BusinessError('This coupon does not belong to you')
    if user_coupon.is_used:
        raise BusinessError('Coupon has already been used')
    if user_coupon.is_expired or user_coupon.coupon.is_expired:
        raise BusinessError('Coupon has expired')
    if not user_coupon.coupon.is_active or not user_coupon.coupon.is_started:
        raise BusinessError('Coupon is not available')
    if not user_coupon.coupon.has_stock:
        raise BusinessError('Coupon is out of stock')
    return user_coupon


def mark_coupon_used(user_coupon, order):
    with transaction.atomic():
        user_coupon.used_at = timezone.now()
        user_coupon.order = order
        user_coupon.save(update_fields=['used_at', 'order'])
        Coupon.objects.filter(pk=user_coupon.coupon_id).update(used_quantity=F('used_quantity') + 1)


def release_coupons_for_order(order):
    """Give back coupons used by a cancelled order"""
    released = 0
    for user_coupon in UserCoupon.objects.filter(order=order):
        user_coupon.used_at = None
        user_coupon.order = None
        user_coupon.save(update_fields=['used_at', 'order'])
        Coupon.objects.filter(pk=user_coupon.coupon_id, used_quantity__gt=0).update(
            used_quantity=F('used_quantity') - 1
        )
        released += 1
    if released:
        logger.info(f"Released {released} coupon(s) for order {order.order_number}")
    return released
