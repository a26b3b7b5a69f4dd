"""Settlement generation and status transitions"""
import logging

from django.db import transaction
from django.db.models import Count, DecimalField, ExpressionWrapper, F, Sum
from django.utils import timezone
from decimal import Decimal

from market.core.exceptions import BusinessError
from market.core.pricing import calculate_commission
from market.orders.models import Order, OrderItem
from .models import Seller, Settlement

logger = logging.getLogger(__name__)


def seller_sales(seller, start_date, end_date):
    """Sales total and distinct order count of a seller's products over a period"""
    items = OrderItem.objects.filter(
        product__seller=seller,
        order__order_status__in=Order.SOLD_STATUSES,
        order__created_at__date__gte=start_date,
        order__created_at__date__lte=end_date,
    )
    totals = items.aggregate(
        sales=Sum(ExpressionWrapper(F('price') * F('quantity'), output_field=DecimalField(max_digits=14, decimal_places=2))),
        orders=Count('order', distinct=True),
    )
    return totals['sales'] or Decimal('0.00'), totals['orders'] or 0


def generate_settlement(seller, start_date, end_date):
    if start_date > end_date:
        raise BusinessError('Start date must not be after end date')
    duplicate = Settlement.objects.filter(
        seller=seller, start_date=start_date, end_date=end_date
    ).exclude(status=Settlement.STATUS_CANCELLED)
    if duplicate.exists():
        raise BusinessError(f'A settlement for {seller.name} already exists for this period')

    sales, order_count = seller_sales(seller, start_date, end_date)
    commission = calculate_commission(sales, seller.commission_rate)
    settlement = Settlement.objects.create(
        seller=seller,
        start_date=start_date,
        end_date=end_date,
        total_sales_amount=sales,
        commission_rate=seller.commission_rate,
        commission_amount=commission,
        settlement_amount=sales - commission,
        order_count=order_count,
    )
    logger.info(
        f"Settlement generated: seller={seller.id}, period={start_date}~{end_date}, "
        f"sales={sales}, commission={commission}"
    )
    return settlement


def generate_all_settlements(start_date, end_date):
    """Generate settlements for every active seller; existing periods are skipped"""
    if start_date > end_date:
        raise BusinessError('Start date must not be after end date')
    created, skipped = [], []
    with transaction.atomic():
        for seller in Seller.objects.filter(is_active=True).order_by('id'):
            try:
                created.append(generate_settlement(seller, start_date, end_date))
            except BusinessError as e:
                skipped.append({'seller_id': seller.id, 'seller_name': seller.name, 'reason': str(e)})
    return created, skipped


def approve_settlement(settlement):
    if settlement.status != Settlement.STATUS_PENDING:
        raise BusinessError('Only pending settlements can be approved')
    settlement.status = Settlement.STATUS_APPROVED
    settlement.approved_at = timezone.now()
    settlement.save(update_fields=['status', 'approved_at', 'updated_at'])
    return settlement


def pay_settlement(settlement, user):
    if settlement.status != Settlement.STATUS_APPROVED:
        raise BusinessError('Only approved settlements can be paid')
    settlement.status = Settlement.STATUS_PAID
    settlement.settled_at = timezone.now()
    settlement.settled_by = user
    settlement.save(update_fields=['status', 'settled_at', 'settled_by', 'updated_at'])
    return settlement


def cancel_settlement(settlement):
    if settlement.status == Settlement.STATUS_PAID:
        raise BusinessError('Paid settlements cannot be cancelled')
    if settlement.status == Settlement.STATUS_CANCELLED:
        raise BusinessError('Settlement is already cancelled')
    settlement.status = Settlement.STATUS_CANCELLED
    settlement.save(update_fields=['status', 'updated_at'])
    return settlement


def update_settlement(settlement, memo=None, commission_rate=None):
    """Edit a pending settlement; a new commission rate recomputes the amounts"""
    if settlement.status != Settlement.STATUS_PENDING:
        raise BusinessError('Only pending settlements can be modified')
    if memo is not None:
        settlement.memo = memo
    if commission_rate is not None:
        commission_rate = Decimal(str(commission_rate))
        if commission_rate < 0 or commission_rate > 100:
            raise BusinessError('Commission rate must be between 0 and 100')
        settlement.commission_rate = commission_rate
        settlement.commission_amount = calculate_commission(settlement.total_sales_amount, commission_rate)
        settlement.settlement_amount = settlement.total_sales_amount - settlement.commission_amount
    settlement.save()
    return settlement


def settlement_stats(queryset=None):
    queryset = Settlement.objects.all() if queryset is None else queryset
    rows = queryset.order_by().values('status').annotate(count=Count('id'), amount=Sum('settlement_amount'))
    stats = {
        status: {'count': 0, 'amount': Decimal('0.00')}
        for status, _ in Settlement.STATUS_CHOICES
    }
    for row in rows:
        stats[row['status']] = {'count': row['count'], 'amount': row['amount'] or Decimal('0.00')}
    return {
        'total_count': sum(entry['count'] for entry in stats.values()),
        'by_status': stats,
    }
