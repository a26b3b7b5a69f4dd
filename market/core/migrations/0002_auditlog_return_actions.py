from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('core', '0001_initial'),
    ]

    operations = [
        migrations.AlterField(
            model_name='auditlog',
            name='action',
            field=models.CharField(choices=[('create', 'Create'), ('update', 'Update'), ('delete', 'Delete'), ('order_create', 'Order Created'), ('order_pay', 'Order Paid'), ('order_cancel', 'Order Cancelled'), ('order_confirm', 'Order Confirmed'), ('order_status', 'Order Status Changed'), ('order_tracking', 'Tracking Number Updated'), ('stock_update', 'Stock Updated'), ('stock_bulk_update', 'Stock Bulk Update'), ('coupon_issue', 'Coupon Issued'), ('settlement_generate', 'Settlement Generated'), ('settlement_status', 'Settlement Status Changed'), ('inquiry_answer', 'Inquiry Answered'), ('return_request', 'Return Requested'), ('return_status', 'Return Status Changed')], max_length=50),
        ),
    ]
