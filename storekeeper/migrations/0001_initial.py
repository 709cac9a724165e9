"""
Initial migration for Storekeeper models.
"""

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):
    """Create Storekeeper models: Batch, pools, StockMove, Sale, Promotion."""

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Batch',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('item_code', models.CharField(db_index=True, max_length=64, verbose_name='Item code')),
                ('batch_number', models.CharField(help_text='Supplier or internal lot identifier.', max_length=64, verbose_name='Batch number')),
                ('quantity_received', models.DecimalField(decimal_places=3, max_digits=12, verbose_name='Quantity received')),
                ('quantity_available', models.DecimalField(decimal_places=3, help_text='Units of this batch still in the store, across all pools.', max_digits=12, verbose_name='Quantity available')),
                ('manufacture_date', models.DateField(blank=True, null=True, verbose_name='Manufacture date')),
                ('expiry_date', models.DateField(blank=True, db_index=True, help_text='Last day the batch may be sold.', null=True, verbose_name='Expiry date')),
                ('received_at', models.DateTimeField(default=django.utils.timezone.now, verbose_name='Received at')),
                ('received_by', models.CharField(max_length=150, verbose_name='Received by')),
            ],
            options={
                'verbose_name': 'Batch',
                'verbose_name_plural': 'Batches',
                'ordering': ['item_code', 'received_at'],
                'constraints': [
                    models.UniqueConstraint(fields=('item_code', 'batch_number'), name='storekeeper_batch_unique_number'),
                ],
            },
        ),
        migrations.CreateModel(
            name='WarehouseStock',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('item_code', models.CharField(db_index=True, max_length=64, verbose_name='Item code')),
                ('location', models.CharField(default='MAIN-WAREHOUSE', max_length=64, verbose_name='Location')),
                ('quantity_received', models.DecimalField(decimal_places=3, max_digits=12, verbose_name='Quantity received')),
                ('quantity_available', models.DecimalField(decimal_places=3, max_digits=12, verbose_name='Quantity available')),
                ('expiry_date', models.DateField(blank=True, null=True, verbose_name='Expiry date')),
                ('received_at', models.DateTimeField(default=django.utils.timezone.now, verbose_name='Received at')),
                ('received_by', models.CharField(max_length=150, verbose_name='Received by')),
                ('is_reserved', models.BooleanField(default=False, verbose_name='Reserved')),
                ('reserved_by', models.CharField(blank=True, default='', max_length=150, verbose_name='Reserved by')),
                ('reserved_at', models.DateTimeField(blank=True, null=True, verbose_name='Reserved at')),
                ('updated_by', models.CharField(max_length=150, verbose_name='Updated by')),
                ('updated_at', models.DateTimeField(default=django.utils.timezone.now, verbose_name='Updated at')),
                ('batch', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='warehouse_stock', to='storekeeper.batch', verbose_name='Batch')),
            ],
            options={
                'verbose_name': 'Warehouse stock',
                'verbose_name_plural': 'Warehouse stock',
                'ordering': ['item_code', 'received_at'],
                'indexes': [
                    models.Index(fields=['item_code', 'is_reserved'], name='storekeeper_item_co_0b6f1d_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ShelfStock',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('item_code', models.CharField(db_index=True, max_length=64, verbose_name='Item code')),
                ('shelf_code', models.CharField(max_length=64, verbose_name='Shelf code')),
                ('quantity', models.DecimalField(decimal_places=3, max_digits=12, verbose_name='Quantity on shelf')),
                ('unit_price', models.DecimalField(decimal_places=2, max_digits=12, verbose_name='Unit price')),
                ('expiry_date', models.DateField(blank=True, null=True, verbose_name='Expiry date')),
                ('is_displayed', models.BooleanField(default=True, verbose_name='Displayed')),
                ('display_position', models.CharField(blank=True, default='', max_length=64, verbose_name='Display position')),
                ('min_level', models.DecimalField(blank=True, decimal_places=3, help_text='Below this the shelf needs restocking.', max_digits=12, null=True, verbose_name='Minimum level')),
                ('max_level', models.DecimalField(blank=True, decimal_places=3, help_text='Restocking and transfers cannot go above this.', max_digits=12, null=True, verbose_name='Maximum level')),
                ('placed_at', models.DateTimeField(default=django.utils.timezone.now, verbose_name='Placed at')),
                ('placed_by', models.CharField(max_length=150, verbose_name='Placed by')),
                ('updated_by', models.CharField(max_length=150, verbose_name='Updated by')),
                ('updated_at', models.DateTimeField(default=django.utils.timezone.now, verbose_name='Updated at')),
                ('batch', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='shelf_stock', to='storekeeper.batch', verbose_name='Batch')),
            ],
            options={
                'verbose_name': 'Shelf stock',
                'verbose_name_plural': 'Shelf stock',
                'ordering': ['item_code', 'placed_at'],
                'constraints': [
                    models.UniqueConstraint(fields=('batch', 'shelf_code'), name='storekeeper_shelf_unique_batch'),
                ],
            },
        ),
        migrations.CreateModel(
            name='WebInventory',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('item_code', models.CharField(db_index=True, max_length=64, verbose_name='Item code')),
                ('quantity', models.DecimalField(decimal_places=3, max_digits=12, verbose_name='Quantity available')),
                ('web_price', models.DecimalField(decimal_places=2, max_digits=12, verbose_name='Web price')),
                ('expiry_date', models.DateField(blank=True, null=True, verbose_name='Expiry date')),
                ('is_published', models.BooleanField(default=True, verbose_name='Published')),
                ('is_featured', models.BooleanField(default=False, verbose_name='Featured')),
                ('stock_level', models.PositiveSmallIntegerField(default=50, help_text='Display indicator, 0 to 100.', verbose_name='Stock level')),
                ('added_at', models.DateTimeField(default=django.utils.timezone.now, verbose_name='Added at')),
                ('added_by', models.CharField(max_length=150, verbose_name='Added by')),
                ('updated_by', models.CharField(max_length=150, verbose_name='Updated by')),
                ('updated_at', models.DateTimeField(default=django.utils.timezone.now, verbose_name='Updated at')),
                ('batch', models.OneToOneField(on_delete=django.db.models.deletion.PROTECT, related_name='web_inventory', to='storekeeper.batch', verbose_name='Batch')),
            ],
            options={
                'verbose_name': 'Web inventory',
                'verbose_name_plural': 'Web inventory',
                'ordering': ['item_code', 'added_at'],
            },
        ),
        migrations.CreateModel(
            name='StockMove',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('item_code', models.CharField(db_index=True, max_length=64, verbose_name='Item code')),
                ('pool', models.CharField(choices=[('warehouse', 'Warehouse'), ('shelf', 'Shelf'), ('web', 'Web')], max_length=16, verbose_name='Pool')),
                ('record_id', models.PositiveBigIntegerField(help_text='Primary key of the warehouse, shelf or web row.', verbose_name='Pool row')),
                ('delta', models.DecimalField(decimal_places=3, help_text='Positive = in, Negative = out', max_digits=12, verbose_name='Delta')),
                ('reason', models.CharField(choices=[('receive', 'Received'), ('transfer_out', 'Transferred out'), ('transfer_in', 'Transferred in'), ('sale', 'Sold')], max_length=16, verbose_name='Reason')),
                ('reference', models.CharField(blank=True, default='', help_text='Bill or order number, shelf code, etc.', max_length=64, verbose_name='Reference')),
                ('metadata', models.JSONField(blank=True, default=dict, verbose_name='Metadata')),
                ('user', models.CharField(max_length=150, verbose_name='User')),
                ('timestamp', models.DateTimeField(db_index=True, default=django.utils.timezone.now, verbose_name='Timestamp')),
                ('batch', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='moves', to='storekeeper.batch', verbose_name='Batch')),
            ],
            options={
                'verbose_name': 'Stock move',
                'verbose_name_plural': 'Stock moves',
                'ordering': ['timestamp', 'pk'],
                'indexes': [
                    models.Index(fields=['item_code', 'timestamp'], name='storekeeper_item_co_5a2c8e_idx'),
                    models.Index(fields=['pool', 'record_id'], name='storekeeper_pool_7d41b3_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Sale',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('channel', models.CharField(choices=[('pos', 'Point of sale'), ('web', 'Online store')], max_length=8, verbose_name='Channel')),
                ('number', models.PositiveIntegerField(verbose_name='Number')),
                ('payment_method', models.CharField(choices=[('cash', 'Cash'), ('card', 'Card')], max_length=8, verbose_name='Payment method')),
                ('subtotal', models.DecimalField(decimal_places=2, max_digits=14, verbose_name='Subtotal')),
                ('discount_total', models.DecimalField(decimal_places=2, max_digits=14, verbose_name='Discount')),
                ('net_total', models.DecimalField(decimal_places=2, max_digits=14, verbose_name='Net total')),
                ('cash_tendered', models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True, verbose_name='Cash tendered')),
                ('change', models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True, verbose_name='Change')),
                ('personal_purchase', models.BooleanField(default=False, verbose_name='Personal purchase')),
                ('customer', models.CharField(blank=True, db_index=True, default='', max_length=150, verbose_name='Customer')),
                ('card_last4', models.CharField(blank=True, default='', max_length=4, verbose_name='Card (last 4)')),
                ('created_by', models.CharField(max_length=150, verbose_name='Created by')),
                ('created_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now, verbose_name='Created at')),
            ],
            options={
                'verbose_name': 'Sale',
                'verbose_name_plural': 'Sales',
                'ordering': ['-created_at', '-number'],
                'constraints': [
                    models.UniqueConstraint(fields=('channel', 'number'), name='storekeeper_sale_unique_number'),
                ],
            },
        ),
        migrations.CreateModel(
            name='SaleLine',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('item_code', models.CharField(max_length=64, verbose_name='Item code')),
                ('item_id', models.CharField(max_length=64, verbose_name='Catalog item id')),
                ('item_name', models.CharField(max_length=200, verbose_name='Item name')),
                ('quantity', models.DecimalField(decimal_places=3, max_digits=12, verbose_name='Quantity')),
                ('unit_price', models.DecimalField(decimal_places=2, max_digits=12, verbose_name='Unit price')),
                ('discount', models.DecimalField(decimal_places=2, default=0, max_digits=14, verbose_name='Discount')),
                ('line_total', models.DecimalField(decimal_places=2, help_text='unit price × quantity − discount', max_digits=14, verbose_name='Line total')),
                ('batch', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='sale_lines', to='storekeeper.batch', verbose_name='Batch')),
                ('sale', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='lines', to='storekeeper.sale', verbose_name='Sale')),
            ],
            options={
                'verbose_name': 'Sale line',
                'verbose_name_plural': 'Sale lines',
                'ordering': ['sale', 'pk'],
            },
        ),
        migrations.CreateModel(
            name='Promotion',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('code', models.CharField(max_length=32, unique=True, verbose_name='Code')),
                ('name', models.CharField(max_length=200, verbose_name='Name')),
                ('kind', models.CharField(choices=[('percentage', 'Percentage'), ('fixed_amount', 'Fixed amount per unit')], max_length=16, verbose_name='Kind')),
                ('value', models.DecimalField(decimal_places=2, help_text='Percent (0-100) or amount per unit, depending on kind.', max_digits=12, verbose_name='Value')),
                ('item_id', models.CharField(db_index=True, max_length=64, verbose_name='Catalog item id')),
                ('starts_at', models.DateTimeField(default=django.utils.timezone.now, verbose_name='Starts at')),
                ('ends_at', models.DateTimeField(blank=True, null=True, verbose_name='Ends at')),
                ('is_active', models.BooleanField(default=True, verbose_name='Active')),
                ('batch', models.ForeignKey(blank=True, help_text='Leave empty to apply to every batch of the item.', null=True, on_delete=django.db.models.deletion.CASCADE, related_name='promotions', to='storekeeper.batch', verbose_name='Batch')),
            ],
            options={
                'verbose_name': 'Promotion',
                'verbose_name_plural': 'Promotions',
                'ordering': ['-starts_at'],
            },
        ),
    ]
