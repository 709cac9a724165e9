"""
Per-channel sale numbering.

Adds SaleCounter and seeds one row per channel from the highest number
already used.
"""

from django.db import migrations, models
from django.db.models import Max


def seed_counters(apps, schema_editor):
    """One counter per channel, starting after the last existing sale."""
    Sale = apps.get_model('storekeeper', 'Sale')
    SaleCounter = apps.get_model('storekeeper', 'SaleCounter')

    for channel in ('pos', 'web'):
        last = Sale.objects.filter(channel=channel).aggregate(last=Max('number'))['last']
        SaleCounter.objects.update_or_create(
            channel=channel,
            defaults={'last_number': last or 0},
        )


def remove_counters(apps, schema_editor):
    SaleCounter = apps.get_model('storekeeper', 'SaleCounter')
    SaleCounter.objects.all().delete()


class Migration(migrations.Migration):
    """Add SaleCounter and seed it."""

    dependencies = [
        ('storekeeper', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='SaleCounter',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('channel', models.CharField(choices=[('pos', 'Point of sale'), ('web', 'Online store')], max_length=8, unique=True, verbose_name='Channel')),
                ('last_number', models.PositiveIntegerField(default=0, verbose_name='Last number')),
            ],
            options={
                'verbose_name': 'Sale counter',
                'verbose_name_plural': 'Sale counters',
            },
        ),
        migrations.RunPython(seed_counters, remove_counters),
    ]
