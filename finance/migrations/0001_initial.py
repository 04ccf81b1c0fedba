import django.db.models.deletion
from django.db import migrations, models


def seed_statuses(apps, schema_editor):
    PaymentStatus = apps.get_model('finance', 'PaymentStatus')
    for name in ('Pending', 'Success', 'Cancelled', 'Refunded', 'Failed'):
        PaymentStatus.objects.get_or_create(status=name)


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('offers', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='PaymentStatus',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('status', models.CharField(max_length=50, unique=True)),
            ],
            options={
                'verbose_name_plural': 'Payment Statuses',
            },
        ),
        migrations.CreateModel(
            name='Transaction',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12)),
                ('transaction_date', models.DateTimeField(auto_now_add=True)),
                ('provider', models.CharField(default='moyasar', max_length=50)),
                ('provider_reference', models.CharField(blank=True, default='', max_length=100)),
                ('moyasar_invoice_id', models.CharField(blank=True, default='', max_length=100)),
                ('invoice_url', models.URLField(blank=True, default='', max_length=500)),
                ('offer', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='transaction', to='offers.offer')),
                ('payment_status', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, to='finance.paymentstatus')),
            ],
            options={
                'indexes': [
                    models.Index(fields=['provider_reference'], name='tx_provider_ref_idx'),
                    models.Index(fields=['moyasar_invoice_id'], name='tx_moyasar_invoice_idx'),
                ],
            },
        ),
        migrations.RunPython(seed_statuses, migrations.RunPython.noop),
    ]
