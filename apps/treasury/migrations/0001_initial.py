# Generated manually on 2026-10-19
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('accounting', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Disbursement',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='Timestamp when this record was created.', verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when this record was last modified.', verbose_name='Updated At')),
                ('check_number', models.CharField(max_length=50, verbose_name='Check Number')),
                ('bank_account', models.CharField(max_length=50, verbose_name='Bank Account')),
                ('amount', models.DecimalField(decimal_places=2, max_digits=15, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))], verbose_name='Amount')),
                ('disbursement_date', models.DateField(verbose_name='Disbursement Date')),
                ('status', models.CharField(choices=[('issued', 'Issued'), ('cleared', 'Cleared'), ('cancelled', 'Cancelled')], default='issued', max_length=20, verbose_name='Status')),
                ('cleared_at', models.DateTimeField(blank=True, null=True, verbose_name='Cleared At')),
                ('voucher', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='disbursements', to='accounting.voucher', verbose_name='Voucher')),
                ('created_by', models.ForeignKey(help_text='User who created this record.', on_delete=django.db.models.deletion.PROTECT, related_name='disbursement_created', to=settings.AUTH_USER_MODEL, verbose_name='Created By')),
                ('updated_by', models.ForeignKey(blank=True, help_text='User who last modified this record.', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='disbursement_updated', to=settings.AUTH_USER_MODEL, verbose_name='Updated By')),
            ],
            options={
                'verbose_name': 'Disbursement',
                'verbose_name_plural': 'Disbursements',
                'ordering': ['-disbursement_date', 'check_number'],
            },
        ),
        migrations.CreateModel(
            name='Collection',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='Timestamp when this record was created.', verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when this record was last modified.', verbose_name='Updated At')),
                ('receipt_number', models.CharField(max_length=50, unique=True, verbose_name='Receipt Number')),
                ('collection_date', models.DateField(verbose_name='Collection Date')),
                ('payor', models.CharField(max_length=200, verbose_name='Payor')),
                ('description', models.TextField(blank=True, verbose_name='Description')),
                ('amount', models.DecimalField(decimal_places=2, max_digits=15, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))], verbose_name='Amount')),
                ('collection_type', models.CharField(choices=[('tax', 'Tax'), ('fee', 'Fee'), ('fine', 'Fine'), ('permit', 'Permit'), ('other', 'Other')], max_length=20, verbose_name='Collection Type')),
                ('account_code', models.CharField(max_length=50, verbose_name='Account Code')),
                ('status', models.CharField(choices=[('recorded', 'Recorded'), ('deposited', 'Deposited'), ('cancelled', 'Cancelled')], default='recorded', max_length=20, verbose_name='Status')),
                ('deposited_at', models.DateTimeField(blank=True, null=True, verbose_name='Deposited At')),
                ('created_by', models.ForeignKey(help_text='User who created this record.', on_delete=django.db.models.deletion.PROTECT, related_name='collection_created', to=settings.AUTH_USER_MODEL, verbose_name='Created By')),
                ('updated_by', models.ForeignKey(blank=True, help_text='User who last modified this record.', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='collection_updated', to=settings.AUTH_USER_MODEL, verbose_name='Updated By')),
            ],
            options={
                'verbose_name': 'Collection',
                'verbose_name_plural': 'Collections',
                'ordering': ['-collection_date', 'receipt_number'],
            },
        ),
    ]
