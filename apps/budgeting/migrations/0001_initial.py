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
        ('planning', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='BudgetItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='Timestamp when this record was created.', verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when this record was last modified.', verbose_name='Updated At')),
                ('fiscal_year', models.PositiveIntegerField(verbose_name='Fiscal Year')),
                ('account_code', models.CharField(max_length=50, verbose_name='Account Code')),
                ('description', models.CharField(max_length=255, verbose_name='Description')),
                ('amount', models.DecimalField(decimal_places=2, help_text='Original allocation.', max_digits=15, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))], verbose_name='Amount')),
                ('balance', models.DecimalField(decimal_places=2, help_text='Remaining unobligated amount.', max_digits=15, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))], verbose_name='Balance')),
                ('status', models.CharField(choices=[('active', 'Active'), ('depleted', 'Depleted'), ('cancelled', 'Cancelled')], default='active', max_length=20, verbose_name='Status')),
                ('version', models.PositiveIntegerField(default=0, help_text='Incremented on every balance change.', verbose_name='Version')),
                ('aip_item', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='budget_items', to='planning.aipitem', verbose_name='AIP Item')),
                ('created_by', models.ForeignKey(help_text='User who created this record.', on_delete=django.db.models.deletion.PROTECT, related_name='budgetitem_created', to=settings.AUTH_USER_MODEL, verbose_name='Created By')),
                ('updated_by', models.ForeignKey(blank=True, help_text='User who last modified this record.', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='budgetitem_updated', to=settings.AUTH_USER_MODEL, verbose_name='Updated By')),
            ],
            options={
                'verbose_name': 'Budget Item',
                'verbose_name_plural': 'Budget Items',
                'ordering': ['fiscal_year', 'account_code'],
                'indexes': [models.Index(fields=['fiscal_year', 'account_code'], name='budgeting_item_fy_code_idx')],
            },
        ),
        migrations.CreateModel(
            name='BudgetObligation',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='Timestamp when this record was created.', verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when this record was last modified.', verbose_name='Updated At')),
                ('obligation_number', models.CharField(max_length=50, unique=True, verbose_name='Obligation Number')),
                ('payee', models.CharField(max_length=200, verbose_name='Payee')),
                ('description', models.TextField(blank=True, verbose_name='Description')),
                ('amount', models.DecimalField(decimal_places=2, max_digits=15, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))], verbose_name='Amount')),
                ('obligation_date', models.DateField(verbose_name='Obligation Date')),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('approved', 'Approved'), ('processed', 'Processed'), ('cancelled', 'Cancelled')], default='pending', max_length=20, verbose_name='Status')),
                ('approved_at', models.DateTimeField(blank=True, null=True, verbose_name='Approved At')),
                ('processed_at', models.DateTimeField(blank=True, null=True, verbose_name='Processed At')),
                ('approved_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='approved_obligations', to=settings.AUTH_USER_MODEL, verbose_name='Approved By')),
                ('processed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='processed_obligations', to=settings.AUTH_USER_MODEL, verbose_name='Processed By')),
                ('budget_item', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='obligations', to='budgeting.budgetitem', verbose_name='Budget Item')),
                ('created_by', models.ForeignKey(help_text='User who created this record.', on_delete=django.db.models.deletion.PROTECT, related_name='budgetobligation_created', to=settings.AUTH_USER_MODEL, verbose_name='Created By')),
                ('updated_by', models.ForeignKey(blank=True, help_text='User who last modified this record.', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='budgetobligation_updated', to=settings.AUTH_USER_MODEL, verbose_name='Updated By')),
            ],
            options={
                'verbose_name': 'Budget Obligation',
                'verbose_name_plural': 'Budget Obligations',
                'ordering': ['-obligation_date', 'obligation_number'],
            },
        ),
    ]
