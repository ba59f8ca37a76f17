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
        ('users', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='AnnualInvestmentPlan',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='Timestamp when this record was created.', verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when this record was last modified.', verbose_name='Updated At')),
                ('fiscal_year', models.PositiveIntegerField(help_text='Year covered by the plan (e.g., 2026).', verbose_name='Fiscal Year')),
                ('title', models.CharField(max_length=255, verbose_name='Title')),
                ('description', models.TextField(blank=True, verbose_name='Description')),
                ('total_budget', models.DecimalField(decimal_places=2, max_digits=15, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))], verbose_name='Total Budget')),
                ('status', models.CharField(choices=[('draft', 'Draft'), ('submitted', 'Submitted'), ('approved', 'Approved'), ('rejected', 'Rejected')], default='draft', max_length=20, verbose_name='Status')),
                ('approved_at', models.DateTimeField(blank=True, null=True, verbose_name='Approved At')),
                ('approved_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='approved_aips', to=settings.AUTH_USER_MODEL, verbose_name='Approved By')),
                ('created_by', models.ForeignKey(help_text='User who created this record.', on_delete=django.db.models.deletion.PROTECT, related_name='annualinvestmentplan_created', to=settings.AUTH_USER_MODEL, verbose_name='Created By')),
                ('updated_by', models.ForeignKey(blank=True, help_text='User who last modified this record.', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='annualinvestmentplan_updated', to=settings.AUTH_USER_MODEL, verbose_name='Updated By')),
            ],
            options={
                'verbose_name': 'Annual Investment Plan',
                'verbose_name_plural': 'Annual Investment Plans',
                'ordering': ['-fiscal_year', 'title'],
                'indexes': [models.Index(fields=['fiscal_year'], name='planning_aip_fy_idx')],
            },
        ),
        migrations.CreateModel(
            name='AIPItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='Timestamp when this record was created.', verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when this record was last modified.', verbose_name='Updated At')),
                ('project_name', models.CharField(max_length=255, verbose_name='Project Name')),
                ('sector', models.CharField(choices=[('infrastructure', 'Infrastructure'), ('health', 'Health'), ('education', 'Education'), ('social_services', 'Social Services'), ('economic', 'Economic Services'), ('environment', 'Environment'), ('general', 'General Public Services')], default='general', max_length=30, verbose_name='Sector')),
                ('description', models.TextField(blank=True, verbose_name='Description')),
                ('location', models.CharField(blank=True, max_length=255, verbose_name='Location')),
                ('budget', models.DecimalField(decimal_places=2, help_text='Planned cost of the project.', max_digits=15, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))], verbose_name='Budget')),
                ('start_date', models.DateField(blank=True, null=True, verbose_name='Start Date')),
                ('end_date', models.DateField(blank=True, null=True, verbose_name='End Date')),
                ('status', models.CharField(choices=[('draft', 'Draft'), ('approved', 'Approved'), ('in_progress', 'In Progress'), ('completed', 'Completed'), ('rejected', 'Rejected')], default='draft', max_length=20, verbose_name='Status')),
                ('aip', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='items', to='planning.annualinvestmentplan', verbose_name='Annual Investment Plan')),
                ('created_by', models.ForeignKey(help_text='User who created this record.', on_delete=django.db.models.deletion.PROTECT, related_name='aipitem_created', to=settings.AUTH_USER_MODEL, verbose_name='Created By')),
                ('updated_by', models.ForeignKey(blank=True, help_text='User who last modified this record.', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='aipitem_updated', to=settings.AUTH_USER_MODEL, verbose_name='Updated By')),
            ],
            options={
                'verbose_name': 'AIP Item',
                'verbose_name_plural': 'AIP Items',
                'ordering': ['aip', 'project_name'],
            },
        ),
    ]
