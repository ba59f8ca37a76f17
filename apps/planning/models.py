"""
-------------------------------------------------------------------------
System: LGU-FMS (Municipal Financial Management System)
Client: Municipal Local Government Unit
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Planning models for the Annual Investment Plan (AIP) and
             its planned capital projects. Approved AIP items are the
             source of funded budget items.
-------------------------------------------------------------------------
"""
from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

from apps.core.mixins import AuditLogMixin


class AIPStatus(models.TextChoices):
    """
    Status choices for the Annual Investment Plan.

    DRAFT: Plan being prepared
    SUBMITTED: Plan submitted to the council for approval
    APPROVED: Plan approved, projects may be implemented
    REJECTED: Plan returned; can be reopened as draft
    """
    DRAFT = 'draft', _('Draft')
    SUBMITTED = 'submitted', _('Submitted')
    APPROVED = 'approved', _('Approved')
    REJECTED = 'rejected', _('Rejected')


class AIPItemStatus(models.TextChoices):
    DRAFT = 'draft', _('Draft')
    APPROVED = 'approved', _('Approved')
    IN_PROGRESS = 'in_progress', _('In Progress')
    COMPLETED = 'completed', _('Completed')
    REJECTED = 'rejected', _('Rejected')


class Sector(models.TextChoices):
    INFRASTRUCTURE = 'infrastructure', _('Infrastructure')
    HEALTH = 'health', _('Health')
    EDUCATION = 'education', _('Education')
    SOCIAL_SERVICES = 'social_services', _('Social Services')
    ECONOMIC = 'economic', _('Economic Services')
    ENVIRONMENT = 'environment', _('Environment')
    GENERAL = 'general', _('General Public Services')


class AnnualInvestmentPlan(AuditLogMixin):
    """
    Fiscal-year collection of planned capital projects.

    Attributes:
        fiscal_year: Calendar year the plan covers (e.g. 2026)
        title: Plan title
        total_budget: Ceiling of the whole plan
        status: Current workflow status
        approved_by / approved_at: Set when the plan is approved
    """

    fiscal_year = models.PositiveIntegerField(
        verbose_name=_('Fiscal Year'),
        help_text=_('Year covered by the plan (e.g., 2026).')
    )
    title = models.CharField(
        max_length=255,
        verbose_name=_('Title')
    )
    description = models.TextField(
        blank=True,
        verbose_name=_('Description')
    )
    total_budget = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))],
        verbose_name=_('Total Budget')
    )
    status = models.CharField(
        max_length=20,
        choices=AIPStatus.choices,
        default=AIPStatus.DRAFT,
        verbose_name=_('Status')
    )
    approved_by = models.ForeignKey(
        'users.CustomUser',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='approved_aips',
        verbose_name=_('Approved By')
    )
    approved_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name=_('Approved At')
    )

    class Meta:
        verbose_name = _('Annual Investment Plan')
        verbose_name_plural = _('Annual Investment Plans')
        ordering = ['-fiscal_year', 'title']
        indexes = [
            models.Index(fields=['fiscal_year'], name='planning_aip_fy_idx'),
        ]

    def __str__(self) -> str:
        return f"AIP {self.fiscal_year} - {self.title}"


class AIPItem(AuditLogMixin):
    """
    A planned project within an AIP.

    Workflow: draft -> approved -> in_progress -> completed, and any
    non-terminal status may be rejected.
    """

    aip = models.ForeignKey(
        AnnualInvestmentPlan,
        on_delete=models.PROTECT,
        related_name='items',
        verbose_name=_('Annual Investment Plan')
    )
    project_name = models.CharField(
        max_length=255,
        verbose_name=_('Project Name')
    )
    sector = models.CharField(
        max_length=30,
        choices=Sector.choices,
        default=Sector.GENERAL,
        verbose_name=_('Sector')
    )
    description = models.TextField(
        blank=True,
        verbose_name=_('Description')
    )
    location = models.CharField(
        max_length=255,
        blank=True,
        verbose_name=_('Location')
    )
    budget = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))],
        verbose_name=_('Budget'),
        help_text=_('Planned cost of the project.')
    )
    start_date = models.DateField(
        null=True,
        blank=True,
        verbose_name=_('Start Date')
    )
    end_date = models.DateField(
        null=True,
        blank=True,
        verbose_name=_('End Date')
    )
    status = models.CharField(
        max_length=20,
        choices=AIPItemStatus.choices,
        default=AIPItemStatus.DRAFT,
        verbose_name=_('Status')
    )

    class Meta:
        verbose_name = _('AIP Item')
        verbose_name_plural = _('AIP Items')
        ordering = ['aip', 'project_name']

    def __str__(self) -> str:
        return f"{self.project_name} - PHP {self.budget}"
