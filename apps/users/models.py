"""
-------------------------------------------------------------------------
System: LGU-FMS (Municipal Financial Management System)
Client: Municipal Local Government Unit
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Custom User model with module-based access control.
             Each user holds one Role, and each Role grants access to
             exactly one functional module (or to all, for admin).
-------------------------------------------------------------------------
"""
from typing import List

from django.contrib.auth.models import AbstractUser
from django.db import models
from django.utils.translation import gettext_lazy as _


class RoleModule(models.TextChoices):
    """
    Functional modules a role can be granted.

    ADMIN is not a module of its own: it covers every module.
    """
    PLANNING = 'planning', _('Planning')
    BUDGET = 'budget', _('Budget')
    ACCOUNTING = 'accounting', _('Accounting')
    TREASURY = 'treasury', _('Treasury')
    HRIS = 'hris', _('Human Resources')
    ADMIN = 'admin', _('Administration')


class Role(models.Model):
    """
    Database-driven role used as the access gate for workflow operations.

    Attributes:
        name: Unique human-readable role name.
        module: The module this role is allowed to operate.
        is_encoder: Whether the role is a data-entry (maker) role.
        permissions: Free-form permission codes attached to the role.
    """

    name = models.CharField(
        max_length=100,
        unique=True,
        verbose_name=_('Role Name'),
        help_text=_('Human-readable name for the role.')
    )
    module = models.CharField(
        max_length=20,
        choices=RoleModule.choices,
        verbose_name=_('Module'),
        help_text=_('Module this role is allowed to operate.')
    )
    is_encoder = models.BooleanField(
        default=False,
        verbose_name=_('Encoder'),
        help_text=_('Data-entry role (maker).')
    )
    permissions = models.JSONField(
        default=list,
        blank=True,
        verbose_name=_('Permissions'),
        help_text=_('Permission codes granted to this role.')
    )

    class Meta:
        verbose_name = _('Role')
        verbose_name_plural = _('Roles')
        ordering = ['name']

    def __str__(self) -> str:
        return self.name

    def covers(self, module: str) -> bool:
        """
        Check if this role grants access to a module.

        Args:
            module: A RoleModule value.

        Returns:
            True if the role is bound to that module or is an admin role.
        """
        return self.module == module or self.module == RoleModule.ADMIN

    def has_permission(self, code: str) -> bool:
        return code in (self.permissions or [])


class CustomUser(AbstractUser):
    """
    Custom User model for LGU-FMS.

    Attributes:
        role: The single role this user acts under.
        department: Office or department the user belongs to.
        position: Official job title.
    """

    role = models.ForeignKey(
        Role,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='users',
        verbose_name=_('Role'),
        help_text=_('Role assigned to this user.')
    )
    department = models.CharField(
        max_length=100,
        blank=True,
        verbose_name=_('Department')
    )
    position = models.CharField(
        max_length=100,
        blank=True,
        verbose_name=_('Position'),
        help_text=_('Official job title (e.g., Municipal Accountant).')
    )

    class Meta:
        verbose_name = _('User')
        verbose_name_plural = _('Users')
        ordering = ['username']

    def __str__(self) -> str:
        return self.get_full_name() or self.username

    def get_modules(self) -> List[str]:
        """Get the list of modules this user can operate."""
        if self.is_superuser or (self.role and self.role.module == RoleModule.ADMIN):
            return [choice.value for choice in RoleModule if choice != RoleModule.ADMIN]
        return [self.role.module] if self.role else []
