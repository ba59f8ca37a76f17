"""
-------------------------------------------------------------------------
System: LGU-FMS (Municipal Financial Management System)
Client: Municipal Local Government Unit
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Reusable model mixins for timestamps and actor tracking
             shared by every ledger entity.
-------------------------------------------------------------------------
"""
from django.db import models
from django.conf import settings


class TimeStampedMixin(models.Model):
    """
    Abstract mixin that adds created_at and updated_at timestamps.

    Attributes:
        created_at: Timestamp when the record was created.
        updated_at: Timestamp when the record was last modified.
    """

    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name="Created At",
        help_text="Timestamp when this record was created."
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        verbose_name="Updated At",
        help_text="Timestamp when this record was last modified."
    )

    class Meta:
        abstract = True


class AuditLogMixin(TimeStampedMixin):
    """
    Abstract mixin that adds actor fields for user tracking.

    Ledger entities are always created on behalf of an authenticated
    actor, so created_by is mandatory. updated_by tracks the last
    actor that changed the record through a service operation.

    Attributes:
        created_by: ForeignKey to the user who created the record.
        updated_by: ForeignKey to the user who last modified the record.
    """

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="%(class)s_created",
        verbose_name="Created By",
        help_text="User who created this record."
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="%(class)s_updated",
        null=True,
        blank=True,
        verbose_name="Updated By",
        help_text="User who last modified this record."
    )

    class Meta:
        abstract = True
