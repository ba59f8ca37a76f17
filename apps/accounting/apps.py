"""
-------------------------------------------------------------------------
System: LGU-FMS (Municipal Financial Management System)
Client: Municipal Local Government Unit
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: App configuration for the accounting module.
-------------------------------------------------------------------------
"""
from django.apps import AppConfig


class AccountingConfig(AppConfig):
    """Configuration class for journal entries and vouchers."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.accounting'
    verbose_name = 'Accounting Module'
