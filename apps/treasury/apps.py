"""
-------------------------------------------------------------------------
System: LGU-FMS (Municipal Financial Management System)
Client: Municipal Local Government Unit
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: App configuration for the treasury module.
-------------------------------------------------------------------------
"""
from django.apps import AppConfig


class TreasuryConfig(AppConfig):
    """Configuration class for disbursements and collections."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.treasury'
    verbose_name = 'Treasury Module'
