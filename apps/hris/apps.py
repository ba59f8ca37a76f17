"""
-------------------------------------------------------------------------
System: LGU-FMS (Municipal Financial Management System)
Client: Municipal Local Government Unit
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: App configuration for the HRIS module.
-------------------------------------------------------------------------
"""
from django.apps import AppConfig


class HrisConfig(AppConfig):
    """Configuration class for employee records and payroll."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.hris'
    verbose_name = 'HRIS Module'
