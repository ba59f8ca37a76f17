"""
-------------------------------------------------------------------------
System: LGU-FMS (Municipal Financial Management System)
Client: Municipal Local Government Unit
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: App configuration for the planning module.
-------------------------------------------------------------------------
"""
from django.apps import AppConfig


class PlanningConfig(AppConfig):
    """
    Configuration class for the planning application.

    This app manages:
    - Annual Investment Plans (AIP) per fiscal year
    - AIP project items and their implementation status
    """

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.planning'
    verbose_name = 'Planning Module'
