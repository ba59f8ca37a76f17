"""
-------------------------------------------------------------------------
System: LGU-FMS (Municipal Financial Management System)
Client: Municipal Local Government Unit
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: App configuration for the budgeting module.
             Handles budget items funded from the AIP and the
             obligations reserved against them.
-------------------------------------------------------------------------
"""
from django.apps import AppConfig


class BudgetingConfig(AppConfig):
    """
    Configuration class for the budgeting application.

    This app manages:
    - Budget items per fiscal year and account code
    - Obligation requests and their approval
    - The running balance of every budget item
    """

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.budgeting'
    verbose_name = 'Budgeting Module'
