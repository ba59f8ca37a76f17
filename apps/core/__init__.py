"""
-------------------------------------------------------------------------
System: LGU-FMS (Municipal Financial Management System)
Client: Municipal Local Government Unit
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Core app initialization. Contains the workflow engine,
             storage port, shared mixins and exceptions.
-------------------------------------------------------------------------
"""
