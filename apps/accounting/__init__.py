"""
-------------------------------------------------------------------------
System: LGU-FMS (Municipal Financial Management System)
Client: Municipal Local Government Unit
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Package initialization for the accounting app.
-------------------------------------------------------------------------
"""
