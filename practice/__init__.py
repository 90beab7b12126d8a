"""Clinic practice application.

Appointment scheduling, medicine inventory and medical records, with
the role-based access rules that gate them.
"""
