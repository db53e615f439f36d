"""Attendance & Penalty Engine package.

Organized by feature module (attendance, penalties, leaves, ...) with a thin
Flask controller layer over service/repository layers.
"""
