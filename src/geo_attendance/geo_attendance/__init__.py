"""Geofenced classroom attendance package.

Organized by feature modules (sessions, enrollments, attendance, stats, ...)
with a thin Flask controller layer over service/repository layers.
"""
