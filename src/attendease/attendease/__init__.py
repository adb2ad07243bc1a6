"""AttendEase package.

Absence-excuse workflow for an academic institution, organized by feature
modules (users, timetables, requests, events, ...) with a thin Flask
controller layer over service/repository layers.
"""
