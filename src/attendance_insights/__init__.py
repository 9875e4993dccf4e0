"""Attendance Insights package.

This package is organized by feature modules (timetables, overrides, schedules,
attendance, insights, ...) with a thin Flask controller layer on top of
service/repository layers.

The resolver in ``schedules`` decides which subject actually runs in a given
period; ``insights`` aggregates attendance logs against that effective schedule.
"""
