"""Attendance Portal package.

Feature modules (auth, employees, attendance) each keep a thin Flask
controller over service/repository layers.
"""
