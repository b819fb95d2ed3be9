"""Gym Dashboard package.

Organized by feature modules (members, payments, attendance, ...) with a thin
Flask JSON controller layer on top of service/repository layers.
"""
