"""Attendance Tracker package.

Feature modules (users, attendance, requests) each carry a model, a repository
interface with its MySQL implementation, a service and a thin Flask JSON
controller. Wiring lives in :mod:`container`, the app factory in :mod:`main`.
"""
