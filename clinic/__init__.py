"""Clinic application for the medical center backend.

This package contains models, serializers, services, views and route
registrations for the clinic back office: patients, appointments,
treatments, medicine stock, billing sessions and reports.
"""
