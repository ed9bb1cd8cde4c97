"""Application package for the student registration backend.

This package exposes the service, repository and model modules used by
the FastAPI application built in `app.main.create_app`. Individual
modules contain the concrete implementations and documentation.
"""
