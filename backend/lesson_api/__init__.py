"""Lesson listing backend.

This package exposes the service, repository and model modules used by
the FastAPI application in `lesson_api.main`. Individual modules contain
the concrete implementations and documentation.
"""
