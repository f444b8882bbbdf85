"""
Application package initializer.

This package contains the main entrypoint for the API and its
submodules.  Registrations and session/activity enrollments live in
their own service modules under ``services`` and are exposed through
the router defined in ``api/v1/endpoints``.  Versioning is handled by
grouping routers under the ``api/<version>/`` hierarchy.
"""

from .main import app  # noqa: F401
