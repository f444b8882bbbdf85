"""
Top‑level package for the Conference Registration API.

This file makes ``conference_api`` a Python package so that modules
within ``app`` can be imported using fully qualified names like
``conference_api.app.main``.  The HTTP client used by bots and admin
tools lives in ``conference_api.client``.

The package provides no public exports; all functionality lives in
submodules under ``app``.
"""

__all__ = []
