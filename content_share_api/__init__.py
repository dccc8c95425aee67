"""
Top‑level package for the Content Share API.

This file makes ``content_share_api`` a Python package so that
modules within ``app`` can be imported using fully qualified names
like ``content_share_api.app.main``.

The package provides no public exports; all functionality lives in
submodules under ``app``.
"""

__all__ = []
