"""
Backend package initializer.

Exposes the history service source tree (backend/src) so the API, the
scripts and the tests import modules via the ``backend.src`` namespace.
"""

__all__ = ["src"]
