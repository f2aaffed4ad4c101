"""Test utilities for htmplx handlers.

    from htmplx.testing import TestClient
"""

from htmplx.testing.client import TestClient

__all__ = ["TestClient"]
