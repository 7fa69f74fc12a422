"""Test utilities for hammock applications::

    from hammock.testing import TestClient
"""

from hammock.testing.client import TestClient

__all__ = ["TestClient"]
