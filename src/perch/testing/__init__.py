"""Testing utilities for perch deployments.

Usage::

    from perch.testing import TestClient

    async with TestClient(StaticSite(deployment)) as client:
        response = await client.get("/")
        assert response.status == 200
"""

from perch.testing.client import TestClient

__all__ = ["TestClient"]
