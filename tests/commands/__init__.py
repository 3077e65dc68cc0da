import pytest

from fleetctl.client import FleetClient


class TestCase:
    """Base class for command tests: every test runs with CLIENT bound to a fake server."""

    @pytest.fixture(autouse=True)
    async def _bind_client(self, fleet_client: FleetClient) -> None:
        pass
