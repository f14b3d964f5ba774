"""
Integration tests for the sidecar auth-token flow against the mock Aplos server.
"""

import httpx
import pytest

from mocks.aplos.server import MockAplosServer
from service_sidecar.app.main import SidecarService
from shared.test_helpers import generate_key_pair, make_config, make_sidecar_client


MOCK_BASE_URL = "http://aplos.mock/hermes/api/v1"


@pytest.fixture(scope="module")
def key_pair():
    """Key pair shared by the mock vendor and the sidecar."""
    return generate_key_pair()


class TestAuthTokenFlow:
    """Integration tests for the complete token exchange."""

    def _sidecar(self, key_pair, mock_server):
        config = make_config(
            aplos_api_base_url=MOCK_BASE_URL,
            aplos_client_id="mock-client",
            aplos_private_key=key_pair.escaped_pem,
        )
        return SidecarService(config, aplos_transport=httpx.ASGITransport(app=mock_server.app))

    @pytest.mark.asyncio
    @pytest.mark.parametrize("scheme,shape", [
        ("pkcs1v15", "nested"),
        ("oaep-sha1", "flat"),
        ("oaep-sha256", "nested"),
    ])
    async def test_complete_flow(self, key_pair, scheme, shape):
        mock_server = MockAplosServer(
            key_pair.public_key,
            client_id="mock-client",
            plaintext_token=f"live-token-{scheme}",
            scheme=scheme,
            shape=shape,
        )
        sidecar = self._sidecar(key_pair, mock_server)

        async with make_sidecar_client(sidecar.app, client_addr="10.0.0.7") as client:
            response = await client.post("/auth-token")

        assert response.status_code == 200
        assert response.json() == {"token": f"live-token-{scheme}"}
        assert mock_server.request_count == 1
        assert sidecar.metrics.get_sample_value("tokens_decrypted_total", {"scheme": scheme}) == 1.0

    @pytest.mark.asyncio
    async def test_repeated_calls_fetch_fresh_tokens(self, key_pair):
        mock_server = MockAplosServer(key_pair.public_key, client_id="mock-client")
        sidecar = self._sidecar(key_pair, mock_server)

        async with make_sidecar_client(sidecar.app) as client:
            first = await client.post("/auth-token")
            second = await client.post("/auth-token")

        assert first.json() == second.json() == {"token": "mock-aplos-access-token"}
        assert mock_server.request_count == 2

    @pytest.mark.asyncio
    async def test_unknown_client_id(self, key_pair):
        mock_server = MockAplosServer(key_pair.public_key, client_id="someone-else")
        sidecar = self._sidecar(key_pair, mock_server)

        async with make_sidecar_client(sidecar.app) as client:
            response = await client.post("/auth-token")

        assert response.status_code == 502
        assert response.json() == {"error": "Aplos auth failed: 404"}

    @pytest.mark.asyncio
    async def test_vendor_outage(self, key_pair):
        mock_server = MockAplosServer(key_pair.public_key, client_id="mock-client", failure_status=503)
        sidecar = self._sidecar(key_pair, mock_server)

        async with make_sidecar_client(sidecar.app) as client:
            response = await client.post("/auth-token")

        assert response.status_code == 502
        assert response.json() == {"error": "Aplos auth failed: 503"}

    @pytest.mark.asyncio
    async def test_public_caller_never_reaches_vendor(self, key_pair):
        mock_server = MockAplosServer(key_pair.public_key, client_id="mock-client")
        sidecar = self._sidecar(key_pair, mock_server)

        async with make_sidecar_client(sidecar.app, client_addr="8.8.8.8") as client:
            response = await client.post("/auth-token")

        assert response.status_code == 403
        assert response.json() == {"error": "Forbidden"}
        assert mock_server.request_count == 0
