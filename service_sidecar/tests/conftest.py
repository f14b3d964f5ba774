"""
Shared fixtures for sidecar tests.
"""

import pytest

from shared.test_helpers import generate_key_pair
from service_sidecar.app.crypto import PrivateKeyHolder


@pytest.fixture(scope="session")
def key_pair():
    """RSA key pair shared across the session; generation is slow."""
    return generate_key_pair()


@pytest.fixture
def key_holder(key_pair):
    """Holder for the session key."""
    return PrivateKeyHolder(key=key_pair.private_key)
