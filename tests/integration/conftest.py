"""Fixtures for the live control plane scenarios.

These tests create real Kafka instances, service accounts and registries, so
they only run when a bearer token is available in ``MSE2E_TOKEN``.
"""

from __future__ import annotations

import os
import uuid

import pytest

from managed_services_e2e.config.loader import load_e2e_config
from managed_services_e2e.config.models import E2EConfig


@pytest.fixture(autouse=True)
def _require_token():
    if not os.environ.get("MSE2E_TOKEN"):
        pytest.skip("MSE2E_TOKEN not set")


@pytest.fixture(scope="session")
def e2e_config() -> E2EConfig:
    """Harness config from defaults, ``MSE2E_CONFIG`` and the environment.

    Without ``MSE2E_NAME_POSTFIX`` each session gets its own resource names.
    """
    if "MSE2E_NAME_POSTFIX" not in os.environ:
        os.environ["MSE2E_NAME_POSTFIX"] = f"it-{uuid.uuid4().hex[:8]}"
    return load_e2e_config(os.environ.get("MSE2E_CONFIG"))
