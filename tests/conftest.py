from __future__ import annotations

import os
import sys

import pytest
from fastapi.testclient import TestClient

# Ensure `import nodepatch.*` and `import scripts.*` work under pytest
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from nodepatch.main import app  # noqa: E402


@pytest.fixture()
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def base_template() -> dict:
    return {
        "metadata": {"labels": {"app": "test"}},
        "spec": {
            "containers": [
                {
                    "name": "test-container",
                    "image": "test-image:latest",
                    "env": [{"name": "DEFAULT", "value": "value"}],
                }
            ]
        },
    }
