"""Pytest configuration and fixtures for integration tests.

Integration tests talk to a running app.py over HTTP. Credentials are
optional: without provider keys the server answers from the local dataset
and template fallback, which the tests accept.
"""

import os
from pathlib import Path

import httpx
import pytest
from dotenv import load_dotenv

API_TIMEOUT = 30  # Seconds per request


def pytest_configure(config):
    """Load .env from the project root before collection."""
    env_path = Path(__file__).parent.parent.parent / ".env"
    load_dotenv(env_path)

    print("\n" + "=" * 70)
    print("Note: These tests require app.py running (python app.py)")
    print(f"Environment loaded from: {env_path}")
    print(f"  - Gemini: {'configured' if os.getenv('GEMINI_API_KEY') else 'template fallback'}")
    print(f"  - Spoonacular: {'configured' if os.getenv('SPOONACULAR_API_KEY') else 'not configured'}")
    print("=" * 70 + "\n")


@pytest.fixture(scope="session")
def api_base_url() -> str:
    return os.getenv("API_BASE_URL", f"http://localhost:{os.getenv('PORT', '7777')}")


@pytest.fixture(scope="session")
def http_client(api_base_url):
    """httpx client for the running app; skips the session when it is unreachable."""
    with httpx.Client(base_url=api_base_url, timeout=API_TIMEOUT) as client:
        try:
            response = client.get("/health")
        except httpx.TransportError:
            pytest.skip(f"Cannot connect to app at {api_base_url}. Start with: python app.py")
        if response.status_code != 200:
            pytest.skip(f"App not healthy at {api_base_url}. Status: {response.status_code}")
        yield client
