# Ensure tests import the package from this checkout first.
import os
import sys
import pytest

SERVICE_ROOT = os.path.dirname(__file__)

if SERVICE_ROOT not in sys.path:
    sys.path.insert(0, SERVICE_ROOT)

from rewrite_proxy.config import _build_config  # noqa: E402
from rewrite_proxy.vars import PROXY_ENV_KEYS  # noqa: E402


@pytest.fixture
def proxy_env(monkeypatch):
    """Clear every proxy variable and return a setter for the ones a test needs."""
    for key in PROXY_ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    _build_config.cache_clear()

    def _set(**values):
        for key, value in values.items():
            monkeypatch.setenv(key, value)

    yield _set
    _build_config.cache_clear()
