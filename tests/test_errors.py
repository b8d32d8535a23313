import pytest

from src.server.api.deps import http_error
from src.services.errors import (
    AIServiceUnavailable,
    ConfigurationMissing,
    InvalidInput,
    InvalidTransition,
    QuoteLocked,
)


@pytest.mark.parametrize(
    "error, status",
    [
        (InvalidInput("bad cases"), 400),
        (InvalidTransition("draft -> accepted"), 409),
        (QuoteLocked("quote is sent"), 409),
        (AIServiceUnavailable("no key"), 503),
        # the settings fallback handles this before it can reach a router
        (ConfigurationMissing("no settings"), 500),
    ],
)
def test_status_for_domain_error(error, status):
    e = http_error(error)
    assert e.status_code == status
    assert e.detail == str(error)
