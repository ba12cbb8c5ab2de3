import logging

import pytest
import structlog


@pytest.fixture(autouse=True)
def _quiet_structlog():
    """
    Keep custody INFO events (deposit_ok, redeem_ok, ...) out of test output
    unless a test configures logging itself (the CLI does).
    """
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(logging.WARNING))
    yield
    structlog.reset_defaults()
