import pytest
import structlog


@pytest.fixture(autouse=True)
def reset_structlog():
    # CLI tests configure structlog to print to the runner's stderr, which
    # is closed once the invocation returns.
    yield
    structlog.reset_defaults()
