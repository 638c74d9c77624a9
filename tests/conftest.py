from unittest.mock import MagicMock

import pytest

from builders import make_candles, make_series
from crypto_forecast.logger.logger import Logger


@pytest.fixture
def mock_logger():
    """Logger double that records calls without touching the filesystem."""
    return MagicMock(spec=Logger)


@pytest.fixture
def series_factory():
    return make_series


@pytest.fixture
def candles_factory():
    return make_candles
