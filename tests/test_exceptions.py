import pytest

from crypto_forecast.exceptions import (
    ConfigError,
    DecodeError,
    EmptyResultError,
    ForecastError,
    ProviderError,
    TransportError,
)


@pytest.mark.parametrize("exc_type", [TransportError, DecodeError, ProviderError, EmptyResultError, ConfigError])
def test_all_errors_share_base(exc_type):
    with pytest.raises(ForecastError):
        raise exc_type("failure")


def test_transport_error_keeps_status():
    error = TransportError("HTTP 429", status=429)
    assert error.status == 429
    assert str(error) == "HTTP 429"
    assert TransportError("connection reset").status is None
