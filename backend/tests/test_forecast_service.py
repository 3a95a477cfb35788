from __future__ import annotations

import pytest

from app.errors import ProviderError, ValidationError
from app.models import ForecastRequest
from app.services.forecast_service import (
    ForecastService,
    is_plausible,
    parse_leading_number,
    validate_current_glucose,
)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("145", 145.0),
        ("  98.6 mg/dL", 98.6),
        ("-12", -12.0),
        (".5", 0.5),
        ("1e2", 100.0),
        ("mg/dL 120", None),
        ("", None),
    ],
)
def test_parse_leading_number(text, expected) -> None:
    assert parse_leading_number(text) == expected


def test_plausibility_window_is_exclusive() -> None:
    assert not is_plausible(None)
    assert not is_plausible(40)
    assert is_plausible(40.1)
    assert is_plausible(399.9)
    assert not is_plausible(400)


def test_validate_current_glucose() -> None:
    assert validate_current_glucose("110") == 110.0
    assert validate_current_glucose(87.5) == 87.5
    for raw in (None, "", "high", 0, False, float("nan"), [120], 10**400):
        with pytest.raises(ValidationError):
            validate_current_glucose(raw)


def test_fallback_covers_the_full_drift_range(provider, settings, drift_rng) -> None:
    for drift in range(-5, 5):
        service = ForecastService(provider, settings, rng=drift_rng(drift))
        assert service.fallback(150) == 150 + drift


def test_forecast_passes_through_plausible_reply(provider, settings, drift_rng) -> None:
    provider.reply = "133"
    service = ForecastService(provider, settings, rng=drift_rng(4))
    assert service.forecast(ForecastRequest(currentGlucose=130)).forecast == 133


def test_forecast_uses_fallback_for_out_of_range_reply(provider, settings, drift_rng) -> None:
    provider.reply = "25"
    service = ForecastService(provider, settings, rng=drift_rng(4))
    assert service.forecast(ForecastRequest(currentGlucose=130)).forecast == 134


def test_forecast_propagates_provider_errors(provider, settings) -> None:
    provider.error = ProviderError("boom")
    service = ForecastService(provider, settings)
    with pytest.raises(ProviderError):
        service.forecast(ForecastRequest(currentGlucose=130))
