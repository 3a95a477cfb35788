from __future__ import annotations

import logging
import random
import re
from typing import Any, Optional

from ..config import Settings
from ..errors import ValidationError
from ..models import ForecastRequest, ForecastResponse, as_number
from ..provider import CompletionProvider

logger = logging.getLogger(__name__)

PLAUSIBLE_MIN_MGDL = 40.0
PLAUSIBLE_MAX_MGDL = 400.0
FALLBACK_DRIFT_LOW = -5
FALLBACK_DRIFT_HIGH = 4
FORECAST_MAX_TOKENS = 50

_LEADING_NUMBER = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def validate_current_glucose(value: Any) -> float:
    number = as_number(value)
    if number is None or number == 0:
        raise ValidationError("Invalid glucose value")
    return number


def parse_leading_number(text: str) -> Optional[float]:
    """Read the number a reply starts with, ignoring trailing units or words."""
    match = _LEADING_NUMBER.match(text or "")
    if not match:
        return None
    return as_number(match.group(1))


def is_plausible(forecast: Optional[float]) -> bool:
    return forecast is not None and PLAUSIBLE_MIN_MGDL < forecast < PLAUSIBLE_MAX_MGDL


def build_forecast_prompt(current: Any) -> str:
    return (
        "You are a clinical diabetes forecasting assistant.\n"
        f"Given a current glucose level of {current} mg/dL, estimate the glucose level after "
        "30 minutes considering normal physiological glucose metabolism.\n"
        "Respond only with the numeric glucose forecast (mg/dL)."
    )


class ForecastService:
    def __init__(self, provider: CompletionProvider, settings: Settings, rng: random.Random | None = None):
        self.provider = provider
        self.settings = settings
        self.rng = rng or random.Random()

    def fallback(self, current: float) -> float:
        return current + self.rng.randint(FALLBACK_DRIFT_LOW, FALLBACK_DRIFT_HIGH)

    def forecast(self, payload: ForecastRequest) -> ForecastResponse:
        current = validate_current_glucose(payload.currentGlucose)

        text = self.provider.complete(
            messages=[{"role": "user", "content": build_forecast_prompt(payload.currentGlucose)}],
            temperature=self.settings.temperature,
            max_tokens=FORECAST_MAX_TOKENS,
        )
        forecast = parse_leading_number(text.strip())
        if not is_plausible(forecast):
            safe = self.fallback(current)
            logger.info("Forecast %r rejected, using fallback %.1f", text.strip()[:40], safe)
            return ForecastResponse(forecast=safe)
        return ForecastResponse(forecast=forecast)
