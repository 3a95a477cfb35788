from __future__ import annotations

import math
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, field_validator

MAX_FORECAST_MINUTES = 24 * 60


def as_number(value: Any) -> Optional[float]:
    """Return ``value`` as a finite float, accepting numeric strings, else None."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


class RiskCategory(str, Enum):
    HYPO = "Hypo risk"
    HYPER = "Hyper risk"
    STABLE = "Stable"

    @classmethod
    def from_label(cls, label: Any) -> Optional["RiskCategory"]:
        if not isinstance(label, str):
            return None
        key = "".join(ch for ch in label.lower() if ch.isalpha())
        for member in cls:
            if "".join(ch for ch in member.value.lower() if ch.isalpha()) == key:
                return member
        return None


class InsulinKind(str, Enum):
    FAST = "fast"
    LONG = "long"
    MIXED = "mixed"
    OTHER = "other"


class ActivityKind(str, Enum):
    WALK = "walk"
    RUN = "run"
    SEDENTARY = "sedentary"
    OTHER = "other"


class ForecastRequest(BaseModel):
    currentGlucose: Any = None


class ForecastResponse(BaseModel):
    forecast: float


class PredictRequest(BaseModel):
    glucoseHistory: Any = None
    insulinType: Optional[str] = None
    insulinUnits: Optional[float] = None
    calories: Optional[float] = None
    activity: Optional[str] = None


class MainAlert(BaseModel):
    type: str
    message: str
    color: Optional[str] = None


class AlertOut(BaseModel):
    risk: RiskCategory
    in_minutes: int
    time: str


class PredictResponse(BaseModel):
    forecast_mgdl: float
    main_alert: MainAlert
    alerts: List[AlertOut]
    baseline: float


class ProviderForecast(BaseModel):
    """Schema of the JSON object the predictive prompt asks the model for.

    Fields the model got wrong are dropped to None so the local baseline and
    risk classification can fill them in.
    """

    forecast_mgdl: Optional[float] = None
    risk_type: Optional[RiskCategory] = None
    forecast_minutes: Optional[int] = None

    @field_validator("forecast_mgdl", mode="before")
    @classmethod
    def _numeric_forecast(cls, value: Any) -> Optional[float]:
        return as_number(value)

    @field_validator("risk_type", mode="before")
    @classmethod
    def _known_risk(cls, value: Any) -> Optional[RiskCategory]:
        return RiskCategory.from_label(value)

    @field_validator("forecast_minutes", mode="before")
    @classmethod
    def _positive_minutes(cls, value: Any) -> Optional[int]:
        number = as_number(value)
        if number is None or not 0 < number <= MAX_FORECAST_MINUTES:
            return None
        return int(round(number))


class SummaryRequest(BaseModel):
    values: Any = None


class SummaryResponse(BaseModel):
    summary: str
