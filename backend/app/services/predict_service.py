from __future__ import annotations

import json
import logging
import re
from datetime import datetime
from typing import Any, Callable, List, Optional

from ..config import Settings
from ..errors import ParseError, ValidationError
from ..models import (
    ActivityKind,
    InsulinKind,
    PredictRequest,
    PredictResponse,
    ProviderForecast,
    as_number,
)
from ..provider import CompletionProvider
from .risk_service import build_alerts, classify_risk, main_alert_for

logger = logging.getLogger(__name__)

BASELINE_FLOOR_MGDL = 60.0
BASELINE_CEILING_MGDL = 250.0
DEFAULT_HORIZON_MINUTES = 30
PREDICT_MAX_TOKENS = 150

_FENCE = re.compile(r"```(?:json)?", re.IGNORECASE)


def insulin_kind(insulin_type: Optional[str]) -> InsulinKind:
    text = (insulin_type or "").lower()
    fast = "fast" in text
    long_acting = "long" in text
    if fast and long_acting:
        return InsulinKind.MIXED
    if fast:
        return InsulinKind.FAST
    if long_acting:
        return InsulinKind.LONG
    return InsulinKind.OTHER


def activity_kind(activity: Optional[str]) -> ActivityKind:
    text = (activity or "").strip().lower()
    if not text:
        return ActivityKind.SEDENTARY
    if "walk" in text:
        return ActivityKind.WALK
    if "run" in text:
        return ActivityKind.RUN
    return ActivityKind.OTHER


def validate_history(raw: Any) -> List[float]:
    if not isinstance(raw, list) or not raw:
        raise ValidationError("Glucose history is required")
    values = [as_number(item) for item in raw]
    if any(value is None for value in values):
        raise ValidationError("Glucose history is required")
    return values


def compute_baseline(
    history: List[float],
    insulin_type: Optional[str] = None,
    insulin_units: Optional[float] = None,
    calories: Optional[float] = None,
    activity: Optional[str] = None,
) -> float:
    latest = history[-1]
    units = insulin_units or 0.0
    kind = insulin_kind(insulin_type)

    adjustment = 0.0
    if kind in (InsulinKind.FAST, InsulinKind.MIXED):
        adjustment -= units * 3
    if kind in (InsulinKind.LONG, InsulinKind.MIXED):
        adjustment -= units * 1.5
    if calories is not None and calories > 400:
        adjustment += 15
    if activity_kind(activity) in (ActivityKind.WALK, ActivityKind.RUN):
        adjustment -= 10

    return max(BASELINE_FLOOR_MGDL, min(latest + adjustment, BASELINE_CEILING_MGDL))


def _field(value: Any) -> str:
    return "not provided" if value is None else str(value)


def build_predict_prompt(payload: PredictRequest) -> str:
    readings = ", ".join(str(value) for value in payload.glucoseHistory)
    return (
        "You are a diabetes management AI.\n"
        "Use the following patient data to predict the next glucose level (in mg/dL) after "
        f"{DEFAULT_HORIZON_MINUTES} minutes and determine the risk category.\n\n"
        "Data:\n"
        f"- Recent glucose readings: {readings}\n"
        f"- Insulin type: {_field(payload.insulinType)}\n"
        f"- Insulin units: {_field(payload.insulinUnits)}\n"
        f"- Calories consumed: {_field(payload.calories)}\n"
        f"- Activity: {_field(payload.activity)}\n\n"
        "Rules:\n"
        '1. If predicted glucose < 100 -> "Hypo risk"\n'
        '2. If predicted glucose > 150 -> "Hyper risk"\n'
        '3. Otherwise -> "Stable"\n'
        "4. Consider insulin, meal, and activity impacts realistically.\n\n"
        "Respond strictly as JSON, with no other text:\n"
        "{\n"
        '  "forecast_mgdl": [number],\n'
        '  "risk_type": "Hypo risk" | "Hyper risk" | "Stable",\n'
        f'  "forecast_minutes": {DEFAULT_HORIZON_MINUTES}\n'
        "}"
    )


def extract_forecast(text: str) -> ProviderForecast:
    """Decode the first JSON object in ``text`` and validate it.

    Markdown code fences and commentary around the object are tolerated.
    """
    cleaned = _FENCE.sub("", text or "")
    decoder = json.JSONDecoder()
    for match in re.finditer(r"\{", cleaned):
        try:
            data, _ = decoder.raw_decode(cleaned, match.start())
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict):
            return ProviderForecast.model_validate(data)
    raise ParseError("no JSON object in provider response")


class PredictiveService:
    def __init__(
        self,
        provider: CompletionProvider,
        settings: Settings,
        clock: Callable[[], datetime] | None = None,
    ):
        self.provider = provider
        self.settings = settings
        self.clock = clock or datetime.now

    def predict(self, payload: PredictRequest) -> PredictResponse:
        history = validate_history(payload.glucoseHistory)
        baseline = compute_baseline(
            history,
            insulin_type=payload.insulinType,
            insulin_units=payload.insulinUnits,
            calories=payload.calories,
            activity=payload.activity,
        )

        text = self.provider.complete(
            messages=[{"role": "user", "content": build_predict_prompt(payload)}],
            temperature=self.settings.temperature,
            max_tokens=PREDICT_MAX_TOKENS,
        )

        try:
            parsed = extract_forecast(text)
        except ParseError as exc:
            logger.warning("Prediction response unparsable, using baseline %.1f: %s", baseline, exc)
            parsed = ProviderForecast()

        if parsed.forecast_mgdl is None:
            logger.info("Prediction has no numeric forecast, using baseline %.1f", baseline)
            forecast_mgdl = baseline
        else:
            forecast_mgdl = parsed.forecast_mgdl
        risk = parsed.risk_type or classify_risk(forecast_mgdl)
        minutes = parsed.forecast_minutes or DEFAULT_HORIZON_MINUTES

        return PredictResponse(
            forecast_mgdl=forecast_mgdl,
            main_alert=main_alert_for(risk),
            alerts=build_alerts(risk, minutes, self.clock()),
            baseline=baseline,
        )
