from __future__ import annotations

from datetime import datetime, timedelta
from typing import Dict, List

from ..models import AlertOut, MainAlert, RiskCategory

HYPO_THRESHOLD_MGDL = 100
HYPER_THRESHOLD_MGDL = 150

_MAIN_ALERTS: Dict[RiskCategory, MainAlert] = {
    RiskCategory.HYPO: MainAlert(
        type="Predictive Alert!",
        message="Risk of Hypoglycemia forecasted. Check your BG and take necessary actions (consume fast-acting carbs).",
        color="#e74c3c",
    ),
    RiskCategory.HYPER: MainAlert(
        type="Warning!",
        message="Risk of Hyperglycemia forecasted. Consider monitoring and adjusting insulin if advised.",
        color="#f1c40f",
    ),
    RiskCategory.STABLE: MainAlert(
        type="Stable",
        message="No immediate risk detected. Continue monitoring as usual.",
        color="#2ecc71",
    ),
}


def classify_risk(forecast_mgdl: float) -> RiskCategory:
    # 100 and 150 themselves are Stable.
    if forecast_mgdl < HYPO_THRESHOLD_MGDL:
        return RiskCategory.HYPO
    if forecast_mgdl > HYPER_THRESHOLD_MGDL:
        return RiskCategory.HYPER
    return RiskCategory.STABLE


def main_alert_for(risk: RiskCategory) -> MainAlert:
    return _MAIN_ALERTS[risk].model_copy()


def alert_time(now: datetime, minutes: int) -> str:
    return (now + timedelta(minutes=minutes)).strftime("%H:%M")


def build_alerts(risk: RiskCategory, minutes: int, now: datetime) -> List[AlertOut]:
    return [AlertOut(risk=risk, in_minutes=minutes, time=alert_time(now, minutes))]
