from __future__ import annotations

from datetime import datetime

import pytest

from app.models import RiskCategory
from app.services.risk_service import alert_time, build_alerts, classify_risk, main_alert_for


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (95, RiskCategory.HYPO),
        (99.9, RiskCategory.HYPO),
        (100, RiskCategory.STABLE),
        (150, RiskCategory.STABLE),
        (150.1, RiskCategory.HYPER),
        (151, RiskCategory.HYPER),
    ],
)
def test_classify_risk_thresholds(value, expected) -> None:
    assert classify_risk(value) is expected


def test_main_alerts_per_category() -> None:
    assert main_alert_for(RiskCategory.HYPO).type == "Predictive Alert!"
    assert main_alert_for(RiskCategory.HYPER).color == "#f1c40f"
    stable = main_alert_for(RiskCategory.STABLE)
    assert stable.type == "Stable"
    assert stable.color == "#2ecc71"


def test_main_alert_is_a_copy() -> None:
    alert = main_alert_for(RiskCategory.HYPO)
    alert.message = "changed"
    assert main_alert_for(RiskCategory.HYPO).message != "changed"


def test_alert_time_is_zero_padded() -> None:
    assert alert_time(datetime(2026, 5, 4, 7, 5), 30) == "07:35"
    assert alert_time(datetime(2026, 5, 4, 23, 45), 30) == "00:15"


def test_build_alerts_emits_single_record() -> None:
    alerts = build_alerts(RiskCategory.STABLE, 30, datetime(2026, 5, 4, 12, 0))
    assert [a.model_dump(mode="json") for a in alerts] == [{"risk": "Stable", "in_minutes": 30, "time": "12:30"}]
