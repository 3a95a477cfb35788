from __future__ import annotations

import json
from typing import Any

from ..config import Settings
from ..errors import ValidationError
from ..models import SummaryRequest, SummaryResponse
from ..provider import CompletionProvider

SUMMARY_MAX_TOKENS = 300

SUMMARY_SYSTEM_PROMPT = (
    "You are a medical AI generating a summary of the patient's glucose risk.\n"
    "Always respond exactly in this structure:\n\n"
    "Risk Summary:\n"
    "- Hypoglycemia probability: [percentage]\n"
    "- Hyperglycemia probability: [percentage]\n"
    "- Overall forecast: [Stable / Risk of spike / Risk of drop]\n"
    "Recommendation:\n"
    "- [One short clear action suggestion]"
)


def build_summary_prompt(values: Any) -> str:
    return "Health data: " + json.dumps(values, separators=(",", ":"), ensure_ascii=False)


class SummaryService:
    def __init__(self, provider: CompletionProvider, settings: Settings):
        self.provider = provider
        self.settings = settings

    def summarize(self, payload: SummaryRequest) -> SummaryResponse:
        values = payload.values
        # Empty objects and lists are valid input; other falsy values are not.
        if values is None or (not values and not isinstance(values, (dict, list))):
            raise ValidationError("No values provided")

        text = self.provider.complete(
            messages=[
                {"role": "system", "content": SUMMARY_SYSTEM_PROMPT},
                {"role": "user", "content": build_summary_prompt(values)},
            ],
            temperature=self.settings.temperature,
            max_tokens=SUMMARY_MAX_TOKENS,
        )
        return SummaryResponse(summary=text.strip())
