"""Agent-backed generator that drafts industry insights."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, Optional, Protocol, cast

from agents import Agent, ModelSettings, RunConfig, Runner
from openai.types.shared.reasoning import Reasoning
from openai.types.shared.reasoning_effort import ReasoningEffort
from pydantic import BaseModel, ValidationError

from .config import Settings, get_settings
from .errors import GenerationFailedError
from .insights import InsightPayload

logger = logging.getLogger(__name__)


INSIGHT_INSTRUCTIONS = (
    "You are the Career Coach industry analyst. Given an industry identifier, describe the current state of that"
    " industry for job seekers. Output only JSON following the provided schema, with no notes, explanations, or"
    " markdown formatting."
)

INSIGHT_SCHEMA = """{
  "salaryRanges": [
    { "role": "string", "min": number, "max": number, "median": number, "location": "string" }
  ],
  "growthRate": number,
  "demandLevel": "High" | "Medium" | "Low",
  "topSkills": ["skill1", "skill2"],
  "marketOutlook": "Positive" | "Neutral" | "Negative",
  "keyTrends": ["trend1", "trend2"],
  "recommendedSkills": ["skill1", "skill2"]
}"""

_CODE_FENCE = re.compile(r"```(?:json)?\n?")


class InsightGenerator(Protocol):
    async def __call__(self, industry: str) -> InsightPayload:  # pragma: no cover - protocol definition
        ...


_agent_cache: Dict[str, Agent[None]] = {}


def _insight_effort(value: str) -> ReasoningEffort:
    allowed = {"minimal", "low", "medium", "high"}
    effort = value if value in allowed else "low"
    return cast(ReasoningEffort, effort)


def _build_insight_agent(model: str) -> Agent[None]:
    return Agent[None](
        name="Career Coach Industry Analyst",
        instructions=INSIGHT_INSTRUCTIONS,
        model=model,
        tools=[],
        model_settings=ModelSettings(store=False),
    )


def get_insight_agent(settings: Settings) -> Agent[None]:
    model = settings.insight_model or "gpt-5-mini"
    if model not in _agent_cache:
        _agent_cache[model] = _build_insight_agent(model)
    return _agent_cache[model]


def build_insight_prompt(industry: str) -> str:
    return (
        f"Analyze the current state of the {industry} industry and provide insights in ONLY the following JSON"
        f" format without any additional notes or explanations:\n{INSIGHT_SCHEMA}\n\n"
        "IMPORTANT: Return ONLY the JSON. No additional text, notes, or markdown formatting. "
        "Include at least 5 common roles for salary ranges. Growth rate should be a percentage. "
        "Include at least 5 skills and trends."
    )


def coerce_insight_payload(payload: Any) -> InsightPayload:
    if isinstance(payload, InsightPayload):
        return payload
    if isinstance(payload, dict):
        return InsightPayload.model_validate(payload)
    if isinstance(payload, BaseModel):
        return InsightPayload.model_validate(payload.model_dump(by_alias=True))
    if isinstance(payload, str):
        cleaned = _CODE_FENCE.sub("", payload).strip()
        return InsightPayload.model_validate(json.loads(cleaned))
    raise TypeError(f"Unsupported insight payload type: {type(payload).__name__}")


class AgentInsightGenerator:
    """Runs the analyst agent and validates its JSON answer."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()

    async def __call__(self, industry: str) -> InsightPayload:
        agent = get_insight_agent(self._settings)
        try:
            result = await Runner.run(
                agent,
                build_insight_prompt(industry),
                context=None,
                run_config=RunConfig(
                    model_settings=ModelSettings(
                        reasoning=Reasoning(effort=_insight_effort(self._settings.insight_reasoning)),
                    )
                ),
            )
        except Exception as exc:  # noqa: BLE001
            logger.exception("Insight agent execution failed for %s", industry)
            raise GenerationFailedError(f"Failed to generate insights for {industry}: {exc}") from exc

        try:
            return coerce_insight_payload(result.final_output)
        except (ValidationError, ValueError, TypeError) as exc:
            logger.warning("Insight agent returned invalid payload for %s: %s", industry, exc)
            raise GenerationFailedError(f"Insight generator returned an invalid payload for {industry}") from exc


__all__ = [
    "AgentInsightGenerator",
    "InsightGenerator",
    "build_insight_prompt",
    "coerce_insight_payload",
    "get_insight_agent",
]
