# Overview: Service-layer AI repair diagnostics backed by the Anthropic API.

"""
Repair diagnostics

Given a device model and the customer's description of the problem, ask
Claude for likely fixes. The model is instructed to answer with a single
JSON object:

    {"suggestedSolutions": [str], "partsNeeded": [str], "estimatedRepairTime": str}

Answers that do not follow that contract raise DiagnosticsError.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import anthropic
from flask import current_app

from ..validation import ValidationError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "Você é um técnico experiente em reparo de celulares, tablets e notebooks. "
    "Com base no modelo do aparelho e na descrição do problema, sugira soluções "
    "de reparo prováveis, as peças que podem ser necessárias e o tempo estimado "
    "de reparo. Responda em português, somente com um objeto JSON com as chaves "
    '"suggestedSolutions" (lista de textos), "partsNeeded" (lista de textos) e '
    '"estimatedRepairTime" (texto).'
)


class DiagnosticsError(Exception):
    """Raised when the AI provider fails or returns an unusable answer."""
    pass


class DiagnosticsUnavailable(DiagnosticsError):
    """Raised when no API key is configured."""
    pass


def _client() -> anthropic.Anthropic:
    api_key = current_app.config.get("ANTHROPIC_API_KEY")
    if not api_key:
        raise DiagnosticsUnavailable("AI diagnostics is not configured (ANTHROPIC_API_KEY)")
    return anthropic.Anthropic(api_key=api_key)


def _response_text(response: Any) -> str:
    parts = [block.text for block in response.content if getattr(block, "type", None) == "text"]
    return "".join(parts).strip()


def _extract_json(text: str) -> dict:
    # Tolerate ```json fences around the object
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end < start:
        raise DiagnosticsError("AI answer did not contain a JSON object")
    try:
        data = json.loads(text[start:end + 1])
    except json.JSONDecodeError as exc:
        raise DiagnosticsError("AI answer was not valid JSON") from exc
    if not isinstance(data, dict):
        raise DiagnosticsError("AI answer was not a JSON object")
    return data


def _as_string_list(data: dict, key: str) -> list[str]:
    value = data.get(key)
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list):
        raise DiagnosticsError(f"AI answer field {key} must be a list")
    return [str(item).strip() for item in value if str(item).strip()]


def suggest_repair_solutions(*, phone_model: str, problem_description: str) -> dict:
    phone_model = (phone_model or "").strip()
    problem_description = (problem_description or "").strip()
    if not phone_model or not problem_description:
        raise ValidationError("phoneModel and problemDescription are required")

    client = _client()
    model = current_app.config.get("AI_MODEL")
    try:
        logger.info("Requesting repair suggestions: model=%s device=%s", model, phone_model)
        response = client.messages.create(
            model=model,
            max_tokens=current_app.config.get("AI_MAX_TOKENS", 1024),
            system=SYSTEM_PROMPT,
            messages=[{
                "role": "user",
                "content": (
                    f"Modelo do aparelho: {phone_model}\n"
                    f"Descrição do problema: {problem_description}"
                ),
            }],
        )
    except anthropic.APITimeoutError as exc:
        logger.error("Claude API timeout: %s", exc)
        raise DiagnosticsError("AI provider timed out") from exc
    except anthropic.APIError as exc:
        logger.error("Claude API error: %s", exc)
        raise DiagnosticsError(f"AI provider error: {exc}") from exc

    data = _extract_json(_response_text(response))
    return {
        "suggestedSolutions": _as_string_list(data, "suggestedSolutions"),
        "partsNeeded": _as_string_list(data, "partsNeeded"),
        "estimatedRepairTime": str(data.get("estimatedRepairTime") or "").strip(),
    }
