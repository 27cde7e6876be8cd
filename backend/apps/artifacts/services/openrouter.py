"""OpenRouter helpers for vision description and scholarly report generation."""

from __future__ import annotations

import json
import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Iterator, Mapping, Optional, Sequence

from django.conf import settings
from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from apps.artifacts.prompts import (
    ASSISTANT_SYSTEM_PROMPT,
    REPORT_SYSTEM_PROMPT,
    VISION_PROMPT,
    build_report_prompt,
)

logger = logging.getLogger(__name__)

DEFAULT_OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_VISION_MODEL = "google/gemma-3-27b-it:free"
DEFAULT_REPORT_MODEL = "google/gemma-3-27b-it:free"
REPORT_TEMPERATURE = 0.2
REPORT_MAX_TOKENS = 2048
DEFAULT_CONFIDENCE = 0.5


class AIReport(BaseModel):
    """Normalised scholarly report; every text field is guaranteed non-empty."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    title: str
    classification: str
    visual_description: str
    material_analysis: str
    structural_interpretation: str
    symbolism: str
    cultural_context: str
    geographic_significance: str
    origin_hypothesis: str
    comparative_analysis: str
    confidence_score: float

    def as_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


REPORT_DEFAULTS: dict[str, str] = {
    "title": "Unidentified Specimen",
    "classification": "Unclassified",
    "visual_description": "Visual description pending.",
    "material_analysis": "Pending laboratory analysis.",
    "structural_interpretation": "Structural interpretation pending.",
    "symbolism": "No significant iconography identified.",
    "cultural_context": "Cultural origin unidentified.",
    "geographic_significance": "Regional data pending.",
    "origin_hypothesis": "Origin hypothesis pending.",
    "comparative_analysis": "No direct parallels identified.",
}

# Label alternatives recognised by the line-oriented fallback extractor.
_SECTION_LABELS: dict[str, str] = {
    "title": r"title",
    "classification": r"classification",
    "visual_description": r"visual\s*description|visual analysis",
    "material_analysis": r"material\s*analysis|material composition|material",
    "structural_interpretation": r"structural\s*interpretation|structure",
    "symbolism": r"symbolism|iconography",
    "cultural_context": r"cultural\s*context|culture",
    "geographic_significance": r"geographic\s*significance|geography|region",
    "origin_hypothesis": r"origin\s*hypothesis|origin",
    "comparative_analysis": r"comparative\s*analysis|comparisons?",
}
_CONFIDENCE_PATTERN = re.compile(
    r"confidence\s*(?:score)?[\"*\s]*:\s*\"?([0-9]*\.?[0-9]+)",
    re.IGNORECASE,
)
_FENCED_PATTERN = re.compile(r"```(?:json)?\s*([\s\S]*?)```")
_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")
_TRAILING_COMMA_PATTERN = re.compile(r",\s*([}\]])")


class ReportParseError(ValueError):
    """Model content could not be read as a JSON report object."""


@dataclass(frozen=True)
class OpenRouterCredentials:
    api_key: str | None
    base_url: str = DEFAULT_OPENROUTER_BASE_URL
    app_url: str = "https://aletheon.app"
    app_title: str = "Aletheon Archaeological Core"

    @classmethod
    def from_settings(cls) -> "OpenRouterCredentials":
        return cls(
            api_key=getattr(settings, "OPENROUTER_API_KEY", None),
            base_url=getattr(settings, "OPENROUTER_BASE_URL", DEFAULT_OPENROUTER_BASE_URL),
            app_url=getattr(settings, "OPENROUTER_APP_URL", "https://aletheon.app"),
            app_title=getattr(settings, "OPENROUTER_APP_TITLE", "Aletheon Archaeological Core"),
        )

    @property
    def headers(self) -> dict[str, str]:
        return {"HTTP-Referer": self.app_url, "X-Title": self.app_title}


def describe_image(
    image: str,
    *,
    credentials: OpenRouterCredentials,
    model: str = DEFAULT_VISION_MODEL,
    callbacks: Sequence[Any] | None = None,
) -> str:
    """Return the vision model's free-text description of a single image."""

    chat = _build_chat(credentials, model=model)
    messages = [
        HumanMessage(
            content=[
                {"type": "text", "text": VISION_PROMPT},
                _image_part(image),
            ]
        )
    ]
    message = chat.invoke(
        messages,
        config={"callbacks": list(callbacks or []), "run_name": "artifact_vision"},
    )
    description = _normalise_content(message.content)
    if not description:
        raise ValueError("Vision model returned an empty description")
    return description


def generate_report(
    *,
    images: Sequence[str],
    notes: Optional[str],
    location: Optional[tuple[float, float]],
    credentials: OpenRouterCredentials,
    vision_description: Optional[str] = None,
    model: str = DEFAULT_REPORT_MODEL,
    callbacks: Sequence[Any] | None = None,
) -> AIReport:
    """Request a JSON report for the submitted images and normalise whatever comes back."""

    chat = _build_chat(
        credentials,
        model=model,
        temperature=REPORT_TEMPERATURE,
        max_tokens=REPORT_MAX_TOKENS,
        json_response=True,
    )
    prompt = build_report_prompt(
        notes=notes,
        location=location,
        vision_description=vision_description,
    )
    messages: list[BaseMessage] = [
        SystemMessage(content=REPORT_SYSTEM_PROMPT),
        HumanMessage(content=[{"type": "text", "text": prompt}, *map(_image_part, images)]),
    ]
    message = chat.invoke(
        messages,
        config={"callbacks": list(callbacks or []), "run_name": "artifact_report"},
    )
    content = _normalise_content(message.content)

    try:
        raw = parse_report_content(content)
    except ReportParseError:
        logger.warning("Report content was not valid JSON; falling back to section extraction")
        raw = extract_report_sections(content)

    return normalise_report(raw)


def stream_assistant_reply(
    message: str,
    *,
    credentials: OpenRouterCredentials,
    model: str,
    callbacks: Sequence[Any] | None = None,
) -> Iterator[str]:
    """Yield text deltas from the research assistant model."""

    chat = _build_chat(credentials, model=model, streaming=True)
    messages = [
        SystemMessage(content=ASSISTANT_SYSTEM_PROMPT),
        HumanMessage(content=message),
    ]
    config = {"callbacks": list(callbacks or []), "run_name": "research_assistant"}
    for chunk in chat.stream(messages, config=config):
        text = _content_text(chunk.content)
        if text:
            yield text


def parse_report_content(content: str) -> dict[str, Any]:
    cleaned = content.strip()

    fenced_match = _FENCED_PATTERN.search(cleaned)
    if fenced_match:
        cleaned = fenced_match.group(1).strip()

    object_match = _OBJECT_PATTERN.search(cleaned)
    if object_match:
        cleaned = object_match.group(0)

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError:
        recovered = _TRAILING_COMMA_PATTERN.sub(r"\1", cleaned.replace("\n", " "))
        recovered = recovered.replace("'", '"')
        try:
            data = json.loads(recovered)
        except json.JSONDecodeError as exc:
            raise ReportParseError("Model response did not contain valid JSON") from exc

    if not isinstance(data, dict):
        raise ReportParseError("Model response JSON was not an object")
    return data


def extract_report_sections(content: str) -> dict[str, Any]:
    """Best-effort `label: value` scan used when the model ignores the JSON format."""

    sections: dict[str, Any] = {}
    for field_name, label in _SECTION_LABELS.items():
        pattern = re.compile(
            rf"^[\s*#>\-\"]*(?:{label})[\"*\s]*:\s*(.+)$",
            re.IGNORECASE | re.MULTILINE,
        )
        match = pattern.search(content)
        if match:
            sections[field_name] = match.group(1).strip().rstrip(",").strip("\"* ")

    confidence = _CONFIDENCE_PATTERN.search(content)
    if confidence:
        sections["confidence_score"] = confidence.group(1)
    return sections


def normalise_report(raw: Mapping[str, Any] | None) -> AIReport:
    raw = raw or {}
    values: dict[str, Any] = {}
    for field_name, default in REPORT_DEFAULTS.items():
        values[field_name] = _clean_text(_lookup(raw, field_name)) or default
    values["confidence_score"] = clamp_confidence(_lookup(raw, "confidence_score"))
    return AIReport(**values)


def clamp_confidence(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return DEFAULT_CONFIDENCE
    try:
        score = float(value)
    except (TypeError, ValueError):
        return DEFAULT_CONFIDENCE
    if math.isnan(score):
        return DEFAULT_CONFIDENCE
    return min(max(score, 0.0), 1.0)


def image_mime_type(image: str) -> str:
    """Guess the MIME type from the first character of the base64 payload."""

    return {
        "/": "image/jpeg",
        "i": "image/png",
        "R": "image/gif",
        "U": "image/webp",
    }.get(image[:1], "image/jpeg")


def _lookup(raw: Mapping[str, Any], field_name: str) -> Any:
    if field_name in raw:
        return raw[field_name]
    return raw.get(to_camel(field_name))


def _clean_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (list, tuple)):
        return "; ".join(part for part in (_clean_text(item) for item in value) if part)
    if isinstance(value, dict):
        return json.dumps(value, ensure_ascii=False)
    return str(value).strip()


def _image_part(image: str) -> dict[str, Any]:
    return {
        "type": "image_url",
        "image_url": {"url": f"data:{image_mime_type(image)};base64,{image}"},
    }


def _build_chat(
    credentials: OpenRouterCredentials,
    *,
    model: str,
    temperature: float | None = None,
    max_tokens: int | None = None,
    json_response: bool = False,
    streaming: bool = False,
) -> ChatOpenAI:
    if not credentials.api_key:
        raise ValueError("OpenRouter API key is required")

    chat_kwargs: dict[str, Any] = {
        "api_key": credentials.api_key,
        "base_url": credentials.base_url.rstrip("/"),
        "model": model,
        "default_headers": credentials.headers,
        "max_retries": 0,
    }
    if temperature is not None:
        chat_kwargs["temperature"] = temperature
    if max_tokens is not None:
        chat_kwargs["max_tokens"] = max_tokens
    if json_response:
        chat_kwargs["model_kwargs"] = {"response_format": {"type": "json_object"}}
    if streaming:
        chat_kwargs["streaming"] = True
    return ChatOpenAI(**chat_kwargs)


def _content_text(content: Any) -> str:
    if isinstance(content, list):
        parts: list[str] = []
        for item in content:
            if isinstance(item, dict) and item.get("type") == "text":
                parts.append(str(item.get("text", "")))
            elif isinstance(item, str):
                parts.append(item)
        content = "".join(parts)

    if not isinstance(content, str):
        return str(content or "")
    return content


def _normalise_content(content: Any) -> str:
    return _content_text(content).strip()


__all__ = [
    "AIReport",
    "DEFAULT_CONFIDENCE",
    "DEFAULT_OPENROUTER_BASE_URL",
    "DEFAULT_REPORT_MODEL",
    "DEFAULT_VISION_MODEL",
    "OpenRouterCredentials",
    "REPORT_DEFAULTS",
    "ReportParseError",
    "clamp_confidence",
    "describe_image",
    "extract_report_sections",
    "generate_report",
    "image_mime_type",
    "normalise_report",
    "parse_report_content",
    "stream_assistant_reply",
]
