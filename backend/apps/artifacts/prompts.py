"""Prompt templates for specimen analysis."""

from __future__ import annotations

from typing import Optional

VISION_PROMPT = (
    "You are examining a photograph of an archaeological specimen. Describe only what "
    "is visible: overall form and dimensions relative to any scale, surface texture, "
    "colour and patina, tool marks, decoration or inscriptions, wear and damage. "
    "Do not speculate about origin. Answer in plain prose."
)

REPORT_SYSTEM_PROMPT = (
    "You are a world-class archaeological analysis engine. You write cautious, "
    "scholarly reports and always answer with a single JSON object and nothing else."
)

REPORT_JSON_SHAPE = """{
  "title": "Evocative title",
  "classification": "Scientific classification",
  "visualDescription": "Detailed visual analysis",
  "materialAnalysis": "Probable material composition",
  "structuralInterpretation": "How it was built or formed",
  "symbolism": "Iconographic or symbolic meaning",
  "culturalContext": "Likely cultural origin and period",
  "geographicSignificance": "Where it might have been found",
  "originHypothesis": "Theory of how it arrived here",
  "comparativeAnalysis": "Similar known artifacts",
  "confidenceScore": 0.0-1.0
}"""


def build_report_prompt(
    notes: Optional[str] = None,
    location: Optional[tuple[float, float]] = None,
    vision_description: Optional[str] = None,
) -> str:
    """Build the report-generation prompt with any field context appended."""

    prompt_parts = [
        "Analyze the provided image(s) of a specimen and return a detailed report.",
        "The report MUST be a JSON object with exactly these keys:",
        REPORT_JSON_SHAPE,
    ]

    if vision_description:
        prompt_parts.append("")
        prompt_parts.append(f"Preliminary visual survey of the first image: {vision_description}")

    if notes:
        prompt_parts.append("")
        prompt_parts.append(f"Additional Field Notes: {notes}")

    if location is not None:
        latitude, longitude = location
        prompt_parts.append("")
        prompt_parts.append(f"Coordinates: {latitude}, {longitude}")

    return "\n".join(prompt_parts)


ASSISTANT_SYSTEM_PROMPT = (
    "You are ALE (Archaeological Logical Engine), an AI scholarly assistant. "
    "Wrap reasoning in <think></think> tags."
)
