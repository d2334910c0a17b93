"""Prompt construction for summary generation.

``build_prompt`` is a pure function: the same category, pending entities and
style always produce the same text, which keeps generation requests
reproducible and easy to assert on in tests.
"""

from __future__ import annotations

from collections.abc import Mapping
import json
from typing import TYPE_CHECKING, Any, Literal

from eco_summaries.core.categories import Category, get_category

if TYPE_CHECKING:
    from eco_summaries.config.types import PromptStyle
    from eco_summaries.core.types import Entity

PromptMode = Literal["batch", "single"]

_PERSONAS: Mapping[str, str] = {
    "biome": (
        "You are a scientific writer for a botanical field guide. Generate extremely "
        "concise, data-rich summaries for the provided biomes. Brevity and factual "
        "accuracy are the highest priorities."
    ),
    "plant": (
        "You are a scientific writer for a botanical field guide. Generate extremely "
        "concise, data-rich summaries for the provided plant species. Brevity and "
        "factual accuracy are the highest priorities."
    ),
    "pest": (
        "You are an entomologist providing concise summaries of agricultural or "
        "ecological pests."
    ),
}

_CONTENT_RULES: Mapping[str, str] = {
    "biome": (
        "Tailor each summary to the provided environmental context (biome name, "
        "climate data). Describe the biome overall, the plants and pests found "
        "there, and its climate."
    ),
    "plant": (
        "Describe the plant's general appearance, its seasonal cycle (such as "
        "flowering time) in its specific biome, and its primary ecological role."
    ),
    "pest": (
        "Describe the named pest and its impact on the local ecosystem or "
        "agriculture within the given biome. Mention its typical life cycle or "
        "period of activity."
    ),
}


def _length_rule(style: PromptStyle) -> str:
    rule = f"{style.min_sentences}-{style.max_sentences} sentences"
    if style.min_words is not None and style.max_words is not None:
        rule += f" and {style.min_words}-{style.max_words} words"
    return f"Each summary MUST be {rule} long."


def _tone_rule(category: Category) -> str:
    rule = (
        "The tone must be dense, factual and encyclopedic. Do not use "
        "conversational language or speculative information."
    )
    if category.name == "biome":
        rule += " Never use scientific names."
    return rule


def _output_rule(mode: PromptMode, keys: list[str]) -> str:
    if mode == "single":
        return (
            'Respond ONLY with a single, valid JSON object of the form '
            '{"summary": "<text>"}. Do not include markdown, comments or any other '
            "text outside the JSON object."
        )
    return (
        "Your ENTIRE response MUST be a single, valid, flat JSON object. Its keys "
        f"MUST be exactly these identifiers: {json.dumps(keys)}; each value MUST be "
        "the summary string for that entry. Do not include markdown, comments or "
        "any other text outside the JSON object."
    )


def _payload(mode: PromptMode, pending: Mapping[str, Entity]) -> str:
    data: Any
    if mode == "single":
        (entity,) = pending.values()
        data = dict(entity.fields)
    else:
        data = {key: dict(entity.fields) for key, entity in pending.items()}
    return json.dumps(data, indent=2, sort_keys=True, ensure_ascii=False, default=str)


def build_prompt(
    category: str | Category,
    pending: Mapping[str, Entity],
    style: PromptStyle,
    *,
    mode: PromptMode = "batch",
) -> str:
    """Build the generation prompt for the entities still needing a summary.

    Args:
        category: Category of every pending entity.
        pending: Ordered mapping of cache key to entity.
        style: Sentence and word bounds for this category.
        mode: ``"batch"`` asks for an object keyed by cache key, ``"single"``
            asks for ``{"summary": ...}`` and requires exactly one entity.

    Returns:
        The prompt text.

    Raises:
        ValueError: If ``pending`` is empty, or holds more than one entity in
            single mode.
    """
    cat = get_category(category)
    if not pending:
        raise ValueError("Cannot build a prompt without pending entities")
    if mode == "single" and len(pending) != 1:
        raise ValueError(f"Single mode takes exactly one entity, got {len(pending)}")

    keys = list(pending)
    rules = [
        f"Length: {_length_rule(style)}",
        f"Content: {_CONTENT_RULES[cat.name]}",
        f"Tone: {_tone_rule(cat)}",
    ]
    if mode == "batch":
        rules.append("Variation: no two summaries may share the same phrasing.")
    rules.append(f"Output: {_output_rule(mode, keys)}")

    numbered = "\n".join(f"{i}. {rule}" for i, rule in enumerate(rules, start=1))
    return (
        f"{_PERSONAS[cat.name]}\n\n"
        f"Follow these rules strictly:\n{numbered}\n\n"
        f"Here is the data to summarize:\n{_payload(mode, pending)}"
    )


__all__ = ["PromptMode", "build_prompt"]
