"""
Recipe Text Parser
Turns raw recipe text (typed, pasted or OCR output) into a canonical Recipe
by way of the LLM
"""

import json
import logging
import re
from typing import Any, Callable, Iterable

from cookbook.core.errors import EmptyInputError, MalformedResponseError
from cookbook.core.llm import call_llm
from cookbook.core.models import CATEGORIES, DEFAULT_GROUP_NAME, Recipe
from cookbook.core.ocr import recognize_image, recognize_images

logger = logging.getLogger(__name__)

Generator = Callable[[str], str]

FENCED_BLOCK = re.compile(r"```[\w+-]*[ \t]*\n?(.*?)\n?[ \t]*```", re.DOTALL)

RECIPE_PROMPT = """You are an expert recipe parser and enhancer. Take the raw recipe text below and turn it into a readable, structured JSON object for someone actually cooking from it.

The JSON object must have exactly these keys:
- recipeName: string. Infer a clear, appealing name if none is given.
- categories: string[]. Choose every category that applies, only from: {categories}.
- ingredientGroups: {{ "name": string, "ingredients": string[] }}[]. Group ingredients by their role in the recipe (for example "Dry Ingredients", "Wet Ingredients", "For the Sauce", "Garnish"). If no grouping is evident, use a single group named "{default_group}". Put each ingredient in its own string.
- instructions: string[]. One short, actionable step per entry.

Rules:
- Do NOT number the instructions ("1.", "Step 2:" and so on); numbering is added when the recipe is displayed.
- Rewrite verbose prose into direct imperative steps that start with a verb. "Take a large bowl and carefully combine the flour, sugar, and baking powder together" becomes "Combine flour, sugar, and baking powder in a large bowl."
- Remove conversational filler, stories and redundant words.
- If the text mentions combining dry or wet ingredients, or a component (sauce, frosting) has its own ingredients, give it its own group.

Recipe Text:

{text}

JSON Output:"""


def extract_json_payload(raw: str) -> Any:
    """
    Read a JSON value out of raw generator output.

    Stage 1 looks for a fenced code block and parses its contents. Stage 2,
    used only when there is no fence, parses the whole output. The error's
    `stage` says which one failed.
    """
    text = raw or ""
    match = FENCED_BLOCK.search(text)
    if match:
        try:
            return json.loads(match.group(1))
        except json.JSONDecodeError as e:
            raise MalformedResponseError(
                f"Fenced block is not valid JSON: {e.msg}",
                raw_payload=raw,
                stage="fenced"
            ) from e

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedResponseError(
            f"Response is not valid JSON: {e.msg}",
            raw_payload=raw,
            stage="raw"
        ) from e


def build_recipe_prompt(raw_text: str) -> str:
    """Build the instruction prompt for one recipe"""
    return RECIPE_PROMPT.format(
        categories=", ".join(CATEGORIES),
        default_group=DEFAULT_GROUP_NAME,
        text=raw_text
    )


def _check_recipe_shape(payload: Any, raw: str) -> dict:
    if not isinstance(payload, dict):
        raise MalformedResponseError(
            "Expected a JSON object for the recipe",
            raw_payload=raw,
            stage="shape"
        )
    if not isinstance(payload.get("recipeName"), str):
        raise MalformedResponseError(
            "Recipe is missing 'recipeName'",
            raw_payload=raw,
            stage="shape"
        )
    for key in ("categories", "ingredientGroups", "instructions"):
        if key in payload and not isinstance(payload[key], list):
            raise MalformedResponseError(
                f"Recipe field '{key}' must be a list",
                raw_payload=raw,
                stage="shape"
            )
    for group in payload.get("ingredientGroups") or []:
        if not isinstance(group, dict) or not isinstance(group.get("ingredients", []), list):
            raise MalformedResponseError(
                "Ingredient groups must be objects with an 'ingredients' list",
                raw_payload=raw,
                stage="shape"
            )
    return payload


def normalize(raw_text: str, generate: Generator = call_llm) -> Recipe:
    """
    Convert unstructured recipe text into a canonical Recipe.

    Sends exactly one request; a failed call is surfaced as-is since the
    caller can safely resubmit the same text. The parsed result is passed
    through Recipe.normalized(), so blank steps are dropped and a recipe
    with no ingredient groups gets the default one.
    """
    if raw_text is None or not raw_text.strip():
        raise EmptyInputError("No recipe text provided")

    prompt = build_recipe_prompt(raw_text)
    raw = generate(prompt)

    payload = _check_recipe_shape(extract_json_payload(raw), raw)
    try:
        recipe = Recipe.from_dict(payload).normalized()
    except MalformedResponseError as e:
        raise MalformedResponseError(str(e), raw_payload=raw, stage="shape") from e

    logger.info(
        "Parsed recipe %r: %d groups, %d steps",
        recipe.name, len(recipe.ingredient_groups), len(recipe.instructions)
    )
    return recipe


def normalize_images(
    images: Iterable,
    generate: Generator = call_llm,
    recognize: Callable[[Any], str] = recognize_image
) -> Recipe:
    """OCR each photo in order, then parse the combined text"""
    images = list(images)
    if not images:
        raise EmptyInputError("No images provided")

    text = recognize_images(images, recognize=recognize)
    if not text.strip():
        raise EmptyInputError("No text could be recognized in the images")

    return normalize(text, generate=generate)
