"""
Search Keyword Extraction
Turns a natural-language search phrase into a few normalized search terms
"""

import logging
import time
from typing import Callable

from cookbook.config import KEYWORD_MAX_ATTEMPTS
from cookbook.core.errors import (
    EmptyInputError,
    MalformedResponseError,
    OverloadedError,
    UpstreamError
)
from cookbook.core.llm import call_llm
from cookbook.core.parser import Generator, extract_json_payload

logger = logging.getLogger(__name__)

KEYWORD_PROMPT = """You are an expert at understanding recipe search queries. Extract the key ingredients, dish names and category names from the user's query. Answer with a JSON object with a single key, "keywords", holding an array of short lowercase strings.

For example, if the user says "I want to make dinner with chicken and rice", the output should be:
{{
  "keywords": ["chicken", "rice"]
}}

If the user says "show me some dessert recipes", the output should be:
{{
  "keywords": ["dessert"]
}}

User Query:
{query}

JSON Output:"""


def build_keyword_prompt(query: str) -> str:
    return KEYWORD_PROMPT.format(query=query)


def _clean_keywords(payload, raw: str) -> list[str]:
    if not isinstance(payload, dict) or not isinstance(payload.get("keywords"), list):
        raise MalformedResponseError(
            "Expected a JSON object with a 'keywords' list",
            raw_payload=raw,
            stage="shape"
        )

    keywords = []
    for item in payload["keywords"]:
        if not isinstance(item, str):
            continue
        keyword = item.strip().lower()
        if keyword and keyword not in keywords:
            keywords.append(keyword)
    return keywords


def extract_keywords(
    query: str,
    generate: Generator = call_llm,
    sleep: Callable[[float], None] = time.sleep,
    max_attempts: int = KEYWORD_MAX_ATTEMPTS
) -> list[str]:
    """
    Extract search keywords from a free-form query.

    Retries only when the model reports it is overloaded, waiting
    `attempt` seconds before the next try (1s, then 2s). Other upstream
    errors propagate straight away.
    """
    if query is None or not query.strip():
        raise EmptyInputError("No search query provided")

    prompt = build_keyword_prompt(query.strip())

    raw = None
    for attempt in range(1, max_attempts + 1):
        try:
            logger.info("Extracting keywords (attempt %d)", attempt)
            raw = generate(prompt)
            break
        except OverloadedError as e:
            if attempt >= max_attempts:
                raise UpstreamError(
                    f"Model still overloaded after {max_attempts} attempts",
                    status_code=e.status_code
                ) from e
            logger.warning("Model is overloaded. Retrying in %d second(s)...", attempt)
            sleep(attempt)

    return _clean_keywords(extract_json_payload(raw), raw)
