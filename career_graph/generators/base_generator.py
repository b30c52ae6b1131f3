"""
Base generator with LLM integration.

All content generators inherit from this. Provides:
- Provider invocation (Anthropic Messages API, single call per batch)
- JSON parsing from LLM output
- Category batching with cache-backed resumability
- Coercion and structural validation of generated items
"""

import json
import logging
from typing import Any, Dict, List, Optional, Sequence, Type

import anthropic
from pydantic import ValidationError

from career_graph.cache_store import CacheStore
from career_graph.config import GenerationConfig, LLMConfig
from career_graph.exceptions import ProviderError
from career_graph.generators.schemas import PayloadModel

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an expert in workforce skills, career development and labour-market "
    "taxonomies. You always answer with valid JSON and nothing else."
)


class AnthropicProvider:
    """Generative content provider backed by the Anthropic Messages API."""

    def __init__(self, llm_config: Optional[LLMConfig] = None):
        self.llm_config = llm_config or LLMConfig.from_settings()
        self._client = None

    def _get_client(self):
        """Lazy-initialize the Anthropic client."""
        if self._client is None:
            self._client = anthropic.Anthropic(
                api_key=self.llm_config.api_key,
                timeout=self.llm_config.timeout_seconds,
            )
        return self._client

    def complete(self, prompt: str, system: str = SYSTEM_PROMPT) -> str:
        """Send one prompt and return the text of the reply.

        Raises:
            ProviderError: the call failed, timed out or returned no text
        """
        try:
            response = self._get_client().messages.create(
                model=self.llm_config.model,
                max_tokens=self.llm_config.max_tokens,
                temperature=self.llm_config.temperature,
                system=system,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIError as e:
            raise ProviderError(f"Provider call failed: {e}") from e

        if not response.content:
            raise ProviderError("Provider returned no content")
        text = getattr(response.content[0], "text", "") or ""
        if not text.strip():
            raise ProviderError("Provider returned an empty reply")
        return text.strip()


class BaseGenerator:
    """Base class for content generators.

    Subclasses set ENTITY_KEY (cache key and response field), PAYLOAD_MODEL
    and CATEGORIES, and implement build_prompt().
    """

    ENTITY_KEY: str = ""
    PAYLOAD_MODEL: Type[PayloadModel] = PayloadModel
    CATEGORIES: List[str] = []

    def __init__(
        self,
        provider: Optional[Any] = None,
        llm_config: Optional[LLMConfig] = None,
        gen_config: Optional[GenerationConfig] = None,
        cache: Optional[CacheStore] = None,
    ):
        self.llm_config = llm_config
        self.gen_config = gen_config or GenerationConfig()
        self.cache = cache or CacheStore()
        self._provider = provider

    @property
    def provider(self):
        """Lazy-load the provider."""
        if self._provider is None:
            self._provider = AnthropicProvider(self.llm_config)
        return self._provider

    def default_categories(self) -> List[str]:
        return list(self.CATEGORIES)

    def build_prompt(self, categories: Sequence[str], count_per_category: int) -> str:
        raise NotImplementedError

    # ── Provider and parsing ─────────────────────────────────────

    def invoke_llm(self, prompt: str) -> str:
        return self.provider.complete(prompt)

    @staticmethod
    def parse_json_response(text: str) -> Any:
        """Extract JSON from LLM response, handling markdown code blocks."""
        cleaned = text.strip()
        if cleaned.startswith("```"):
            # Remove first line (```json or ```)
            lines = cleaned.split("\n")[1:]
            if lines and lines[-1].strip() == "```":
                lines = lines[:-1]
            cleaned = "\n".join(lines)

        try:
            return json.loads(cleaned)
        except json.JSONDecodeError as e:
            # Look for a JSON object or array embedded in prose
            for start_char, end_char in [("{", "}"), ("[", "]")]:
                start = cleaned.find(start_char)
                end = cleaned.rfind(end_char)
                if start != -1 and end != -1 and end > start:
                    try:
                        return json.loads(cleaned[start:end + 1])
                    except json.JSONDecodeError:
                        continue
            logger.error(f"Failed to parse JSON from response: {text[:500]}...")
            raise ProviderError(f"Could not parse JSON from provider response: {e}") from e

    def extract_items(self, parsed: Any) -> List[Any]:
        """Pull the entity array out of {"<entity_key>": [...]} or a bare array."""
        if isinstance(parsed, list):
            return parsed
        if isinstance(parsed, dict):
            items = parsed.get(self.ENTITY_KEY)
            if isinstance(items, list):
                return items
            # Single-array objects under an unexpected key
            arrays = [v for v in parsed.values() if isinstance(v, list)]
            if len(arrays) == 1:
                return arrays[0]
        raise ProviderError(
            f"Provider response has no '{self.ENTITY_KEY}' array"
        )

    # ── Validation ───────────────────────────────────────────────

    def coerce_item(self, raw: Dict[str, Any], categories: Sequence[str]) -> Dict[str, Any]:
        """Fix up an item before validation.

        Unknown categories are pinned to the first category of the batch.
        """
        item = dict(raw)
        if item.get("category") not in categories:
            item["category"] = categories[0]
        return item

    def validate_items(self, items: List[Any], categories: Sequence[str]) -> List[PayloadModel]:
        valid: List[PayloadModel] = []
        seen = set()
        for raw in items:
            if not isinstance(raw, dict):
                logger.warning(f"Skipping non-object {self.ENTITY_KEY} item: {raw!r:.100}")
                continue
            try:
                payload = self.PAYLOAD_MODEL.model_validate(self.coerce_item(raw, categories))
            except ValidationError as e:
                logger.warning(f"Dropping invalid {self.ENTITY_KEY} item: {e.error_count()} errors")
                continue
            if payload.natural_key in seen:
                continue
            seen.add(payload.natural_key)
            valid.append(payload)

        if items and not valid:
            raise ProviderError(f"No valid {self.ENTITY_KEY} in provider response")
        return valid

    # ── Batching ─────────────────────────────────────────────────

    def generate_batch(self, categories: Sequence[str], count_per_category: int) -> List[PayloadModel]:
        """One provider request for up to categories_per_batch categories."""
        prompt = self.build_prompt(categories, count_per_category)
        response_text = self.invoke_llm(prompt)
        parsed = self.parse_json_response(response_text)
        return self.validate_items(self.extract_items(parsed), categories)

    def split_batches(self, categories: Sequence[str]) -> List[List[str]]:
        size = max(1, self.gen_config.categories_per_batch)
        return [list(categories[i:i + size]) for i in range(0, len(categories), size)]

    def pending_categories(self, categories: Optional[Sequence[str]] = None) -> List[str]:
        """Requested categories that have nothing in the cache yet."""
        categories = list(categories or self.default_categories())
        cached = set(self.cache.cached_categories(self.ENTITY_KEY))
        return [c for c in categories if c not in cached]

    def generate(
        self,
        categories: Optional[Sequence[str]] = None,
        count_per_category: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Generate payloads for every requested category.

        Categories already present in the cache are not requested again.
        The accumulated list is written back after each successful batch.
        A failed batch is logged and skipped.

        Returns:
            Flat list of cached payloads (camelCase, un-identified)
        """
        categories = list(categories or self.default_categories())
        count = count_per_category or self.gen_config.count_per_category

        accumulated = self.cache.read(self.ENTITY_KEY)
        known = {
            item.get(self.PAYLOAD_MODEL.NATURAL_KEY)
            for item in accumulated
            if isinstance(item, dict)
        }
        pending = self.pending_categories(categories)
        if not pending:
            logger.info(f"All {len(categories)} {self.ENTITY_KEY} categories cached, skipping provider")
            return accumulated

        skipped = len(categories) - len(pending)
        if skipped:
            logger.info(f"Resuming {self.ENTITY_KEY}: {skipped} categories already cached")

        for batch in self.split_batches(pending):
            categories_str = ", ".join(batch)
            logger.info(f"Generating {count} {self.ENTITY_KEY} per category for: {categories_str}")
            try:
                payloads = self.generate_batch(batch, count)
            except ProviderError as e:
                logger.error(f"Failed to generate {self.ENTITY_KEY} for {categories_str}: {e}")
                continue

            added = 0
            for payload in payloads:
                if payload.natural_key in known:
                    continue
                known.add(payload.natural_key)
                accumulated.append(payload.to_cache())
                added += 1
            logger.info(f"  Got {added} new {self.ENTITY_KEY}")
            self.cache.write(self.ENTITY_KEY, accumulated)

        logger.info(f"Generated {len(accumulated)} {self.ENTITY_KEY} in total")
        return accumulated
