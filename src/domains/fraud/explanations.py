"""Explanation cache: deduplicates calls to the explanation service.

Entries are keyed by the sorted triggered rule ids plus the decision, not by
the exact charge. Two charges with the same fraud signature share one
explanation even when their amounts differ.
"""

import asyncio
from collections.abc import Iterable
from datetime import UTC, datetime
from decimal import Decimal

import structlog

from .config import ExplanationConfig, default_config
from .llm_client import ExplanationClient
from .models import CacheClearReport, CacheEntry, CacheStats, Decision, RuleSet

logger = structlog.get_logger()


def cache_key(triggered_rule_ids: Iterable[str], decision: Decision | str) -> str:
    """Order-independent fingerprint of a risk profile."""
    return f"{','.join(sorted(triggered_rule_ids))}|{Decision(decision).value}"


def build_prompt(
    rules: RuleSet,
    triggered_rule_ids: Iterable[str],
    decision: Decision | str,
    score: Decimal | float | None = None,
) -> str:
    """Assemble the model input from rule labels, score and decision."""
    decision = Decision(decision)
    lines = [f"A payment charge was {decision.value} by the fraud screening system."]
    if score is not None:
        lines.append(f"Risk score: {float(score):.2f} on a scale from 0 to 1.")

    # Sorted so every charge sharing a cache key produces the same prompt
    labels = []
    for rule_id in sorted(triggered_rule_ids):
        rule = rules.get(rule_id)
        labels.append(rule.label if rule else rule_id)

    if labels:
        lines.append("Risk signals detected:")
        lines.extend(f"- {label}" for label in labels)
    else:
        lines.append("No risk signals were detected.")

    lines.append("Explain this outcome to the merchant in plain language.")
    return "\n".join(lines)


def fallback_explanation(
    decision: Decision | str, config: ExplanationConfig | None = None
) -> str:
    cfg = config or default_config.explanation
    if Decision(decision) == Decision.DECLINED:
        return cfg.declined_fallback
    return cfg.accepted_fallback


class ExplanationCache:
    """In-process explanation store with single-flight misses.

    All reads and writes of the store happen under one asyncio.Lock; the
    external call itself runs outside it. The first miss for a key installs
    a Future that concurrent callers for the same key await instead of
    issuing their own call. Failed calls are never stored.
    """

    def __init__(
        self,
        client: ExplanationClient,
        rules: RuleSet,
        config: ExplanationConfig | None = None,
    ) -> None:
        self._client = client
        self._rules = rules
        self._config = config or default_config.explanation
        self._entries: dict[str, CacheEntry] = {}
        self._in_flight: dict[str, asyncio.Future[str | None]] = {}
        self._lock = asyncio.Lock()
        self._hits = 0
        self._misses = 0
        self._coalesced = 0

    @property
    def size(self) -> int:
        return len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    async def get_explanation(
        self,
        triggered_rule_ids: Iterable[str],
        decision: Decision | str,
        score: Decimal | float | None = None,
    ) -> str:
        """Return the explanation for a risk profile, calling the service at most once per key."""
        triggered_rule_ids = list(triggered_rule_ids)
        decision = Decision(decision)
        key = cache_key(triggered_rule_ids, decision)

        async with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                self._hits += 1
                logger.debug("explanation_cache_hit", key=key)
                return entry.explanation

            pending = self._in_flight.get(key)
            if pending is None:
                self._misses += 1
                pending = asyncio.get_running_loop().create_future()
                self._in_flight[key] = pending
                leader = True
            else:
                self._coalesced += 1
                leader = False

        if not leader:
            logger.debug("explanation_cache_wait", key=key)
            explanation = await asyncio.shield(pending)
            return explanation if explanation is not None else fallback_explanation(
                decision, self._config
            )

        explanation: str | None = None
        try:
            explanation = await self._fetch(key, triggered_rule_ids, decision, score)
        finally:
            # No await from here on, so this cannot interleave with clear() or stats()
            if explanation is not None:
                self._entries[key] = CacheEntry(
                    key=key,
                    explanation=explanation,
                    created_at=datetime.now(UTC),
                )
            self._in_flight.pop(key, None)
            pending.set_result(explanation)

        if explanation is None:
            return fallback_explanation(decision, self._config)
        return explanation

    async def _fetch(
        self,
        key: str,
        triggered_rule_ids: list[str],
        decision: Decision,
        score: Decimal | float | None,
    ) -> str | None:
        try:
            prompt = build_prompt(self._rules, triggered_rule_ids, decision, score)
            explanation = await self._client.explain(prompt)
        except Exception:
            logger.warning("explanation_fallback_used", key=key, exc_info=True)
            return None

        if not isinstance(explanation, str) or not explanation.strip():
            logger.warning("explanation_fallback_used", key=key, reason="empty_response")
            return None

        logger.info("explanation_cached", key=key)
        return explanation

    async def clear(self) -> CacheClearReport:
        """Empty the store and report how many entries it held."""
        async with self._lock:
            previous = len(self._entries)
            self._entries.clear()
            current = len(self._entries)

        logger.info("explanation_cache_cleared", previous_size=previous)
        return CacheClearReport(previous_size=previous, current_size=current)

    async def stats(self) -> CacheStats:
        async with self._lock:
            return CacheStats(
                size=len(self._entries),
                status="active",
                hits=self._hits,
                misses=self._misses,
                in_flight=len(self._in_flight),
                coalesced=self._coalesced,
            )
