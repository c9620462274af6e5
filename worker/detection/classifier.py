"""AI crawler classification for inbound requests.

Known crawlers are matched by user-agent token against the registry. Anything
else is scored against a handful of scraper heuristics; a score at or above
the threshold marks the request as an unidentified AI bot.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

import structlog

from worker.crawler.registry import DEFAULT_REGISTRY, CrawlerRegistry

logger = structlog.get_logger(__name__)

HEURISTIC_BOT_TYPE = "heuristic_detection"
UNKNOWN_AI_COMPANY = "Unknown AI Bot"

SUSPICIOUS_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"python-requests",
        r"scrapy",
        r"selenium",
        r"headless",
        r"crawler",
        r"scraper",
        r"bot.*ai",
        r"ai.*bot",
        r"gpt",
        r"llm",
        r"language.*model",
    )
)

# Browsers send user agents within this length range
MIN_BROWSER_UA_LENGTH = 20
MAX_BROWSER_UA_LENGTH = 500


@dataclass(frozen=True)
class HeuristicWeights:
    """Points each heuristic signal adds to the score."""

    pattern: int = 20
    missing_accept_language: int = 15
    missing_accept_encoding: int = 10
    unusual_length: int = 15


@dataclass(frozen=True)
class BotClassification:
    """What sent a request, and how sure we are."""

    is_bot: bool
    is_ai_bot: bool
    confidence: int
    bot_type: str | None = None
    bot_company: str | None = None
    suggested_rate: float | None = None

    def __post_init__(self) -> None:
        if not 0 <= self.confidence <= 100:
            raise ValueError(f"confidence must be in 0..100, got {self.confidence}")
        if self.is_ai_bot and self.confidence == 0:
            raise ValueError("an AI bot classification needs a positive confidence")

    @classmethod
    def human(cls) -> BotClassification:
        return cls(is_bot=False, is_ai_bot=False, confidence=0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_bot": self.is_bot,
            "is_ai_bot": self.is_ai_bot,
            "bot_type": self.bot_type,
            "bot_company": self.bot_company,
            "confidence": self.confidence,
            "suggested_rate": self.suggested_rate,
        }


class CrawlerClassifier:
    """Classifies a request from its user agent and accept headers."""

    def __init__(
        self,
        registry: CrawlerRegistry = DEFAULT_REGISTRY,
        threshold: int = 40,
        confidence_cap: int = 85,
        default_rate: float = 0.001,
        weights: HeuristicWeights | None = None,
    ):
        self.registry = registry
        self.threshold = threshold
        self.confidence_cap = confidence_cap
        self.default_rate = default_rate
        self.weights = weights or HeuristicWeights()

    def classify(
        self,
        user_agent: str,
        accept_language: str | None = None,
        accept_encoding: str | None = None,
    ) -> BotClassification:
        user_agent = user_agent or ""

        signature = self.registry.match_user_agent(user_agent)
        if signature is not None:
            return BotClassification(
                is_bot=True,
                is_ai_bot=True,
                confidence=signature.base_confidence,
                bot_type=signature.token,
                bot_company=signature.company,
                suggested_rate=signature.suggested_rate,
            )

        score = self.heuristic_score(user_agent, accept_language, accept_encoding)
        if score >= self.threshold:
            logger.debug("heuristic_ai_bot_detected", user_agent=user_agent[:200], score=score)
            return BotClassification(
                is_bot=True,
                is_ai_bot=True,
                confidence=max(1, min(score, self.confidence_cap)),
                bot_type=HEURISTIC_BOT_TYPE,
                bot_company=UNKNOWN_AI_COMPANY,
                suggested_rate=self.default_rate,
            )

        return BotClassification.human()

    def heuristic_score(
        self,
        user_agent: str,
        accept_language: str | None = None,
        accept_encoding: str | None = None,
    ) -> int:
        """Sum of the heuristic signals present on a request."""
        score = sum(self.weights.pattern for p in SUSPICIOUS_PATTERNS if p.search(user_agent))

        if not accept_language:
            score += self.weights.missing_accept_language
        if not accept_encoding:
            score += self.weights.missing_accept_encoding

        if len(user_agent) < MIN_BROWSER_UA_LENGTH or len(user_agent) > MAX_BROWSER_UA_LENGTH:
            score += self.weights.unusual_length

        return score
