"""Tests for inbound request classification."""

import pytest

from worker.crawler.registry import CrawlerRegistry, CrawlerSignature
from worker.detection.classifier import (
    HEURISTIC_BOT_TYPE,
    UNKNOWN_AI_COMPANY,
    BotClassification,
    CrawlerClassifier,
    HeuristicWeights,
)

BROWSER_UA = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0 Safari/537.36"
)


@pytest.fixture
def classifier() -> CrawlerClassifier:
    return CrawlerClassifier()


class TestKnownCrawlers:
    """Registry matches."""

    def test_gptbot(self, classifier: CrawlerClassifier) -> None:
        result = classifier.classify(
            "Mozilla/5.0 (compatible; GPTBot/1.0; +https://openai.com/gptbot)"
        )

        assert result.is_bot is True
        assert result.is_ai_bot is True
        assert result.bot_type == "gptbot"
        assert result.bot_company == "OpenAI"
        assert result.confidence == 95
        assert result.suggested_rate == 0.002

    def test_match_ignores_accept_headers(self, classifier: CrawlerClassifier) -> None:
        result = classifier.classify(
            "CCBot/2.0 (https://commoncrawl.org/faq/)",
            accept_language="en-US",
            accept_encoding="gzip",
        )
        assert result.bot_company == "Common Crawl"
        assert result.confidence == 90

    def test_custom_registry(self) -> None:
        registry = CrawlerRegistry([CrawlerSignature("AcmeBot", "Acme", "AcmeBot", 77, 0.004)])
        result = CrawlerClassifier(registry).classify("AcmeBot/3.1")
        assert result.bot_company == "Acme"
        assert result.confidence == 77


class TestHeuristics:
    """Unidentified scrapers."""

    def test_python_requests_without_headers(self, classifier: CrawlerClassifier) -> None:
        result = classifier.classify("python-requests/2.28.0")

        # pattern 20 + no language 15 + no encoding 10
        assert classifier.heuristic_score("python-requests/2.28.0") == 45
        assert result.is_ai_bot is True
        assert result.bot_type == HEURISTIC_BOT_TYPE
        assert result.bot_company == UNKNOWN_AI_COMPANY
        assert result.confidence == 45
        assert result.suggested_rate == 0.001

    def test_browser_with_headers_is_human(self, classifier: CrawlerClassifier) -> None:
        result = classifier.classify(
            BROWSER_UA, accept_language="en-US,en;q=0.9", accept_encoding="gzip, br"
        )
        assert result == BotClassification.human()
        assert result.confidence == 0

    def test_below_threshold_is_human(self, classifier: CrawlerClassifier) -> None:
        # Only missing encoding and language: 25 < 40
        result = classifier.classify(BROWSER_UA)
        assert result.is_ai_bot is False

    def test_confidence_is_capped(self, classifier: CrawlerClassifier) -> None:
        ua = "python-requests scrapy selenium headless crawler"
        result = classifier.classify(ua)
        assert result.confidence == 85

    def test_empty_user_agent(self, classifier: CrawlerClassifier) -> None:
        # No pattern: 15 + 10 + 15 = 40, exactly the threshold
        result = classifier.classify("")
        assert result.is_ai_bot is True
        assert result.confidence == 40

    def test_custom_threshold_and_weights(self) -> None:
        classifier = CrawlerClassifier(
            threshold=100, weights=HeuristicWeights(pattern=50, unusual_length=0)
        )
        assert classifier.heuristic_score("scrapy") == 75
        assert classifier.classify("scrapy").is_ai_bot is False


class TestBotClassification:
    """Invariants on the classification value."""

    def test_confidence_range(self) -> None:
        with pytest.raises(ValueError):
            BotClassification(is_bot=True, is_ai_bot=True, confidence=101)

    def test_ai_bot_needs_confidence(self) -> None:
        with pytest.raises(ValueError):
            BotClassification(is_bot=True, is_ai_bot=True, confidence=0)

    def test_to_dict(self) -> None:
        data = BotClassification.human().to_dict()
        assert data["is_ai_bot"] is False
        assert data["bot_company"] is None
