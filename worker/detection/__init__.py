"""Inbound request classification."""

from worker.detection.classifier import BotClassification, CrawlerClassifier

__all__ = ["BotClassification", "CrawlerClassifier"]
