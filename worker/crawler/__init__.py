"""Crawler package for the AI exposure analyzers."""

from worker.crawler.fetcher import Fetcher, FetchResult
from worker.crawler.registry import (
    DEFAULT_REGISTRY,
    CrawlerRegistry,
    CrawlerSignature,
    load_registry,
)
from worker.crawler.robots import RobotsAnalysis, RobotsTxt, RobotsTxtAnalyzer
from worker.crawler.sample import SampleCrawler, SampleCrawlResult
from worker.crawler.sitemap import SitemapAnalysis, SitemapAnalyzer
from worker.crawler.techstack import Platform, TechStackDetector, TechStackInfo
from worker.crawler.url import normalize_domain

__all__ = [
    # Fetcher
    "Fetcher",
    "FetchResult",
    # Registry
    "CrawlerRegistry",
    "CrawlerSignature",
    "DEFAULT_REGISTRY",
    "load_registry",
    # Robots
    "RobotsTxt",
    "RobotsTxtAnalyzer",
    "RobotsAnalysis",
    # Sitemap
    "SitemapAnalyzer",
    "SitemapAnalysis",
    # Sample crawl
    "SampleCrawler",
    "SampleCrawlResult",
    # Tech stack
    "Platform",
    "TechStackDetector",
    "TechStackInfo",
    # URL utilities
    "normalize_domain",
]
