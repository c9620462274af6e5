"""CrawlToll worker package: crawler analyzers, request classification and scoring."""
