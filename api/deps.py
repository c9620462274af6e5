"""FastAPI dependencies for dependency injection."""

from datetime import timedelta
from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from api.config import Settings, get_settings
from api.database import DbSession
from api.services.monetization_service import MonetizationDecisionMachine
from api.services.payment_service import PaymentSettlementService, StripePaymentProvider
from api.services.pricing import PricingEngine
from api.services.rate_limiter import RateLimiter
from api.services.site_service import SiteService
from worker.crawler.registry import CrawlerRegistry, load_registry
from worker.detection.classifier import CrawlerClassifier

__all__ = [
    "DbSession",
    "SettingsDep",
    "RegistryDep",
    "ClassifierDep",
    "RateLimiterDep",
    "SiteServiceDep",
    "DecisionMachineDep",
    "SettlementServiceDep",
]


# Settings dependency
SettingsDep = Annotated[Settings, Depends(get_settings)]


@lru_cache
def get_registry() -> CrawlerRegistry:
    """Crawler registry, loaded once per process."""
    return load_registry(get_settings().crawler_registry_path)


RegistryDep = Annotated[CrawlerRegistry, Depends(get_registry)]


def get_classifier(settings: SettingsDep, registry: RegistryDep) -> CrawlerClassifier:
    return CrawlerClassifier(
        registry=registry,
        threshold=settings.heuristic_threshold,
        confidence_cap=settings.heuristic_confidence_cap,
        default_rate=settings.default_bot_rate,
    )


ClassifierDep = Annotated[CrawlerClassifier, Depends(get_classifier)]


def get_rate_limiter(settings: SettingsDep) -> RateLimiter:
    return RateLimiter(settings.tier_rate_limits)


RateLimiterDep = Annotated[RateLimiter, Depends(get_rate_limiter)]


def get_site_service(db: DbSession) -> SiteService:
    return SiteService(db)


SiteServiceDep = Annotated[SiteService, Depends(get_site_service)]


def get_decision_machine(
    settings: SettingsDep, site_service: SiteServiceDep
) -> MonetizationDecisionMachine:
    return MonetizationDecisionMachine(
        store=site_service,
        payment_provider=StripePaymentProvider(settings),
        pricing=PricingEngine(default_rate=settings.default_bot_rate),
        paywall_expiry=timedelta(minutes=settings.paywall_expiry_minutes),
    )


DecisionMachineDep = Annotated[MonetizationDecisionMachine, Depends(get_decision_machine)]


def get_settlement_service(
    settings: SettingsDep, site_service: SiteServiceDep
) -> PaymentSettlementService:
    return PaymentSettlementService(site_service, settings)


SettlementServiceDep = Annotated[PaymentSettlementService, Depends(get_settlement_service)]
