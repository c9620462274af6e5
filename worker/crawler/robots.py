"""Robots.txt parser and AI crawler policy analyzer.

Answers one question per known AI crawler: does the site's robots.txt shut
it out entirely? A missing or unreachable robots.txt is an open policy, not
a block, so every failure path returns the permissive default.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

import structlog

from worker.crawler.fetcher import Fetcher
from worker.crawler.registry import DEFAULT_REGISTRY, CrawlerRegistry, CrawlerSignature

logger = structlog.get_logger(__name__)

_LINE_SPLIT = re.compile(r"\r?\n")

# Disallow values that shut out the whole site
BLANKET_DISALLOW = frozenset({"/", "/*"})


@dataclass
class RobotsGroup:
    """User-agent group with its allow/disallow rules."""

    agents: list[str] = field(default_factory=list)
    allow: list[str] = field(default_factory=list)
    disallow: list[str] = field(default_factory=list)

    @property
    def has_rules(self) -> bool:
        return bool(self.allow or self.disallow)

    def names_agent(self, token: str) -> bool:
        """Exact, case-insensitive match against this group's agents."""
        token_lower = token.lower()
        return any(agent.lower() == token_lower for agent in self.agents)

    @property
    def is_wildcard(self) -> bool:
        return any(agent.strip() == "*" for agent in self.agents)

    @property
    def blocks_site(self) -> bool:
        """A blanket disallow blocks unless the group also allows ``/``."""
        disallows_all = any(p.strip() in BLANKET_DISALLOW for p in self.disallow)
        allows_all = any(p.strip() == "/" for p in self.allow)
        return disallows_all and not allows_all


@dataclass
class RobotsTxt:
    """Parsed robots.txt: ordered groups plus sitemap declarations."""

    groups: list[RobotsGroup] = field(default_factory=list)
    sitemaps: list[str] = field(default_factory=list)

    @classmethod
    def parse(cls, content: str) -> RobotsTxt:
        """
        Parse robots.txt content.

        Consecutive ``User-agent`` lines share one group; a ``User-agent`` line
        after a rule starts a new group. Rules before any ``User-agent`` go to
        an implicit ``*`` group.
        """
        parsed = cls()
        current: RobotsGroup | None = None

        for raw_line in _LINE_SPLIT.split(content):
            line = raw_line.strip()

            # Skip comments and empty lines
            if not line or line.startswith("#"):
                continue

            key, _, value = line.partition(":")
            key = key.strip().lower()
            # Strip inline comments
            if "#" in value:
                value = value.split("#", 1)[0]
            value = value.strip()

            # An empty Disallow/Allow restricts nothing
            if not key or not value:
                continue

            if key == "user-agent":
                if current is None or current.has_rules:
                    current = RobotsGroup()
                    parsed.groups.append(current)
                current.agents.append(value)
            elif key in ("allow", "disallow"):
                if current is None:
                    current = RobotsGroup(agents=["*"])
                    parsed.groups.append(current)
                if key == "allow":
                    current.allow.append(value)
                else:
                    current.disallow.append(value)
            elif key == "sitemap":
                parsed.sitemaps.append(value)

        return parsed

    def group_for(self, token: str) -> RobotsGroup | None:
        """Group governing a crawler: exact agent match first, then ``*``."""
        for group in self.groups:
            if group.names_agent(token):
                return group
        for group in self.groups:
            if group.is_wildcard:
                return group
        return None

    def is_blocked(self, token: str) -> bool:
        group = self.group_for(token)
        # No applicable group means no restriction
        return group is not None and group.blocks_site


@dataclass
class RobotsAnalysis:
    """AI crawler policy derived from a site's robots.txt."""

    exists: bool
    allows_ai_bots: bool
    blocked_bots: list[str] = field(default_factory=list)
    allowed_bots: list[str] = field(default_factory=list)
    sitemaps: list[str] = field(default_factory=list)
    error: str | None = None

    @classmethod
    def permissive(
        cls, registry: CrawlerRegistry = DEFAULT_REGISTRY, error: str | None = None
    ) -> RobotsAnalysis:
        """Default when no policy could be read: every crawler is allowed."""
        return cls(
            exists=False,
            allows_ai_bots=True,
            blocked_bots=[],
            allowed_bots=[s.name for s in registry.robots_agents],
            sitemaps=[],
            error=error,
        )

    def is_allowed(self, crawler_name: str) -> bool:
        return crawler_name in self.allowed_bots

    def to_dict(self) -> dict[str, Any]:
        return {
            "exists": self.exists,
            "allows_ai_bots": self.allows_ai_bots,
            "blocked_bots": self.blocked_bots,
            "allowed_bots": self.allowed_bots,
            "sitemaps": self.sitemaps,
        }


def analyze_robots_content(
    content: str, registry: CrawlerRegistry = DEFAULT_REGISTRY
) -> RobotsAnalysis:
    """Resolve every audited crawler against robots.txt content."""
    robots = RobotsTxt.parse(content)
    blocked: list[str] = []
    allowed: list[str] = []

    signature: CrawlerSignature
    for signature in registry.robots_agents:
        if robots.is_blocked(signature.user_agent_token):
            blocked.append(signature.name)
        else:
            allowed.append(signature.name)

    return RobotsAnalysis(
        exists=True,
        allows_ai_bots=len(allowed) > 0,
        blocked_bots=blocked,
        allowed_bots=allowed,
        sitemaps=robots.sitemaps,
    )


class RobotsTxtAnalyzer:
    """Fetches robots.txt for a domain and audits AI crawler access."""

    def __init__(
        self,
        fetcher: Fetcher,
        registry: CrawlerRegistry = DEFAULT_REGISTRY,
        timeout: float = 5.0,
    ):
        self.fetcher = fetcher
        self.registry = registry
        self.timeout = timeout

    async def analyze(self, domain: str) -> RobotsAnalysis:
        """
        Audit AI crawler access for a domain.

        Args:
            domain: Bare host name, e.g. ``example.com``

        Returns:
            RobotsAnalysis; the permissive default when robots.txt is
            missing or unreachable
        """
        robots_url = f"https://{domain}/robots.txt"
        result = await self.fetcher.fetch(robots_url, timeout=self.timeout)

        if not result.success:
            logger.info(
                "robots_txt_unavailable",
                domain=domain,
                status=result.status_code,
                error=result.error,
                result="all_crawlers_allowed_by_default",
            )
            return RobotsAnalysis.permissive(self.registry, error=result.error)

        analysis = analyze_robots_content(result.text, self.registry)

        logger.info(
            "robots_txt_ai_check_complete",
            domain=domain,
            allows_ai_bots=analysis.allows_ai_bots,
            blocked=analysis.blocked_bots,
            sitemaps=len(analysis.sitemaps),
        )
        return analysis
