from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DiscoveryConfig:
    # Per-branch candidate floor when merging in-person and online results.
    min_branch_fetch: int = 100
    branch_fetch_multiplier: int = 5
    # None scores every upcoming event.
    recommendation_candidates: int | None = 100
    trending_candidates: int = 50
    trending_window_days: int = 7

    def branch_fetch(self, page: int, limit: int) -> int:
        """Rows to pull from each date-sorted branch to build page ``page`` exactly."""
        return max(self.min_branch_fetch, limit * self.branch_fetch_multiplier, page * limit)


DEFAULT_DISCOVERY_CONFIG = DiscoveryConfig()
