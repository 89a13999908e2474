"""Admin statistics and moderation.

Note: Router is not exported here to avoid circular imports.
"""

from .service import SiteStats, StatsService


__all__ = ["SiteStats", "StatsService"]
