"""TTL selection by endpoint shape.

Rules are evaluated in order; the first match wins:
  - user profile (not a repository list)  -> 10 minutes
  - single repository (not its issue list) -> 5 minutes
  - search endpoints                      -> 3 minutes
  - issue lists                           -> 1 minute
  - anything else                         -> configured default
"""

from __future__ import annotations

USER_PROFILE_TTL = 600.0
REPOSITORY_TTL = 300.0
SEARCH_TTL = 180.0
ISSUES_TTL = 60.0


def select_ttl(endpoint: str, default_ttl: float) -> float:
    """Return the cache TTL (seconds) for an endpoint path."""
    if "/users/" in endpoint and "/repos" not in endpoint:
        return USER_PROFILE_TTL
    if "/repos/" in endpoint and "/issues" not in endpoint:
        return REPOSITORY_TTL
    if "/search/" in endpoint:
        return SEARCH_TTL
    if "/issues" in endpoint:
        return ISSUES_TTL
    return default_ttl
