"""Blog view counter client.

The site's view tracker exposes per-slug counts at
`/api/blog-views?summary=true` as {"views": {slug: count}}.
"""

from __future__ import annotations

import requests

TIMEOUT_SECONDS = 15


def fetch_blog_views(url: str, session: requests.Session | None = None) -> dict[str, int]:
    """Fetch per-slug view counts.

    Args:
        url: Summary endpoint URL.
        session: Optional requests session.

    Returns:
        Slug -> view count. Empty when nothing has been tracked.

    Raises:
        requests.RequestException: On network or HTTP errors.
        ValueError: If the response body is not the expected shape.
    """
    http = session or requests
    response = http.get(url, timeout=TIMEOUT_SECONDS)
    response.raise_for_status()

    payload = response.json()
    if not isinstance(payload, dict):
        raise ValueError("Unexpected blog views response")

    views = payload.get("views") or {}
    if not isinstance(views, dict):
        raise ValueError("Unexpected blog views response")

    return {str(slug): int(count) for slug, count in views.items()}
