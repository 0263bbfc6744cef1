"""Console table for blog view counts."""

from __future__ import annotations

INDEX_SLUG = "blog-index"
RULE_WIDTH = 60


def format_views_table(views: dict[str, int], slug_prefix: str = "") -> list[str]:
    """Render view counts as console lines, most viewed first.

    Args:
        views: Slug -> view count.
        slug_prefix: Date prefix stripped from post slugs for display.

    Returns:
        Lines to print.
    """
    if not views:
        return ["No views tracked yet."]

    ranked = sorted(views.items(), key=lambda item: item[1], reverse=True)

    lines = ["Blog Post Views:", "", "-" * RULE_WIDTH]
    for slug, count in ranked:
        if slug == INDEX_SLUG:
            label = "Blog Index Page"
        elif slug_prefix and slug.startswith(slug_prefix):
            label = slug[len(slug_prefix):]
        else:
            label = slug
        lines.append(f"{label:<45} {count:>6} views")
    lines.append("-" * RULE_WIDTH)

    total = sum(count for _, count in ranked)
    lines.extend(["", f"Total Views: {total}"])
    return lines
