"""Usage counters over normalized records.

Pure functions - no store access. Every public count excludes user ids
that start with the test-account prefix (prefix match, since test ids
share a stable prefix but vary in suffix).
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable, Mapping
from typing import Protocol, TypeVar

from protostats.core.timeutil import Window
from protostats.models.domain import UploadRecord, UserRecord

# Rule key: (category, action)
RuleKey = tuple[str, str]

T = TypeVar("T")


class HasUserId(Protocol):
    user_id: str | None


class HasCategoryAction(Protocol):
    category: str
    action: str
    user_id: str | None


def is_excluded(user_id: str | None, prefix: str) -> bool:
    """Check whether a user id belongs to a test account.

    Records without a user id are not test accounts.
    """
    if not user_id or not prefix:
        return False
    return user_id.startswith(prefix)


def count_distinct_users(sources: Iterable[Iterable[HasUserId]], prefix: str) -> int:
    """Count unique non-test user ids across all sources.

    Set semantics: invariant under reordering and duplicated records.

    Args:
        sources: Record collections, each yielding objects with user_id.
        prefix: Test-account prefix.

    Returns:
        Number of distinct real user ids.
    """
    users: set[str] = set()
    for source in sources:
        for record in source:
            user_id = record.user_id
            if user_id and not is_excluded(user_id, prefix):
                users.add(user_id)
    return len(users)


def count_by_category_action(
    records: Iterable[HasCategoryAction],
    rules: Mapping[RuleKey, str],
    prefix: str,
) -> dict[str, int]:
    """Count records into named counters by (category, action).

    Several (category, action) pairs may feed the same counter. Pairs
    with no rule are ignored. Every counter named in rules is present in
    the result.

    Args:
        records: Normalized events.
        rules: Mapping of (category, action) to counter name.
        prefix: Test-account prefix.

    Returns:
        Counter name -> count.
    """
    counters = {name: 0 for name in rules.values()}
    for record in records:
        if is_excluded(record.user_id, prefix):
            continue
        name = rules.get((record.category, record.action))
        if name is not None:
            counters[name] += 1
    return counters


def count_records(records: Iterable[HasUserId], prefix: str) -> int:
    """Count records not owned by a test account."""
    return sum(1 for record in records if not is_excluded(record.user_id, prefix))


def count_active_users(users: Iterable[UserRecord], window: Window, prefix: str) -> int:
    """Count real users whose last activity falls in the window."""
    return sum(
        1
        for user in users
        if not is_excluded(user.user_id, prefix) and window.contains(user.last_active)
    )


def top_n(
    records: Iterable[T],
    key: Callable[[T], str],
    n: int,
    predicate: Callable[[T], bool] | None = None,
) -> list[str]:
    """Return the n most frequent labels.

    Ties keep first-encountered order (dicts preserve insertion order and
    sorted() is stable).

    Args:
        records: Records to label.
        key: Extracts a label from a record.
        n: Maximum number of labels.
        predicate: Optional filter; records failing it are not counted.

    Returns:
        At most n labels, most frequent first.
    """
    if n <= 0:
        return []

    counts: dict[str, int] = {}
    for record in records:
        if predicate is not None and not predicate(record):
            continue
        label = key(record)
        counts[label] = counts.get(label, 0) + 1

    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [label for label, _ in ranked[:n]]


def success_rate(
    records: Iterable[UploadRecord],
    window: Window,
    prefix: str,
) -> int | None:
    """Percentage of successful uploads in the window.

    Args:
        records: Upload records.
        window: Time window.
        prefix: Test-account prefix.

    Returns:
        Integer in [0, 100] rounded half-up, or None when the window holds
        no qualifying record (no data is not a measured 0%).
    """
    total = 0
    successful = 0
    for record in records:
        if is_excluded(record.user_id, prefix) or not window.contains(record.timestamp):
            continue
        total += 1
        if record.status == "success":
            successful += 1

    if total == 0:
        return None
    return int(math.floor(successful * 100 / total + 0.5))
