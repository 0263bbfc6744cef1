"""Data audit for the usage collections.

Operator diagnostics behind the public numbers: how many ids in each
source are test accounts, how many records carry no user id at all, and
how the rule counters split by month partition.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from protostats.aggregation import counts
from protostats.models.domain import EventRecord, UploadRecord, UserRecord
from protostats.normalize.events import (
    DEFAULT_UPLOADS_COLLECTION,
    DEFAULT_USERS_COLLECTION,
    EventSchema,
    normalize_upload,
    normalize_user,
    read_events,
)
from protostats.store.base import DocumentStore

# Each protocol upload emits both actions; the audit shows both so the
# double count is visible.
PROTOCOL_ACTION_RULES = {
    ("protocol", "upload_completed"): "upload_completed",
    ("protocol", "extraction_completed"): "extraction_completed",
}

NO_PARTITION = "unpartitioned"


@dataclass
class UserBreakdown:
    """Unique ids in one source split into test and real accounts."""

    source: str
    total: int
    test: int
    real: int


@dataclass
class IdCoverage:
    """How many records in one source carry a user id."""

    source: str
    with_user_id: int
    without_user_id: int
    unique_devices: int


@dataclass
class AuditReport:
    user_breakdowns: list[UserBreakdown] = field(default_factory=list)
    coverage: list[IdCoverage] = field(default_factory=list)
    monthly: dict[str, dict[str, int]] = field(default_factory=dict)
    combined_unique_devices: int = 0
    users_with_last_active: int = 0
    total_user_profiles: int = 0


def user_breakdown(source: str, user_ids: Iterable[str | None], prefix: str) -> UserBreakdown:
    unique = {user_id for user_id in user_ids if user_id}
    test = sum(1 for user_id in unique if counts.is_excluded(user_id, prefix))
    return UserBreakdown(source=source, total=len(unique), test=test, real=len(unique) - test)


def id_coverage(source: str, records: list[EventRecord] | list[UploadRecord]) -> IdCoverage:
    with_user_id = sum(1 for r in records if r.user_id)
    devices = {r.device_id for r in records if r.device_id}
    return IdCoverage(
        source=source,
        with_user_id=with_user_id,
        without_user_id=len(records) - with_user_id,
        unique_devices=len(devices),
    )


def monthly_counts(
    events: list[EventRecord],
    rules: dict[tuple[str, str], str],
    prefix: str,
) -> dict[str, dict[str, int]]:
    """Rule counters per month partition, months in ascending order."""
    by_month: dict[str, list[EventRecord]] = {}
    for event in events:
        by_month.setdefault(event.partition or NO_PARTITION, []).append(event)

    combined_rules = {**rules, **PROTOCOL_ACTION_RULES}
    return {
        month: counts.count_by_category_action(by_month[month], combined_rules, prefix)
        for month in sorted(by_month)
    }


def run_audit(
    store: DocumentStore,
    schemas: list[EventSchema],
    rules: dict[tuple[str, str], str],
    prefix: str,
    uploads_collection: str = DEFAULT_UPLOADS_COLLECTION,
    users_collection: str = DEFAULT_USERS_COLLECTION,
) -> AuditReport:
    """Read every collection once and build the audit.

    Unlike the snapshot job, read failures propagate.
    """
    events = read_events(store, schemas)
    uploads = [normalize_upload(d) for d in store.list_documents(uploads_collection)]
    users: list[UserRecord] = [normalize_user(d) for d in store.list_documents(users_collection)]

    event_ids = [e.user_id for e in events]
    upload_ids = [u.user_id for u in uploads]

    report = AuditReport()
    report.user_breakdowns = [
        user_breakdown("events", event_ids, prefix),
        user_breakdown("protocol_uploads", upload_ids, prefix),
        user_breakdown("users", [u.user_id for u in users], prefix),
        user_breakdown("events + protocol_uploads", event_ids + upload_ids, prefix),
    ]
    report.coverage = [id_coverage("events", events), id_coverage("protocol_uploads", uploads)]
    report.combined_unique_devices = len(
        {r.device_id for r in [*events, *uploads] if r.device_id}
    )
    report.users_with_last_active = sum(1 for u in users if u.last_active is not None)
    report.total_user_profiles = len(users)
    report.monthly = monthly_counts(events, rules, prefix)
    return report


def format_audit(report: AuditReport) -> list[str]:
    """Render the audit as console lines."""
    lines = ["=== UNIQUE USERS ==="]
    for b in report.user_breakdowns:
        lines.append(f"{b.source}: {b.total} (test: {b.test}, real: {b.real})")

    lines.extend(["", "=== USER ID COVERAGE ==="])
    for c in report.coverage:
        lines.append(
            f"{c.source}: with userId {c.with_user_id}, without {c.without_user_id}, "
            f"unique deviceIds {c.unique_devices}"
        )
    lines.append(f"events + protocol_uploads: unique deviceIds {report.combined_unique_devices}")

    lines.extend(["", "=== USER PROFILES ==="])
    lines.append(
        f"users with lastActive: {report.users_with_last_active} of {report.total_user_profiles}"
    )

    lines.extend(["", "=== BY MONTH ==="])
    if not report.monthly:
        lines.append("(no events)")
    for month, month_counts in report.monthly.items():
        parts = ", ".join(f"{name}={value}" for name, value in month_counts.items())
        lines.append(f"{month}: {parts}")
    return lines
