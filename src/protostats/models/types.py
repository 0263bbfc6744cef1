"""Pydantic models for protostats outputs.

The snapshot shape is consumed by the blog templating step, so field names
serialize as camelCase and the layout is stable:
{generatedAt, raw, display, topProtocols}.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    """Base for models serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class RawStats(_CamelModel):
    """Measured counters.

    None means the metric could not be read, never a measured zero.
    """

    app_store_downloads: int | None = None
    active_users: int | None = None
    total_users: int | None = None
    protocols_uploaded: int | None = None
    quizzes_generated: int | None = None
    scenarios_completed: int | None = None
    algorithm_quizzes: int | None = None
    upload_success_rate: int | None = None


class DisplayStats(_CamelModel):
    """Human-rounded counters for public copy ("2,500+", "67%")."""

    app_store_downloads: str | None = None
    active_users: str | None = None
    total_users: str | None = None
    protocols_uploaded: str | None = None
    quizzes_generated: str | None = None
    scenarios_completed: str | None = None
    algorithm_quizzes: str | None = None
    upload_success_rate: str | None = None


class StatsSnapshot(_CamelModel):
    """Point-in-time aggregate written once per run."""

    generated_at: datetime
    raw: RawStats
    display: DisplayStats
    top_protocols: list[str]

    def to_json_dict(self) -> dict:
        """Serialize with camelCase keys and JSON-safe values."""
        return self.model_dump(mode="json", by_alias=True)


class AppInfo(_CamelModel):
    """App Store Connect app summary.

    Download totals are not exposed by the Connect API and stay None.
    """

    app_name: str
    bundle_id: str | None
    version_count: int | None
    total_downloads: int | None = None
    last30_days_downloads: int | None = None
