"""Event counting rules.

Rules map (category, action) pairs to snapshot counters. The app has
renamed and added lifecycle actions across releases, so which actions
feed a counter is configuration rather than code.

Rules file format (YAML), counter name to "category:action" entries:

    quizzes_generated:
      - quiz:quiz_completed
      - quiz:quiz_started
    scenarios_completed:
      - scenario:generation_completed
"""

from __future__ import annotations

from pathlib import Path

import yaml

from protostats.aggregation.counts import RuleKey

# Counters that event rules may feed (snapshot raw field names)
EVENT_COUNTERS = ("quizzes_generated", "scenarios_completed", "algorithm_quizzes")

DEFAULT_RULES: dict[RuleKey, str] = {
    ("quiz", "quiz_completed"): "quizzes_generated",
    ("quiz", "quiz_started"): "quizzes_generated",
    ("scenario", "generation_completed"): "scenarios_completed",
    ("scenario", "completed"): "scenarios_completed",
    ("quiz", "algorithm_completed"): "algorithm_quizzes",
}


def parse_rules(raw: object) -> dict[RuleKey, str]:
    """Parse a counter -> ["category:action", ...] mapping into rules.

    Counters missing from the mapping keep no rule and count zero.

    Raises:
        ValueError: On malformed entries, unknown counters, or a pair
            mapped to two different counters.
    """
    if not isinstance(raw, dict):
        raise ValueError("Rules must be a mapping of counter name to entries")

    rules: dict[RuleKey, str] = {}
    for counter, entries in raw.items():
        if counter not in EVENT_COUNTERS:
            raise ValueError(f"Unknown counter in rules: {counter}")
        if not isinstance(entries, list):
            raise ValueError(f"Rules for {counter} must be a list")

        for entry in entries:
            category, sep, action = str(entry).partition(":")
            if not sep or not category or not action:
                raise ValueError(f"Rule entry must be 'category:action', got {entry!r}")
            key = (category.strip(), action.strip())
            existing = rules.get(key)
            if existing is not None and existing != counter:
                raise ValueError(f"{entry} maps to both {existing} and {counter}")
            rules[key] = counter

    return rules


def load_rules(path: Path | None) -> dict[RuleKey, str]:
    """Load rules from a YAML file, or the defaults when path is None.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file content is malformed.
    """
    if path is None:
        return dict(DEFAULT_RULES)

    with open(path, encoding="utf-8") as f:
        try:
            raw = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid rules file {path}: {e}") from e

    return parse_rules(raw or {})
