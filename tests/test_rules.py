"""Tests for event counting rules."""

import pytest

from protostats.aggregation.rules import DEFAULT_RULES, load_rules, parse_rules


class TestParseRules:
    """Tests for rule parsing."""

    def test_parses_entries(self):
        rules = parse_rules(
            {
                "quizzes_generated": ["quiz:quiz_completed", "quiz:quiz_started"],
                "scenarios_completed": ["scenario:generation_completed"],
            }
        )
        assert rules == {
            ("quiz", "quiz_completed"): "quizzes_generated",
            ("quiz", "quiz_started"): "quizzes_generated",
            ("scenario", "generation_completed"): "scenarios_completed",
        }

    def test_strips_whitespace(self):
        rules = parse_rules({"algorithm_quizzes": ["quiz : algorithm_completed"]})
        assert rules == {("quiz", "algorithm_completed"): "algorithm_quizzes"}

    def test_unknown_counter(self):
        with pytest.raises(ValueError, match="Unknown counter"):
            parse_rules({"downloads": ["quiz:quiz_completed"]})

    def test_malformed_entry(self):
        with pytest.raises(ValueError, match="category:action"):
            parse_rules({"quizzes_generated": ["quiz_completed"]})

    def test_entries_must_be_list(self):
        with pytest.raises(ValueError, match="must be a list"):
            parse_rules({"quizzes_generated": "quiz:quiz_completed"})

    def test_pair_mapped_twice(self):
        with pytest.raises(ValueError, match="maps to both"):
            parse_rules(
                {
                    "quizzes_generated": ["quiz:quiz_completed"],
                    "algorithm_quizzes": ["quiz:quiz_completed"],
                }
            )

    def test_not_a_mapping(self):
        with pytest.raises(ValueError):
            parse_rules(["quiz:quiz_completed"])


class TestLoadRules:
    """Tests for loading rules from YAML."""

    def test_defaults_without_path(self):
        rules = load_rules(None)
        assert rules == DEFAULT_RULES
        assert rules is not DEFAULT_RULES

    def test_loads_yaml(self, tmp_path):
        path = tmp_path / "rules.yaml"
        path.write_text("quizzes_generated:\n  - quiz:quiz_completed\n")

        rules = load_rules(path)

        assert rules == {("quiz", "quiz_completed"): "quizzes_generated"}

    def test_empty_file(self, tmp_path):
        path = tmp_path / "rules.yaml"
        path.write_text("")
        assert load_rules(path) == {}

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "rules.yaml"
        path.write_text("quizzes_generated: [unclosed\n")
        with pytest.raises(ValueError, match="Invalid rules file"):
            load_rules(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_rules(tmp_path / "missing.yaml")
