"""Aggregation module for usage statistics.

- counts: pure counters with test-account exclusion
- rules: (category, action) -> counter configuration
- display: human-rounded values for public copy
- Forbidden: store reads, file writes
"""
