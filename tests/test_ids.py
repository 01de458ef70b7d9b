"""Tests for id and timestamp generation."""

import re
from datetime import datetime

from home_planner.ids import _to_base36, create_id, utc_timestamp

ID_PATTERN = re.compile(r"^task_\d{13}_[0-9a-f]{16}_[0-9a-z]+$")


class TestCreateId:
    def test_format(self):
        assert ID_PATTERN.match(create_id("task"))

    def test_prefix_may_contain_underscores(self):
        assert create_id("backup_snapshot").startswith("backup_snapshot_")

    def test_unique_within_same_millisecond(self):
        ids = {create_id("task") for _ in range(1000)}
        assert len(ids) == 1000

    def test_base36(self):
        assert _to_base36(0) == "0"
        assert _to_base36(35) == "z"
        assert _to_base36(36) == "10"


class TestUtcTimestamp:
    def test_milliseconds_and_z_suffix(self):
        value = utc_timestamp()
        assert re.match(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$", value)
        assert datetime.fromisoformat(value).utcoffset().total_seconds() == 0
