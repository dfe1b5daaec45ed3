"""Tests for bt_common.id_generator and bt_common.datetime_utils."""

from datetime import UTC, datetime, timedelta

import pytest

from src.bt_common.datetime_utils import days_from_now, utc_now
from src.bt_common.id_generator import SnowflakeIdGenerator, generate_id


class TestSnowflakeIdGenerator:
    def test_returns_numeric_str(self) -> None:
        result = SnowflakeIdGenerator(machine_id=1).next_id()
        assert isinstance(result, str)
        assert result.isdigit()

    def test_unique_ids(self) -> None:
        gen = SnowflakeIdGenerator(machine_id=1)
        ids = {gen.next_id() for _ in range(5000)}
        assert len(ids) == 5000

    def test_monotonically_increasing(self) -> None:
        gen = SnowflakeIdGenerator(machine_id=1)
        prev = int(gen.next_id())
        for _ in range(100):
            current = int(gen.next_id())
            assert current > prev
            prev = current

    def test_machine_ids_do_not_collide(self) -> None:
        a = {SnowflakeIdGenerator(machine_id=1).next_id() for _ in range(10)}
        b = {SnowflakeIdGenerator(machine_id=2).next_id() for _ in range(10)}
        assert not a & b

    def test_machine_id_out_of_range(self) -> None:
        with pytest.raises(ValueError):
            SnowflakeIdGenerator(machine_id=1024)

    def test_module_helper(self) -> None:
        assert int(generate_id()) < int(generate_id())


class TestDatetimeUtils:
    def test_utc_now_is_aware_utc(self) -> None:
        now = utc_now()
        assert isinstance(now, datetime)
        assert now.tzinfo == UTC

    def test_days_from_now(self) -> None:
        delta = days_from_now(7) - utc_now()
        assert timedelta(days=6, hours=23) < delta <= timedelta(days=7)
