"""Tests for bm_common.id_generator."""

import pytest

from src.bm_common.id_generator import SnowflakeIdGenerator, generate_id


class TestSnowflake:
    def test_ids_are_unique_and_increasing(self) -> None:
        gen = SnowflakeIdGenerator(machine_id=1)
        ids = [int(gen.next_id()) for _ in range(2000)]
        assert len(set(ids)) == len(ids)
        assert ids == sorted(ids)

    def test_generate_id_is_decimal_string(self) -> None:
        assert generate_id().isdigit()

    def test_machine_id_range(self) -> None:
        with pytest.raises(ValueError):
            SnowflakeIdGenerator(machine_id=1024)

    def test_machine_id_is_embedded(self) -> None:
        gen = SnowflakeIdGenerator(machine_id=37)
        assert (int(gen.next_id()) >> 12) & 0x3FF == 37
