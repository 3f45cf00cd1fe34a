"""Tests for fdbtop data models."""

import pytest

from fdbtop.models import Missing, ProcessRecord, RawProcess


def make_record(**overrides) -> ProcessRecord:
    fields = {
        "host": "10.0.0.1",
        "port": "4500",
        "cpu_percent": 50,
        "mem_percent": 25,
        "iops": 1000,
        "net": 12,
        "class_tag": "storage",
        "roles": "storage",
    }
    fields.update(overrides)
    return ProcessRecord(**fields)


def test_process_record_creation():
    """Test ProcessRecord dataclass creation."""
    record = make_record()

    assert record.host == "10.0.0.1"
    assert record.port == "4500"
    assert record.cpu_percent == 50
    assert record.mem_percent == 25
    assert record.iops == 1000
    assert record.net == 12
    assert record.class_tag == "storage"
    assert record.roles == "storage"


def test_process_record_is_frozen():
    """Test that ProcessRecord is immutable (frozen)."""
    record = make_record()

    with pytest.raises(AttributeError):
        record.cpu_percent = 99


def test_process_record_uses_slots():
    """Test that ProcessRecord uses __slots__."""
    assert not hasattr(make_record(), "__dict__")


def test_raw_process_defaults():
    """RawProcess only requires an address; metrics default to missing."""
    raw = RawProcess(address="10.0.0.1:4500")

    assert raw.class_type == ""
    assert raw.roles == ()
    assert raw.cpu_usage_cores is None
    assert raw.memory_limit_bytes is None
    assert raw.megabits_received_hz is None


class TestMissing:
    """Tests for the Missing sentinel."""

    def test_display_text(self):
        """Unknown shows as ??? and not-applicable as a dash."""
        assert str(Missing.UNKNOWN) == "???"
        assert str(Missing.NOT_APPLICABLE) == "-"

    def test_sentinels_are_distinct(self):
        """The two sentinels never compare equal to each other or to numbers."""
        assert Missing.UNKNOWN != Missing.NOT_APPLICABLE
        assert make_record(iops=Missing.UNKNOWN) != make_record(iops=Missing.NOT_APPLICABLE)
        assert Missing.UNKNOWN != 0
