"""Data models for fdbtop."""

from dataclasses import dataclass
from enum import Enum


class Missing(Enum):
    """Placeholder for a metric that cannot be shown as a number."""

    UNKNOWN = "???"
    NOT_APPLICABLE = "-"

    def __str__(self) -> str:
        return self.value


Metric = int | Missing


@dataclass(slots=True, frozen=True)
class RawProcess:
    """Validated process entry from a status snapshot.

    Metric fields are None when the snapshot does not carry them.
    """

    address: str
    class_type: str = ""
    roles: tuple[str, ...] = ()
    cpu_usage_cores: float | None = None
    memory_used_bytes: float | None = None
    memory_limit_bytes: float | None = None
    disk_reads_hz: float | None = None
    disk_writes_hz: float | None = None
    megabits_sent_hz: float | None = None
    megabits_received_hz: float | None = None


@dataclass(slots=True, frozen=True)
class ProcessRecord:
    """Immutable, display-ready view of one worker process."""

    host: str
    port: str
    cpu_percent: Metric
    mem_percent: Metric
    iops: Metric  # NOT_APPLICABLE for stateless roles unless configured
    net: Metric  # Mbit/s sent + received
    class_tag: str
    roles: str  # sorted, comma separated
