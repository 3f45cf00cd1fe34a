"""Status snapshot parsing and projection into process records."""

import json
import logging
import math
from collections.abc import Iterable, Mapping
from typing import Any

from fdbtop.errors import MalformedAddress, MalformedSnapshot
from fdbtop.models import Metric, Missing, ProcessRecord, RawProcess

logger = logging.getLogger(__name__)

# Roles whose processes do disk I/O worth showing by default.
STATEFUL_ROLES = frozenset({"log", "storage"})


def _number(data: Mapping[str, Any], *path: str) -> float | None:
    """Follow ``path`` through nested mappings and return a number, or None."""
    value: Any = data
    for key in path:
        if not isinstance(value, Mapping):
            return None
        value = value.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def _roles(entry: Mapping[str, Any]) -> tuple[str, ...]:
    roles = entry.get("roles")
    if not isinstance(roles, list):
        return ()
    return tuple(
        role["role"] for role in roles if isinstance(role, Mapping) and isinstance(role.get("role"), str)
    )


def _raw_process(process_id: str, entry: Any) -> RawProcess:
    if not isinstance(entry, Mapping):
        raise MalformedSnapshot(f"Process entry {process_id!r} is not an object")
    address = entry.get("address")
    if not isinstance(address, str):
        raise MalformedSnapshot(f"Process entry {process_id!r} has no address")
    class_type = entry.get("class_type")

    return RawProcess(
        address=address,
        class_type=class_type if isinstance(class_type, str) else "",
        roles=_roles(entry),
        cpu_usage_cores=_number(entry, "cpu", "usage_cores"),
        memory_used_bytes=_number(entry, "memory", "used_bytes"),
        memory_limit_bytes=_number(entry, "memory", "limit_bytes"),
        disk_reads_hz=_number(entry, "disk", "reads", "hz"),
        disk_writes_hz=_number(entry, "disk", "writes", "hz"),
        megabits_sent_hz=_number(entry, "network", "megabits_sent", "hz"),
        megabits_received_hz=_number(entry, "network", "megabits_received", "hz"),
    )


def parse_snapshot(text: str) -> dict[str, RawProcess]:
    """
    Parse ``status json`` output into validated process entries.

    Args:
        text: The status document as produced by ``fdbcli --exec "status json"``.

    Returns:
        Mapping of process id to its raw entry, in document order.

    Raises:
        MalformedSnapshot: If the text is not JSON or lacks ``cluster.processes``.
    """
    try:
        status = json.loads(text)
    except ValueError as e:
        raise MalformedSnapshot(f"Status is not valid JSON: {e}") from e
    except RecursionError as e:
        raise MalformedSnapshot("Status is nested too deeply to parse") from e

    cluster = status.get("cluster") if isinstance(status, Mapping) else None
    processes = cluster.get("processes") if isinstance(cluster, Mapping) else None
    if not isinstance(processes, Mapping):
        raise MalformedSnapshot("Status has no cluster.processes object")

    return {process_id: _raw_process(process_id, entry) for process_id, entry in processes.items()}


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounding up (12.5 -> 13)."""
    return math.floor(value + 0.5)


def split_address(address: str) -> tuple[str, str]:
    """
    Split ``host:port`` into its parts.

    The port keeps any suffix (``4500:tls``). Bracketed IPv6 hosts keep
    their brackets.

    Raises:
        MalformedAddress: If there is no separator.
    """
    if address.startswith("["):
        host, sep, port = address.partition("]:")
        if sep:
            return host + "]", port
        raise MalformedAddress(address)
    host, sep, port = address.partition(":")
    if not sep:
        raise MalformedAddress(address)
    return host, port


def _cpu_percent(raw: RawProcess) -> Metric:
    if raw.cpu_usage_cores is None:
        return Missing.UNKNOWN
    return round_half_up(raw.cpu_usage_cores * 100)


def _mem_percent(raw: RawProcess) -> Metric:
    if raw.memory_used_bytes is None or not raw.memory_limit_bytes:
        return Missing.UNKNOWN
    return round_half_up(100 * raw.memory_used_bytes / raw.memory_limit_bytes)


def _iops(raw: RawProcess, show_stateless_iops: bool, divisor: int) -> Metric:
    if not show_stateless_iops and STATEFUL_ROLES.isdisjoint(raw.roles):
        return Missing.NOT_APPLICABLE
    if raw.disk_reads_hz is None or raw.disk_writes_hz is None:
        return Missing.UNKNOWN
    return round_half_up((raw.disk_reads_hz + raw.disk_writes_hz) / divisor)


def _net(raw: RawProcess) -> Metric:
    if raw.megabits_sent_hz is None or raw.megabits_received_hz is None:
        return Missing.UNKNOWN
    return round_half_up(raw.megabits_sent_hz + raw.megabits_received_hz)


def project_record(raw: RawProcess, show_stateless_iops: bool = False, iops_divisor: int = 1) -> ProcessRecord:
    """
    Build the display record for one process.

    Raises:
        MalformedAddress: If the address has no port separator.
    """
    host, port = split_address(raw.address)
    return ProcessRecord(
        host=host,
        port=port,
        cpu_percent=_cpu_percent(raw),
        mem_percent=_mem_percent(raw),
        iops=_iops(raw, show_stateless_iops, iops_divisor),
        net=_net(raw),
        class_tag=raw.class_type,
        roles=",".join(sorted(raw.roles)),
    )


def project_records(
    processes: Iterable[RawProcess],
    show_stateless_iops: bool = False,
    iops_divisor: int = 1,
) -> list[ProcessRecord]:
    """
    Build display records for every process, in input order.

    Entries with a malformed address are skipped and logged; the rest of the
    snapshot is still shown.
    """
    records: list[ProcessRecord] = []
    for raw in processes:
        try:
            records.append(project_record(raw, show_stateless_iops, iops_divisor))
        except MalformedAddress as e:
            logger.warning("Skipping process: %s", e)
    return records
