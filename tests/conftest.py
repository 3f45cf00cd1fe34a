"""Shared test fixtures for fdbtop."""

import json
from typing import Any

import pytest


def make_process(
    address: str,
    roles: list[str] | None = None,
    class_type: str = "unset",
    cpu: float | None = None,
    mem_used: float | None = None,
    mem_limit: float | None = None,
    reads: float | None = None,
    writes: float | None = None,
    sent: float | None = None,
    received: float | None = None,
) -> dict[str, Any]:
    """Build one ``cluster.processes`` entry, leaving out metrics that are None."""
    entry: dict[str, Any] = {
        "address": address,
        "class_type": class_type,
        "roles": [{"role": role, "id": f"{role}-{i}"} for i, role in enumerate(roles or [])],
    }
    if cpu is not None:
        entry["cpu"] = {"usage_cores": cpu}
    if mem_used is not None or mem_limit is not None:
        entry["memory"] = {}
        if mem_used is not None:
            entry["memory"]["used_bytes"] = mem_used
        if mem_limit is not None:
            entry["memory"]["limit_bytes"] = mem_limit
    if reads is not None and writes is not None:
        entry["disk"] = {"reads": {"hz": reads}, "writes": {"hz": writes}}
    if sent is not None and received is not None:
        entry["network"] = {"megabits_sent": {"hz": sent}, "megabits_received": {"hz": received}}
    return entry


def make_status(*processes: dict[str, Any]) -> str:
    """Serialize processes into a ``status json`` document."""
    return json.dumps(
        {
            "client": {"database_status": {"available": True}},
            "cluster": {"processes": {f"pid{i}": process for i, process in enumerate(processes)}},
        }
    )


@pytest.fixture
def two_process_status() -> str:
    """Two processes on one machine: a storage server and a log server."""
    return make_status(
        make_process("10.0.0.1:4000", roles=["storage"], class_type="storage", cpu=0.5),
        make_process("10.0.0.1:4001", roles=["log"], class_type="transaction", cpu=0.2),
    )


@pytest.fixture
def cluster_status() -> str:
    """A small three-machine cluster with a mix of roles and missing metrics."""
    return make_status(
        make_process(
            "10.0.0.2:4500",
            roles=["storage"],
            class_type="storage",
            cpu=0.31,
            mem_used=2e9,
            mem_limit=8e9,
            reads=120.4,
            writes=80.2,
            sent=3.2,
            received=4.1,
        ),
        make_process(
            "10.0.0.1:4501",
            roles=["proxy", "master"],
            class_type="stateless",
            cpu=0.12,
            mem_used=1e9,
            mem_limit=8e9,
            reads=5,
            writes=5,
            sent=10.0,
            received=9.0,
        ),
        make_process(
            "10.0.0.1:4500",
            roles=["log"],
            class_type="transaction",
            cpu=0.77,
            mem_used=4e9,
            reads=300,
            writes=900,
            sent=20.4,
            received=1.0,
        ),
        make_process("10.0.0.3:4500", roles=["storage"], class_type=""),
    )
