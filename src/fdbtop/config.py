"""Configuration for fdbtop."""

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import tomlkit


@dataclass
class Config:
    """Runtime settings. CLI flags override values loaded from the config file."""

    interval: float = 1.0  # Seconds between refreshes
    show_stateless_iops: bool = False  # Show I/O for roles other than log and storage
    iops_divisor: int = 1  # 1000 shows kilo-IOPS
    fdbcli: str = "fdbcli"
    status_timeout: int = 15  # Passed to fdbcli as --timeout
    fetch_timeout: float = 20.0  # Subprocess timeout for one status fetch
    fdbcli_args: list[str] = field(default_factory=list)

    @staticmethod
    def default_path() -> Path:
        """Path to the per-user config file."""
        return Path.home() / ".config" / "fdbtop" / "config.toml"

    def save(self, path: Path | None = None) -> None:
        """Save config to TOML file."""
        path = path or self.default_path()
        path.parent.mkdir(parents=True, exist_ok=True)

        doc = tomlkit.document()
        for f in fields(self):
            doc.add(f.name, getattr(self, f.name))
        path.write_text(tomlkit.dumps(doc))

    @classmethod
    def load(cls, path: Path | None = None) -> "Config":
        """Load config from TOML file, returning defaults for missing values.

        Raises:
            ValueError: If the file cannot be parsed or a value has the wrong type.
        """
        path = path or cls.default_path()
        if not path.exists():
            return cls()

        try:
            with open(path) as f:
                data = tomlkit.load(f).unwrap()
        except tomlkit.exceptions.TOMLKitError as e:
            raise ValueError(f"Failed to parse config file {path}: {e}") from e

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Config":
        """Build a config from plain values, validating each known key."""
        defaults = cls()
        unknown = set(data) - {f.name for f in fields(cls)}
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")

        interval = data.get("interval", defaults.interval)
        if isinstance(interval, bool) or not isinstance(interval, (int, float)) or interval <= 0:
            raise ValueError(f"Invalid interval: {interval!r}. Must be a positive number")

        show_stateless_iops = data.get("show_stateless_iops", defaults.show_stateless_iops)
        if not isinstance(show_stateless_iops, bool):
            raise ValueError(f"Invalid show_stateless_iops: {show_stateless_iops!r}. Must be true or false")

        iops_divisor = data.get("iops_divisor", defaults.iops_divisor)
        if isinstance(iops_divisor, bool) or not isinstance(iops_divisor, int) or iops_divisor < 1:
            raise ValueError(f"Invalid iops_divisor: {iops_divisor!r}. Must be a positive integer")

        fdbcli = data.get("fdbcli", defaults.fdbcli)
        if not isinstance(fdbcli, str) or not fdbcli:
            raise ValueError(f"Invalid fdbcli: {fdbcli!r}. Must be a command name or path")

        status_timeout = data.get("status_timeout", defaults.status_timeout)
        if isinstance(status_timeout, bool) or not isinstance(status_timeout, int) or status_timeout < 1:
            raise ValueError(f"Invalid status_timeout: {status_timeout!r}. Must be a positive integer")

        fetch_timeout = data.get("fetch_timeout", defaults.fetch_timeout)
        if isinstance(fetch_timeout, bool) or not isinstance(fetch_timeout, (int, float)) or fetch_timeout <= 0:
            raise ValueError(f"Invalid fetch_timeout: {fetch_timeout!r}. Must be a positive number")

        fdbcli_args = data.get("fdbcli_args", defaults.fdbcli_args)
        if not isinstance(fdbcli_args, list) or not all(isinstance(arg, str) for arg in fdbcli_args):
            raise ValueError(f"Invalid fdbcli_args: {fdbcli_args!r}. Must be a list of strings")

        return cls(
            interval=float(interval),
            show_stateless_iops=show_stateless_iops,
            iops_divisor=iops_divisor,
            fdbcli=fdbcli,
            status_timeout=status_timeout,
            fetch_timeout=float(fetch_timeout),
            fdbcli_args=list(fdbcli_args),
        )
