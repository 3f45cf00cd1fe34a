"""Running fdbcli to fetch a cluster status snapshot."""

import logging
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass, field

from fdbtop.errors import FetchFailure

logger = logging.getLogger(__name__)


def _text(output: str | bytes | None) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode(errors="replace")
    return output


@dataclass(slots=True)
class StatusCommand:
    """The ``fdbcli --exec "status json"`` invocation and how long to wait for it."""

    fdbcli: str = "fdbcli"
    status_timeout: int = 15
    fetch_timeout: float = 20.0
    extra_args: Sequence[str] = field(default_factory=tuple)

    @property
    def argv(self) -> list[str]:
        return [
            self.fdbcli,
            "--exec",
            "status json",
            f"--timeout={self.status_timeout}",
            *self.extra_args,
        ]

    def __call__(self) -> str:
        """
        Run the command and return its standard output.

        Raises:
            FetchFailure: If the command cannot start, exits non-zero, or
                times out. Any output captured so far is attached.
        """
        try:
            result = subprocess.run(
                self.argv,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.fetch_timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            logger.warning("Status command timed out after %ss", self.fetch_timeout)
            raise FetchFailure(
                f"{self.fdbcli} timed out after {self.fetch_timeout:g}s",
                _text(e.stdout) + _text(e.stderr),
            ) from e
        except OSError as e:
            logger.warning("Status command could not start: %s", e)
            raise FetchFailure(f"Could not run {self.fdbcli}: {e}") from e

        if result.returncode != 0:
            logger.warning("Status command exited with %d", result.returncode)
            raise FetchFailure(
                f"{self.fdbcli} exited with status {result.returncode}",
                result.stdout + result.stderr,
            )
        return result.stdout
