"""Sort modes for the process table and the controller that selects one."""

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass

from fdbtop.models import Missing, ProcessRecord

# Empty strings compare as this so they sort after every real value.
EMPTY_LAST = "\uffff"

# Sentinel order behind all numbers in a numeric column.
_MISSING_RANK = {Missing.UNKNOWN: 1, Missing.NOT_APPLICABLE: 2}


@dataclass(slots=True, frozen=True)
class SortSpec:
    """A selectable sort mode for the process table."""

    name: str  # column label
    fields: tuple[str, ...]  # ProcessRecord attributes, most significant first
    descending: bool = False
    numeric: bool = False
    group: bool = False  # blank repeated hosts and delimit host groups


SORT_SPECS: tuple[SortSpec, ...] = (
    SortSpec("host", ("host", "port"), group=True),
    SortSpec("port", ("port",)),
    SortSpec("cpu%", ("cpu_percent",), descending=True, numeric=True),
    SortSpec("mem%", ("mem_percent",), descending=True, numeric=True),
    SortSpec("iops", ("iops",), descending=True, numeric=True),
    SortSpec("net", ("net",), descending=True, numeric=True),
    SortSpec("class", ("class_tag",)),
    SortSpec("roles", ("roles",)),
)


class SortController:
    """Cursor over a fixed sequence of sort modes, wrapping in both directions."""

    def __init__(self, specs: Sequence[SortSpec] = SORT_SPECS, index: int = 0) -> None:
        if not specs:
            raise ValueError("At least one sort spec is required")
        self._specs = tuple(specs)
        self._index = index % len(self._specs)

    @property
    def index(self) -> int:
        """Get the current cursor position."""
        return self._index

    @property
    def specs(self) -> tuple[SortSpec, ...]:
        return self._specs

    def active(self) -> SortSpec:
        """Return the sort mode under the cursor."""
        return self._specs[self._index]

    def advance(self) -> SortSpec:
        """Move to the next sort mode and return it."""
        self._index = (self._index + 1) % len(self._specs)
        return self.active()

    def retreat(self) -> SortSpec:
        """Move to the previous sort mode and return it."""
        self._index = (self._index - 1) % len(self._specs)
        return self.active()


def _numeric_key(field: str, descending: bool) -> Callable[[ProcessRecord], tuple[int, int]]:
    def key(record: ProcessRecord) -> tuple[int, int]:
        value = getattr(record, field)
        if isinstance(value, Missing):
            return (_MISSING_RANK[value], 0)
        return (0, -value if descending else value)

    return key


def _text_key(fields: tuple[str, ...]) -> Callable[[ProcessRecord], tuple[str, ...]]:
    def key(record: ProcessRecord) -> tuple[str, ...]:
        return tuple(getattr(record, field) or EMPTY_LAST for field in fields)

    return key


def order_records(records: Iterable[ProcessRecord], spec: SortSpec) -> list[ProcessRecord]:
    """
    Order records for display under ``spec``.

    Numeric columns keep unknown and not-applicable values at the end
    whatever the direction. Empty strings sort after all other text. The
    sort is stable, so ties keep their input order between refreshes.
    """
    if spec.numeric:
        return sorted(records, key=_numeric_key(spec.fields[0], spec.descending))
    return sorted(records, key=_text_key(spec.fields), reverse=spec.descending)
