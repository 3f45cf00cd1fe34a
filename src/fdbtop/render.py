"""Table rendering and viewport cropping."""

from collections.abc import Sequence
from dataclasses import dataclass
from io import StringIO

from rich import box
from rich.cells import cell_len, set_cell_size
from rich.console import Console
from rich.table import Table
from rich.text import Text

from fdbtop.models import ProcessRecord
from fdbtop.sorting import SortSpec

# Column label -> ProcessRecord attribute, in display order.
COLUMNS: tuple[tuple[str, str], ...] = (
    ("host", "host"),
    ("port", "port"),
    ("cpu%", "cpu_percent"),
    ("mem%", "mem_percent"),
    ("iops", "iops"),
    ("net", "net"),
    ("class", "class_tag"),
    ("roles", "roles"),
)

# Dashes under the header and at section breaks, no edges or verticals.
DELIMITED = box.Box(
    "    \n"
    "    \n"
    " -  \n"
    "    \n"
    " -  \n"
    "    \n"
    "    \n"
    "    \n",
    ascii=True,
)

# Wide enough that the layout never wraps; cropping happens afterwards.
_LAYOUT_WIDTH = 4096


@dataclass(slots=True)
class RenderedRow:
    """One table row: label -> cell text, plus whether a new host group starts here."""

    cells: dict[str, str]
    starts_group: bool = False


def header_labels(spec: SortSpec) -> list[str]:
    """Column headers with the active sort column wrapped in angle brackets."""
    return [f"<{label}>" if label == spec.name else label for label, _ in COLUMNS]


def build_rows(records: Sequence[ProcessRecord], group: bool) -> list[RenderedRow]:
    """
    Turn ordered records into rows of cell text.

    With ``group`` set, a host repeated from the previous row is blanked and
    the first row of every host group after the first is flagged so the
    layout can draw a delimiter before it.
    """
    rows: list[RenderedRow] = []
    last_host: str | None = None
    for record in records:
        cells = {label: str(getattr(record, attr)) for label, attr in COLUMNS}
        starts_group = False
        if group:
            if record.host == last_host:
                cells["host"] = ""
            else:
                starts_group = last_host is not None
                last_host = record.host
        rows.append(RenderedRow(cells, starts_group))
    return rows


def render_table(records: Sequence[ProcessRecord], spec: SortSpec) -> str:
    """Lay out ordered records as plain text with ``spec`` marked in the header."""
    table = Table(
        box=DELIMITED,
        show_edge=False,
        pad_edge=False,
        padding=0,
        header_style="",
    )
    for label in header_labels(spec):
        table.add_column(f" {label} ", no_wrap=True)

    for row in build_rows(records, spec.group):
        if row.starts_group:
            table.add_section()
        table.add_row(*(Text(f" {value} ") for value in row.cells.values()))

    buffer = StringIO()
    console = Console(
        file=buffer,
        width=_LAYOUT_WIDTH,
        color_system=None,
        force_terminal=False,
        legacy_windows=False,
        emoji=False,
        highlight=False,
    )
    console.print(table)
    return buffer.getvalue()


def crop(text: str, width: int, height: int, pad: bool = False) -> str:
    """
    Fit text into a ``width`` x ``height`` viewport.

    Lines are cut to ``width`` terminal cells and the block to ``height``
    lines. With ``pad`` every line is filled to ``width`` and blank lines are
    added up to ``height`` so a previous frame is fully overwritten.
    """
    width = max(0, width)
    height = max(0, height)
    lines = text.split("\n")[:height]
    if pad:
        lines += [""] * (height - len(lines))
        return "\n".join(set_cell_size(line, width) for line in lines)
    return "\n".join(set_cell_size(line, width) if cell_len(line) > width else line for line in lines)
