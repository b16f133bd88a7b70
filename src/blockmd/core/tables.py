"""Database block to GFM table conversion"""

from datetime import datetime, timezone
from typing import Any, Optional

from loguru import logger

from blockmd.core.deltas import plain_text
from blockmd.core.mdast import Table, TableCell, TableRow, Text
from blockmd.core.models import BlockSnapshot, Cell, Column, DatabaseProps, read_deltas


DATE_FORMAT = "%Y-%m-%d"
RAW_COLUMN_TYPES = {"link", "progress", "number", "checkbox"}


def _js_text(value: Any) -> Optional[str]:
    """Stringify a stored scalar the way the document editor displays it."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _option_value(column: Column, option_id: Any) -> Optional[str]:
    for opt in column.data.options:
        if opt.id == option_id:
            return opt.value
    return None


def _format_date(value: Any) -> str:
    """Epoch milliseconds to yyyy-MM-dd (UTC)."""
    return datetime.fromtimestamp(float(value) / 1000, tz=timezone.utc).strftime(DATE_FORMAT)


def cell_text(column: Column, cell: Optional[Cell], row: BlockSnapshot) -> Optional[str]:
    """Resolve the display text of one cell by column type; None renders as an empty cell."""
    if cell is None and column.type != "title":
        return ""

    if column.type in RAW_COLUMN_TYPES:
        return _js_text(cell.value)
    if column.type == "rich-text":
        return plain_text(read_deltas(cell.value))
    if column.type == "title":
        return plain_text(read_deltas(row.props.get("text")))
    if column.type == "date":
        if cell.value is None:
            return ""
        try:
            return _format_date(cell.value)
        except (TypeError, ValueError, OverflowError, OSError):
            logger.warning(f"Unreadable date {cell.value!r} in row {row.id!r}, column {column.id!r}")
            return ""
    if column.type == "select":
        value = _option_value(column, cell.value)
        return value if value is not None else ""
    if column.type == "multi-select":
        values = cell.value if isinstance(cell.value, list) else []
        resolved = (_option_value(column, v) for v in values)
        return ",".join(v for v in resolved if v)
    return ""


def database_to_table(block: BlockSnapshot, props: DatabaseProps) -> Table:
    """Build a table node: header row of column names, one body row per child row block."""
    header = TableRow()
    for column in props.columns:
        header.children.append(TableCell(children=[Text(value=column.name)]))

    rows = [header]
    for row in block.children:
        row_cells = props.cells.get(row.id, {})
        body = TableRow()
        for column in props.columns:
            value = cell_text(column, row_cells.get(column.id), row)
            body.children.append(TableCell(children=[Text(value=value)]))
        rows.append(body)

    return Table(children=rows)
