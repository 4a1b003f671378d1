"""Generic editable price table model.

Holds an editable copy of the incoming records, a transient new-entry row
seeded from schema defaults, and the rendering decisions (input widgets and
display cells) the templates draw from. Persisting is always delegated to
the owner's callbacks; the table never mutates the source dataset.
"""

from __future__ import annotations

import copy
import inspect
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Mapping, Optional, Union

import structlog

from offsetpanel.models import ColumnSchema, PriceRecord
from offsetpanel.tables.nested import get_nested_value, set_nested_value

logger = structlog.get_logger(__name__)

_DIGITS = str.maketrans("۰۱۲۳۴۵۶۷۸۹٠١٢٣٤٥٦٧٨٩٫", "01234567890123456789.")

Callback = Callable[..., Union[Any, Awaitable[Any]]]


@dataclass
class InputWidget:
    """Edit-mode control for one cell."""

    kind: str  # select, number, text
    name: str
    value: Any
    options: list[dict[str, Any]] = field(default_factory=list)
    min: Optional[float] = None
    max: Optional[float] = None
    step: Optional[float] = None
    multiline: bool = False
    rows: int = 1
    disabled: bool = False


@dataclass
class DisplayCell:
    """Read-only rendering of one cell."""

    text: str
    badge: bool = False


def coerce_number(value: Any) -> Any:
    """Parse a number typed into a form; Persian and Arabic digits accepted.

    Blank input stays ``""`` and unparseable input is returned unchanged so
    validation can flag it.
    """
    if isinstance(value, bool) or value is None:
        return value
    if isinstance(value, (int, float)):
        return value
    text = str(value).strip().translate(_DIGITS).replace(",", "")
    if text == "":
        return ""
    try:
        number = float(text)
    except ValueError:
        return value
    return int(number) if number.is_integer() and "." not in text else number


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def input_widget(
    column: ColumnSchema, value: Any, name: str = "", disabled: bool = False
) -> InputWidget:
    """Pick the edit control for ``column``; unknown types are free text."""
    if column.type == "select":
        return InputWidget(
            kind="select",
            name=name,
            value=_as_text(value),
            options=[
                {"value": _as_text(option.value), "label": option.label}
                for option in column.options or []
            ],
            disabled=disabled,
        )
    if column.type == "number":
        return InputWidget(
            kind="number",
            name=name,
            value=_as_text(value),
            min=column.min,
            max=column.max,
            step=column.step or 1,
            disabled=disabled,
        )
    return InputWidget(
        kind="text",
        name=name,
        value=_as_text(value),
        multiline=column.multiline,
        rows=column.rows or 1,
        disabled=disabled,
    )


def display_value(column: ColumnSchema, value: Any, row: PriceRecord) -> DisplayCell:
    """Render a cell for read-only mode.

    A column formatter wins and receives the raw nested value plus the row.
    """
    if column.formatter is not None:
        return DisplayCell(text=_as_text(column.formatter(value, row)))

    if column.type == "select":
        for option in column.options or []:
            if option.value == value or _as_text(option.value) == _as_text(value):
                return DisplayCell(text=option.label, badge=True)
        return DisplayCell(text=_as_text(value))

    if column.type == "number" and column.suffix and value != "":
        return DisplayCell(text=f"{value} {column.suffix}")

    return DisplayCell(text=_as_text(value))


class EditableTable:
    """Editable copy of one price table.

    Callbacks (sync or async) receive:
    - ``on_create(entry)``: the new entry; a falsy return keeps the entry
    - ``on_update(entry_id, data)``
    - ``on_delete(entry_id)``
    - ``on_bulk_save(rows)``: the whole edited set at once
    """

    def __init__(
        self,
        schema: list[ColumnSchema],
        rows: list[PriceRecord] | None = None,
        *,
        on_create: Callback | None = None,
        on_update: Callback | None = None,
        on_delete: Callback | None = None,
        on_bulk_save: Callback | None = None,
    ):
        self.schema = list(schema)
        self.rows: list[PriceRecord] = []
        self.on_create = on_create
        self.on_update = on_update
        self.on_delete = on_delete
        self.on_bulk_save = on_bulk_save
        self.new_entry: dict[str, Any] = self.default_entry()
        self.load(rows or [])

    @property
    def columns(self) -> dict[str, ColumnSchema]:
        return {column.key: column for column in self.schema}

    def default_entry(self) -> dict[str, Any]:
        entry: dict[str, Any] = {}
        for column in self.schema:
            if column.editable:
                default = column.default_value
                set_nested_value(entry, column.key, "" if default is None else default)
        return entry

    def set_schema(self, schema: list[ColumnSchema]) -> None:
        self.schema = list(schema)
        self.reset_new_entry()

    def load(self, rows: list[PriceRecord]) -> None:
        """Replace the editable copy with a fresh copy of ``rows``."""
        self.rows = copy.deepcopy(list(rows))

    def reset_new_entry(self) -> None:
        self.new_entry = self.default_entry()

    def _coerce(self, column: ColumnSchema, value: Any) -> Any:
        if column.type == "number":
            return coerce_number(value)
        return value

    def edit_cell(self, row_index: int, key: str, value: Any) -> bool:
        """Write one cell of the editable copy. Non-editable cells are ignored."""
        column = self.columns.get(key)
        if column is None or not column.editable:
            return False
        if not 0 <= row_index < len(self.rows):
            raise IndexError(f"row {row_index} out of range")
        set_nested_value(self.rows[row_index], key, self._coerce(column, value))
        return True

    def update_new_entry(self, key: str, value: Any) -> bool:
        column = self.columns.get(key)
        if column is None or not column.editable:
            return False
        set_nested_value(self.new_entry, key, self._coerce(column, value))
        return True

    def apply_form(self, form: Mapping[str, Any]) -> int:
        """Apply ``cell-{id}-{key}`` and ``new-{key}`` form fields.

        Cells are matched to rows by record id, so a refetched list in a
        different order still receives the right values. Fields for ids no
        longer present are dropped. Returns the number of fields applied.
        """
        applied = 0
        for name, value in form.items():
            if name.startswith("cell-"):
                entry_id, _, key = name[len("cell-"):].rpartition("-")
                index = self.row_index(entry_id) if entry_id else None
                if index is None:
                    logger.debug("stale_cell_dropped", field=name)
                    continue
                applied += self.edit_cell(index, key, value)
            elif name.startswith("new-"):
                applied += self.update_new_entry(name[len("new-"):], value)
        return applied

    def rows_for_save(self) -> list[PriceRecord]:
        return copy.deepcopy(self.rows)

    def row_index(self, entry_id: Any) -> int | None:
        for index, row in enumerate(self.rows):
            if str(row.get("id")) == str(entry_id):
                return index
        return None

    def cell_value(self, row: PriceRecord, column: ColumnSchema) -> Any:
        return get_nested_value(row, column.key)

    def cell_widget(self, row_index: int, column: ColumnSchema) -> InputWidget:
        row = self.rows[row_index]
        return input_widget(
            column,
            self.cell_value(row, column),
            name=f"cell-{row.get('id')}-{column.key}",
        )

    def new_entry_widget(self, column: ColumnSchema) -> InputWidget:
        return input_widget(
            column, get_nested_value(self.new_entry, column.key), name=f"new-{column.key}"
        )

    def cell_display(self, row: PriceRecord, column: ColumnSchema) -> DisplayCell:
        return display_value(column, self.cell_value(row, column), row)

    async def _call(self, callback: Callback | None, *args) -> Any:
        if callback is None:
            raise RuntimeError("table action has no handler")
        result = callback(*args)
        if inspect.isawaitable(result):
            result = await result
        return result

    async def create(self) -> bool:
        """Submit the new entry; it is reset to defaults only on success."""
        ok = await self._call(self.on_create, copy.deepcopy(self.new_entry))
        if ok:
            self.reset_new_entry()
        else:
            logger.debug("new_entry_kept", reason="create_failed")
        return bool(ok)

    async def update(self, row_index: int) -> Any:
        row = self.rows[row_index]
        return await self._call(self.on_update, row.get("id"), copy.deepcopy(row))

    async def delete(self, entry_id: Any) -> Any:
        return await self._call(self.on_delete, entry_id)

    async def save_all(self) -> Any:
        return await self._call(self.on_bulk_save, self.rows_for_save())
