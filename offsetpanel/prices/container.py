"""Price table container: filters, fetching and mutations for one category.

The container owns the fetched dataset and the active schema. All writes go
through the REST API and are followed by a refetch; local rows are never
patched in place.
"""

from __future__ import annotations

from typing import Any

import structlog

from offsetpanel.api.errors import ApiError, ErrorType
from offsetpanel.api.services import CooperatorService, PriceService
from offsetpanel.categories import category_for
from offsetpanel.config import get_config
from offsetpanel.i18n import translate
from offsetpanel.models import ColumnSchema, FilterState, PriceRecord, TableStatus
from offsetpanel.prices.validation import (
    PriceValidationError,
    check_table_rows,
    validate_table_entry,
)
from offsetpanel.tables.editable import EditableTable
from offsetpanel.tables.schema import default_schema, infer_schema

logger = structlog.get_logger(__name__)

# Selector names, also used as i18n key segments
_SELECTORS = ("cooperator", "range", "box_type", "bindery_type")


def error_message(error: BaseException) -> str:
    if isinstance(error, ApiError):
        return error.message
    return str(error) or error.__class__.__name__


class PriceTableContainer:
    """State of one price category page.

    ``status`` moves ``idle -> loading -> ready | error``. A failed fetch
    keeps the previous rows and schema. Every fetch takes a new generation
    number and only the latest generation may write state.
    """

    def __init__(
        self,
        category: str,
        price_service: PriceService,
        cooperator_service: CooperatorService | None = None,
        locale: str | None = None,
        filters: FilterState | None = None,
    ):
        self.category = category
        self.meta = category_for(category)
        self.price_service = price_service
        self.cooperator_service = cooperator_service
        self.locale = locale
        self.filters = filters or FilterState()

        self.status = TableStatus.IDLE
        self.rows: list[PriceRecord] = []
        self.schema: list[ColumnSchema] = []
        self.error: str | None = None
        self.error_type: ErrorType | None = None
        self.is_editing = False
        self.generation = 0

        self.reference_lists: dict[str, list[dict[str, Any]]] = {
            name: [] for name in _SELECTORS
        }
        self.reference_errors: dict[str, str] = {}

    # Selectors

    @property
    def needs_range_selector(self) -> bool:
        return self.meta.needs_range_selector

    @property
    def needs_box_type_selector(self) -> bool:
        return self.meta.needs_box_type_selector

    @property
    def needs_bindery_type_selector(self) -> bool:
        return self.meta.needs_bindery_type_selector

    def active_selectors(self) -> list[str]:
        selectors = ["cooperator"]
        if self.needs_range_selector:
            selectors.append("range")
        if self.needs_box_type_selector:
            selectors.append("box_type")
        if self.needs_bindery_type_selector:
            selectors.append("bindery_type")
        return selectors

    @property
    def cooperator_category(self) -> str:
        return get_config().api.cooperator_category or self.category

    # Fetching

    async def set_filters(self, **changes: Any) -> None:
        """Update selected filter values and refetch once."""
        self.filters = self.filters.model_copy(update=changes)
        await self.refresh()

    async def refresh(self) -> None:
        self.generation += 1
        generation = self.generation
        self.status = TableStatus.LOADING
        self.error = None
        self.error_type = None

        logger.debug(
            "price_table_fetch",
            category=self.category,
            generation=generation,
        )
        try:
            rows = await self.price_service.get_price_table(self.category, self.filters)
        except ApiError as exc:
            if generation != self.generation:
                return
            self.status = TableStatus.ERROR
            self.error = error_message(exc)
            self.error_type = exc.error_type
            logger.warning("price_table_fetch_failed", category=self.category, error=self.error)
            return

        if generation != self.generation:
            logger.debug("price_table_fetch_superseded", category=self.category, generation=generation)
            return

        self.rows = list(rows)
        if self.rows:
            self.schema = infer_schema(self.rows[0], self.category)
        else:
            self.schema = default_schema(self.category)
        self.status = TableStatus.READY
        logger.debug(
            "price_table_loaded",
            category=self.category,
            rows=len(self.rows),
            columns=len(self.schema),
        )

    async def load_reference_lists(self) -> None:
        """Load the options of every active selector.

        A failing list records its own error and never blocks the table.
        """
        loaders = {
            "cooperator": self._load_cooperators,
            "range": lambda: self.price_service.get_circulation_ranges(self.category),
            "box_type": lambda: self.price_service.get_box_types(self.category),
            "bindery_type": lambda: self.price_service.get_bindery_types(self.category),
        }
        for name in self.active_selectors():
            try:
                self.reference_lists[name] = list(await loaders[name]() or [])
                self.reference_errors.pop(name, None)
            except ApiError as exc:
                self.reference_lists[name] = []
                self.reference_errors[name] = translate(
                    f"selector.{name}.error", self.locale, message=error_message(exc)
                )
                logger.warning("reference_list_failed", selector=name, error=str(exc))

    async def _load_cooperators(self) -> list[dict[str, Any]]:
        if self.cooperator_service is None:
            return []
        return await self.cooperator_service.get_cooperators(self.cooperator_category)

    # Mutations

    def _fail(self, action: str, error: BaseException) -> bool:
        self.error_type = getattr(error, "error_type", None)
        self.error = translate(f"error.{action}", self.locale, message=error_message(error))
        logger.warning("price_mutation_failed", category=self.category, action=action, error=str(error))
        return False

    async def create_entry(self, entry: PriceRecord) -> bool:
        """Validate and submit a new entry for the selected cooperator."""
        try:
            data = validate_table_entry(self.category, entry, self.schema)
        except PriceValidationError as exc:
            return self._fail("validation", exc)
        data["cooperator_id"] = self.filters.cooperator
        try:
            await self.price_service.create_price_entry(self.category, data)
        except ApiError as exc:
            return self._fail("create", exc)
        await self.refresh()
        return True

    async def update_entry(self, entry_id: Any, data: PriceRecord) -> bool:
        try:
            check_table_rows([data], self.schema)
        except PriceValidationError as exc:
            return self._fail("validation", exc)
        try:
            await self.price_service.update_price_entry(self.category, entry_id, data)
        except ApiError as exc:
            return self._fail("update", exc)
        await self.refresh()
        return True

    async def delete_entry(self, entry_id: Any) -> bool:
        try:
            await self.price_service.delete_price_entry(self.category, entry_id)
        except ApiError as exc:
            return self._fail("delete", exc)
        await self.refresh()
        return True

    async def bulk_save(self, rows: list[PriceRecord]) -> bool:
        """Save the whole edited set; edit mode ends only on success."""
        try:
            check_table_rows(rows, self.schema)
        except PriceValidationError as exc:
            return self._fail("validation", exc)
        try:
            await self.price_service.bulk_update_prices(self.category, rows)
        except ApiError as exc:
            return self._fail("bulk_save", exc)
        self.is_editing = False
        await self.refresh()
        return True

    def toggle_editing(self) -> None:
        self.is_editing = not self.is_editing

    def make_table(self) -> EditableTable:
        """An editable table over the current rows wired to this container."""
        return EditableTable(
            self.schema,
            self.rows,
            on_create=self.create_entry,
            on_update=self.update_entry,
            on_delete=self.delete_entry,
            on_bulk_save=self.bulk_save,
        )

    def snapshot(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "status": self.status.value,
            "error": self.error,
            "error_type": self.error_type.value if self.error_type else None,
            "is_editing": self.is_editing,
            "filters": self.filters.model_dump(),
            "selectors": self.active_selectors(),
            "schema": [column.model_dump() for column in self.schema],
            "rows": self.rows,
            "reference_errors": dict(self.reference_errors),
        }
