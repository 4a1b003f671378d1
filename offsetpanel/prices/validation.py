"""Validation schemas for price entries.

Numeric price fields must be non-negative and enumerated fields must hold a
known choice. ``cooperator_id`` and ``category`` are attached by the table
container at submission time, so they are optional here; free-text fields
may be blank. Messages are Persian.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from offsetpanel.models import ColumnSchema
from offsetpanel.tables.editable import coerce_number
from offsetpanel.tables.nested import get_nested_value

NonNegative = Annotated[float, Field(ge=0)]

MESSAGES = {
    "greater_than_equal": "مقدار باید بزرگتر یا مساوی صفر باشد",
    "below_min": "مقدار باید حداقل {limit} باشد",
    "above_max": "مقدار نمی‌تواند بیش از {limit} باشد",
    "float_parsing": "مقدار عددی معتبر نیست",
    "float_type": "مقدار عددی معتبر نیست",
    "int_parsing": "مقدار باید عدد صحیح باشد",
    "int_from_float": "مقدار باید عدد صحیح باشد",
    "missing": "این فیلد الزامی است",
    "string_type": "مقدار متنی معتبر نیست",
}

FIELD_MESSAGES = {
    ("uv_type", "literal_error"): "نوع UV معتبر نیست",
    ("cut_type", "literal_error"): "نوع برش معتبر نیست",
    ("laminate_type", "literal_error"): "نوع لمینت معتبر نیست",
    ("binding_type", "literal_error"): "نوع صحافی معتبر نیست",
    ("color_count", "greater_than_equal"): "تعداد رنگ باید حداقل 1 باشد",
    ("color_count", "less_than_equal"): "تعداد رنگ نمی‌تواند بیش از 8 باشد",
    ("page_count_min", "greater_than_equal"): "حداقل تعداد صفحه باید 1 باشد",
    ("page_count_max", "greater_than_equal"): "حداکثر تعداد صفحه باید 1 باشد",
}


class PriceValidationError(ValueError):
    """Invalid price entry; ``field_errors`` maps field name to message."""

    def __init__(self, field_errors: dict[str, str]):
        self.field_errors = field_errors
        super().__init__("; ".join(f"{k}: {v}" for k, v in field_errors.items()))


class BasePriceSchema(BaseModel):
    model_config = ConfigDict(extra="allow", str_strip_whitespace=True)

    cooperator_id: Optional[Union[int, str]] = None
    category: Optional[str] = None


class PaperPriceSchema(BasePriceSchema):
    paper_type: str = ""
    paper_size: str = ""
    weight: NonNegative = 0
    unit_price: NonNegative = 0


class UvPriceSchema(BasePriceSchema):
    uv_type: Literal["glossy", "matte", "spot"] = "glossy"
    surface_area: NonNegative = 0
    unit_price: NonNegative = 0


class CutPriceSchema(BasePriceSchema):
    cut_type: Literal["straight", "shaped", "rounded"] = "straight"
    material_thickness: NonNegative = 0
    price_per_cut: NonNegative = 0


class LithographyPriceSchema(BasePriceSchema):
    paper_size: str = ""
    color_count: Annotated[int, Field(ge=1, le=8)] = 1
    price_per_sheet: NonNegative = 0


class LaminatePriceSchema(BasePriceSchema):
    laminate_type: Literal["glossy", "matte", "soft_touch"] = "glossy"
    thickness: NonNegative = 0
    price_per_sqm: NonNegative = 0


class BindingPriceSchema(BasePriceSchema):
    binding_type: Literal["spiral", "thermal", "perfect", "saddle"] = "spiral"
    page_count_min: Annotated[int, Field(ge=1)] = 1
    page_count_max: Annotated[int, Field(ge=1)] = 100
    unit_price: NonNegative = 0

    @field_validator("page_count_max")
    @classmethod
    def max_not_below_min(cls, value: int, info) -> int:
        minimum = info.data.get("page_count_min")
        if minimum is not None and value < minimum:
            raise ValueError("حداکثر تعداد صفحه نباید کمتر از حداقل باشد")
        return value


class DefaultPriceSchema(BasePriceSchema):
    name: str = ""
    description: Optional[str] = None
    unit_price: NonNegative = 0


PRICE_SCHEMAS: dict[str, type[BasePriceSchema]] = {
    "papers": PaperPriceSchema,
    "uvs": UvPriceSchema,
    "cuts": CutPriceSchema,
    "lithographies": LithographyPriceSchema,
    "laminates": LaminatePriceSchema,
    "bindings": BindingPriceSchema,
}

DEFAULT_VALUES: dict[str, dict[str, Any]] = {
    "papers": {"paper_type": "", "paper_size": "", "weight": 0, "unit_price": 0},
    "uvs": {"uv_type": "glossy", "surface_area": 0, "unit_price": 0},
    "cuts": {"cut_type": "straight", "material_thickness": 0, "price_per_cut": 0},
    "lithographies": {"paper_size": "", "color_count": 1, "price_per_sheet": 0},
    "laminates": {"laminate_type": "glossy", "thickness": 0, "price_per_sqm": 0},
    "bindings": {
        "binding_type": "spiral",
        "page_count_min": 1,
        "page_count_max": 100,
        "unit_price": 0,
    },
}


def get_price_schema(category: str) -> type[BasePriceSchema]:
    return PRICE_SCHEMAS.get(category, DefaultPriceSchema)


def get_default_values(category: str) -> dict[str, Any]:
    """Form defaults for a new entry; always valid for the category schema."""
    defaults = DEFAULT_VALUES.get(category)
    if defaults is None:
        defaults = {"name": "", "description": "", "unit_price": 0}
    return dict(defaults)


def _message(field: str, error: dict[str, Any]) -> str:
    error_type = error.get("type", "")
    if (field, error_type) in FIELD_MESSAGES:
        return FIELD_MESSAGES[(field, error_type)]
    if error_type == "value_error":
        return str(error.get("ctx", {}).get("error", error.get("msg", "")))
    return MESSAGES.get(error_type, error.get("msg", ""))


def validate_price_data(category: str, data: dict[str, Any]) -> dict[str, Any]:
    """Validate ``data`` for ``category`` and return the parsed entry.

    Raises:
        PriceValidationError: one message per invalid field
    """
    schema = get_price_schema(category)
    try:
        model = schema.model_validate(data)
    except ValidationError as exc:
        field_errors: dict[str, str] = {}
        for error in exc.errors():
            loc = error.get("loc") or ()
            field = str(loc[0]) if loc else "root"
            field_errors.setdefault(field, _message(field, error))
        raise PriceValidationError(field_errors) from exc

    cleaned = dict(data)
    cleaned.update({name: getattr(model, name) for name in schema.model_fields if name in data})
    return cleaned


def check_number_cells(entry: dict[str, Any], columns: list[ColumnSchema]) -> dict[str, str]:
    """Field errors for the editable number columns of one row.

    Blank cells are left to the API and numeric strings count as numbers.
    A column's ``min``/``max`` bound the value; without a ``min`` the
    value must be non-negative.
    """
    field_errors: dict[str, str] = {}
    for column in columns:
        if not column.editable or column.type != "number":
            continue
        value = coerce_number(get_nested_value(entry, column.key))
        if value == "" or value is None:
            continue
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            field_errors[column.key] = MESSAGES["float_parsing"]
        elif column.min is not None and value < column.min:
            field_errors[column.key] = MESSAGES["below_min"].format(limit=_bound(column.min))
        elif column.min is None and value < 0:
            field_errors[column.key] = MESSAGES["greater_than_equal"]
        elif column.max is not None and value > column.max:
            field_errors[column.key] = MESSAGES["above_max"].format(limit=_bound(column.max))
    return field_errors


def _bound(limit: float) -> str:
    return str(int(limit)) if float(limit).is_integer() else str(limit)


def check_table_rows(rows: list[dict[str, Any]], columns: list[ColumnSchema]) -> None:
    """Check edited rows before an update or bulk save.

    Errors are keyed ``{id}.{field}``.
    """
    field_errors: dict[str, str] = {}
    for row in rows:
        for key, message in check_number_cells(row, columns).items():
            field_errors[f"{row.get('id')}.{key}"] = message
    if field_errors:
        raise PriceValidationError(field_errors)


def validate_table_entry(
    category: str, entry: dict[str, Any], columns: list[ColumnSchema]
) -> dict[str, Any]:
    """Validate a new table row before it is submitted.

    Editable number columns are checked against their bounds, then the
    category schema checks the fields it knows.
    """
    field_errors = check_number_cells(entry, columns)
    if field_errors:
        raise PriceValidationError(field_errors)
    return validate_price_data(category, entry)
