"""Column schema derivation for price tables.

Known categories use hand-coded column lists. Relation columns of a known
category (``machine.title``, ``type.title`` ...) are only emitted when the
sample record actually carries that relation. Any other category falls back
to generic inference over the sample's own keys.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from offsetpanel.models import SYSTEM_FIELDS, ColumnSchema, PriceRecord

ID_LABEL = "شناسه"


def format_dimension(value: Any, row: PriceRecord | None = None) -> str:
    if not isinstance(value, dict) or not value:
        return "-"
    return f"{value.get('width', '')} × {value.get('height', '')}"


@dataclass(frozen=True)
class _Col:
    key: str
    label: str
    type: str = "number"
    editable: bool = True
    # Emit only when the sample has this field set
    when: str | None = None
    # Conditional columns that still belong to the empty-table schema
    in_default: bool = False
    formatter: Callable[[Any, PriceRecord], str] | None = None

    def build(self) -> ColumnSchema:
        return ColumnSchema(
            key=self.key,
            label=self.label,
            type=self.type,
            editable=self.editable,
            formatter=self.formatter,
        )


def _relation(field: str, label: str) -> _Col:
    return _Col(f"{field}.title", label, "text", editable=False, when=field)


_MACHINE = _relation("machine", "ماشین")
_PRICE = _Col("price", "قیمت")
_TITLE = _Col("title", "عنوان", "text")
_PER_CYCLE = _Col("per_cycle", "هر دور")
_PRINT_COLUMNS = (
    _Col("cmyk", "CMYK"),
    _Col("spot", "اسپات"),
    _Col("metallic", "متالیک"),
    _Col("verni", "ورنی"),
)

CATEGORY_COLUMNS: dict[str, tuple[_Col, ...]] = {
    "papers": (
        _TITLE,
        _Col("grammage", "گرماژ"),
        _Col("quantity", "تعداد"),
        _PRICE,
        _relation("type", "نوع"),
        _relation("material", "جنس"),
        _Col("dimension", "ابعاد", "text", editable=False, when="dimension",
             formatter=format_dimension),
        _relation("measurement", "واحد اندازه‌گیری"),
    ),
    "lithographies": (
        _MACHINE,
        _Col("colored_film", "فیلم رنگی"),
        _Col("film", "فیلم"),
        _Col("ozalid", "ازالید"),
        _Col("zinc", "روی"),
        _Col("burned_zinc", "روی سوخته"),
        _Col("plate", "پلیت"),
        _Col("forming", "قالب‌سازی"),
    ),
    "monitorings": (
        _relation("level", "سطح نظارت"),
        _Col("complex", "پیچیده"),
        _Col("medium", "متوسط"),
        _Col("simple", "ساده"),
    ),
    "colors": (_MACHINE, *_PRINT_COLUMNS),
    "circulations": (
        _Col("quantity", "تعداد (از)"),
        _Col("to", "تا"),
        *_PRINT_COLUMNS,
    ),
    "uvs": (_MACHINE, _relation("uv_type", "نوع UV"), _PRICE),
    "selefons": (_MACHINE, _relation("selefon_type", "نوع سلفون"), _PRICE),
    "laminates": (_MACHINE, _Col("opaque", "مات"), _Col("glossy", "براق")),
    "boxes": (
        _relation("box_type", "نوع جعبه"),
        _Col("title", "سایز", "text", editable=False, when="title", in_default=True),
        _PRICE,
    ),
    "pockets": (_TITLE, _PRICE),
    "bags": (_TITLE, _PRICE),
    "binderies": (_relation("trim", "قطع"), _Col("tahrir", "تحریر"), _Col("gelase", "گلاسه")),
    "framings": (_Col("type", "نوع", "text"), _Col("size", "سایز"), _PRICE),
    "plates": (_Col("perimeter", "محیط"), _Col("size", "سایز"), _PRICE),
    "golds": (
        _Col("gold_size", "اندازه طلاکوب", "text", editable=False, when="gold_size",
             formatter=format_dimension),
        _PRICE,
    ),
    "letterpress": (_MACHINE, _PER_CYCLE),
    "cuts": (_PRICE,),
    "glues": (_Col("quantity", "تعداد"), _PRICE),
    "numerations": (_PRICE,),
    "perforages": (_MACHINE, _PER_CYCLE),
    "others": (
        _TITLE,
        _Col("description", "توضیحات", "text"),
        _Col("type", "نوع", "text"),
        _PRICE,
    ),
}

_GENERIC_DEFAULT = (_TITLE, _PRICE)


def id_column() -> ColumnSchema:
    return ColumnSchema(key="id", label=ID_LABEL, type="number", editable=False)


def _has_field(sample: PriceRecord, field: str) -> bool:
    return sample.get(field) not in (None, "", 0, False)


def _format_object(value: Any, row: PriceRecord | None = None) -> str:
    if not isinstance(value, dict) or not value:
        return "-"
    return "، ".join(f"{k}: {v}" for k, v in value.items())


def _humanize(key: str) -> str:
    return " ".join(part.capitalize() for part in key.split("_") if part)


def _generic_columns(sample: PriceRecord) -> list[ColumnSchema]:
    columns = []
    for key, value in sample.items():
        if key in SYSTEM_FIELDS:
            continue
        if isinstance(value, dict):
            # Relations show their title; other objects are read-only summaries
            titled = bool(value.get("title"))
            columns.append(
                ColumnSchema(
                    key=f"{key}.title" if titled else key,
                    label=key[:1].upper() + key[1:],
                    type="text",
                    editable=False,
                    formatter=None if titled else _format_object,
                )
            )
            continue
        is_number = isinstance(value, (int, float)) and not isinstance(value, bool)
        columns.append(
            ColumnSchema(key=key, label=_humanize(key), type="number" if is_number else "text")
        )
    return columns


def infer_schema(sample: PriceRecord, category: str) -> list[ColumnSchema]:
    """Derive the ordered column list for ``category`` from one sample record.

    The ``id`` column is always first and never editable.
    """
    columns = [id_column()]
    definitions = CATEGORY_COLUMNS.get(category)
    if definitions is None:
        columns.extend(_generic_columns(sample))
        return columns

    for col in definitions:
        if col.when is not None and not _has_field(sample, col.when):
            continue
        columns.append(col.build())
    return columns


def default_schema(category: str) -> list[ColumnSchema]:
    """Static schema used to render an empty but editable table."""
    definitions = CATEGORY_COLUMNS.get(category, _GENERIC_DEFAULT)
    return [id_column()] + [
        col.build() for col in definitions if col.when is None or col.in_default
    ]
