"""Static price category map.

Each category slug maps to its display metadata and to the filter selectors
its price table uses. The map drives routing (unknown slugs are 404) and the
category card list.
"""

from __future__ import annotations

from dataclasses import dataclass

# Categories whose price lists are bucketed by circulation range
RANGE_CATEGORIES = frozenset({"monitorings", "boxes", "golds", "cuts", "glues"})
BOX_TYPE_CATEGORIES = frozenset({"boxes"})
BINDERY_TYPE_CATEGORIES = frozenset({"binderies"})


@dataclass(frozen=True)
class PriceCategory:
    key: str
    title: str
    description: str
    icon: str = "tabler-table"
    color: str = "primary"

    @property
    def needs_range_selector(self) -> bool:
        return self.key in RANGE_CATEGORIES

    @property
    def needs_box_type_selector(self) -> bool:
        return self.key in BOX_TYPE_CATEGORIES

    @property
    def needs_bindery_type_selector(self) -> bool:
        return self.key in BINDERY_TYPE_CATEGORIES


PRICE_CATEGORIES: dict[str, PriceCategory] = {
    c.key: c
    for c in (
        PriceCategory("papers", "قیمت کاغذ", "مدیریت قیمت انواع کاغذ و مقوا", "tabler-file-text", "primary"),
        PriceCategory("uvs", "قیمت UV", "مدیریت قیمت UV و پوشش‌های محافظ", "tabler-sun", "warning"),
        PriceCategory("cuts", "قیمت برش", "مدیریت قیمت انواع برش و بریدگی", "tabler-cut", "error"),
        PriceCategory("lithographies", "قیمت لیتوگرافی", "مدیریت قیمت چاپ لیتوگرافی", "tabler-print", "info"),
        PriceCategory("monitorings", "قیمت نظارت", "مدیریت قیمت نظارت و بازرسی", "tabler-eye", "success"),
        PriceCategory("colors", "قیمت ماشین افست", "مدیریت قیمت ماشین‌های افست", "tabler-palette", "secondary"),
        PriceCategory("circulations", "قیمت تیراژ افست", "مدیریت قیمت بر اساس تیراژ", "tabler-copy", "primary"),
        PriceCategory("selefons", "قیمت سلفون", "مدیریت قیمت سلفون و روکش", "tabler-layers", "warning"),
        PriceCategory("laminates", "قیمت لمینیت", "مدیریت قیمت لمینیت و پوشش", "tabler-layers-intersect", "info"),
        PriceCategory("boxes", "قیمت جعبه", "مدیریت قیمت انواع جعبه و بسته‌بندی", "tabler-box", "success"),
        PriceCategory("pockets", "قیمت بسته‌بندی", "مدیریت قیمت انواع بسته‌بندی", "tabler-package", "error"),
        PriceCategory("bags", "قیمت کیسه", "مدیریت قیمت انواع کیسه و ساک", "tabler-shopping-bag", "secondary"),
        PriceCategory("binderies", "قیمت صحافی", "مدیریت قیمت انواع صحافی", "tabler-book", "primary"),
        PriceCategory("framings", "قیمت قالب‌سازی", "مدیریت قیمت ساخت قالب", "tabler-frame", "warning"),
        PriceCategory("plates", "قیمت کلیشه‌سازی", "مدیریت قیمت ساخت کلیشه", "tabler-stamp", "info"),
        PriceCategory("golds", "قیمت طلاکوب", "مدیریت قیمت طلاکوب و نقره‌کوب", "tabler-star", "warning"),
        PriceCategory("letterpress", "قیمت چاپ لترپرس", "مدیریت قیمت چاپ لترپرس", "tabler-typography", "error"),
        PriceCategory("glues", "قیمت سرچسب", "مدیریت قیمت انواع برچسب", "tabler-sticker", "success"),
        PriceCategory("numerations", "قیمت شماره‌زنی", "مدیریت قیمت شماره‌زنی", "tabler-numbers", "secondary"),
        PriceCategory("perforages", "قیمت پرفراژ", "مدیریت قیمت پرفراژ و سوراخ‌کاری", "tabler-dots", "primary"),
        PriceCategory("others", "سایر قیمت‌ها", "مدیریت سایر خدمات و قیمت‌ها", "tabler-dots-vertical", "info"),
    )
}


def get_category(key: str) -> PriceCategory | None:
    return PRICE_CATEGORIES.get(key)


def category_for(key: str) -> PriceCategory:
    """Return the category for ``key``; unlisted slugs get generic metadata."""
    return PRICE_CATEGORIES.get(key) or PriceCategory(key, key, "")
