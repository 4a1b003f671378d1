"""Tests for column schema derivation."""

from __future__ import annotations

import pytest

from offsetpanel.categories import PRICE_CATEGORIES
from offsetpanel.tables.schema import ID_LABEL, default_schema, format_dimension, infer_schema


def keys(columns):
    return [column.key for column in columns]


class TestInferSchema:
    """Known categories use their hand-coded columns."""

    def test_id_column_first_and_read_only(self, paper_rows):
        columns = infer_schema(paper_rows[0], "papers")

        assert columns[0].key == "id"
        assert columns[0].label == ID_LABEL
        assert columns[0].editable is False

    @pytest.mark.parametrize("category", sorted(PRICE_CATEGORIES))
    def test_id_first_for_every_known_category(self, category):
        columns = infer_schema({"id": 1, "price": 10}, category)

        assert columns[0].key == "id"
        assert columns[0].editable is False

    def test_papers_relation_columns_follow_sample(self, paper_rows):
        columns = infer_schema(paper_rows[0], "papers")

        assert keys(columns) == [
            "id",
            "title",
            "grammage",
            "quantity",
            "price",
            "type.title",
            "dimension",
        ]
        type_column = columns[5]
        assert type_column.type == "text"
        assert type_column.editable is False

    def test_dimension_formatter(self, paper_rows):
        dimension = infer_schema(paper_rows[0], "papers")[-1]

        assert dimension.formatter(paper_rows[0]["dimension"], paper_rows[0]) == "70 × 100"
        assert format_dimension(None) == "-"

    def test_lithographies_machine_comes_first(self):
        columns = infer_schema({"id": 1, "machine": {"title": "GTO"}, "film": 5}, "lithographies")

        assert keys(columns)[:3] == ["id", "machine.title", "colored_film"]

    def test_lithographies_without_machine(self):
        columns = infer_schema({"id": 1, "film": 5}, "lithographies")

        assert "machine.title" not in keys(columns)
        assert len(columns) == 8

    def test_boxes_title_is_read_only_size(self):
        columns = infer_schema(
            {"id": 1, "box_type": {"title": "کشویی"}, "title": "A4", "price": 10}, "boxes"
        )

        assert keys(columns) == ["id", "box_type.title", "title", "price"]
        assert columns[2].editable is False

    def test_uvs(self):
        columns = infer_schema(
            {"id": 1, "machine": {"title": "M"}, "uv_type": {"title": "موضعی"}, "price": 5}, "uvs"
        )

        assert keys(columns) == ["id", "machine.title", "uv_type.title", "price"]


class TestGenericInference:
    """Unlisted categories derive columns from the sample's own keys."""

    def test_n_plus_one_columns(self):
        sample = {
            "id": 9,
            "cooperator_id": 3,
            "created_at": "2024-01-01",
            "updated_at": "2024-01-02",
            "label": "foil",
            "unit_cost": 12.5,
            "vendor": {"id": 1, "title": "Acme"},
        }

        columns = infer_schema(sample, "stickers")

        assert len(columns) == 4
        assert keys(columns) == ["id", "label", "unit_cost", "vendor.title"]

    def test_object_with_title_is_read_only_text(self):
        columns = infer_schema({"id": 1, "vendor": {"title": "Acme"}}, "stickers")

        vendor = columns[1]
        assert vendor.key == "vendor.title"
        assert vendor.type == "text"
        assert vendor.editable is False

    def test_number_and_text_types(self):
        columns = infer_schema({"id": 1, "unit_cost": 3, "label": "x", "active": True}, "stickers")
        types = {column.key: column.type for column in columns}

        assert types["unit_cost"] == "number"
        assert types["label"] == "text"
        assert types["active"] == "text"
        assert all(column.editable for column in columns[1:])

    def test_object_without_title_is_read_only(self):
        columns = infer_schema({"id": 1, "size": {"width": 2, "height": 3}}, "stickers")

        size = columns[1]
        assert size.key == "size"
        assert size.editable is False
        assert size.formatter({"width": 2}, {}) == "width: 2"


class TestDefaultSchema:
    @pytest.mark.parametrize("category", sorted(PRICE_CATEGORIES))
    def test_non_empty_for_every_known_category(self, category):
        columns = default_schema(category)

        assert len(columns) >= 2
        assert columns[0].key == "id"
        assert any(column.editable for column in columns)

    def test_papers_default(self):
        assert keys(default_schema("papers")) == ["id", "title", "grammage", "quantity", "price"]

    def test_boxes_default_keeps_size(self):
        assert keys(default_schema("boxes")) == ["id", "title", "price"]

    def test_unknown_category_default(self):
        assert keys(default_schema("stickers")) == ["id", "title", "price"]
