"""Tests for merging, cleaning and segmenting sales."""

import math

import pandas as pd
import pytest

from nycsales.cleaning import (
    borough_name,
    clean_sales,
    map_borough_codes,
    merge_boroughs,
    save_cleaned,
    segment_by_building_class,
    title_case,
    to_numeric,
)
from nycsales.errors import SchemaMismatchError
from nycsales.models import UNKNOWN_BOROUGH

from conftest import RAW_COLUMNS, make_sale


def raw_frame(rows):
    return pd.DataFrame(rows, columns=RAW_COLUMNS)


def merged_frame(rows):
    return merge_boroughs({"test": raw_frame(rows)})


class TestBoroughMapping:
    """Test borough code mapping."""

    @pytest.mark.parametrize(
        "code, name",
        [
            (1, "Manhattan"),
            (2, "Bronx"),
            (3, "Brooklyn"),
            (4, "Queens"),
            (5, "Staten Island"),
        ],
    )
    def test_known_codes(self, code, name):
        assert borough_name(code) == name

    @pytest.mark.parametrize("code", [0, 6, 99, "Brooklyn", None, math.nan])
    def test_unknown_codes(self, code):
        assert borough_name(code) == UNKNOWN_BOROUGH

    def test_mapping_keeps_every_row(self):
        """Test unmapped codes are labelled, never dropped."""
        codes = pd.Series([1, 2, 3, 4, 5, 7, None])
        names = map_borough_codes(codes)
        assert names.tolist() == [
            "Manhattan",
            "Bronx",
            "Brooklyn",
            "Queens",
            "Staten Island",
            "Unknown",
            "Unknown",
        ]


class TestHelpers:
    """Test value-level helpers."""

    def test_title_case(self):
        assert title_case("  BAY RIDGE  ") == "Bay Ridge"
        assert title_case("01 ONE FAMILY DWELLINGS") == "01 One Family Dwellings"
        assert title_case(None) is None
        assert title_case(12) == 12

    def test_to_numeric_strings(self):
        """Test currency formatting and blanks are handled."""
        series = pd.Series(["$1,250,000", " 450000 ", " -  ", "", None])
        result = to_numeric(series)
        assert result.iloc[0] == 1250000
        assert result.iloc[1] == 450000
        assert result.iloc[2:].isna().all()

    def test_to_numeric_passthrough(self):
        series = pd.Series([1, 2, 3])
        assert to_numeric(series) is series


class TestMergeBoroughs:
    """Test merge_boroughs."""

    def test_concatenates_all_inputs(self):
        frames = {
            "Manhattan": raw_frame([make_sale(borough=1)]),
            "Queens": raw_frame([make_sale(borough=4), make_sale(borough=4, sale_price=1)]),
        }
        merged = merge_boroughs(frames)
        assert len(merged) == 3
        assert merged["borough"].tolist() == ["Manhattan", "Queens", "Queens"]
        assert merged.index.tolist() == [0, 1, 2]

    def test_normalizes_columns_and_drops_easement(self):
        """Test headers are normalized and ease-ment removed."""
        merged = merged_frame([make_sale()])
        assert "ease-ment" not in merged.columns
        assert "building_class_at_time_of_sale" in merged.columns
        assert all(c == c.lower() and " " not in c for c in merged.columns)
        assert len(merged.columns) == len(RAW_COLUMNS) - 1

    def test_title_cases_text_columns(self):
        merged = merged_frame(
            [make_sale(address="8 BAY RIDGE PARKWAY", **{"APARTMENT NUMBER": "APT 2B"})]
        )
        row = merged.iloc[0]
        assert row["neighborhood"] == "Bay Ridge"
        assert row["building_class_category"] == "01 One Family Dwellings"
        assert row["address"] == "8 Bay Ridge Parkway"
        assert row["apartment_number"] == "Apt 2B"
        # codes are not title-cased
        assert row["building_class_at_time_of_sale"] == "A5"

    def test_strips_building_class_codes(self):
        """Test padded building class codes are stored without whitespace."""
        merged = merged_frame([make_sale(building_class=" A5 ")])
        assert merged.loc[0, "building_class_at_time_of_sale"] == "A5"
        assert merged.loc[0, "building_class_at_present"] == "A5"

    def test_unknown_borough_kept(self):
        merged = merged_frame([make_sale(borough=9)])
        assert merged["borough"].tolist() == ["Unknown"]

    def test_removes_exact_duplicates(self):
        """Test exact duplicates go but near duplicates stay."""
        sale = make_sale()
        merged = merged_frame([sale, dict(sale), make_sale(sale_price=500001)])
        assert len(merged) == 2
        assert not merged.duplicated().any()

    def test_duplicates_across_files(self):
        sale = make_sale()
        merged = merge_boroughs({"a": raw_frame([sale]), "b": raw_frame([sale])})
        assert len(merged) == 1

    def test_schema_mismatch(self):
        """Test inputs with different columns are rejected before merging."""
        bad = raw_frame([make_sale()]).drop(columns=["SALE DATE"])
        with pytest.raises(SchemaMismatchError, match="sale_date"):
            merge_boroughs({"Manhattan": raw_frame([make_sale()]), "Bronx": bad})

    def test_inputs_not_modified(self):
        frame = raw_frame([make_sale()])
        before = frame.copy()
        merge_boroughs({"a": frame})
        pd.testing.assert_frame_equal(frame, before)


class TestCleanSales:
    """Test clean_sales filtering and ordering."""

    def test_sale_price_threshold_is_exclusive(self):
        merged = merged_frame(
            [make_sale(sale_price=10000), make_sale(sale_price=10001)]
        )
        cleaned = clean_sales(merged)
        assert cleaned["sale_price"].tolist() == [10001]

    def test_area_threshold_is_inclusive(self):
        merged = merged_frame(
            [make_sale(gross_square_feet=149), make_sale(gross_square_feet=150)]
        )
        cleaned = clean_sales(merged)
        assert cleaned["gross_square_feet"].tolist() == [150]

    def test_drops_missing_values(self):
        """Test rows missing price or area are removed."""
        merged = merged_frame(
            [
                make_sale(gross_square_feet=None),
                make_sale(sale_price=None),
                make_sale(sale_price=" -  "),
                make_sale(),
            ]
        )
        cleaned = clean_sales(merged)
        assert len(cleaned) == 1
        assert cleaned[["sale_price", "gross_square_feet"]].notna().all().all()

    def test_parses_formatted_numbers(self):
        merged = merged_frame(
            [make_sale(sale_price="$1,250,000", gross_square_feet="2,400")]
        )
        cleaned = clean_sales(merged)
        assert cleaned.loc[0, "sale_price"] == 1250000
        assert cleaned.loc[0, "gross_square_feet"] == 2400
        assert cleaned["sale_price"].dtype == "int64"

    def test_custom_thresholds(self):
        merged = merged_frame([make_sale(sale_price=20000), make_sale(sale_price=30000)])
        cleaned = clean_sales(merged, min_sale_price=25000)
        assert cleaned["sale_price"].tolist() == [30000]

    def test_sorted_by_borough_and_neighborhood(self):
        """Test rows come out ordered by borough, then neighborhood."""
        merged = merged_frame(
            [
                make_sale(borough=4, neighborhood="BAYSIDE"),
                make_sale(borough=3, neighborhood="DYKER HEIGHTS"),
                make_sale(borough=3, neighborhood="BAY RIDGE"),
                make_sale(borough=1, neighborhood="HARLEM-CENTRAL"),
            ]
        )
        cleaned = clean_sales(merged)
        keys = list(zip(cleaned["borough"], cleaned["neighborhood"]))
        assert keys == sorted(keys)
        assert cleaned.index.tolist() == list(range(len(cleaned)))

    def test_sort_is_stable(self):
        """Test rows in the same neighborhood keep their merged order."""
        merged = merged_frame(
            [
                make_sale(sale_price=300000),
                make_sale(borough=1, neighborhood="CHELSEA"),
                make_sale(sale_price=200000),
            ]
        )
        cleaned = clean_sales(merged)
        bay_ridge = cleaned[cleaned["neighborhood"] == "Bay Ridge"]
        assert bay_ridge["sale_price"].tolist() == [300000, 200000]

    def test_invariants(self, sample_config):
        """Test every cleaned row satisfies the cleaning guarantees."""
        from nycsales.loaders import load_borough_files

        cleaned = clean_sales(merge_boroughs(load_borough_files(sample_config.input)))

        assert (cleaned["sale_price"] > 10000).all()
        assert (cleaned["gross_square_feet"] >= 150).all()
        assert cleaned[["sale_price", "gross_square_feet"]].notna().all().all()
        assert not cleaned.duplicated().any()
        keys = list(zip(cleaned["borough"], cleaned["neighborhood"]))
        assert keys == sorted(keys)

    def test_input_not_modified(self):
        merged = merged_frame([make_sale(sale_price="$20,000")])
        before = merged.copy()
        clean_sales(merged)
        pd.testing.assert_frame_equal(merged, before)


class TestSaveCleaned:
    """Test the cleaned CSV snapshot."""

    def test_writes_csv(self, tmp_path):
        cleaned = clean_sales(merged_frame([make_sale(), make_sale(sale_price=600000)]))
        path = save_cleaned(cleaned, tmp_path / "out" / "NYC_property_sales.csv")

        assert path.exists()
        text = path.read_text(encoding="utf-8")
        header = text.splitlines()[0].split(",")
        assert header == list(cleaned.columns)
        assert "\r\n" not in text
        pd.testing.assert_series_equal(
            pd.read_csv(path)["sale_price"], cleaned["sale_price"]
        )

    def test_deterministic(self, tmp_path):
        """Test writing the same table twice gives identical bytes."""
        cleaned = clean_sales(merged_frame([make_sale(), make_sale(borough=1)]))
        first = save_cleaned(cleaned, tmp_path / "a.csv").read_bytes()
        second = save_cleaned(cleaned, tmp_path / "b.csv").read_bytes()
        assert first == second


class TestSegment:
    """Test segment_by_building_class."""

    def test_selects_building_class(self):
        cleaned = clean_sales(
            merged_frame(
                [
                    make_sale(building_class="A5"),
                    make_sale(building_class="A1", sale_price=400000),
                    make_sale(building_class="R4", sale_price=300000),
                    make_sale(building_class="A5 ", sale_price=200000),
                ]
            )
        )
        segment = segment_by_building_class(cleaned)

        assert len(segment) == 2
        assert (segment["building_class_at_time_of_sale"] == "A5").all()

    def test_padded_codes_returned_stripped(self):
        """Test a padded code in an unmerged table is matched and stripped."""
        df = pd.DataFrame(
            {
                "building_class_at_time_of_sale": ["A5", "A5 ", " A1"],
                "sale_price": [500000, 400000, 300000],
            }
        )
        segment = segment_by_building_class(df)

        assert segment["building_class_at_time_of_sale"].tolist() == ["A5", "A5"]
        assert segment["sale_price"].tolist() == [500000, 400000]
        assert df["building_class_at_time_of_sale"].tolist() == ["A5", "A5 ", " A1"]

    def test_other_class(self):
        cleaned = clean_sales(merged_frame([make_sale(building_class="A1")]))
        assert len(segment_by_building_class(cleaned, "A1")) == 1
        assert segment_by_building_class(cleaned, "A5").empty
