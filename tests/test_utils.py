"""Tests for inventory import helpers."""

import io

import pandas as pd

from utils import items_from_dataframe, normalize_item_dicts, read_inventory_file


class FakeLookup:
    def __init__(self, hsn_code="7214", rate=18.0):
        self.calls = []
        self.result = [{"hsn_code": hsn_code, "description": "Steel bars", "rate": rate, "score": 95}]

    def suggest(self, description, limit=1):
        self.calls.append(description)
        return self.result


class TestItemsFromDataframe:

    def test_loose_headers(self):
        df = pd.DataFrame([
            {"Description": "Steel Bars", "HSN Code": 7214, "Unit Price": 5500, "Qty": 10, "Unit": "MT", "GST": 18},
        ])
        [item] = items_from_dataframe(df)
        assert item.name == "Steel Bars"
        assert item.hsn == "7214"
        assert item.rate == 5500
        assert item.stock == 10
        assert item.gst_rate == 18

    def test_bad_rows_skipped(self):
        df = pd.DataFrame([
            {"name": "Good", "rate": 10},
            {"name": "No rate", "rate": None},
            {"name": None, "rate": 5},
            {"name": "Text rate", "rate": "abc"},
        ])
        items = items_from_dataframe(df)
        assert [i.name for i in items] == ["Good"]
        assert items[0].unit == "Pcs"
        assert items[0].gst_rate == 0

    def test_hsn_with_gaps(self):
        df = pd.DataFrame([{"name": "A", "rate": 1, "hsn": 7214}, {"name": "B", "rate": 1, "hsn": None}])
        items = items_from_dataframe(df)
        assert [i.hsn for i in items] == ["7214", ""]


class TestReadInventoryFile:

    def test_csv(self):
        data = b"name,hsn,rate,stock,unit,gst_rate\nCement,2523,380,500,Bags,28\n"
        [item] = read_inventory_file(data, "stock.CSV")
        assert item.name == "Cement"
        assert item.gst_rate == 28

    def test_xlsx(self):
        buffer = io.BytesIO()
        pd.DataFrame([{"name": "Tiles", "rate": 55, "stock": 2000, "unit": "Sqft", "gst_rate": 18}]).to_excel(
            buffer, index=False
        )
        [item] = read_inventory_file(buffer.getvalue(), "tiles.xlsx")
        assert item.stock == 2000

    def test_unsupported(self):
        assert read_inventory_file(b"%PDF-1.4", "scan.pdf") == []


class TestNormalizeItemDicts:

    def test_fills_missing_fields(self):
        lookup = FakeLookup()
        [item] = normalize_item_dicts([{"name": "steel rod", "rate": 10}], lookup)
        assert item["hsn"] == "7214"
        assert item["gst_rate"] == 18.0
        assert item["rate"] == 10

    def test_keeps_given_values(self):
        lookup = FakeLookup()
        [item] = normalize_item_dicts([{"name": "steel rod", "hsn": "7308", "gst_rate": 12}], lookup)
        assert item["hsn"] == "7308"
        assert item["gst_rate"] == 12.0
        assert lookup.calls == []


class TestImportWithLookup:

    def test_blank_codes_suggested(self):
        df = pd.DataFrame([
            {"name": "steel rod", "rate": 60, "hsn": None, "gst_rate": None},
            {"name": "glass", "rate": 10, "hsn": "7005", "gst_rate": 18},
        ])
        lookup = FakeLookup(hsn_code="7214", rate=18.0)
        items = items_from_dataframe(df, lookup)
        assert items[0].hsn == "7214"
        assert items[0].gst_rate == 18.0
        assert items[1].hsn == "7005"
        assert lookup.calls == ["steel rod"]
