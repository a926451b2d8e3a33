"""Tests for invoice assembly and document export."""

import io
import random
from datetime import date

import pandas as pd
import pytest

from catalog import BANK_DETAILS
from invoice_generator import (
    build_invoice,
    generate_invoice_csv_bytes,
    generate_invoice_number,
    generate_invoice_pdf,
    generate_invoice_xlsx_bytes,
    issue_invoice,
)
from invoice_store import InvoiceNotReadyError
from models import InventoryItem, InvoiceLineItem


@pytest.fixture
def two_rate_lines(steel, bricks):
    return (
        InvoiceLineItem("line-1", steel, 2, 10),
        InvoiceLineItem("line-2", bricks, 1000, 0),
    )


def _build(lines, company, seller, options, **kwargs):
    return build_invoice(lines, company, seller, options, "INV/2610/0042", "19 Oct 2026", **kwargs)


class TestInvoiceNumber:

    def test_format(self):
        number = generate_invoice_number(date(2026, 10, 19), random.Random(7))
        assert number.startswith("INV/2610/")
        assert len(number.split("/")[-1]) == 4

    def test_default_today(self):
        assert generate_invoice_number().startswith(f"INV/{date.today():%y%m}/")


class TestBuildInvoice:

    def test_requires_company(self, steel_line, seller, options):
        with pytest.raises(InvoiceNotReadyError):
            _build([steel_line], None, seller, options)

    def test_requires_items(self, local_company, seller, options):
        with pytest.raises(InvoiceNotReadyError):
            _build([], local_company, seller, options)

    def test_scenario_cross_state(self, steel_line, delhi_company, seller, options):
        invoice = _build([steel_line], delhi_company, seller, options)
        totals = invoice["totals"]
        assert invoice["same_state"] is False
        assert totals["taxable_value"] == pytest.approx(9900)
        assert totals["igst"] == pytest.approx(1782)
        assert totals["cgst"] == 0
        assert totals["grand_total"] == pytest.approx(11682)
        assert totals["previous_balance"] == 45000
        assert totals["total_payable"] == pytest.approx(56682)
        assert invoice["gst_lines"] == [{"label": "IGST @ 18%", "amount": pytest.approx(1782)}]

    def test_same_state_two_rates(self, two_rate_lines, local_company, seller, options):
        invoice = _build(two_rate_lines, local_company, seller, options)
        labels = [row["label"] for row in invoice["gst_lines"]]
        assert labels == ["CGST @ 9%", "SGST @ 9%", "CGST @ 2.5%", "SGST @ 2.5%"]
        totals = invoice["totals"]
        assert totals["cgst"] == pytest.approx(891 + 200)
        assert totals["cgst"] == pytest.approx(totals["sgst"])
        assert totals["igst"] == 0
        assert totals["total_gst"] == pytest.approx(1782 + 400)
        assert totals["gross"] == pytest.approx(11000 + 8000)
        assert totals["discount"] == pytest.approx(1100)

    def test_rows_match_engine(self, two_rate_lines, local_company, seller, options):
        invoice = _build(two_rate_lines, local_company, seller, options)
        rows = invoice["items"]
        assert [r["sr"] for r in rows] == [1, 2]
        assert rows[0]["hsn"] == "7214"
        assert rows[0]["unit"] == "MT"
        assert rows[0]["discount_pct"] == 10
        assert rows[0]["line_total"] == pytest.approx(11682)
        assert sum(r["line_total"] for r in rows) == pytest.approx(invoice["totals"]["grand_total"])

    def test_seller_buyer_blocks(self, steel_line, local_company, seller, options):
        invoice = _build([steel_line], local_company, seller, options, bank=BANK_DETAILS)
        assert invoice["seller"]["gstin"] == seller.gst_no
        assert invoice["buyer"]["gstin"] == local_company.gst_no
        assert invoice["bank"]["ifsc_code"] == "SBIN0001234"
        assert invoice["options"]["payment_terms"] == "Net 30 Days"
        assert invoice["options"]["transport_mode"] == "By Road"
        assert invoice["options"]["due_date"] == "2026-11-18"

    def test_totals_stay_unrounded(self, local_company, seller, options):
        item = InventoryItem("x", "Odd", "0", 99.99, 10, "Pcs", 18)
        invoice = _build([InvoiceLineItem("l", item, 3, 0)], local_company, seller, options)
        assert invoice["totals"]["total_gst"] == pytest.approx(53.9946)


class TestExports:

    def test_pdf(self, two_rate_lines, delhi_company, seller, options):
        invoice = _build(two_rate_lines, delhi_company, seller, options, bank=BANK_DETAILS)
        pdf = generate_invoice_pdf(invoice)
        assert pdf.startswith(b"%PDF")

    def test_pdf_many_lines(self, local_company, seller, options):
        lines = [
            InvoiceLineItem(f"l{i}", InventoryItem(str(i), f"Item {i}", "9999", 10 + i, 100, "Pcs", 18), 1, 0)
            for i in range(80)
        ]
        pdf = generate_invoice_pdf(_build(lines, local_company, seller, options))
        assert pdf.startswith(b"%PDF")

    def test_csv(self, two_rate_lines, local_company, seller, options):
        invoice = _build(two_rate_lines, local_company, seller, options)
        df = pd.read_csv(io.BytesIO(generate_invoice_csv_bytes(invoice)))
        assert list(df["description"]) == ["Steel Bars (10mm)", "Bricks (Red)"]
        assert df["line_total"].tolist() == [11682.0, 8400.0]

    def test_xlsx(self, two_rate_lines, local_company, seller, options):
        invoice = _build(two_rate_lines, local_company, seller, options)
        sheets = pd.read_excel(io.BytesIO(generate_invoice_xlsx_bytes(invoice)), sheet_name=None)
        assert set(sheets) == {"Items", "GST", "Totals"}
        assert sheets["Totals"]["grand_total"][0] == pytest.approx(11682 + 8400)
        assert len(sheets["GST"]) == 4


class TestIssueInvoice:

    def _issue(self, lines, company, seller, options, **kwargs):
        return issue_invoice(lines, company, seller, options, "INV/2610/0042", "19 Oct 2026", **kwargs)

    def test_unpaid_uses_balance_before_this_invoice(self, steel_line, delhi_company, seller, options):
        invoice, updated = self._issue([steel_line], delhi_company, seller, options, payment_received=False)
        totals = invoice["totals"]
        assert totals["previous_balance"] == 45000
        assert totals["total_payable"] == pytest.approx(56682)
        assert updated.pending_amount == pytest.approx(45000 + 11682)
        assert delhi_company.pending_amount == 45000

    def test_unpaid_balance_grows_once_per_invoice(self, steel_line, delhi_company, seller, options):
        _, updated = self._issue([steel_line], delhi_company, seller, options, payment_received=False)
        invoice, again = self._issue([steel_line], updated, seller, options, payment_received=False)
        assert invoice["totals"]["previous_balance"] == pytest.approx(56682)
        assert again.pending_amount == pytest.approx(45000 + 2 * 11682)

    def test_paid_leaves_company_alone(self, steel_line, delhi_company, seller, options):
        invoice, company = self._issue([steel_line], delhi_company, seller, options)
        assert company is delhi_company
        assert invoice["totals"]["total_payable"] == pytest.approx(56682)

    def test_not_ready_skips_balance_update(self, delhi_company, seller, options):
        with pytest.raises(InvoiceNotReadyError):
            self._issue([], delhi_company, seller, options, payment_received=False)
