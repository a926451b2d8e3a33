import itertools
import os
from dataclasses import dataclass, field
from typing import List, Optional

import pandas as pd  # type: ignore
from loguru import logger

from models import BankDetails, Company, InventoryItem, Seller
from utils import cell_number, cell_text, items_from_dataframe, normalize_columns

# ---------------------------------------------------
# SEED DATA (used when no catalog files are configured)
# ---------------------------------------------------
SEED_INVENTORY = (
    InventoryItem("1", "Steel Bars (10mm)", "7214", 5500, 150, "MT", 18),
    InventoryItem("2", "Cement (OPC 53)", "2523", 380, 500, "Bags", 28),
    InventoryItem("3", "TMT Bars (12mm)", "7214", 5800, 80, "MT", 18),
    InventoryItem("4", "Bricks (Red)", "6901", 8, 10000, "Pcs", 5),
    InventoryItem("5", "Sand (River)", "2505", 2500, 200, "CFT", 5),
    InventoryItem("6", "Aggregate (20mm)", "2517", 1800, 300, "CFT", 5),
    InventoryItem("7", 'PVC Pipes (4")', "3917", 450, 250, "Pcs", 18),
    InventoryItem("8", "Electrical Wire (1.5mm)", "8544", 2800, 50, "Coils", 18),
    InventoryItem("9", "Paint (Exterior)", "3208", 2400, 30, "Bucket", 28),
    InventoryItem("10", "Tiles (Ceramic)", "6908", 55, 2000, "Sqft", 18),
)

SEED_COMPANIES = (
    Company("1", "27AABCU9603R1ZM", "Sharma Constructions Pvt Ltd", "123, Industrial Area, Sector 5",
            "Maharashtra", "27", 125000, "2025-01-15"),
    Company("2", "29AABCT1332L1ZL", "BuildWell Infrastructure", "456, Business Park, Phase 2",
            "Karnataka", "29", 0, "2025-01-28"),
    Company("3", "07AAACR5055K1Z6", "Raj Builders & Developers", "789, Commercial Complex, Ring Road",
            "Delhi", "07", 45000, "2025-02-01"),
    Company("4", "33AABCS1429B1ZR", "Southern Infra Solutions", "321, Tech Park, OMR Road",
            "Tamil Nadu", "33", 0),
)

SELLER = Seller(
    name="ABC Trading Company",
    address="100, Main Market, Industrial Zone",
    city="Mumbai",
    state="Maharashtra",
    state_code="27",
    pincode="400001",
    gst_no="27AABCA1234A1Z5",
    pan="AABCA1234A",
    phone="+91 98765 43210",
    email="sales@abctrading.com",
)

BANK_DETAILS = BankDetails(
    bank_name="State Bank of India",
    account_name="ABC Trading Company",
    account_number="1234567890123456",
    ifsc_code="SBIN0001234",
    branch="Industrial Area Branch, Mumbai",
)


@dataclass
class Catalog:
    """Inventory and customers available to one session. Changes are session-local."""
    inventory: List[InventoryItem] = field(default_factory=lambda: list(SEED_INVENTORY))
    companies: List[Company] = field(default_factory=lambda: list(SEED_COMPANIES))
    seller: Seller = SELLER
    bank: BankDetails = BANK_DETAILS

    def __post_init__(self):
        self._ids = itertools.count(1)

    def _new_id(self, prefix: str) -> str:
        return f"{prefix}-{next(self._ids)}"

    def find_item(self, item_id: str) -> Optional[InventoryItem]:
        return next((i for i in self.inventory if i.id == item_id), None)

    def find_company_by_gst(self, gst_no: str) -> Optional[Company]:
        gst_no = (gst_no or "").strip().upper()
        if not gst_no:
            return None
        return next((c for c in self.companies if c.gst_no == gst_no), None)

    def add_inventory_item(self, name, hsn, rate, stock, unit, gst_rate) -> InventoryItem:
        item = InventoryItem(
            id=self._new_id("item"),
            name=name.strip(),
            hsn=str(hsn).strip(),
            rate=float(rate),
            stock=int(stock),
            unit=unit.strip(),
            gst_rate=float(gst_rate),
        )
        self.inventory.append(item)
        logger.info("Added inventory item {} ({})", item.name, item.id)
        return item

    def add_company(self, name, address="", gst_no="", state="", state_code="",
                    pending_amount=0.0, phone="") -> Company:
        company = Company(
            id=self._new_id("new"),
            gst_no=gst_no.strip().upper() or "NA",
            name=name.strip(),
            address=address.strip(),
            state=state.strip(),
            state_code=state_code.strip().zfill(2) if state_code.strip() else "",
            pending_amount=float(pending_amount or 0),
            phone=phone.strip(),
        )
        self.companies.append(company)
        logger.info("Added company {} ({})", company.name, company.id)
        return company

    def replace_company(self, company: Company) -> None:
        self.companies = [company if c.id == company.id else c for c in self.companies]


_COMPANY_ALIASES = {
    "gstin": "gst_no",
    "gst": "gst_no",
    "gst_number": "gst_no",
    "pending": "pending_amount",
    "balance": "pending_amount",
}


def companies_from_dataframe(df: pd.DataFrame) -> List[Company]:
    df = normalize_columns(df, _COMPANY_ALIASES)
    companies = []
    for idx, row in df.iterrows():
        try:
            name = cell_text(row, "name")
            if not name:
                raise ValueError("name is required")
            state_code = cell_text(row, "state_code")
            companies.append(Company(
                id=cell_text(row, "id") or str(idx + 1),
                gst_no=cell_text(row, "gst_no").upper() or "NA",
                name=name,
                address=cell_text(row, "address"),
                state=cell_text(row, "state"),
                state_code=state_code.zfill(2) if state_code else "",
                pending_amount=cell_number(row, "pending_amount", 0.0),
                last_transaction=cell_text(row, "last_transaction") or None,
            ))
        except (TypeError, ValueError) as e:
            logger.warning("Skipping company row {}: {}", idx, e)
    return companies


def _read_csv(path: str) -> Optional[pd.DataFrame]:
    if not path:
        return None
    if not os.path.exists(path):
        logger.warning("Catalog file {} not found, using seed data", path)
        return None
    try:
        return pd.read_csv(path)
    except (OSError, ValueError) as e:
        logger.warning("Could not read {}: {}, using seed data", path, e)
        return None


def load_catalog(settings) -> Catalog:
    """Build the session catalog from configured CSV files, falling back to the seeds."""
    catalog = Catalog()

    df = _read_csv(settings.INVENTORY_CSV)
    if df is not None:
        items = items_from_dataframe(df)
        if items:
            catalog.inventory = items
            logger.info("Loaded {} inventory items from {}", len(items), settings.INVENTORY_CSV)

    df = _read_csv(settings.COMPANIES_CSV)
    if df is not None:
        companies = companies_from_dataframe(df)
        if companies:
            catalog.companies = companies
            logger.info("Loaded {} companies from {}", len(companies), settings.COMPANIES_CSV)

    return catalog
