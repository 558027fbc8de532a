"""
Spreadsheet import for card lists.

Reads the first sheet of an Excel workbook (.xlsx, .xls) or a CSV file
into validated card drafts. Headers are matched case-insensitively and
accept snake or camel case ("sold_price", "soldPrice", "Sold Price").

Import is all-or-nothing: every row is validated up front and a single
bad row rejects the whole file, listing every failing row number.
"""

import io
import logging
import re
from collections.abc import Mapping
from datetime import date, datetime
from pathlib import PurePath
from typing import Any

import pandas as pd

from cardledger.analysis.windows import resolve_today
from cardledger.models.card import CardDraft, CardStatus, parse_card_date, parse_money
from cardledger.models.failure import CardValidationError, SpreadsheetImportError
from cardledger.services.card_validation import validate_card_draft

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = (".xlsx", ".xls", ".csv")

DEFAULT_NAME = "Unknown"
DEFAULT_CATEGORY = "Other"

# Normalized header -> card field
COLUMN_ALIASES: dict[str, str] = {
    "name": "name",
    "cardname": "name",
    "price": "price",
    "boughtprice": "price",
    "status": "status",
    "category": "category",
    "boughtdate": "bought_date",
    "purchasedate": "bought_date",
    "solddate": "sold_date",
    "soldprice": "sold_price",
    "imageurl": "image_url",
    "description": "description",
    "graded": "graded",
    "gradingcompany": "grading_company",
    "gradingvalue": "grading_value",
    "grade": "grading_value",
}

# Header row is row 1 in the user's spreadsheet
FIRST_DATA_ROW = 2

TEMPLATE_ROWS = [
    {"name": "Connor McDavid Rookie Card", "price": "150.00", "soldPrice": ""},
    {"name": "Patrick Mahomes Autograph", "price": "200.00", "soldPrice": "350.00"},
]

_HEADER_NOISE = re.compile(r"[\s_\-]")


def normalize_header(header: Any) -> str | None:
    """Map a raw column header to a card field, None if unrecognised."""
    key = _HEADER_NOISE.sub("", str(header).strip().lower())
    return COLUMN_ALIASES.get(key)


def _read_frame(content: bytes, filename: str) -> pd.DataFrame:
    extension = PurePath(filename or "").suffix.lower()
    if extension not in SUPPORTED_EXTENSIONS:
        raise SpreadsheetImportError(
            f"Unsupported file type '{extension or filename}'. "
            "Upload an .xlsx, .xls or .csv file."
        )

    buffer = io.BytesIO(content)
    try:
        if extension == ".csv":
            return pd.read_csv(buffer, dtype=object, skip_blank_lines=False)
        engine = "openpyxl" if extension == ".xlsx" else "xlrd"
        return pd.read_excel(buffer, sheet_name=0, engine=engine, dtype=object)
    except Exception as e:
        logger.warning("Could not read spreadsheet %s: %s", filename, e)
        raise SpreadsheetImportError(f"Could not read spreadsheet: {e}") from e


def _coerce_date(value: Any) -> Any:
    """Also accept the dd-mm-yyyy display format."""
    if value is None or isinstance(value, date | datetime):
        return value
    if parse_card_date(value) is not None:
        return value
    try:
        return datetime.strptime(str(value).strip(), "%d-%m-%Y").date()
    except ValueError:
        return value


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def apply_row_defaults(
    row: Mapping[str, Any], today: date, collection_id: int | None = None
) -> dict[str, Any]:
    """
    Fill the import defaults into one raw row.

    Name and category fall back to placeholders, the bought date to today.
    A row with a sold price and no status is a sale, and a sale without a
    date is dated on the purchase day.
    """
    data = dict(row)

    if _is_blank(data.get("name")):
        data["name"] = DEFAULT_NAME
    if _is_blank(data.get("category")):
        data["category"] = DEFAULT_CATEGORY

    data["bought_date"] = _coerce_date(data.get("bought_date"))
    if _is_blank(data.get("bought_date")):
        data["bought_date"] = today

    if _is_blank(data.get("status")):
        has_sale = parse_money(data.get("sold_price")) is not None
        data["status"] = CardStatus.SOLD.value if has_sale else CardStatus.BOUGHT.value

    if str(data["status"]).strip().lower() == CardStatus.SOLD.value:
        data["sold_date"] = _coerce_date(data.get("sold_date"))
        if _is_blank(data.get("sold_date")):
            data["sold_date"] = data["bought_date"]

    if collection_id is not None:
        data["collection_id"] = collection_id

    return data


def parse_spreadsheet(
    content: bytes,
    filename: str,
    *,
    today: date | None = None,
    collection_id: int | None = None,
) -> list[CardDraft]:
    """
    Parse an uploaded spreadsheet into validated card drafts.

    Args:
        content: Raw file bytes
        filename: Original file name; its extension selects the reader
        today: Default bought date for rows without one
        collection_id: Collection every imported card goes to (Main if None)

    Returns:
        One CardDraft per data row, in sheet order.

    Raises:
        SpreadsheetImportError: If the file cannot be read, holds no rows,
            or any row fails card validation.
    """
    today = resolve_today(today)
    frame = _read_frame(content, filename)

    # First matching column wins when two headers alias the same field
    known: dict[Any, str] = {}
    for column in frame.columns:
        field = normalize_header(column)
        if field is not None and field not in known.values():
            known[column] = field
    if "price" not in known.values():
        raise SpreadsheetImportError("Spreadsheet must have a 'price' column")

    frame = frame[list(known)].rename(columns=known).dropna(how="all")
    if frame.empty:
        raise SpreadsheetImportError("The spreadsheet contains no cards")

    # NaN/NaT cells become None so validation sees blanks uniformly
    frame = frame.astype(object).where(pd.notna(frame), None)

    drafts: list[CardDraft] = []
    row_errors: list[str] = []
    for index, row in frame.iterrows():
        row_number = int(index) + FIRST_DATA_ROW
        record = row.to_dict()
        try:
            drafts.append(validate_card_draft(apply_row_defaults(record, today, collection_id)))
        except CardValidationError as e:
            row_errors.append(f"Row {row_number}: {e.message}")

    if row_errors:
        logger.warning("Spreadsheet %s rejected: %d invalid rows", filename, len(row_errors))
        raise SpreadsheetImportError(
            f"{len(row_errors)} of {len(frame)} rows could not be imported",
            row_errors,
        )

    logger.info("Parsed %d cards from %s", len(drafts), filename)
    return drafts


def build_import_template() -> str:
    """CSV template users fill in for spreadsheet import."""
    return pd.DataFrame(TEMPLATE_ROWS).to_csv(index=False)
