"""Plain-text tuition payment receipts."""

from datetime import datetime
from typing import Any, Dict, Optional

RECEIPT_WIDTH = 43
HEAVY_RULE = "=" * RECEIPT_WIDTH
LIGHT_RULE = "-" * RECEIPT_WIDTH
TITLE = "TUITION PAYMENT RECEIPT"

# Receipt label -> field name
_FIELDS = {
    "Transaction ID": "transaction_id",
    "Status": "status",
    "Initiated At": "initiated_at",
    "Completed At": "completed_at",
    "Name": "payer_name",
    "Student ID": "receiver_id",
    "Student Name": "receiver_name",
    "Semester": "semester",
    "Academic Year": "academic_year",
    "Amount": "amount",
}


def format_currency(amount: int) -> str:
    return f"{amount:,} VND"


def parse_currency(text: str) -> int:
    return int(text.replace("VND", "").replace(",", "").strip())


def format_datetime(value: datetime) -> str:
    """Display form used on screen, e.g. 17:26 28/09/2025."""
    return value.strftime("%H:%M %d/%m/%Y")


def _iso(value: Optional[datetime]) -> str:
    return value.isoformat() if value is not None else "-"


def _value(obj: Any) -> str:
    return getattr(obj, "value", obj)


def receipt_filename(transaction_id: str) -> str:
    return f"receipt_{transaction_id}.txt"


def render_receipt(transaction: Any, generated_at: datetime) -> str:
    """Render the receipt for a transaction. Pure formatting."""
    shown_at = transaction.completed_at or transaction.initiated_at
    lines = [
        HEAVY_RULE,
        TITLE.center(RECEIPT_WIDTH).rstrip(),
        HEAVY_RULE,
        "",
        f"Transaction ID: {transaction.transaction_id}",
        f"Date: {format_datetime(shown_at)}",
        f"Status: {_value(transaction.status)}",
        f"Initiated At: {_iso(transaction.initiated_at)}",
        f"Completed At: {_iso(transaction.completed_at)}",
        "",
        LIGHT_RULE,
        "PAYER INFORMATION",
        LIGHT_RULE,
        f"Name: {transaction.payer_name}",
        "",
        LIGHT_RULE,
        "STUDENT INFORMATION",
        LIGHT_RULE,
        f"Student ID: {transaction.receiver_id}",
        f"Student Name: {transaction.receiver_name}",
        "",
        LIGHT_RULE,
        "PAYMENT DETAILS",
        LIGHT_RULE,
        f"Semester: {transaction.semester}",
        f"Academic Year: {transaction.academic_year}",
        f"Amount: {format_currency(transaction.amount)}",
        "",
        LIGHT_RULE,
        "This is an official receipt for tuition payment.",
        f"Generated on: {format_datetime(generated_at)}",
        HEAVY_RULE,
        "",
    ]
    return "\n".join(lines)


def parse_receipt(text: str) -> Dict[str, Any]:
    """Read the transaction fields back out of a rendered receipt."""
    parsed: Dict[str, Any] = {}
    for line in text.splitlines():
        label, sep, value = line.partition(": ")
        if not sep or label not in _FIELDS:
            continue
        parsed[_FIELDS[label]] = value.strip()

    missing = [field for field in _FIELDS.values() if field not in parsed]
    if missing:
        raise ValueError(f"Receipt is missing fields: {', '.join(missing)}")

    parsed["amount"] = parse_currency(parsed["amount"])
    parsed["initiated_at"] = datetime.fromisoformat(parsed["initiated_at"])
    completed_at = parsed["completed_at"]
    parsed["completed_at"] = None if completed_at == "-" else datetime.fromisoformat(completed_at)
    return parsed
