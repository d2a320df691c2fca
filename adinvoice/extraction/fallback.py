"""Deterministic regex extraction used when the AI tier is unavailable."""

import re

from adinvoice.classification.platform import Platform
from adinvoice.extraction.models import CampaignLineItem, InvoiceData
from adinvoice.extraction.values import parse_date, to_int, to_number

_GOOGLE_INVOICE_NUMBER_RE = re.compile(r"Invoice number[:\s]+(\d{6,})", re.IGNORECASE)
_GOOGLE_DATE_RE = re.compile(r"(\d{1,2}\s+[A-Za-z]+\s+20\d{2})")
_GOOGLE_ACCOUNT_ID_RE = re.compile(r"Account ID[:\s]+([\d-]+)", re.IGNORECASE)
_GOOGLE_ACCOUNT_NAME_RE = re.compile(r"Account:\s+([^\n]+)", re.IGNORECASE)
_GOOGLE_LOCATION_RE = re.compile(r"Bill to\s+([\s\S]*?)India", re.IGNORECASE)
_GOOGLE_SUBTOTAL_RE = re.compile(r"Subtotal in INR\s+₹?([\d,]+\.\d{2})", re.IGNORECASE)
_GOOGLE_TAX_RE = re.compile(r"(?:Integrated GST|IGST)[^\n]*?\s+₹?([\d,]+\.\d{2})", re.IGNORECASE)
_GOOGLE_TOTAL_RE = re.compile(r"\bTotal in INR\s+₹?([\d,]+\.\d{2})", re.IGNORECASE)
_CAMPAIGN_ROW_RE = re.compile(r"(.*?)\s+(\d+)\s+Clicks\s+₹?([\d,]+\.\d{2})", re.IGNORECASE)

_GENERIC_INVOICE_NUMBER_RE = re.compile(
    r"invoice\s*(?:number|no\.?|#)\s*:?\s*([A-Za-z0-9-]+)", re.IGNORECASE
)
_GENERIC_DATE_RE = re.compile(
    r"(?:invoice\s+)?date\s*:?\s*(\d{4}-\d{2}-\d{2}|\d{1,2}[/.-]\d{1,2}[/.-]\d{2,4}"
    r"|\d{1,2}\s+[A-Za-z]+\s+\d{4}|[A-Za-z]+\s+\d{1,2},\s*\d{4})",
    re.IGNORECASE,
)
_GENERIC_ACCOUNT_ID_RE = re.compile(r"Account ID\s*:?\s*([\w-]+)", re.IGNORECASE)
_GENERIC_TOTAL_RE = re.compile(
    r"\btotal\s*(?:amount|cost|due)?\s*(?:in\s+[A-Z]{3})?\s*:?\s*[₹$€£]?\s*([\d,]+\.?\d*)",
    re.IGNORECASE,
)


def extract_with_patterns(text: str, platform: Platform) -> InvoiceData:
    """Extract invoice fields with platform-tuned regular expressions."""
    if platform == Platform.GOOGLE_ADS:
        return _extract_google(text)
    return _extract_generic(text)


def extract_campaign_rows(text: str) -> list[CampaignLineItem]:
    """Parse "<name> <n> Clicks ₹<amount>" rows of a search-platform invoice."""
    campaigns: list[CampaignLineItem] = []
    for match in _CAMPAIGN_ROW_RE.finditer(text):
        campaigns.append(
            CampaignLineItem(
                campaign_name=match.group(1).strip() or None,
                clicks=to_int(match.group(2)),
                amount=to_number(match.group(3)),
            )
        )
    return campaigns


def _extract_google(text: str) -> InvoiceData:
    return InvoiceData(
        invoice_number=_first_group(_GOOGLE_INVOICE_NUMBER_RE, text),
        invoice_date=parse_date(_first_group(_GOOGLE_DATE_RE, text)),
        account_id=_first_group(_GOOGLE_ACCOUNT_ID_RE, text),
        account_name=_first_group(_GOOGLE_ACCOUNT_NAME_RE, text),
        location=_first_group(_GOOGLE_LOCATION_RE, text),
        subtotal=to_number(_first_group(_GOOGLE_SUBTOTAL_RE, text)),
        tax_amount=to_number(_first_group(_GOOGLE_TAX_RE, text)),
        total_amount=to_number(_first_group(_GOOGLE_TOTAL_RE, text)),
        currency="INR",
        campaigns=extract_campaign_rows(text),
    )


def _extract_generic(text: str) -> InvoiceData:
    return InvoiceData(
        invoice_number=_first_group(_GENERIC_INVOICE_NUMBER_RE, text),
        invoice_date=parse_date(_first_group(_GENERIC_DATE_RE, text)),
        account_id=_first_group(_GENERIC_ACCOUNT_ID_RE, text),
        total_amount=to_number(_first_group(_GENERIC_TOTAL_RE, text)),
    )


def _first_group(pattern: re.Pattern[str], text: str) -> str | None:
    match = pattern.search(text)
    if match is None:
        return None
    value = match.group(1).strip()
    return value or None
