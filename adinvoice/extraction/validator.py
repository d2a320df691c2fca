"""Builds typed InvoiceData from the parsed AI response.

Container shapes are enforced strictly: a wrong shape means the response
cannot be trusted and the caller falls back to pattern extraction. Scalar
fields are coerced leniently, unusable values become None.
"""

from typing import Any

from adinvoice.classification.platform import Platform
from adinvoice.extraction.exceptions import ExtractionResponseError
from adinvoice.extraction.models import (
    BillingPeriod,
    CampaignLineItem,
    InvoiceData,
    PaymentLineItem,
)
from adinvoice.extraction.values import parse_date, to_int, to_number, to_text

_MAX_LINE_ITEMS = 500


def validate_and_build(data: dict[str, Any], platform: Platform) -> InvoiceData:
    """Validate a parsed JSON object and build InvoiceData.

    Raises:
        ExtractionResponseError: if a nested structure has the wrong shape.
    """
    return InvoiceData(
        invoice_number=to_text(data.get("invoiceNumber")),
        invoice_date=parse_date(data.get("invoiceDate")),
        account_id=to_text(data.get("accountId")),
        account_name=to_text(data.get("accountName")),
        location=to_text(data.get("location")),
        subtotal=to_number(data.get("subtotal")),
        tax_amount=to_number(data.get("taxAmount")),
        total_amount=to_number(data.get("totalAmount")),
        currency=to_text(data.get("currency")),
        billing_period=_build_billing_period(data.get("billingPeriod")),
        campaigns=_build_campaigns(data.get("campaigns"), platform),
        payments=_build_payments(data.get("payments")),
    )


def _build_billing_period(raw: Any) -> BillingPeriod | None:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise ExtractionResponseError("'billingPeriod' must be an object or null")
    return BillingPeriod(
        start_date=parse_date(raw.get("startDate")),
        end_date=parse_date(raw.get("endDate")),
    )


def _require_list(raw: Any, field: str) -> list[Any]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ExtractionResponseError(f"'{field}' must be a list")
    if len(raw) > _MAX_LINE_ITEMS:
        raise ExtractionResponseError(
            f"Too many {field}: {len(raw)} (max {_MAX_LINE_ITEMS})"
        )
    return raw


def _build_campaigns(raw: Any, platform: Platform) -> list[CampaignLineItem]:
    campaigns: list[CampaignLineItem] = []
    for i, item in enumerate(_require_list(raw, "campaigns")):
        if not isinstance(item, dict):
            raise ExtractionResponseError(f"Campaign at index {i} must be an object")
        campaign = CampaignLineItem(
            campaign_name=to_text(item.get("campaignName")),
            amount=to_number(item.get("amount")),
        )
        if platform == Platform.GOOGLE_ADS:
            campaign.clicks = to_int(item.get("clicks"))
        elif platform == Platform.META_ADS:
            campaign.impressions = to_int(item.get("impressions"))
        campaigns.append(campaign)
    return campaigns


def _build_payments(raw: Any) -> list[PaymentLineItem]:
    payments: list[PaymentLineItem] = []
    for i, item in enumerate(_require_list(raw, "payments")):
        if not isinstance(item, dict):
            raise ExtractionResponseError(f"Payment at index {i} must be an object")
        payments.append(
            PaymentLineItem(
                payment_date=parse_date(item.get("date")),
                transaction_id=to_text(item.get("transactionId")),
                mode_of_payment=to_text(item.get("modeOfPayment")),
                amount=to_number(item.get("amount")),
            )
        )
    return payments
