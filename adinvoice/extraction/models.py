from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any


@dataclass
class BillingPeriod:
    """Service period covered by an invoice."""

    start_date: date | None = None
    end_date: date | None = None


@dataclass
class CampaignLineItem:
    """Spend of one campaign on an invoice.

    Search platforms report clicks (and a derived cost per click), social
    platforms report impressions.
    """

    campaign_name: str | None = None
    amount: float | None = None
    clicks: int | None = None
    cpc: float | None = None
    impressions: int | None = None


@dataclass
class PaymentLineItem:
    """A payment applied to an invoice."""

    payment_date: date | None = None
    transaction_id: str | None = None
    mode_of_payment: str | None = None
    amount: float | None = None


@dataclass
class InvoiceData:
    """Structured billing fields extracted from invoice text."""

    invoice_number: str | None = None
    invoice_date: date | None = None
    account_id: str | None = None
    account_name: str | None = None
    location: str | None = None
    subtotal: float | None = None
    tax_amount: float | None = None
    total_amount: float | None = None
    currency: str | None = None
    billing_period: BillingPeriod | None = None
    campaigns: list[CampaignLineItem] = field(default_factory=list)
    payments: list[PaymentLineItem] = field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready dict with ISO-formatted dates."""
        return _jsonable(asdict(self))

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "InvoiceData":
        """Rebuild from a dict produced by to_payload()."""
        period = payload.get("billing_period")
        return cls(
            invoice_number=payload.get("invoice_number"),
            invoice_date=_from_iso(payload.get("invoice_date")),
            account_id=payload.get("account_id"),
            account_name=payload.get("account_name"),
            location=payload.get("location"),
            subtotal=payload.get("subtotal"),
            tax_amount=payload.get("tax_amount"),
            total_amount=payload.get("total_amount"),
            currency=payload.get("currency"),
            billing_period=(
                BillingPeriod(
                    start_date=_from_iso(period.get("start_date")),
                    end_date=_from_iso(period.get("end_date")),
                )
                if isinstance(period, dict)
                else None
            ),
            campaigns=[CampaignLineItem(**c) for c in payload.get("campaigns") or []],
            payments=[
                PaymentLineItem(
                    payment_date=_from_iso(p.get("payment_date")),
                    transaction_id=p.get("transaction_id"),
                    mode_of_payment=p.get("mode_of_payment"),
                    amount=p.get("amount"),
                )
                for p in payload.get("payments") or []
            ],
        )


def _jsonable(value: Any) -> Any:
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: _jsonable(val) for key, val in value.items()}
    if isinstance(value, list):
        return [_jsonable(item) for item in value]
    return value


def _from_iso(value: Any) -> date | None:
    if not isinstance(value, str) or not value:
        return None
    return date.fromisoformat(value)
