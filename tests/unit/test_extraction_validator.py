from datetime import date

import pytest

from adinvoice.classification.platform import Platform
from adinvoice.extraction.exceptions import ExtractionResponseError
from adinvoice.extraction.validator import validate_and_build


class TestValidateAndBuild:
    def test_builds_scalar_fields(self) -> None:
        data = validate_and_build(
            {
                "invoiceNumber": 5123456789,
                "invoiceDate": "5 March 2024",
                "accountName": "  Acme  ",
                "subtotal": "₹1,000.00",
                "taxAmount": "n/a",
                "currency": "INR",
            },
            Platform.GOOGLE_ADS,
        )
        assert data.invoice_number == "5123456789"
        assert data.invoice_date == date(2024, 3, 5)
        assert data.account_name == "Acme"
        assert data.subtotal == 1000.0
        assert data.tax_amount is None

    def test_missing_fields_become_none(self) -> None:
        data = validate_and_build({}, Platform.OTHER)
        assert data.invoice_number is None
        assert data.billing_period is None
        assert data.campaigns == []
        assert data.payments == []

    def test_builds_billing_period(self) -> None:
        data = validate_and_build(
            {"billingPeriod": {"startDate": "2024-01-01", "endDate": "garbage"}},
            Platform.OTHER,
        )
        assert data.billing_period is not None
        assert data.billing_period.start_date == date(2024, 1, 1)
        assert data.billing_period.end_date is None

    def test_google_campaigns_keep_clicks_only(self) -> None:
        data = validate_and_build(
            {"campaigns": [{"campaignName": "Brand", "amount": 10, "clicks": 5, "impressions": 99}]},
            Platform.GOOGLE_ADS,
        )
        assert data.campaigns[0].clicks == 5
        assert data.campaigns[0].impressions is None

    def test_meta_campaigns_keep_impressions_only(self) -> None:
        data = validate_and_build(
            {"campaigns": [{"campaignName": "Reach", "amount": 10, "clicks": 5, "impressions": 99}]},
            Platform.META_ADS,
        )
        assert data.campaigns[0].impressions == 99
        assert data.campaigns[0].clicks is None

    def test_builds_payments(self) -> None:
        data = validate_and_build(
            {
                "payments": [
                    {
                        "date": "2024-02-01",
                        "transactionId": "TX1",
                        "modeOfPayment": "Card",
                        "amount": "50.00",
                    }
                ]
            },
            Platform.META_ADS,
        )
        payment = data.payments[0]
        assert payment.payment_date == date(2024, 2, 1)
        assert payment.transaction_id == "TX1"
        assert payment.amount == 50.0

    @pytest.mark.parametrize(
        "payload",
        [
            {"billingPeriod": "January"},
            {"campaigns": {"name": "x"}},
            {"campaigns": ["x"]},
            {"payments": [1]},
            {"campaigns": [{}] * 501},
        ],
    )
    def test_rejects_wrong_shapes(self, payload: dict[str, object]) -> None:
        with pytest.raises(ExtractionResponseError):
            validate_and_build(payload, Platform.GOOGLE_ADS)
