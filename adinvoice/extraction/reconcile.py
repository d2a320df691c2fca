from adinvoice.extraction.models import InvoiceData
from adinvoice.extraction.values import round_money

DEFAULT_CURRENCY = "INR"


def reconcile(data: InvoiceData) -> InvoiceData:
    """Fill derived totals and per-campaign cost per click in place.

    Order matters: subtotal from total and tax, total from subtotal and tax,
    then subtotal from campaign spend when still missing or zero.
    """
    if not data.currency:
        data.currency = DEFAULT_CURRENCY

    if data.subtotal is None and data.total_amount is not None and data.tax_amount is not None:
        data.subtotal = round_money(data.total_amount - data.tax_amount)

    if data.total_amount is None and data.subtotal is not None and data.tax_amount is not None:
        data.total_amount = round_money(data.subtotal + data.tax_amount)

    if not data.subtotal and data.campaigns:
        data.subtotal = round_money(sum(c.amount or 0.0 for c in data.campaigns))

    for campaign in data.campaigns:
        clicks, amount = campaign.clicks, campaign.amount
        if clicks is not None and amount is not None and clicks > 0 and amount > 0:
            campaign.cpc = round_money(amount / clicks)
        else:
            campaign.cpc = None
    return data
