from enum import Enum


class Platform(str, Enum):
    """Advertising network that issued an invoice."""

    GOOGLE_ADS = "google_ads"
    META_ADS = "meta_ads"
    FACEBOOK_ADS = "facebook_ads"
    INSTAGRAM_ADS = "instagram_ads"
    OTHER = "other"


def classify_platform(text: str) -> Platform:
    """Infer the issuing platform from invoice text.

    Rules are checked in order and the first match wins, so an invoice that
    mentions both Google Ads and Meta is a Google invoice.
    """
    lowered = text.lower()
    if "google ads" in lowered or "google invoice" in lowered:
        return Platform.GOOGLE_ADS
    if "meta" in lowered and ("ads" in lowered or "advertising" in lowered):
        return Platform.META_ADS
    if "facebook ads" in lowered:
        return Platform.FACEBOOK_ADS
    if "instagram ads" in lowered:
        return Platform.INSTAGRAM_ADS
    return Platform.OTHER
