"""
Useful validation methods
"""
from datetime import datetime, timezone

from django.core.exceptions import ValidationError
from django.core.validators import URLValidator
from django.utils.translation import gettext_lazy as _

# Links may only point at web pages.
LINK_URL_SCHEMES = ["http", "https"]


def validate_utc_datetime(dt: datetime):
    if dt.tzinfo != timezone.utc:
        raise ValidationError(
            _("The timezone for %(datetime)s is not UTC."),
            params={"datetime": dt},
        )


def validate_link_url(url: str):
    """
    Raise ValidationError unless ``url`` is an absolute http(s) URL.
    """
    if not isinstance(url, str) or not url.strip():
        raise ValidationError(_("Link URL cannot be empty."), code="invalid")
    URLValidator(
        schemes=LINK_URL_SCHEMES,
        message=_("URL must start with http:// or https:// and be a valid URL."),
    )(url)
