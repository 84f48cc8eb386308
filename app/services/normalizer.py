"""Manifest metadata normalisation: defaults, date formatting, logo resolution."""

from datetime import datetime, timezone
from typing import Optional

from app.models.manifest import ManifestDocument
from app.models.site import SiteMetadata
from app.services.resolver import resolve

UNKNOWN_DATE = "Unknown"

DEFAULT_SITE_NAME = "Unknown Site"
DEFAULT_DESCRIPTION = "No description available."
DEFAULT_THEME = "Default"
DEFAULT_HEX_CODE = "#333"
DEFAULT_ICON = ""


def format_epoch(seconds: Optional[float]) -> str:
    """Render Unix epoch *seconds* as a short calendar date (``M/D/YYYY``, UTC).

    Missing or zero timestamps, and ones outside the platform's date range,
    render as ``"Unknown"``.  Time of day is dropped.
    """
    if not seconds:
        return UNKNOWN_DATE
    try:
        moment = datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return UNKNOWN_DATE
    return f"{moment.month}/{moment.day}/{moment.year}"


def normalize(manifest: ManifestDocument, base_url: str) -> SiteMetadata:
    """Flatten the manifest's nested metadata into a :class:`SiteMetadata`.

    Never fails: every field falls back to a literal default.
    """
    site = manifest.metadata.site
    theme = manifest.metadata.theme

    return SiteMetadata(
        site_name=site.name or DEFAULT_SITE_NAME,
        description=site.description or DEFAULT_DESCRIPTION,
        logo=resolve(site.logo, base_url) or None,
        theme=theme.name or DEFAULT_THEME,
        created=format_epoch(site.created),
        last_updated=format_epoch(site.updated),
        hex_code=theme.variables.hex_code or DEFAULT_HEX_CODE,
        icon=theme.variables.icon or DEFAULT_ICON,
    )
