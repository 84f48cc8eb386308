from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict


class SiteMetadata(BaseModel):
    """Flat, fully-defaulted overview of a site."""

    model_config = ConfigDict(frozen=True)

    site_name: str
    description: str
    logo: Optional[str] = None
    theme: str
    created: str
    last_updated: str
    hex_code: str
    icon: str


SourceUrlOrigin = Literal["location", "index_suffix", "none"]


class CardView(BaseModel):
    """Display-ready card for one content item.  Never persisted."""

    title: str
    description: str
    image_url: str
    image_alt: str
    page_url: str
    source_url: str
    source_url_origin: SourceUrlOrigin
    """Where ``source_url`` came from.

    ``"location"``
        The manifest supplied an explicit ``location`` for the item.

    ``"index_suffix"``
        No ``location``; derived as ``page_url + "/index.html"``.

    ``"none"``
        Neither a location nor a page URL was available.
    """
    last_updated: str
    read_time_label: Optional[str] = None
    image_count: int
    video_count: int
    image_count_label: Optional[str] = None
    video_count_label: Optional[str] = None
