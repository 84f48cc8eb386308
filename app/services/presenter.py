"""Card presentation: turns raw manifest items into display-ready records."""

from typing import List, Optional, Sequence, Tuple

from app.models.manifest import ContentItem
from app.models.site import CardView, SiteMetadata, SourceUrlOrigin
from app.services.normalizer import format_epoch
from app.services.resolver import resolve

PLACEHOLDER_IMAGE_URL = "https://via.placeholder.com/150"

_INDEX_SUFFIX = "/index.html"


def select_image(item: ContentItem, site_metadata: Optional[SiteMetadata]) -> str:
    """Return the first available image path for *item*.

    Order: first entry of ``metadata.images``, ``metadata.image``, the site
    logo, then a fixed placeholder, so a card always has an image.
    """
    images = item.metadata.images or []
    first = images[0] if images and isinstance(images[0], str) else None
    logo = site_metadata.logo if site_metadata else None
    return first or item.metadata.image or logo or PLACEHOLDER_IMAGE_URL


def source_url_for(item: ContentItem, page_url: str, base_url: str) -> Tuple[str, SourceUrlOrigin]:
    # An explicit location wins over the index.html heuristic
    if item.location:
        return resolve(item.location, base_url), "location"
    if page_url:
        return page_url.rstrip("/") + _INDEX_SUFFIX, "index_suffix"
    return "", "none"


def read_time_label(readtime: Optional[float]) -> Optional[str]:
    if readtime is None or readtime <= 0:
        return None
    minutes = int(readtime) if float(readtime).is_integer() else readtime
    return f"{minutes} min read"


def _count_label(count: int, noun: str) -> Optional[str]:
    return f"Contains {count} {noun}" if count > 0 else None


def present(item: ContentItem, site_metadata: Optional[SiteMetadata], base_url: str) -> CardView:
    """Build the :class:`CardView` for one manifest item."""
    meta = item.metadata
    title = item.title or ""
    page_url = resolve(item.slug, base_url)
    source_url, origin = source_url_for(item, page_url, base_url)
    image_count = len(meta.images or [])
    video_count = len(meta.videos or [])

    return CardView(
        title=title,
        description=item.description or "",
        image_url=resolve(select_image(item, site_metadata), base_url),
        image_alt=title or "Image",
        page_url=page_url,
        source_url=source_url,
        source_url_origin=origin,
        last_updated=format_epoch(meta.updated),
        read_time_label=read_time_label(meta.readtime),
        image_count=image_count,
        video_count=video_count,
        image_count_label=_count_label(image_count, "images"),
        video_count_label=_count_label(video_count, "videos"),
    )


def present_all(
    items: Sequence[ContentItem],
    site_metadata: Optional[SiteMetadata],
    base_url: str,
) -> List[CardView]:
    return [present(item, site_metadata, base_url) for item in items]
