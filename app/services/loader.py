"""Manifest loading: fetch, decode, validate, normalise, and commit to the session."""

import json
import logging
from typing import List, Tuple
from urllib.parse import urlsplit

import httpx
from pydantic import ValidationError

from app.errors import FetchError, SchemaError, SiteAnalyzerError
from app.models.manifest import ContentItem, ManifestDocument
from app.models.site import SiteMetadata
from app.services.fetcher import fetch_url
from app.services.normalizer import normalize
from app.services.session import AnalyzerSession

logger = logging.getLogger(__name__)

SCHEMA_ERROR_MESSAGE = "Invalid site.json schema."


def derive_base_url(canonical_url: str) -> str:
    """Return ``scheme://host[:port]`` of *canonical_url* (no path, no trailing slash)."""
    parts = urlsplit(canonical_url)
    host = parts.netloc.rpartition("@")[2]
    return f"{parts.scheme}://{host}"


def parse_manifest(body: str) -> ManifestDocument:
    """Decode *body* and check the two required top-level keys.

    Raises:
        FetchError: if *body* is not JSON.
        SchemaError: if ``metadata`` or ``items`` is missing.
    """
    try:
        data = json.loads(body)
    except (ValueError, RecursionError) as exc:
        raise FetchError(f"Failed to decode site.json: {exc}", cause=exc) from exc

    try:
        return ManifestDocument.model_validate(data)
    except ValidationError as exc:
        raise SchemaError(SCHEMA_ERROR_MESSAGE, cause=exc) from exc


async def _fetch_manifest(canonical_url: str) -> str:
    try:
        return await fetch_url(canonical_url)
    except httpx.TimeoutException as exc:
        raise FetchError("Timed out fetching site.json.", cause=exc) from exc
    except httpx.HTTPStatusError as exc:
        raise FetchError(
            f"Failed to fetch site.json (HTTP {exc.response.status_code}).", cause=exc
        ) from exc
    except (ValueError, httpx.HTTPError, RuntimeError) as exc:
        raise FetchError(f"Failed to fetch site.json: {exc}", cause=exc) from exc


async def load(
    session: AnalyzerSession,
    canonical_url: str,
    *,
    raw_url: str = "",
) -> Tuple[SiteMetadata, List[ContentItem]]:
    """Load the manifest at *canonical_url* into *session*.

    ``session.loading`` is true for the whole fetch and is released on every
    exit path.  On failure the session's items and metadata are cleared
    together and the error is re-raised for the caller to present.  Results
    of a load that has been superseded by a newer one are returned to the
    caller but never committed.

    Raises:
        FetchError: transport failure, non-2xx status, or undecodable body.
        SchemaError: decoded JSON lacks ``metadata`` or ``items``.
    """
    base_url = derive_base_url(canonical_url)
    token = session.begin(canonical_url, base_url, raw_url=raw_url)
    logger.info("Loading manifest", extra={"url": canonical_url, "token": token})

    try:
        body = await _fetch_manifest(canonical_url)
        manifest = parse_manifest(body)
        site_metadata = normalize(manifest, base_url)
        if session.commit(token, site_metadata, manifest.items):
            logger.info(
                "Manifest loaded",
                extra={"url": canonical_url, "items": len(manifest.items)},
            )
        return site_metadata, manifest.items
    except SiteAnalyzerError as exc:
        logger.warning("Manifest load failed for %s: %s", canonical_url, exc)
        session.fail(token, exc.message)
        raise
    except Exception:
        logger.exception("Unexpected error loading manifest %s", canonical_url)
        session.fail(token, "An unexpected error occurred.")
        raise
    finally:
        session.finish(token)
