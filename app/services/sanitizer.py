"""Turn free-form user input into the canonical ``site.json`` manifest URL."""

import re

from pydantic import HttpUrl, TypeAdapter, ValidationError

from app.errors import InvalidUrl

MANIFEST_NAME = "site.json"

# Matches an explicit http:// or https:// prefix
_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)

# Matches any other explicit scheme, which cannot be upgraded
_OTHER_SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.\-]*://", re.IGNORECASE)

# Matches a plain-http prefix that must be upgraded
_HTTP_RE = re.compile(r"^http://", re.IGNORECASE)

# Matches a manifest file name already present at the end of the input
_MANIFEST_SUFFIX_RE = re.compile(r"/site\.json$", re.IGNORECASE)

# Matches a run of trailing slashes
_TRAILING_SLASHES_RE = re.compile(r"/+$")

_http_url = TypeAdapter(HttpUrl)


def sanitize(raw_input: str) -> str:
    """Return the canonical manifest URL for *raw_input*.

    The steps mirror what a user expects from an address bar: a missing scheme
    becomes ``https://``, ``http://`` is upgraded, a trailing ``site.json`` is
    tolerated, and the result always points at ``<path>/site.json``.  Feeding
    the output back in yields the same URL.

    Raises:
        InvalidUrl: if the input is empty or does not parse as an absolute URL.
    """
    url = (raw_input or "").strip()
    if not url:
        raise InvalidUrl("Please enter a valid URL!")

    if not _SCHEME_RE.match(url):
        if _OTHER_SCHEME_RE.match(url):
            raise InvalidUrl("Invalid URL format!")
        url = "https://" + url

    url = _HTTP_RE.sub("https://", url)
    url = _MANIFEST_SUFFIX_RE.sub("/", url)
    url = _TRAILING_SLASHES_RE.sub("", url) + "/"
    url += MANIFEST_NAME

    try:
        parsed = _http_url.validate_python(url)
    except ValidationError as exc:
        raise InvalidUrl("Invalid URL format!", cause=exc) from exc

    # Query strings or fragments typed before the appended segment swallow it
    if not parsed.host or not (parsed.path or "").endswith("/" + MANIFEST_NAME):
        raise InvalidUrl("Invalid URL format!")

    return str(parsed)
