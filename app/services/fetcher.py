import asyncio
import ipaddress
import socket
from typing import Optional
from urllib.parse import urljoin, urlparse

import httpx

MAX_CONTENT_SIZE = 10 * 1024 * 1024  # 10 MB
TIMEOUT = 10  # seconds
MAX_REDIRECTS = 10
ALLOWED_SCHEMES = {"http", "https"}

HEADERS = {
    "Accept": "application/json, text/plain;q=0.9, */*;q=0.1",
    "User-Agent": "site-analyzer/1.0",
}


async def _is_private_address(hostname: str) -> bool:
    """Return True if *hostname* resolves to a private, loopback, or link-local address."""
    try:
        infos = await asyncio.get_running_loop().getaddrinfo(hostname, None)
    except socket.gaierror:
        return False

    for info in infos:
        # Strip IPv6 zone IDs (e.g. "::1%eth0" → "::1")
        raw_ip = str(info[4][0]).split("%")[0]
        try:
            addr = ipaddress.ip_address(raw_ip)
        except ValueError:
            continue
        if addr.is_private or addr.is_loopback or addr.is_link_local or addr.is_reserved:
            return True
    return False


async def _validate_url(url: str) -> None:
    """Raise ValueError if *url* fails SSRF / scheme validation."""
    parsed = urlparse(url)

    if parsed.scheme not in ALLOWED_SCHEMES:
        raise ValueError(f"Scheme '{parsed.scheme}' is not allowed. Use http or https.")

    hostname = parsed.hostname
    if not hostname:
        raise ValueError("URL must have a valid hostname.")

    if await _is_private_address(hostname):
        raise ValueError("Requests to private/internal addresses are not allowed.")


async def fetch_url(url: str, *, client: Optional[httpx.AsyncClient] = None) -> str:
    """Fetch *url* and return the response body as text.

    Redirects are followed manually so every hop is validated against the SSRF
    rules before it is requested.  Pass *client* to reuse a configured
    :class:`httpx.AsyncClient`; otherwise a short-lived one is created.

    Raises:
        ValueError: if the URL (or a redirect target) fails SSRF / scheme validation.
        httpx.HTTPError: on network errors, timeouts, or a non-2xx status.
        RuntimeError: on oversized bodies or too many redirects.
    """
    if client is None:
        async with httpx.AsyncClient(follow_redirects=False, timeout=TIMEOUT, headers=HEADERS) as own:
            return await _fetch(own, url)
    return await _fetch(client, url)


async def _fetch(client: httpx.AsyncClient, url: str) -> str:
    await _validate_url(url)
    current_url = url

    for _ in range(MAX_REDIRECTS + 1):
        async with client.stream("GET", current_url, follow_redirects=False) as response:
            if response.is_redirect:
                location = response.headers.get("location", "")
                next_url = urljoin(current_url, location)
                await _validate_url(next_url)
                current_url = next_url
                continue

            response.raise_for_status()

            content_length = response.headers.get("content-length")
            if content_length and int(content_length) > MAX_CONTENT_SIZE:
                raise RuntimeError("Response body exceeds the maximum allowed size.")

            chunks = []
            total = 0
            async for chunk in response.aiter_bytes():
                total += len(chunk)
                if total > MAX_CONTENT_SIZE:
                    raise RuntimeError("Response body exceeds the maximum allowed size.")
                chunks.append(chunk)

            return b"".join(chunks).decode("utf-8-sig", errors="replace")

    raise RuntimeError("Too many redirects.")
