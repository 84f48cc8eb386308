from typing import Optional


def resolve(path: Optional[str], base_url: str) -> str:
    """Resolve *path* against *base_url*.

    Returns ``""`` for an empty path; callers treat that as "no value".  Paths
    that already start with ``http`` are returned unchanged.  Otherwise exactly
    one ``/`` joins the two halves, whether or not either side carries one.
    """
    if not path:
        return ""
    if path.startswith("http"):
        return path
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"
