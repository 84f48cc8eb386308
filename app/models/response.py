from typing import List, Optional

from pydantic import BaseModel

from app.models.site import CardView, SiteMetadata


class AnalyzeResponse(BaseModel):
    url: str
    base_url: str
    site: SiteMetadata
    total_pages: int
    cards: List[CardView]


class SessionResponse(BaseModel):
    loading: bool
    raw_url: str
    url: str
    base_url: str
    site: Optional[SiteMetadata] = None
    total_pages: int
    cards: List[CardView]
    error: Optional[str] = None
    """Message of the most recent failed load, cleared by the next load."""
