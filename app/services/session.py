"""Live analyzer session shared by the HTTP layer and the manifest loader."""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from app.models.manifest import ContentItem
from app.models.site import SiteMetadata

logger = logging.getLogger(__name__)


@dataclass
class AnalyzerSession:
    """State of the most recently issued manifest load.

    Every load takes a generation token from :meth:`begin`.  Only the holder of
    the latest token may commit, fail, or finish; results from superseded
    loads are discarded so overlapping requests cannot resurrect stale data.
    ``site_metadata``, ``items`` and the URL they were resolved against are
    always replaced together; ``base_url`` belongs to the latest issued load,
    ``committed_base_url`` to the data currently held.
    """

    raw_url: str = ""
    canonical_url: str = ""
    base_url: str = ""
    committed_url: str = ""
    committed_base_url: str = ""
    site_metadata: Optional[SiteMetadata] = None
    items: List[ContentItem] = field(default_factory=list)
    loading: bool = False
    error: Optional[str] = None
    generation: int = 0

    def begin(self, canonical_url: str, base_url: str, raw_url: str = "") -> int:
        self.generation += 1
        self.raw_url = raw_url or canonical_url
        self.canonical_url = canonical_url
        self.base_url = base_url
        self.loading = True
        return self.generation

    def is_current(self, token: int) -> bool:
        return token == self.generation

    def commit(self, token: int, site_metadata: SiteMetadata, items: List[ContentItem]) -> bool:
        if not self.is_current(token):
            logger.info("Discarding stale manifest load", extra={"token": token, "latest": self.generation})
            return False
        self.site_metadata, self.items = site_metadata, list(items)
        self.committed_url, self.committed_base_url = self.canonical_url, self.base_url
        self.error = None
        return True

    def fail(self, token: int, message: str) -> bool:
        if not self.is_current(token):
            logger.info("Ignoring failure of stale manifest load", extra={"token": token, "latest": self.generation})
            return False
        self.site_metadata, self.items = None, []
        self.committed_url, self.committed_base_url = self.canonical_url, self.base_url
        self.error = message
        return True

    def finish(self, token: int) -> None:
        if self.is_current(token):
            self.loading = False
