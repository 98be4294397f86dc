"""Two-step article resolution: plain search, then a clinically biased search."""

import logging
from typing import Optional

from .wikipedia import WikipediaClient

logger = logging.getLogger(__name__)

AUGMENTED_SUFFIX = "medical condition OR human disease"


def augment_term(term: str) -> str:
    return f"{term} {AUGMENTED_SUFFIX}"


class Resolver:
    """
    Find the best matching article title for a candidate term.

    The search backend sometimes answers junk queries with its own landing
    page, so a title equal to `root_title` counts as no match.
    """

    def __init__(self, client: WikipediaClient, root_title: str = "Wikipedia"):
        self.client = client
        self.root_title = root_title.lower()

    def _usable(self, title: Optional[str]) -> Optional[str]:
        if not title or title.lower() == self.root_title:
            return None
        return title

    async def resolve(self, term: str) -> Optional[str]:
        """
        Resolve a term to an article title.

        Args:
            term (str): Normalized search term

        Returns:
            Optional[str]: Article title, or None when both searches come back empty

        Raises:
            SearchFailed: If either search request fails
        """
        title = self._usable(await self.client.search_title(term))
        if title:
            return title

        logger.info("Primary search empty, retrying with clinical qualifiers")
        return self._usable(await self.client.search_title(augment_term(term)))
