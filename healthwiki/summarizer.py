"""Turn a resolved article title into a short, citable summary."""

from dataclasses import dataclass
from typing import Optional

from .wikipedia import WikipediaClient, article_url

DISAMBIGUATION_MARKER = "may refer to:"
DISAMBIGUATION_NOTICE = "The topic is ambiguous, but here is the primary medical summary:"


@dataclass(frozen=True)
class ArticleSummary:
    title: str
    summary: str
    source_url: str


def first_paragraph(extract: str) -> str:
    """
    Pick the first paragraph of a plain-text extract.

    Args:
        extract (str): Extract text with newline-separated paragraphs

    Returns:
        str: First segment that is not blank, or an empty string
    """
    for segment in extract.split("\n"):
        if segment.strip():
            return segment
    return ""


def clean_extract(extract: str) -> str:
    """First paragraph, with disambiguation lists replaced by a fixed notice."""
    paragraph = first_paragraph(extract)
    if DISAMBIGUATION_MARKER in paragraph:
        return DISAMBIGUATION_NOTICE
    return paragraph


class Summarizer:
    def __init__(self, client: WikipediaClient, article_base_url: str = "https://en.wikipedia.org/wiki/"):
        self.client = client
        self.article_base_url = article_base_url

    async def summarize(self, title: str) -> Optional[ArticleSummary]:
        """
        Fetch and clean the summary of an article.

        Args:
            title (str): Article title from the resolver

        Returns:
            Optional[ArticleSummary]: Summary with citation, or None if the page has no usable extract

        Raises:
            ExtractFetchFailed: If the extract request fails
        """
        extract = await self.client.fetch_extract(title)
        if not extract:
            return None

        summary = clean_extract(extract)
        if not summary:
            return None

        return ArticleSummary(
            title=title,
            summary=summary,
            source_url=article_url(self.article_base_url, title),
        )
