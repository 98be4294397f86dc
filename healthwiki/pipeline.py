"""
Per-request query pipeline.

Runs classification, resolution and summarization in order and reduces every
branch to one canonical Result that the serializers in formatters.py render.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .completion import CompletionClient
from .content_filter import GREETING_MESSAGE, Disposition, classify, get_out_of_scope_message
from .exceptions import CompletionFailed
from .resolver import Resolver
from .security import fingerprint
from .summarizer import Summarizer

logger = logging.getLogger(__name__)

SUCCESS_DISCLAIMER = "Disclaimer: I am a fact-finding assistant, not a doctor."


class Outcome(str, Enum):
    GREETING = "greeting"
    OUT_OF_SCOPE = "out_of_scope"
    SUCCESS = "success"
    NOT_FOUND = "not_found"
    EXTRACT_FAILED = "extract_failed"
    COMPLETION = "completion"


@dataclass(frozen=True)
class Result:
    """
    Canonical outcome of one request.

    `prompt` is the trimmed prompt as accepted by ChatIn, and `term` the
    normalized search term derived from it. `title`, `summary` and
    `source_url` are all set only for SUCCESS. `message` carries the
    user-facing text as plain text; the text serializer escapes the parts
    that come from the user or from Wikipedia.
    """

    outcome: Outcome
    prompt: str
    term: str = ""
    title: Optional[str] = None
    summary: Optional[str] = None
    source_url: Optional[str] = None
    message: str = ""

    @property
    def is_success(self) -> bool:
        return self.outcome == Outcome.SUCCESS


def not_found_message(prompt: str) -> str:
    return (
        "Disclaimer: I am a fact-finding assistant. I could not find a relevant Wikipedia article for "
        f'**"{prompt}"**. Please try a more specific health term.'
    )


def extract_failed_message(title: str) -> str:
    return f'Disclaimer: I am a fact-finding assistant. Found article "{title}" but could not extract a summary.'


class QueryPipeline:
    """Stateless pipeline; one instance is shared by all requests."""

    def __init__(
        self,
        resolver: Resolver,
        summarizer: Summarizer,
        completion: Optional[CompletionClient] = None,
        log_secret: Optional[str] = None,
    ):
        self.resolver = resolver
        self.summarizer = summarizer
        self.completion = completion
        self.log_secret = log_secret

    async def run(self, prompt: str, system_instruction: Optional[str] = None) -> Result:
        """
        Answer one prompt.

        Args:
            prompt (str): User text, already trimmed by ChatIn
            system_instruction (str, optional): Passed to the completion fallback

        Returns:
            Result: Canonical outcome

        Raises:
            SearchFailed: If a search request fails
            ExtractFetchFailed: If the extract request fails
        """
        query_id = fingerprint(prompt, self.log_secret)
        classification = classify(prompt)

        if classification.disposition == Disposition.GREETING:
            logger.info("query=%s outcome=greeting", query_id)
            return Result(Outcome.GREETING, prompt, message=GREETING_MESSAGE)

        term = classification.term
        if classification.disposition == Disposition.OUT_OF_SCOPE:
            logger.info("query=%s outcome=out_of_scope", query_id)
            return Result(Outcome.OUT_OF_SCOPE, prompt, term, message=get_out_of_scope_message(term))

        title = await self.resolver.resolve(term)
        if not title:
            logger.info("query=%s outcome=not_found", query_id)
            result = Result(Outcome.NOT_FOUND, prompt, term, message=not_found_message(prompt))
            return await self._fall_back(result, system_instruction, query_id)

        article = await self.summarizer.summarize(title)
        if article is None:
            logger.info("query=%s outcome=extract_failed title=%r", query_id, title)
            result = Result(Outcome.EXTRACT_FAILED, prompt, term, title=title, message=extract_failed_message(title))
            return await self._fall_back(result, system_instruction, query_id)

        logger.info("query=%s outcome=success title=%r", query_id, title)
        return Result(
            Outcome.SUCCESS,
            prompt,
            term,
            title=article.title,
            summary=article.summary,
            source_url=article.source_url,
            message=SUCCESS_DISCLAIMER,
        )

    async def _fall_back(self, result: Result, system_instruction: Optional[str], query_id: str) -> Result:
        if self.completion is None:
            return result

        try:
            content = await self.completion.complete(result.prompt, system_instruction)
        except CompletionFailed as e:
            logger.warning("query=%s completion fallback failed: %s", query_id, e)
            return result

        logger.info("query=%s outcome=completion", query_id)
        return Result(Outcome.COMPLETION, result.prompt, result.term, summary=content, message=SUCCESS_DISCLAIMER)
