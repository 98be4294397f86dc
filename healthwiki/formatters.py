"""
Serializers from the canonical Result to the two wire formats.

A deployment picks exactly one: "text" for chat widgets that render an HTML
string, or "structured" for clients that lay out the fields themselves.
"""

from html import escape
from typing import Callable, Dict, Union

from pydantic import BaseModel

from .content_filter import get_out_of_scope_message
from .models import ArticleOut, ErrorOut, MessageOut, TextOut
from .pipeline import Outcome, Result, extract_failed_message, not_found_message

EXTRACT_FAILED_ERROR = "Could not extract summary."


def render_article_html(title: str, summary: str, source_url: str) -> str:
    summary_html = escape(summary).replace("\n", "<br>")
    html = f'<p class="font-bold text-sm">Wikipedia Result for "{escape(title)}"</p>'
    html += f'<p class="mt-2">{summary_html}</p>'
    html += (
        '<p class="mt-3 text-xs italic text-blue-700">Source: '
        f'<a href="{escape(source_url)}" target="_blank" class="underline hover:text-blue-900">'
        'Read the full article on Wikipedia</a></p>'
    )
    return html


def _message_html(result: Result) -> str:
    """Message for a non-article outcome with the user-derived parts escaped."""
    if result.outcome == Outcome.NOT_FOUND:
        return not_found_message(escape(result.prompt))
    if result.outcome == Outcome.OUT_OF_SCOPE:
        return get_out_of_scope_message(escape(result.term))
    if result.outcome == Outcome.EXTRACT_FAILED:
        return extract_failed_message(escape(result.title or ""))
    return result.message


def to_text(result: Result) -> TextOut:
    """
    Render a Result as a single message string.

    Args:
        result (Result): Pipeline outcome

    Returns:
        TextOut: `{text}` body
    """
    if result.outcome == Outcome.SUCCESS:
        body = render_article_html(result.title, result.summary, result.source_url)
        return TextOut(text=f"{result.message} {body}")

    if result.outcome == Outcome.COMPLETION:
        answer = escape(result.summary).replace("\n", "<br>")
        return TextOut(text=f'{result.message} <p class="mt-2">{answer}</p>')

    return TextOut(text=_message_html(result))


def to_structured(result: Result) -> Union[ArticleOut, MessageOut, ErrorOut]:
    """
    Render a Result as separate fields.

    Args:
        result (Result): Pipeline outcome

    Returns:
        ArticleOut for a found article, ErrorOut when the extract was unusable,
        MessageOut for everything else
    """
    if result.outcome == Outcome.SUCCESS:
        return ArticleOut(
            title=result.title,
            summary=result.summary,
            source_url=result.source_url,
            disclaimer=result.message,
        )

    if result.outcome == Outcome.EXTRACT_FAILED:
        return ErrorOut(error=EXTRACT_FAILED_ERROR)

    if result.outcome == Outcome.COMPLETION:
        return MessageOut(message=f"{result.message} {result.summary}")

    return MessageOut(message=result.message)


SERIALIZERS: Dict[str, Callable[[Result], BaseModel]] = {
    "text": to_text,
    "structured": to_structured,
}


def serialize(result: Result, response_format: str) -> dict:
    """Render a Result with the named serializer into a JSON-ready dict."""
    return SERIALIZERS[response_format](result).model_dump(by_alias=True)
