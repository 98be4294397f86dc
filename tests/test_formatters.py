"""
Tests for the two wire-format serializers.
"""

from healthwiki.content_filter import GREETING_MESSAGE
from healthwiki.formatters import EXTRACT_FAILED_ERROR, render_article_html, serialize, to_structured, to_text
from healthwiki.models import ArticleOut, ErrorOut, MessageOut
from healthwiki.pipeline import SUCCESS_DISCLAIMER, Outcome, Result, not_found_message

SUCCESS = Result(
    Outcome.SUCCESS,
    "I have a fever",
    "fever",
    title="Fever",
    summary="Fever is a raised body temperature.",
    source_url="https://en.wikipedia.org/wiki/Fever",
    message=SUCCESS_DISCLAIMER,
)


class TestTextFormat:
    def test_success_renders_disclaimer_and_html(self):
        text = to_text(SUCCESS).text

        assert text.startswith("Disclaimer: I am a fact-finding assistant, not a doctor. <p")
        assert 'Wikipedia Result for "Fever"' in text
        assert "<p class=\"mt-2\">Fever is a raised body temperature.</p>" in text
        assert 'href="https://en.wikipedia.org/wiki/Fever"' in text
        assert "Read the full article on Wikipedia" in text

    def test_html_is_escaped(self):
        html = render_article_html("A<b>", "x < y & z", "https://example.org/A")

        assert "A&lt;b&gt;" in html
        assert "x &lt; y &amp; z" in html

    def test_non_success_is_plain_message(self):
        result = Result(Outcome.GREETING, "hi", message=GREETING_MESSAGE)
        assert to_text(result).text == GREETING_MESSAGE

    def test_not_found_prompt_is_escaped(self):
        prompt = '<iframe src="//evil.example"></iframe>'
        result = Result(Outcome.NOT_FOUND, prompt, prompt, message=not_found_message(prompt))
        text = to_text(result).text

        assert "<iframe" not in text
        assert "&lt;iframe src=&quot;//evil.example&quot;&gt;&lt;/iframe&gt;" in text
        assert "could not find a relevant Wikipedia article" in text

    def test_out_of_scope_term_is_escaped(self):
        result = Result(Outcome.OUT_OF_SCOPE, "movie <b>night</b>", "movie <b>night</b>", message="irrelevant")
        text = to_text(result).text

        assert "<b>" not in text
        assert 'about "movie &lt;b&gt;night&lt;/b&gt;"' in text

    def test_extract_failed_title_is_escaped(self):
        result = Result(Outcome.EXTRACT_FAILED, "q", "q", title="A<i>B</i>", message="irrelevant")
        text = to_text(result).text

        assert 'Found article "A&lt;i&gt;B&lt;/i&gt;"' in text

    def test_completion_is_wrapped_in_paragraph(self):
        result = Result(Outcome.COMPLETION, "q", "q", summary="Line one\nLine two", message=SUCCESS_DISCLAIMER)
        text = to_text(result).text

        assert text.startswith(SUCCESS_DISCLAIMER)
        assert "Line one<br>Line two" in text


class TestStructuredFormat:
    def test_success_is_article(self):
        out = to_structured(SUCCESS)

        assert isinstance(out, ArticleOut)
        assert out.model_dump(by_alias=True) == {
            "title": "Fever",
            "summary": "Fever is a raised body temperature.",
            "sourceUrl": "https://en.wikipedia.org/wiki/Fever",
            "disclaimer": SUCCESS_DISCLAIMER,
        }

    def test_extract_failed_is_error(self):
        result = Result(Outcome.EXTRACT_FAILED, "gout", "gout", title="Gout", message="irrelevant")
        out = to_structured(result)

        assert isinstance(out, ErrorOut)
        assert out.error == EXTRACT_FAILED_ERROR

    def test_not_found_is_message(self):
        result = Result(Outcome.NOT_FOUND, "zz", "zz", message="Disclaimer: nothing found")
        out = to_structured(result)

        assert isinstance(out, MessageOut)
        assert out.message == "Disclaimer: nothing found"

    def test_structured_message_is_not_escaped(self):
        prompt = "x < y"
        result = Result(Outcome.NOT_FOUND, prompt, prompt, message=not_found_message(prompt))

        assert '**"x < y"**' in to_structured(result).message

    def test_completion_is_message(self):
        result = Result(Outcome.COMPLETION, "q", "q", summary="Model answer.", message=SUCCESS_DISCLAIMER)
        assert to_structured(result).message == f"{SUCCESS_DISCLAIMER} Model answer."


class TestSerialize:
    def test_text_dict(self):
        assert set(serialize(SUCCESS, "text")) == {"text"}

    def test_structured_dict(self):
        assert serialize(SUCCESS, "structured")["sourceUrl"] == "https://en.wikipedia.org/wiki/Fever"
