"""
Tests for paragraph selection, disambiguation handling and summary building.
"""

import pytest

from healthwiki.exceptions import ExtractFetchFailed
from healthwiki.summarizer import (
    DISAMBIGUATION_NOTICE,
    ArticleSummary,
    Summarizer,
    clean_extract,
    first_paragraph,
)
from healthwiki.wikipedia import WikipediaClient

API_URL = "https://en.wikipedia.org/w/api.php"


def make_summarizer(backend):
    return Summarizer(WikipediaClient(API_URL, transport=backend.transport))


class TestFirstParagraph:
    def test_first_line_only(self):
        assert first_paragraph("Fever is ...\nMore text") == "Fever is ..."

    def test_skips_blank_leading_lines(self):
        assert first_paragraph("\n   \nInfluenza is a disease.\nMore") == "Influenza is a disease."

    def test_single_paragraph(self):
        assert first_paragraph("Only one paragraph.") == "Only one paragraph."

    def test_blank_extract(self):
        assert first_paragraph("\n \n") == ""


class TestCleanExtract:
    def test_disambiguation_page_replaced_by_notice(self):
        extract = "Cold may refer to:\nCommon cold\nCold (temperature)"
        assert clean_extract(extract) == DISAMBIGUATION_NOTICE

    def test_regular_page_kept(self):
        assert clean_extract("Asthma is a long-term disease.\nMore") == "Asthma is a long-term disease."

    def test_marker_outside_first_paragraph_is_ignored(self):
        extract = "Malaria is a mosquito-borne disease.\nMAL may refer to: something"
        assert clean_extract(extract) == "Malaria is a mosquito-borne disease."


class TestSummarizer:
    @pytest.mark.asyncio
    async def test_fever_round_trip(self, backend):
        summary = await make_summarizer(backend).summarize("Fever")

        assert summary == ArticleSummary(
            title="Fever",
            summary="Fever is a raised body temperature.",
            source_url="https://en.wikipedia.org/wiki/Fever",
        )
        assert backend.extract_titles == ["Fever"]

    @pytest.mark.asyncio
    async def test_disambiguation_summary(self, backend):
        backend.extracts["Cold"] = "Cold may refer to:\n\nCommon cold"
        summary = await make_summarizer(backend).summarize("Cold")

        assert summary.summary == DISAMBIGUATION_NOTICE
        assert summary.title == "Cold"

    @pytest.mark.asyncio
    async def test_citation_is_percent_encoded(self, backend):
        backend.extracts["Common cold"] = "The common cold is a viral infection."
        summary = await make_summarizer(backend).summarize("Common cold")

        assert summary.source_url == "https://en.wikipedia.org/wiki/Common%20cold"

    @pytest.mark.asyncio
    async def test_missing_extract_returns_none(self, backend):
        assert await make_summarizer(backend).summarize("No Such Page") is None

    @pytest.mark.asyncio
    async def test_whitespace_only_extract_returns_none(self, backend):
        backend.extracts["Blank"] = "\n  \n"
        assert await make_summarizer(backend).summarize("Blank") is None

    @pytest.mark.asyncio
    async def test_fetch_failure_propagates(self, backend):
        backend.fail_extract = True

        with pytest.raises(ExtractFetchFailed):
            await make_summarizer(backend).summarize("Fever")
