"""Unit tests for page text cleanup and the mock OCR service."""

import pytest

from marginalia.ocr import ImageProcessingFailed, MockOCRService, NoTextFound, extract_quote


class TestExtractQuote:
    """Test recognized text cleanup."""

    def test_wraps_in_guillemets(self) -> None:
        assert extract_quote("Fear is the mind-killer.") == "«Fear is the mind-killer.»"

    def test_joins_lines_and_drops_page_numbers(self) -> None:
        """Test line breaks, blank lines and bare page numbers are removed."""
        text = "Fear is the\nmind-killer.\n\n\n  42  \nFear is the little-death."

        assert extract_quote(text) == "«Fear is the mind-killer. Fear is the little-death.»"

    def test_collapses_whitespace(self) -> None:
        assert extract_quote("a   b\t\tc") == "«a b c»"

    @pytest.mark.parametrize("text", ['"Already quoted"', "«Already quoted»"])
    def test_keeps_existing_quotes(self, text: str) -> None:
        assert extract_quote(text) == text

    @pytest.mark.parametrize("text", ["", "   ", "\n\n", "12\n13"])
    def test_nothing_left(self, text: str) -> None:
        assert extract_quote(text) == ""


class TestMockOCRService:
    """Test the mock OCR service."""

    def test_returns_text(self) -> None:
        service = MockOCRService("page text")

        assert service.recognize_text(b"image") == "page text"
        assert service.call_count == 1

    def test_empty_image(self) -> None:
        with pytest.raises(ImageProcessingFailed):
            MockOCRService("text").recognize_text(b"")

    def test_no_text(self) -> None:
        with pytest.raises(NoTextFound):
            MockOCRService("  ").recognize_text(b"image")
