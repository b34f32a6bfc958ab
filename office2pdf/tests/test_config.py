import unittest

import pytest

from office2pdf.config import (
    A4,
    LETTER,
    ConvertOptions,
    Format,
    PaperSize,
    SlideRange,
)

tc = unittest.TestCase()


def test_format_from_extension() -> None:
    tc.assertEqual(Format.DOCX, Format.from_extension("docx"))
    tc.assertEqual(Format.XLSX, Format.from_extension(".XLSX"))
    tc.assertEqual(Format.PPTX, Format.from_extension("Pptx"))
    tc.assertIsNone(Format.from_extension("pdf"))
    tc.assertIsNone(Format.from_extension(""))
    tc.assertEqual("docx", Format.DOCX.extension)


def test_slide_range_parse() -> None:
    tc.assertEqual(SlideRange(3, 3), SlideRange.parse("3"))
    tc.assertEqual(SlideRange(2, 5), SlideRange.parse(" 2 - 5 "))

    slide_range = SlideRange.parse("2-4")
    tc.assertFalse(slide_range.contains(1))
    tc.assertTrue(slide_range.contains(2))
    tc.assertTrue(slide_range.contains(4))
    tc.assertFalse(slide_range.contains(5))


@pytest.mark.parametrize("text", ["0", "0-3", "5-2", "abc", "1-x", ""])
def test_slide_range_parse_rejects_invalid_input(text: str) -> None:
    with pytest.raises(ValueError):
        SlideRange.parse(text)


def test_paper_size_parse() -> None:
    tc.assertIs(A4, PaperSize.parse("A4"))
    tc.assertIs(LETTER, PaperSize.parse(" letter "))
    tc.assertEqual((612.0, 1008.0), PaperSize.parse("legal").dimensions())
    tc.assertEqual((100.0, 200.0), PaperSize.custom(100.0, 200.0).dimensions())

    with pytest.raises(ValueError):
        PaperSize.parse("tabloid")


def test_convert_options_defaults() -> None:
    options = ConvertOptions()

    tc.assertIsNone(options.sheet_names)
    tc.assertIsNone(options.slide_range)
    tc.assertIsNone(options.pdf_standard)
    tc.assertIsNone(options.paper_size)
    tc.assertIsNone(options.landscape)
    tc.assertEqual([], options.font_paths)
    tc.assertFalse(options.streaming)
    tc.assertEqual(1000, options.streaming_chunk_size)

    # Mutable defaults are not shared between instances
    options.font_paths.append("fonts")
    tc.assertEqual([], ConvertOptions().font_paths)
