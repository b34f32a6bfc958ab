import unittest

import pytest

from office2pdf.config import Format
from office2pdf.exceptions import UnsupportedFormatError
from office2pdf.parsers.docx_parser import parse_docx
from office2pdf.parsers.pptx_parser import parse_pptx
from office2pdf.parsers.xlsx_parser import parse_xlsx
from office2pdf.router import detect_format, format_for_path, get_parser

tc = unittest.TestCase()


def test_get_parser() -> None:
    tc.assertIs(parse_docx, get_parser(Format.DOCX))
    tc.assertIs(parse_pptx, get_parser(Format.PPTX))
    tc.assertIs(parse_xlsx, get_parser(Format.XLSX))
    with pytest.raises(UnsupportedFormatError):
        get_parser("rtf")


def test_detect_format() -> None:
    tc.assertEqual(Format.DOCX, detect_format(".docx"))
    tc.assertEqual(Format.XLSX, detect_format("XLSX"))
    tc.assertIsNone(detect_format(".doc"))


def test_format_for_path() -> None:
    tc.assertEqual(Format.PPTX, format_for_path("decks/Quarterly.PPTX"))
    tc.assertEqual(Format.XLSX, format_for_path("/tmp/missing/data.xlsx"))


def test_format_for_path_rejects_unknown_extensions() -> None:
    with pytest.raises(UnsupportedFormatError) as excinfo:
        format_for_path("notes.txt")
    tc.assertEqual("txt", excinfo.value.extension)

    with pytest.raises(UnsupportedFormatError) as excinfo:
        format_for_path("README")
    tc.assertEqual("README", excinfo.value.extension)
