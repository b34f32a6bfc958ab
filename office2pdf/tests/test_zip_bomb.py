import io
import zipfile

import pytest

from office2pdf.exceptions import ParseError, ZipBombError
from office2pdf.parsers.util.zip_bomb import ZipBombLimits, open_zipfile, validate_zipfile
from office2pdf.parsers.util.zip_context import open_package


def _make_zip_bytesio(files: dict[str, bytes]) -> io.BytesIO:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for name, data in files.items():
            zf.writestr(name, data)
    buffer.seek(0)
    return buffer


def test_zip_bomb_detection_can_use_low_thresholds__compression_ratio() -> None:
    buffer = _make_zip_bytesio({"a.txt": b"A" * 10_000})

    with zipfile.ZipFile(buffer) as zf:
        with pytest.raises(ZipBombError):
            validate_zipfile(
                zf,
                limits=ZipBombLimits(
                    max_entry_compression_ratio=10.0,
                    max_total_compression_ratio=10.0,
                ),
                source="test",
            )

        validate_zipfile(
            zf,
            limits=ZipBombLimits(
                max_entry_compression_ratio=10_000.0,
                max_total_compression_ratio=10_000.0,
            ),
            source="test",
        )


def test_zip_bomb_detection_can_use_low_thresholds__entry_count() -> None:
    buffer = _make_zip_bytesio(
        {
            "a.txt": b"a",
            "b.txt": b"b",
            "c.txt": b"c",
        }
    )

    with pytest.raises(ZipBombError):
        open_zipfile(buffer, limits=ZipBombLimits(max_entries=2), source="test")


def test_zip_bomb_detection_can_use_low_thresholds__entry_size() -> None:
    buffer = _make_zip_bytesio({"big.bin": b"x" * 2048})

    with pytest.raises(ZipBombError) as exc_info:
        open_zipfile(buffer, limits=ZipBombLimits(max_single_uncompressed_bytes=1024))
    assert "big.bin" in str(exc_info.value)


def test_zip_bomb_error_is_a_parse_error() -> None:
    assert issubclass(ZipBombError, ParseError)


def test_open_zipfile_rejects_non_zip_input() -> None:
    with pytest.raises(ParseError):
        open_zipfile(io.BytesIO(b"this is not a zip file"))


def test_open_package_accepts_bytes_and_bytesio() -> None:
    buffer = _make_zip_bytesio({"word/document.xml": b"<document/>"})

    with open_package(buffer.getvalue(), "DOCX") as package:
        assert package.exists("word/document.xml")
    with open_package(buffer, "DOCX") as package:
        assert package.read_text("word/document.xml") == "<document/>"


def test_open_package_rejects_non_zip_input() -> None:
    with pytest.raises(ParseError):
        open_package(b"plain text", "DOCX")
