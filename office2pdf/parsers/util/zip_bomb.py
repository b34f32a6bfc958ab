from __future__ import annotations

import io
import zipfile
from dataclasses import dataclass

from office2pdf.exceptions import ParseError, ZipBombError


@dataclass(frozen=True)
class ZipBombLimits:
    """
    Heuristics for rejecting probable ZIP bombs in OOXML packages.

    The defaults sit far above what real office documents reach, so only
    containers built to exhaust memory are rejected.
    """

    max_entries: int = 50_000
    max_total_uncompressed_bytes: int = 4 * 1024 * 1024 * 1024  # 4 GiB
    max_single_uncompressed_bytes: int = 1 * 1024 * 1024 * 1024  # 1 GiB
    max_total_compression_ratio: float = 200.0
    max_entry_compression_ratio: float = 500.0


DEFAULT_ZIP_BOMB_LIMITS = ZipBombLimits()


def _where(source: str | None) -> str:
    return f" [{source}]" if source else ""


def validate_zipfile(
    zf: zipfile.ZipFile,
    *,
    limits: ZipBombLimits = DEFAULT_ZIP_BOMB_LIMITS,
    source: str | None = None,
) -> None:
    """
    Check an opened package against the limits, raising ZipBombError.

    Directory entries are ignored; sizes come from the central directory, so
    nothing is decompressed here.
    """
    infos = zf.infolist()

    if len(infos) > limits.max_entries:
        raise ZipBombError(
            f"Package has too many parts ({len(infos)} > {limits.max_entries})"
            + _where(source)
        )

    total_uncompressed = 0
    total_compressed = 0

    for info in infos:
        if info.is_dir():
            continue

        file_size = info.file_size or 0
        compressed_size = info.compress_size or 0

        if file_size > limits.max_single_uncompressed_bytes:
            raise ZipBombError(
                f"Package part {info.filename} too large ({file_size} bytes)"
                + _where(source)
            )

        if file_size > 0:
            if compressed_size <= 0:
                raise ZipBombError(
                    f"Package part {info.filename} has zero compressed size"
                    + _where(source)
                )
            ratio = file_size / compressed_size
            if ratio > limits.max_entry_compression_ratio:
                raise ZipBombError(
                    f"Package part {info.filename} compression ratio too high "
                    f"({ratio:.1f} > {limits.max_entry_compression_ratio})"
                    + _where(source)
                )

        total_uncompressed += file_size
        total_compressed += compressed_size

        if total_uncompressed > limits.max_total_uncompressed_bytes:
            raise ZipBombError(
                f"Package total uncompressed size too large ({total_uncompressed} bytes)"
                + _where(source)
            )

    if total_uncompressed > 0:
        total_ratio = total_uncompressed / max(total_compressed, 1)
        if total_ratio > limits.max_total_compression_ratio:
            raise ZipBombError(
                f"Package total compression ratio too high "
                f"({total_ratio:.1f} > {limits.max_total_compression_ratio})"
                + _where(source)
            )


def open_zipfile(
    file_like: io.BytesIO,
    *,
    limits: ZipBombLimits = DEFAULT_ZIP_BOMB_LIMITS,
    source: str | None = None,
) -> zipfile.ZipFile:
    """
    Open an OOXML package and validate it for ZIP-bomb indicators.

    Caller owns the returned ZipFile and must close it.

    Raises:
        ParseError: The bytes are not a ZIP container.
        ZipBombError: The container exceeds the limits.
    """
    file_like.seek(0)
    try:
        zf = zipfile.ZipFile(file_like, "r")
    except (zipfile.BadZipFile, ValueError) as exc:
        raise ParseError(
            f"Not a valid ZIP container{_where(source)}: {exc}", cause=exc
        ) from exc
    try:
        validate_zipfile(zf, limits=limits, source=source)
    except Exception:
        zf.close()
        raise
    return zf
