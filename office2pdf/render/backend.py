"""
Render backends turning generated markup into PDF bytes.

The conversion pipeline only depends on the ``RenderBackend`` protocol; the
default implementation shells out to the ``typst`` command line compiler.
"""

import logging
import subprocess
import tempfile
from pathlib import Path
from typing import List, Optional, Protocol

from office2pdf.config import ConvertOptions, PdfStandard
from office2pdf.exceptions import RenderError
from office2pdf.render.typst_gen import ImageAsset

logger = logging.getLogger(__name__)

MAIN_FILE = "main.typ"
OUTPUT_FILE = "out.pdf"
DEFAULT_TIMEOUT_SECONDS = 120
PDF_UA_STANDARD = "ua-1"


class RenderBackend(Protocol):
    def compile(
        self, source: str, images: List[ImageAsset], options: ConvertOptions
    ) -> bytes: ...


class TypstCliBackend:
    """
    Compile markup with the ``typst`` binary in a scratch directory.

    Args:
        binary: Name or path of the typst executable.
        timeout: Seconds before the compiler is killed.
    """

    def __init__(self, binary: str = "typst", timeout: Optional[float] = DEFAULT_TIMEOUT_SECONDS):
        self.binary = binary
        self.timeout = timeout

    def command(self, options: ConvertOptions) -> List[str]:
        cmd = [self.binary, "compile", MAIN_FILE, OUTPUT_FILE]
        for font_path in options.font_paths:
            cmd += ["--font-path", str(font_path)]
        standards = []
        if options.pdf_standard == PdfStandard.PDF_A_2B:
            standards.append(options.pdf_standard.value)
        if options.pdf_ua:
            standards.append(PDF_UA_STANDARD)
        if standards:
            cmd += ["--pdf-standard", ",".join(standards)]
        # typst tags PDFs unless told otherwise; PDF/UA requires the tags
        if not options.tagged and not options.pdf_ua:
            cmd.append("--no-pdf-tags")
        return cmd

    def compile(
        self, source: str, images: List[ImageAsset], options: ConvertOptions
    ) -> bytes:
        with tempfile.TemporaryDirectory(prefix="office2pdf-") as tmp:
            workdir = Path(tmp)
            (workdir / MAIN_FILE).write_text(source, encoding="utf-8")
            for image in images:
                (workdir / image.virtual_path).write_bytes(image.data)

            cmd = self.command(options)
            logger.debug(f"Running {' '.join(cmd)} in {workdir}")
            try:
                result = subprocess.run(
                    cmd,
                    cwd=workdir,
                    capture_output=True,
                    text=True,
                    timeout=self.timeout,
                    check=False,
                )
            except FileNotFoundError as exc:
                raise RenderError(
                    f"typst binary not found: {self.binary}", cause=exc
                ) from exc
            except subprocess.TimeoutExpired as exc:
                raise RenderError(
                    f"typst compile timed out after {self.timeout}s", cause=exc
                ) from exc

            if result.returncode != 0:
                logger.error(
                    f"typst compile failed (returncode={result.returncode} stderr={result.stderr})"
                )
                raise RenderError(
                    f"typst compile failed with exit code {result.returncode}: "
                    f"{result.stderr.strip()}"
                )

            output = workdir / OUTPUT_FILE
            if not output.exists():
                raise RenderError(f"typst did not produce {OUTPUT_FILE}")
            pdf = output.read_bytes()

        logger.debug(f"Compiled PDF: {len(pdf)} bytes")
        return pdf
