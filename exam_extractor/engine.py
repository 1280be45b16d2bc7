"""
Extraction Engine
=================
Main orchestrator that combines source retrieval, page text extraction,
state machine parsing, validation, and JSON output into a complete pipeline.

Usage:
    engine = ExtractionEngine(config)
    result = engine.run("path/to/exam.pdf")
    # result is a ParseResult; questions are also saved to config.output_path

Architecture:
    PDF (or URL) → PageTextExtractor → page texts → parse_questions (per page)
    → Questions → ValidationEngine → JSON output
"""

from __future__ import annotations

import hashlib
import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Optional

from . import __version__
from . import storage
from .downloader import DEFAULT_TIMEOUT, fetch_pdf
from .extractor import PageTextExtractor
from .models import ExamMetadata, ParseResult, ParseVersion, Question
from .state_machine import QuestionParser
from .validator import ValidationEngine

logger = logging.getLogger(__name__)

# Receives human-readable status lines while pages are processed
ProgressCallback = Callable[[str], None]

# Pages in pre-extracted text files are separated by form feeds
PAGE_SEPARATOR = "\f"


@dataclass
class ParserConfig:
    """Configuration for the extraction engine."""

    # Output settings
    output_path: Optional[str] = storage.DEFAULT_OUTPUT_PATH
    save_report: bool = True

    # Source retrieval
    source_url: Optional[str] = None
    download_timeout: int = DEFAULT_TIMEOUT

    # Processing
    page_range: Optional[tuple[int, int]] = None
    continuous_numbering: bool = False
    include_marker_text: bool = False

    # Progress reporting
    progress_every_pages: int = 5
    progress_interval: float = 0.5

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    def __post_init__(self):
        if self.progress_every_pages < 1:
            raise ValueError(
                f"progress_every_pages must be >= 1, got {self.progress_every_pages}"
            )


class ExtractionEngine:
    """
    Main question extraction engine.

    Orchestrates the full pipeline:
        1. Source retrieval (download when the local PDF is missing)
        2. Page text extraction
        3. Per-page state machine parsing
        4. Validation
        5. JSON output
    """

    def __init__(self, config: Optional[ParserConfig] = None):
        self.config = config or ParserConfig()
        self._setup_logging()

    def _setup_logging(self):
        """Configure logging based on config."""
        log_level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        package_logger = logging.getLogger("exam_extractor")
        package_logger.setLevel(log_level)

        formatter = logging.Formatter(
            "[%(asctime)s] %(levelname)-8s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        if not package_logger.handlers:
            console = logging.StreamHandler()
            console.setLevel(log_level)
            console.setFormatter(formatter)
            package_logger.addHandler(console)

        if self.config.log_file and not self._has_file_handler(package_logger):
            log_dir = Path(self.config.log_file).parent
            log_dir.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(
                self.config.log_file, encoding="utf-8"
            )
            file_handler.setLevel(log_level)
            file_handler.setFormatter(formatter)
            package_logger.addHandler(file_handler)

    def _has_file_handler(self, package_logger: logging.Logger) -> bool:
        """Check whether the configured log file is already being written."""
        log_path = os.path.abspath(self.config.log_file)
        return any(
            isinstance(h, logging.FileHandler) and h.baseFilename == log_path
            for h in package_logger.handlers
        )

    # ─── Parsing ──────────────────────────────────────────────────────────────

    def parse_pages(
        self,
        pages: Iterable[str],
        progress_callback: Optional[ProgressCallback] = None,
    ) -> list[Question]:
        """
        Parse each page independently and concatenate the results.

        Numbering restarts at 1 on every page unless
        config.continuous_numbering is set, in which case a running
        counter is carried from one page to the next.
        """
        all_questions: list[Question] = []
        next_number = 1
        last_update = time.monotonic()

        for page_idx, page_text in enumerate(pages):
            start_number = next_number if self.config.continuous_numbering else 1
            parser = QuestionParser(
                start_number=start_number,
                include_marker_text=self.config.include_marker_text,
            )
            questions = parser.parse_text(page_text)
            next_number = start_number + len(questions)
            all_questions.extend(questions)

            logger.debug(f"Page {page_idx + 1}: {len(questions)} questions")

            now = time.monotonic()
            if progress_callback and (
                page_idx % self.config.progress_every_pages == 0
                or now - last_update >= self.config.progress_interval
            ):
                progress_callback(
                    f"Processing page {page_idx + 1} "
                    f"(total questions: {len(all_questions)})"
                )
                last_update = now

        if progress_callback:
            progress_callback(
                f"Processing complete: {len(all_questions)} questions processed"
            )

        return all_questions

    # ─── Pipelines ────────────────────────────────────────────────────────────

    def run(
        self,
        pdf_path: str,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> ParseResult:
        """
        Extract questions from a PDF file.

        Args:
            pdf_path: Path to the PDF. If missing and config.source_url is
                set, the document is downloaded to this path first.
            progress_callback: Receives status strings while pages are parsed.

        Returns:
            ParseResult containing questions, metadata, and validation.

        Raises:
            FileNotFoundError: If the PDF is missing and no URL is configured.
            DownloadError: If the download fails.
            OutputError: If the output cannot be written.
        """
        start_time = time.time()
        pdf_path = self._resolve_source(pdf_path)
        logger.info(f"Starting extraction of: {pdf_path}")

        logger.info("Phase 1: Page text extraction")
        extractor = PageTextExtractor()
        pages = extractor.extract_pages(
            pdf_path, page_range=self.config.page_range
        )

        exam_metadata = self._build_exam_metadata(pdf_path)
        exam_metadata.total_pages = extractor.get_page_count(pdf_path)

        result = self._process(pages, exam_metadata, progress_callback)

        elapsed = time.time() - start_time
        logger.info(
            f"Extraction complete in {elapsed:.2f}s, "
            f"{len(result.questions)} questions extracted"
        )
        return result

    def run_text(
        self,
        text: str,
        name: str = "",
        progress_callback: Optional[ProgressCallback] = None,
    ) -> ParseResult:
        """
        Extract questions from already-extracted text.

        Pages are separated by form feed characters, as written by most
        PDF-to-text tools.
        """
        pages = text.split(PAGE_SEPARATOR)
        exam_metadata = ExamMetadata(name=name, total_pages=len(pages))
        return self._process(pages, exam_metadata, progress_callback)

    def _process(
        self,
        pages: list[str],
        exam_metadata: ExamMetadata,
        progress_callback: Optional[ProgressCallback],
    ) -> ParseResult:
        logger.info("Phase 2: State machine parsing")
        questions = self.parse_pages(pages, progress_callback)

        logger.info("Phase 3: Validation")
        validation = ValidationEngine().validate(questions)

        result = ParseResult(
            exam=exam_metadata,
            parse_version=ParseVersion(
                parser_version=__version__,
                page_count=len(pages),
                question_count=len(questions),
                continuous_numbering=self.config.continuous_numbering,
            ),
            questions=questions,
            validation=validation,
        )

        if self.config.output_path:
            logger.info("Phase 4: Saving output")
            storage.save_questions(questions, self.config.output_path)
            if self.config.save_report:
                storage.save_report(
                    validation,
                    storage.report_path_for(self.config.output_path),
                )

        return result

    # ─── Helpers ──────────────────────────────────────────────────────────────

    def _resolve_source(self, pdf_path: str) -> str:
        """Return an existing local PDF path, downloading it if needed."""
        pdf_path = os.path.abspath(pdf_path)
        if os.path.exists(pdf_path):
            return pdf_path

        if not self.config.source_url:
            raise FileNotFoundError(f"PDF not found: {pdf_path}")

        logger.info(f"PDF not found locally, fetching {self.config.source_url}")
        fetch_pdf(
            self.config.source_url,
            pdf_path,
            timeout=self.config.download_timeout,
        )
        return pdf_path

    def _build_exam_metadata(self, pdf_path: str) -> ExamMetadata:
        """Build exam metadata from file info and config."""
        return ExamMetadata(
            name=Path(pdf_path).stem,
            source_pdf=os.path.basename(pdf_path),
            source_url=self.config.source_url,
            file_hash=self._compute_file_hash(pdf_path),
            file_size_bytes=os.path.getsize(pdf_path),
        )

    def _compute_file_hash(self, filepath: str) -> str:
        """Compute SHA-256 hash of a file."""
        sha256 = hashlib.sha256()
        with open(filepath, "rb") as f:
            for chunk in iter(lambda: f.read(8192), b""):
                sha256.update(chunk)
        return sha256.hexdigest()
