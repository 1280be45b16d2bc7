"""
Test Suite for the CLI
======================
Runs the click commands through CliRunner.
"""

from __future__ import annotations

import json
import re
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from exam_extractor.cli import cli
from exam_extractor.downloader import DownloadError


SAMPLE_TEXT = (
    "Exam title\n"
    "1. What is 2+2?\n"
    "A. 3\n"
    "B. 4\n"
    "\f"
    "1. Next page question\n"
    "C. maybe\n"
)


PDF_PAGES = [
    "Header\n1. Alpha?\nA. a\nB. b\n2. Beta?\nC. c\n",
    "1. Gamma?<br>continued\nD. d\n",
    "1. Delta?\nA. yes\nB. no\n",
]


def _mock_doc(texts):
    doc = MagicMock()
    doc.page_count = len(texts)
    pages = []
    for text in texts:
        page = MagicMock()
        page.get_text.return_value = text
        pages.append(page)
    doc.__getitem__.side_effect = lambda idx: pages[idx]
    return doc


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def sample_file(tmp_path):
    path = tmp_path / "exam.txt"
    path.write_text(SAMPLE_TEXT, encoding="utf-8")
    return path


class TestParseTextCommand:
    """Test the parse-text command."""

    def test_json_output(self, runner, sample_file, tmp_path):
        out = tmp_path / "out.json"
        result = runner.invoke(
            cli,
            ["parse-text", str(sample_file), "-o", str(out), "--json-output"],
        )

        assert result.exit_code == 0, result.output
        printed = json.loads(result.stdout)
        assert [q["number"] for q in printed] == ["1", "1"]
        assert printed[0]["choices"] == {"A": "3", "B": "4"}
        assert json.loads(out.read_text(encoding="utf-8")) == printed

    def test_continuous_numbering(self, runner, sample_file, tmp_path):
        out = tmp_path / "out.json"
        result = runner.invoke(
            cli,
            [
                "parse-text", str(sample_file),
                "-o", str(out),
                "--continuous-numbering",
                "--json-output",
            ],
        )

        assert result.exit_code == 0, result.output
        assert [q["number"] for q in json.loads(result.stdout)] == ["1", "2"]

    def test_keep_marker_text(self, runner, sample_file, tmp_path):
        out = tmp_path / "out.json"
        default = runner.invoke(
            cli,
            ["parse-text", str(sample_file), "-o", str(out), "--json-output"],
        )
        kept = runner.invoke(
            cli,
            [
                "parse-text", str(sample_file),
                "-o", str(out),
                "--keep-marker-text",
                "--json-output",
            ],
        )

        assert default.exit_code == 0, default.output
        assert kept.exit_code == 0, kept.output
        assert [q["text"] for q in json.loads(default.stdout)] == ["", ""]
        assert [q["text"] for q in json.loads(kept.stdout)] == [
            "What is 2+2?",
            "Next page question",
        ]

    def test_table_output_and_report(self, runner, sample_file, tmp_path):
        out = tmp_path / "out.json"
        result = runner.invoke(cli, ["parse-text", str(sample_file), "-o", str(out)])

        assert result.exit_code == 0, result.output
        assert "Validation Report" in result.output
        assert (tmp_path / "out_validation.json").exists()

    def test_no_report(self, runner, sample_file, tmp_path):
        out = tmp_path / "out.json"
        result = runner.invoke(
            cli,
            ["parse-text", str(sample_file), "-o", str(out), "--no-report"],
        )

        assert result.exit_code == 0, result.output
        assert out.exists()
        assert not (tmp_path / "out_validation.json").exists()


class TestExtractCommand:
    """Test the extract command against a mocked PyMuPDF document."""

    @pytest.fixture
    def pdf_file(self, tmp_path):
        path = tmp_path / "exam.pdf"
        path.write_bytes(b"%PDF-1.4 fake")
        return path

    def test_extract_saves_questions(self, runner, pdf_file, tmp_path):
        out = tmp_path / "json" / "questions.json"
        with patch("exam_extractor.extractor.fitz.open") as mock_open:
            mock_open.return_value.__enter__.return_value = _mock_doc(PDF_PAGES)
            result = runner.invoke(cli, ["extract", str(pdf_file), "-o", str(out)])

        assert result.exit_code == 0, result.output
        assert "Validation Report" in result.output

        saved = json.loads(out.read_text(encoding="utf-8"))
        assert [q["number"] for q in saved] == ["1", "2", "1", "1"]
        assert all(q["text"] == "" for q in saved)
        assert saved[0]["choices"] == {"A": "a", "B": "b"}
        assert saved[2]["choices"] == {"D": "d"}

        report = json.loads(
            (tmp_path / "json" / "questions_validation.json").read_text(encoding="utf-8")
        )
        assert report["duplicate_question_numbers"] == ["1"]

    def test_extract_flags_and_page_range(self, runner, pdf_file, tmp_path):
        out = tmp_path / "out.json"
        doc = _mock_doc(PDF_PAGES)
        with patch("exam_extractor.extractor.fitz.open") as mock_open:
            mock_open.return_value.__enter__.return_value = doc
            result = runner.invoke(
                cli,
                [
                    "extract", str(pdf_file),
                    "-o", str(out),
                    "--page-start", "2",
                    "--continuous-numbering",
                    "--keep-marker-text",
                    "--json-output",
                ],
            )

        assert result.exit_code == 0, result.output
        printed = json.loads(result.stdout)
        assert [q["number"] for q in printed] == ["1", "2"]
        assert [q["text"] for q in printed] == ["Gamma? continued", "Delta?"]
        assert json.loads(out.read_text(encoding="utf-8")) == printed
        assert [c.args[0] for c in doc.__getitem__.call_args_list] == [1, 2]

    @pytest.mark.parametrize("args, expected", [
        (["--page-start", "2"], (2, 99999)),
        (["--page-end", "3"], (1, 3)),
        (["--page-start", "2", "--page-end", "5"], (2, 5)),
        ([], None),
    ])
    def test_page_range_passed_to_extractor(
        self, runner, pdf_file, tmp_path, args, expected
    ):
        with patch("exam_extractor.engine.PageTextExtractor") as mock_cls:
            extractor = mock_cls.return_value
            extractor.extract_pages.return_value = PDF_PAGES
            extractor.get_page_count.return_value = len(PDF_PAGES)
            result = runner.invoke(
                cli,
                ["extract", str(pdf_file), "-o", str(tmp_path / "out.json"),
                 "--json-output", *args],
            )

        assert result.exit_code == 0, result.output
        extractor.extract_pages.assert_called_once_with(
            str(pdf_file), page_range=expected
        )

    def test_missing_pdf(self, runner, tmp_path):
        result = runner.invoke(cli, ["extract", str(tmp_path / "missing.pdf")])

        assert result.exit_code == 1
        assert "PDF not found" in result.output

    def test_download_failure(self, runner, tmp_path):
        with patch(
            "exam_extractor.engine.fetch_pdf",
            side_effect=DownloadError("Failed to download"),
        ):
            result = runner.invoke(
                cli,
                [
                    "extract", str(tmp_path / "missing.pdf"),
                    "--url", "https://example.com/exam.pdf",
                    "-o", str(tmp_path / "out.json"),
                ],
            )

        assert result.exit_code == 1
        assert "Failed to download" in result.output


class TestInfoCommand:
    """Test the per-page question summary."""

    def test_counts_per_page(self, runner, tmp_path):
        pdf = tmp_path / "exam.pdf"
        pdf.write_bytes(b"%PDF-1.4 fake")

        with patch("exam_extractor.extractor.fitz.open") as mock_open:
            mock_open.return_value.__enter__.return_value = _mock_doc(PDF_PAGES)
            result = runner.invoke(cli, ["info", str(pdf)])

        assert result.exit_code == 0, result.output
        assert "exam.pdf (3 pages)" in result.output
        assert re.search(r"│\s*1\s*│\s*2\s*│\s*3\s*│", result.output)
        assert re.search(r"│\s*2\s*│\s*1\s*│\s*1\s*│", result.output)
        assert re.search(r"│\s*3\s*│\s*1\s*│\s*2\s*│", result.output)
        assert re.search(r"Total\s*│\s*4\s*│\s*6\s*│", result.output)

    def test_missing_file_rejected(self, runner, tmp_path):
        result = runner.invoke(cli, ["info", str(tmp_path / "missing.pdf")])
        assert result.exit_code == 2


class TestValidateCommand:
    """Test re-validation of saved output."""

    def test_validate_saved_file(self, runner, tmp_path):
        path = tmp_path / "questions.json"
        path.write_text(json.dumps([
            {"number": "1", "text": "Q", "choices": {"A": "x"}, "correct_answer": None},
            {"number": "1", "text": "", "choices": {}, "correct_answer": None},
        ]), encoding="utf-8")

        result = runner.invoke(cli, ["validate", str(path)])

        assert result.exit_code == 0, result.output
        assert "Duplicate Question Numbers" in result.output

    def test_validate_invalid_file(self, runner, tmp_path):
        path = tmp_path / "questions.json"
        path.write_text("not json", encoding="utf-8")

        result = runner.invoke(cli, ["validate", str(path)])

        assert result.exit_code == 1
        assert "Error" in result.output


def test_version(runner):
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "1.0.0" in result.output
