"""
Module entry point for: python -m exam_extractor

Allows running the extractor directly as a module:
    python -m exam_extractor extract <pdf_path> [options]
    python -m exam_extractor parse-text <text_path> [options]
    python -m exam_extractor validate <json_path>
"""

from .cli import cli


def main():
    cli()


if __name__ == "__main__":
    main()
