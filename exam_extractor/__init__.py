"""
Exam Question Extractor
=======================
Extracts multiple-choice exam questions from PDF text into structured JSON.

Architecture:
    - Page Text Extractor: Plain text per PDF page (PyMuPDF)
    - Normalizer: Strips <br> artifacts and whitespace from each line
    - State Machine: Detects question starts and A-D choices line by line
    - Validator: Structural report (duplicates, missing text/choices)
    - Storage: JSON array output

Version: 1.0.0
"""

__version__ = "1.0.0"
