#!/usr/bin/env python3
"""
Text Extractor v1.0.0
=====================
Turns an uploaded payload into the plain text the analyzers consume.

Supported content types:
- application/pdf (pdfplumber)
- DOCX and application/msword (python-docx)
- text/html (BeautifulSoup; script and style removed)
- text/plain (UTF-8, undecodable bytes replaced)

Extracted text is cleaned: horizontal whitespace is collapsed per line and
runs of blank lines become one blank line, so headers and paragraphs survive.
"""

import io
import os
import re
from dataclasses import dataclass
from typing import Optional, Dict, Any

import pdfplumber
from bs4 import BeautifulSoup
from docx import Document

from config_logging import (
    ExtractionError, ValidationError, get_config, get_logger, handle_errors,
    sanitize_filename,
)

__version__ = "1.0.0"

logger = get_logger('text_extractor')

PDF = 'application/pdf'
DOCX = 'application/vnd.openxmlformats-officedocument.wordprocessingml.document'
DOC = 'application/msword'
HTML = 'text/html'
PLAIN = 'text/plain'

FILE_TYPE_DISPLAY = {
    PDF: 'PDF',
    HTML: 'HTML',
    DOCX: 'DOCX',
    DOC: 'DOC',
    PLAIN: 'TXT',
}

EXTENSION_TYPES = {
    '.pdf': PDF,
    '.docx': DOCX,
    '.doc': DOC,
    '.html': HTML,
    '.htm': HTML,
    '.txt': PLAIN,
    '.md': PLAIN,
    '.markdown': PLAIN,
}

SIZE_UNITS = ['Bytes', 'KB', 'MB', 'GB']

HORIZONTAL_WS = re.compile(r'[^\S\n]+')
BLANK_LINE_RUN = re.compile(r'\n{3,}')


def normalize_content_type(content_type: Optional[str]) -> str:
    """Lower-case a content type and drop parameters such as charset."""
    if not content_type:
        return ''
    return content_type.split(';', 1)[0].strip().lower()


def guess_content_type(filename: str) -> Optional[str]:
    _, ext = os.path.splitext(filename.lower())
    return EXTENSION_TYPES.get(ext)


def file_type_display(content_type: Optional[str]) -> str:
    return FILE_TYPE_DISPLAY.get(normalize_content_type(content_type), 'Unknown')


def format_file_size(size: int) -> str:
    """Human readable size, base 1024, up to two decimals (e.g. '1.5 KB')."""
    if size <= 0:
        return '0 Bytes'
    unit = 0
    value = float(size)
    while value >= 1024 and unit < len(SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    text = f"{value:.2f}".rstrip('0').rstrip('.')
    return f"{text} {SIZE_UNITS[unit]}"


def clean_text(text: Optional[str]) -> str:
    """Collapse whitespace while keeping line and paragraph boundaries."""
    if not text:
        return ''
    lines = [HORIZONTAL_WS.sub(' ', line).strip() for line in text.split('\n')]
    return BLANK_LINE_RUN.sub('\n\n', '\n'.join(lines)).strip()


def _extract_pdf(payload: bytes) -> str:
    pages = []
    with pdfplumber.open(io.BytesIO(payload)) as pdf:
        for page in pdf.pages:
            text = page.extract_text() or ''
            if text:
                pages.append(text)
    return '\n\n'.join(pages)


def _extract_docx(payload: bytes) -> str:
    doc = Document(io.BytesIO(payload))
    return '\n'.join(p.text for p in doc.paragraphs)


def _extract_html(payload: bytes) -> str:
    soup = BeautifulSoup(payload.decode('utf-8', errors='replace'), 'html.parser')
    for element in soup(['script', 'style']):
        element.decompose()
    return soup.get_text(separator='\n', strip=True)


def _extract_plain(payload: bytes) -> str:
    return payload.decode('utf-8', errors='replace')


EXTRACTORS = {
    PDF: _extract_pdf,
    DOCX: _extract_docx,
    DOC: _extract_docx,
    HTML: _extract_html,
    PLAIN: _extract_plain,
}


@handle_errors(logger=logger, wrap=ExtractionError)
def extract_text(payload: bytes, content_type: str) -> str:
    """
    Extract and clean the text of a payload.

    Raises:
        ValidationError: payload larger than the configured limit
        ExtractionError: unsupported content type or unreadable payload
    """
    limit = get_config().max_content_length
    if len(payload) > limit:
        raise ValidationError(
            f"Payload of {format_file_size(len(payload))} exceeds the "
            f"{format_file_size(limit)} limit",
            field='payload', size=len(payload),
        )

    mime_type = normalize_content_type(content_type)
    extractor = EXTRACTORS.get(mime_type)
    if extractor is None:
        raise ExtractionError(f"Unsupported file type: {content_type}", content_type=content_type)

    try:
        text = extractor(payload)
    except Exception as e:
        raise ExtractionError(
            f"Failed to extract {file_type_display(mime_type)} content: {e}",
            content_type=mime_type,
        ) from e

    cleaned = clean_text(text)
    logger.debug("Text extracted", content_type=mime_type,
                 bytes=len(payload), characters=len(cleaned))
    return cleaned


@dataclass(frozen=True)
class AnalysisInput:
    """Extracted text plus display-only facts about where it came from."""
    text: str
    filename: Optional[str] = None
    size: Optional[int] = None
    mime_type: Optional[str] = None

    @property
    def file_type(self) -> str:
        return file_type_display(self.mime_type)

    @property
    def file_size(self) -> str:
        return format_file_size(self.size or 0)

    @classmethod
    def from_payload(cls, payload: bytes, content_type: Optional[str] = None,
                     filename: Optional[str] = None) -> 'AnalysisInput':
        """
        Extract a payload into an input ready for analysis.

        The content type is guessed from the filename when not given.

        Raises:
            ValidationError: oversized payload or no text extracted
            ExtractionError: unsupported or unreadable payload
        """
        if not content_type and filename:
            content_type = guess_content_type(filename)
        if not content_type:
            raise ExtractionError("Could not determine the file type", content_type=None)

        text = extract_text(payload, content_type)
        if not text.strip():
            raise ValidationError("No text content could be extracted from the file",
                                  field='payload')

        return cls(
            text=text,
            filename=sanitize_filename(filename) if filename else None,
            size=len(payload),
            mime_type=normalize_content_type(content_type),
        )

    def display(self) -> Dict[str, Any]:
        """Display fields for reports and job listings."""
        return {
            'filename': self.filename,
            'file_type': self.file_type,
            'file_size': self.file_size,
        }
