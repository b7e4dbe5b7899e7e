#!/usr/bin/env python3
"""
Text Metrics v1.0.0
===================
Segmentation and counts shared by every analyzer.

The metrics are derived once per analysis and handed to each analyzer
read-only:
- Words: whitespace separated tokens
- Sentences: fragments between runs of . ! ?
- Lines: non-blank lines
- Paragraphs: blocks separated by blank lines

Also hosts the header line recognition used by the structure, token,
prompt coverage and content gap analyzers.
"""

import math
import re
from dataclasses import dataclass, field
from typing import Dict, Any, List, Tuple

__version__ = "1.0.0"

SENTENCE_BOUNDARY = re.compile(r'[.!?]+')
PARAGRAPH_BOUNDARY = re.compile(r'\n\s*\n')
NON_LETTERS = re.compile(r'[^a-z]')

# Header line patterns (markdown, capitalised label, numbered, Roman numeral)
MARKDOWN_HEADER = re.compile(r'^(#{1,6})\s+(.+)')
HEADER_PATTERNS = [
    re.compile(r'^#{1,6}\s+.+'),
    re.compile(r'^[A-Z][^.!?]*:?\s*$'),
    re.compile(r'^\d+\.?\s+[A-Z]'),
    re.compile(r'^[IVX]+\.?\s+[A-Z]'),
]


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from negative infinity."""
    return int(math.floor(value + 0.5))


def round_to(value: float, places: int) -> float:
    """Round half up to a fixed number of decimal places."""
    factor = 10 ** places
    return math.floor(value * factor + 0.5) / factor


def clamp_score(value: float) -> float:
    """Clamp a score into [0, 100]."""
    return max(0.0, min(100.0, value))


def split_words(text: str) -> List[str]:
    return text.split()


def split_sentences(text: str) -> List[str]:
    return [s for s in SENTENCE_BOUNDARY.split(text) if s.strip()]


def split_lines(text: str) -> List[str]:
    """Non-blank lines, untrimmed."""
    return [line for line in text.split('\n') if line.strip()]


def split_paragraphs(text: str) -> List[str]:
    return [p for p in PARAGRAPH_BOUNDARY.split(text) if p.strip()]


def normalize_word(word: str) -> str:
    """Lower-case a token and keep only the letters a-z."""
    return NON_LETTERS.sub('', word.lower())


def is_header_line(line: str) -> bool:
    """True if a trimmed line looks like a section header."""
    return any(pattern.search(line) for pattern in HEADER_PATTERNS)


@dataclass(frozen=True)
class TextMetrics:
    """Document counts plus the segments they were computed from."""
    line_count: int = 0
    word_count: int = 0
    sentence_count: int = 0
    character_count: int = 0
    avg_words_per_sentence: int = 0
    avg_chars_per_word: int = 0

    words: Tuple[str, ...] = field(default=(), repr=False)
    sentences: Tuple[str, ...] = field(default=(), repr=False)
    lines: Tuple[str, ...] = field(default=(), repr=False)
    paragraphs: Tuple[str, ...] = field(default=(), repr=False)

    @classmethod
    def from_text(cls, text: str) -> 'TextMetrics':
        words = tuple(split_words(text))
        sentences = tuple(split_sentences(text))
        lines = tuple(split_lines(text))
        paragraphs = tuple(split_paragraphs(text))

        avg_words = round_half_up(len(words) / len(sentences)) if sentences else 0
        avg_chars = round_half_up(len(text) / len(words)) if words else 0

        return cls(
            line_count=len(lines),
            word_count=len(words),
            sentence_count=len(sentences),
            character_count=len(text),
            avg_words_per_sentence=avg_words,
            avg_chars_per_word=avg_chars,
            words=words,
            sentences=sentences,
            lines=lines,
            paragraphs=paragraphs,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'line_count': self.line_count,
            'word_count': self.word_count,
            'sentence_count': self.sentence_count,
            'character_count': self.character_count,
            'avg_words_per_sentence': self.avg_words_per_sentence,
            'avg_chars_per_word': self.avg_chars_per_word,
        }
