"""
Post-processing for OCR output.

Pure functions: noise filtering for screenshots and a heuristic
confidence score. OCR.space does not return a usable per-request
confidence, so one is derived from the text itself.
"""

import re

GARBLED_TEXT_MESSAGE = (
    "OCR could not extract readable text from this image.\n\n"
    "The text appears to be too stylized, decorative, or low resolution "
    "for accurate recognition.\n\n"
    "Try using:\n"
    "• Plain text documents\n"
    "• Screenshots with simple fonts\n"
    "• High-contrast images\n"
    "• Less decorative text styles"
)

MAX_FILTERED_LINES = 20

_REAL_WORD = re.compile(r"\b[A-Za-z]{3,}\b")
_DECORATIVE = re.compile(r"[¥€£™®©§¶†‡•…‰′″‹›«»]")
_SYMBOL = re.compile(r"[^\w\s]", re.ASCII)
_LETTER = re.compile(r"[A-Za-z]")
_CAPITALIZED = re.compile(r"\b[A-Z][a-z]+")
_SENTENCE_END = re.compile(r"[.!?]+")

# Social-media UI leftovers
_NOISE_PATTERNS = (
    re.compile(r"^\d+(\.\d+)?[km]?\s*(like|follow|view|share)s?$", re.IGNORECASE),
    re.compile(r"^(manage|edit|more)$", re.IGNORECASE),
    re.compile(r"^@[a-z0-9_]+$"),
)


def count_words(text: str) -> int:
    return len(text.split())


def _symbol_ratio(text: str) -> float:
    return len(_SYMBOL.findall(text)) / len(text) if text else 0.0


def is_garbled(text: str) -> bool:
    """Few real words and lots of decorative symbols."""
    real_words = _REAL_WORD.findall(text)
    decorative = len(_DECORATIVE.findall(text))
    return len(real_words) < 3 and (decorative > 5 or _symbol_ratio(text) > 0.6)


def _is_noise(line: str) -> bool:
    lowered = line.lower()
    if any(pattern.match(lowered) for pattern in _NOISE_PATTERNS):
        return True
    return len(_LETTER.findall(line)) < 2


def filter_text(text: str) -> str:
    """
    Strip UI noise from OCR output.

    Garbled text is replaced by an explanatory message; otherwise blank
    lines, counters like "12k likes", handles and lines with fewer than two
    letters are dropped and at most 20 lines are kept.
    """
    if is_garbled(text):
        return GARBLED_TEXT_MESSAGE

    lines = [line.strip() for line in re.split(r"\n+", text)]
    kept = [line for line in lines if line and not _is_noise(line)]
    return "\n".join(kept[:MAX_FILTERED_LINES]).strip()


def calculate_confidence(text: str) -> int:
    """
    Heuristic confidence in [50, 99], or 0 for empty text.

    Starts at 75 and adds points for length, share of real words, full
    sentences, low symbol noise and capitalised words.
    """
    if not text:
        return 0

    confidence = 75

    word_count = count_words(text)
    if word_count > 10:
        confidence += 5
    if word_count > 30:
        confidence += 5

    tokens = len(re.split(r"\s+", text))
    confidence += int(len(_REAL_WORD.findall(text)) / max(1, tokens) * 15)

    sentences = [s for s in _SENTENCE_END.split(text) if len(s.strip()) > 10]
    if sentences:
        confidence += 5
    if len(sentences) > 2:
        confidence += 5

    ratio = _symbol_ratio(text)
    if ratio < 0.1:
        confidence += 10
    elif ratio < 0.2:
        confidence += 5

    if _CAPITALIZED.search(text):
        confidence += 5

    return min(99, max(50, confidence))
