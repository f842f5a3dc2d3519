"""Pinyin annotation for lyrics display."""

import re
from functools import lru_cache

from pypinyin import Style, pinyin

from ..utils.logging import get_logger

logger = get_logger(__name__)

# ----------------------
# Unicode ranges for Han script detection
# ----------------------
HAN_RANGES = [
    (0x3400, 0x4DBF),    # CJK Unified Ideographs Extension A
    (0x4E00, 0x9FFF),    # CJK Unified Ideographs
    (0xF900, 0xFAFF),    # CJK Compatibility Ideographs
    (0x20000, 0x2CEAF),  # Extensions B-E
]
HAN_RE = re.compile(
    "[" + "".join(f"{chr(start)}-{chr(end)}" for start, end in HAN_RANGES) + "]"
)


def contains_han(text: str) -> bool:
    """Check whether text contains at least one Han-script character."""
    if not text:
        return False
    return HAN_RE.search(text) is not None


@lru_cache(maxsize=4096)
def _convert(text: str) -> str:
    # Heteronyms resolve to pypinyin's single most likely reading
    syllables = pinyin(text, style=Style.TONE, heteronym=False, errors="default")
    joined = " ".join(item[0] for item in syllables if item and item[0])
    return " ".join(joined.split())  # collapse repeated spaces


def to_pinyin(text: str) -> str:
    """
    Convert mixed Han/Latin text into a tone-marked pinyin string.

    Lines without Han characters yield an empty annotation. Non-Han runs
    (Latin words, punctuation) pass through unchanged. Never raises: if
    conversion fails the original text is returned.
    """
    if not contains_han(text):
        return ""
    try:
        return _convert(text)
    except Exception as e:
        logger.debug(f"Pinyin conversion failed for {text!r}: {e}")
        return text


# Main entry point alias
annotate = to_pinyin
