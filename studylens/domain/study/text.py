import math
import re

_WHITESPACE_RUN = re.compile(r"\s+")
_SENTENCE_BREAK = re.compile(r"([.!?])\s+")


def normalize_extracted_text(text: str | None) -> str:
    """
    Reflows OCR output into paragraphs: hard line breaks inside sentences are
    dropped and every sentence terminator starts a new paragraph.
    """
    if not text:
        return ""
    lines = [line.strip() for line in text.split("\n")]
    joined = " ".join(line for line in lines if line)
    collapsed = _WHITESPACE_RUN.sub(" ", joined)
    return _SENTENCE_BREAK.sub(r"\1\n\n", collapsed).strip()


def estimate_token_count(text: str | None) -> int:
    # ~4 characters per token, rounded half up
    return int(math.floor(len(text or "") / 4 + 0.5))
