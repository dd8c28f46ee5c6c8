"""Character-based document chunking with word-aligned overlap."""

from __future__ import annotations


def chunk_text(text: str, max_chars: int = 2048, overlap: int = 256) -> list[str]:
    """Split text into overlapping chunks of roughly max_chars characters.

    The first chunk is the leading max_chars characters. Every later chunk
    reaches back half an overlap into the previous one, starting at the
    first space in that window so the chunk does not open mid-word, and
    ends max_chars characters after the previous chunk ended. A later chunk
    is therefore up to max_chars + overlap // 2 characters long. Chunks are
    stripped and blank ones dropped.

    Raises:
        ValueError: If overlap is not smaller than max_chars
    """
    if max_chars <= 0:
        raise ValueError(f"max_chars must be positive, got {max_chars}")
    if not 0 <= overlap < max_chars:
        raise ValueError(f"overlap ({overlap}) must be in [0, max_chars={max_chars})")

    half = overlap // 2
    chunks: list[str] = []
    start = 0
    while start < len(text):
        end = start + max_chars
        if start == 0:
            begin = 0
        else:
            window_start = max(0, start - half)
            space = text.find(" ", window_start, window_start + half)
            begin = space if space != -1 else window_start

        piece = text[begin:end].strip()
        if piece:
            chunks.append(piece)
        start = end

    return chunks
