"""Text chunking for document ingestion."""

from typing import Any

SENTENCE_BREAKS = (".", "\n")

# A snapped boundary must land at least this far into the window
MIN_SNAP_RATIO = 0.5


def _find_break(window: str) -> int:
    """Index of the last sentence break in ``window``, or -1."""
    return max(window.rfind(ch) for ch in SENTENCE_BREAKS)


def chunk_text(
    text: str,
    source_label: str,
    max_chars: int = 1000,
    overlap: int = 200,
) -> list[dict[str, Any]]:
    """
    Split text into overlapping, sentence-aware chunks.

    Each window is at most ``max_chars`` long. When a window ends before the
    end of the text, the boundary is pulled back to the last period or
    newline in the window, provided that break sits at least halfway into
    the window; otherwise the hard cut is kept. The next window starts
    ``overlap`` characters before the previous boundary.

    Args:
        text: Text to chunk
        source_label: Label of the source (usually the storage path)
        max_chars: Maximum characters per window
        overlap: Characters carried over into the next window

    Returns:
        List of chunk dicts with:
            - chunk_index: int (0-based, counts emitted chunks only)
            - content: str (whitespace-trimmed, never empty)
            - source_ref: str ("{source_label}#chunk_{chunk_index}")
            - start_char: int
            - end_char: int

    Raises:
        ValueError: If max_chars <= overlap
    """
    if max_chars <= overlap:
        raise ValueError(f"max_chars ({max_chars}) must be greater than overlap ({overlap})")

    if not text:
        return []

    chunks = []
    chunk_index = 0
    start = 0
    text_length = len(text)

    while start < text_length:
        end = min(start + max_chars, text_length)

        if end < text_length:
            break_point = _find_break(text[start:end])
            snapped_end = start + break_point + 1
            # Snap only when it lands past the midpoint and still advances the window
            if break_point >= max_chars * MIN_SNAP_RATIO and snapped_end - overlap > start:
                end = snapped_end

        content = text[start:end].strip()

        if content:
            chunks.append(
                {
                    "chunk_index": chunk_index,
                    "content": content,
                    "source_ref": f"{source_label}#chunk_{chunk_index}",
                    "start_char": start,
                    "end_char": end,
                }
            )
            chunk_index += 1

        # Last window reached the end of the text
        if end >= text_length:
            break

        start = end - overlap

    return chunks
