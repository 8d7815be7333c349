"""Split a digest into Telegram-sized segments.

Sections (blank-line separated) are packed greedily into segments up to
the threshold. A section that alone is too long is packed again by
subsection (bullet items), and a bullet that is still too long is cut at
the last newline, then the last space, then hard at the threshold.

Every segment remembers the delimiter consumed in front of it, so
``join_segments(split_digest(text, config)) == text``.
"""
from __future__ import annotations

from dataclasses import dataclass

from gazette.config import SegmenterConfig


@dataclass(frozen=True)
class Segment:
    index: int  # 1-based
    total: int
    text: str
    separator: str = ""

    @property
    def label(self) -> str:
        if self.total <= 1:
            return ""
        return f"[Part {self.index}/{self.total}]"

    def render(self) -> str:
        """The text actually sent: label line (if any) plus payload."""
        if not self.label:
            return self.text
        return f"{self.label}\n{self.text}"


_ENTITY_MAX = 10  # longest entity we emit is "&quot;"


def _markup_safe(text: str, cut: int) -> int:
    """Move *cut* back so it leaves no ``<...>`` tag or ``&...;`` entity open."""
    window = text[:cut]
    safe = cut
    lt = window.rfind("<")
    if lt > window.rfind(">"):
        safe = lt
    amp = window.rfind("&", max(0, cut - _ENTITY_MAX))
    if amp != -1 and ";" not in window[amp:]:
        safe = min(safe, amp)
    return safe if safe > 0 else cut


def split_message(text: str, max_len: int) -> list[str]:
    """Cut *text* into pieces of at most *max_len*, preferring line then word breaks.

    The break character stays at the end of the earlier piece, so the
    pieces concatenate back to *text*. Word breaks and hard cuts never
    land inside an HTML tag or entity.
    """
    chunks: list[str] = []
    while len(text) > max_len:
        split_at = text.rfind("\n", 0, max_len)
        if split_at == -1:
            split_at = text.rfind(" ", 0, max_len)
            split_at = _markup_safe(text, max_len if split_at == -1 else split_at + 1)
        else:
            split_at += 1
        chunks.append(text[:split_at])
        text = text[split_at:]
    chunks.append(text)
    return chunks


def _pack(text: str, delimiters: tuple[str, ...], limit: int) -> list[tuple[str, str]]:
    """Greedy-pack *text* split on ``delimiters[0]``; returns ``(separator, chunk)`` pairs."""
    if len(text) <= limit:
        return [("", text)]
    if not delimiters:
        return [("", piece) for piece in split_message(text, limit)]

    delimiter, finer = delimiters[0], delimiters[1:]
    chunks: list[tuple[str, str]] = []
    current: str | None = None
    lead = ""

    for i, piece in enumerate(text.split(delimiter)):
        sep = delimiter if i else ""

        if current is not None:
            if len(current) + len(delimiter) + len(piece) <= limit:
                current += delimiter + piece
                continue
            if current:
                chunks.append((lead, current))
            else:
                # Empty buffer: keep its separator for whatever comes next.
                sep = lead + delimiter
            current = None

        if len(piece) > limit:
            sub = _pack(piece, finer, limit)
            # The nested pack may already have consumed a leading delimiter.
            sub[0] = (sep + sub[0][0], sub[0][1])
            chunks.extend(sub)
        else:
            current, lead = piece, sep

    if current:
        chunks.append((lead, current))
    return chunks


def split_digest(text: str, config: SegmenterConfig | None = None) -> list[Segment]:
    """Split *text* into ordered segments that each fit ``config.hard_limit`` once labelled."""
    config = config or SegmenterConfig()
    pieces = _pack(
        text,
        (config.section_delimiter, config.subsection_delimiter),
        config.threshold,
    )
    total = len(pieces)
    return [
        Segment(index=i, total=total, text=chunk, separator=sep)
        for i, (sep, chunk) in enumerate(pieces, start=1)
    ]


def join_segments(segments: list[Segment]) -> str:
    """Inverse of :func:`split_digest`: payloads plus the delimiters consumed between them."""
    return "".join(s.separator + s.text for s in segments)
