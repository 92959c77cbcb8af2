"""
Tag Enrichment Engine

Deterministic, rule-based tag derivation. It is used two ways:
1. To widen model output (model tags are the seed)
2. Alone, as the heuristic fallback when no model answered

DESIGN DECISION: Every step only ADDS to an insertion-ordered set and the
result is truncated at the very end. The step order below is therefore the
priority order of the tags.

    seed -> brands -> keywords -> places -> url -> synonyms -> loose -> padding

The engine is pure: same seed, text and url give the same list.
"""

from typing import Iterable, Optional
from urllib.parse import urlsplit

from infocards.models.item import Draft, TagResult
from infocards.tagging import vocabulary as vocab

HEURISTIC_CONFIDENCE = 0.6


class _OrderedTagSet:
    """Insertion-ordered set of tags."""

    def __init__(self):
        self._tags: dict[str, None] = {}

    def add(self, tag: str) -> None:
        self._tags.setdefault(tag, None)

    def update(self, tags: Iterable[str]) -> None:
        for tag in tags:
            self.add(tag)

    def __contains__(self, tag: str) -> bool:
        return tag in self._tags

    def __len__(self) -> int:
        return len(self._tags)

    def to_list(self) -> list[str]:
        return list(self._tags)


def normalize_draft_text(draft: Draft) -> str:
    """Text scanned by the engine: title and note, lower-cased."""
    return f"{draft.title} {draft.note or ''}".lower()


def _add_brand_tags(text: str, into: _OrderedTagSet) -> None:
    for key, tags in vocab.BRAND_TAGS.items():
        if key in text:
            into.update(tags)


def _add_pattern_tags(text: str, patterns, into: _OrderedTagSet) -> None:
    for pattern, tags in patterns:
        if pattern.search(text):
            into.update(tags)


def _add_url_tags(url: Optional[str], into: _OrderedTagSet) -> None:
    """Hostname, registrable label and brand tags; bad URLs add nothing."""
    if not url:
        return
    try:
        host = urlsplit(url.strip()).hostname
    except ValueError:
        return
    if not host:
        return

    host = host.lower()
    into.add(host)
    labels = [label for label in host.split(".") if label]
    if len(labels) >= 2:
        into.add(labels[-2])
    for key, tags in vocab.BRAND_TAGS.items():
        if key in host:
            into.update(tags)


def _add_synonyms(into: _OrderedTagSet) -> None:
    # Snapshot first: synonyms added here are not expanded again
    for tag in into.to_list():
        into.update(vocab.SYNONYMS.get(tag, ()))


def _add_loose_keywords(text: str, into: _OrderedTagSet) -> None:
    if vocab.DATE_PATTERN.search(text):
        into.add(vocab.DATE_TAG)
    if vocab.AMOUNT_PATTERN.search(text):
        into.add(vocab.AMOUNT_TAG)
    if vocab.YEAR_PATTERN.search(text):
        into.add(vocab.YEAR_TAG)

    katakana = vocab.KATAKANA_PATTERN.findall(text)
    into.update(katakana[:vocab.MAX_KATAKANA_TOKENS])

    ascii_tokens = vocab.ASCII_TOKEN_PATTERN.findall(text)
    into.update(token.lower() for token in ascii_tokens[:vocab.MAX_ASCII_TOKENS])


def _pad(into: _OrderedTagSet, min_tags: int) -> None:
    for tag in vocab.FIXED_TAGS:
        if len(into) >= min_tags:
            break
        into.add(tag)


def enrich(
    seed_tags: Iterable[str],
    text: str,
    url: Optional[str] = None,
    min_tags: int = 6,
    max_tags: int = 10,
) -> list[str]:
    """
    Derive a bounded tag list from seed tags, text and an optional URL.

    Args:
        seed_tags: Tags to start from (usually model output). Blank
                   strings are dropped; the rest are kept verbatim.
        text: Normalized (lower-cased) title + note.
        url: Optional URL of the card.
        min_tags: Pad from the fixed vocabulary up to this many tags.
        max_tags: Truncate to this many tags.

    Returns:
        Tags in discovery order, between min_tags and max_tags long.
    """
    tags = _OrderedTagSet()
    tags.update(t for t in seed_tags if isinstance(t, str) and t.strip())

    _add_brand_tags(text, tags)
    _add_pattern_tags(text, vocab.KEYWORD_PATTERNS, tags)
    _add_pattern_tags(text, vocab.GEO_PATTERNS, tags)
    _add_url_tags(url, tags)
    _add_synonyms(tags)
    _add_loose_keywords(text, tags)
    _pad(tags, min_tags)

    return tags.to_list()[:max_tags]


def heuristic_summary(draft: Draft, preview_length: int = 80) -> str:
    """First characters of the note when there is one, else the title."""
    if draft.note and draft.note.strip():
        return draft.note[:preview_length]
    return draft.title


def heuristic_result(
    draft: Draft,
    model: str,
    error: Optional[str] = None,
    min_tags: int = 6,
    max_tags: int = 10,
    preview_length: int = 80,
) -> TagResult:
    """
    Build the fallback TagResult for a draft.

    Same shape as a model result, always marked `fallback=True`.
    """
    tags = enrich(
        [],
        normalize_draft_text(draft),
        url=draft.url,
        min_tags=min_tags,
        max_tags=max_tags,
    )
    return TagResult(
        tags=tags,
        summary=heuristic_summary(draft, preview_length),
        confidence=HEURISTIC_CONFIDENCE,
        model=model,
        fallback=True,
        error=error,
    )
