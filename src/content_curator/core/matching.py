"""Fuzzy title matching and release title parsing."""

import re
from collections.abc import Mapping
from typing import Any, Optional, Sequence, TypeVar

from rapidfuzz.distance import Levenshtein

T = TypeVar("T")

# Release-scene tokens that never belong to a title
SCENE_TOKENS = frozenset({
    # resolution
    "480p", "576p", "720p", "1080p", "1080i", "2160p", "4k", "uhd", "hd", "sd",
    # source / container
    "bluray", "blu-ray", "bdrip", "brrip", "bdremux", "remux", "webrip", "web-dl",
    "webdl", "web", "hdtv", "hdrip", "dvdrip", "dvdscr", "hdr", "hdr10", "dv",
    # codec
    "x264", "x265", "h264", "h265", "hevc", "avc", "xvid", "divx", "10bit",
    # audio
    "aac", "ac3", "dts", "ddp5", "dd5", "atmos", "flac",
})

_BRACKETED = re.compile(r"\[.*?\]|\(.*?\)|\{.*?\}")
_BRACKETS = re.compile(r"[\[\](){}]")
_SEPARATORS = re.compile(r"[._]+")
_PUNCTUATION = re.compile(r"[^\w\s-]")
_WHITESPACE = re.compile(r"\s+")
_YEAR = re.compile(r"^(19|20)\d{2}$")
_QUALITY = re.compile(r"\b(480p|720p|1080p|2160p|4k)\b", re.IGNORECASE)


def levenshtein_distance(a: str, b: str) -> int:
    """Edit distance with unit cost for insertion, deletion and substitution."""
    return Levenshtein.distance(a, b)


def similarity(a: str, b: str) -> float:
    """
    Normalized Levenshtein similarity of two strings, case-insensitive.

    Returns:
        1.0 for identical strings, 0.0 when either string is empty
    """
    if not a or not b:
        return 0.0

    return float(Levenshtein.normalized_similarity(a.lower(), b.lower()))


def candidate_title(candidate: Any) -> str:
    """Title (or series name) of a candidate object or mapping."""
    if isinstance(candidate, str):
        return candidate
    if isinstance(candidate, Mapping):
        return candidate.get("title") or candidate.get("name") or ""
    return getattr(candidate, "title", None) or getattr(candidate, "name", None) or ""


def find_best_match(candidates: Sequence[T], original_title: str) -> Optional[T]:
    """
    Pick the candidate whose title is closest to original_title.

    A single candidate is returned as is. Ties keep the first-seen candidate.
    """
    if not candidates:
        return None
    if len(candidates) == 1:
        return candidates[0]

    best = candidates[0]
    best_score = similarity(candidate_title(best), original_title)
    for candidate in candidates[1:]:
        score = similarity(candidate_title(candidate), original_title)
        if score > best_score:
            best, best_score = candidate, score

    return best


def _tokens(raw_title: str, keep_bracketed: bool = False) -> list[str]:
    text = raw_title.lower()
    text = _BRACKETS.sub(" ", text) if keep_bracketed else _BRACKETED.sub(" ", text)
    text = _SEPARATORS.sub(" ", text)
    return text.split()


def _year_index(tokens: list[str]) -> Optional[int]:
    # Last year-like token; a leading one is part of the title ("1917", "2012")
    for index in range(len(tokens) - 1, 0, -1):
        if _YEAR.match(tokens[index]):
            return index
    return None


def extract_year(raw_title: str) -> Optional[int]:
    """Release year embedded in a raw release title."""
    tokens = _tokens(raw_title, keep_bracketed=True)
    index = _year_index(tokens)
    return int(tokens[index]) if index is not None else None


def extract_quality(raw_title: str) -> Optional[str]:
    """Resolution tag of a raw release title, lower-cased."""
    match = _QUALITY.search(raw_title)
    return match.group(1).lower() if match else None


def clean_search_title(raw_title: str) -> str:
    """
    Turn a raw release title into a metadata search term.

    "Dune.Part.Two.2024.2160p.BluRay.x265" -> "dune part two"
    """
    tokens = _tokens(raw_title)

    year_index = _year_index(tokens)
    if year_index is not None:
        del tokens[year_index]

    words = []
    for token in tokens:
        if token in SCENE_TOKENS or token.split("-")[0] in SCENE_TOKENS:
            continue
        word = _PUNCTUATION.sub("", token).strip("-")
        if word and word not in SCENE_TOKENS:
            words.append(word)

    return _WHITESPACE.sub(" ", " ".join(words)).strip()
