from __future__ import annotations

"""Query enhancement helpers for episode-number retrieval."""

from dataclasses import dataclass
import re

from src.rag.numerals import NUMERAL_GLYPHS, normalize_numeral

ORDINAL_MARKER = "第"
CLASSIFIER = "集"
DOMAIN_KEYWORD = "播客節目"
SOURCE_KEYWORD = "BNI官方播客"

_ORDINAL_RE = re.compile(rf"{ORDINAL_MARKER}([{NUMERAL_GLYPHS}]+)({CLASSIFIER})?")
# A bare run must not follow the ordinal marker or start inside a longer run.
_BARE_RE = re.compile(rf"(?<![{ORDINAL_MARKER}{NUMERAL_GLYPHS}])([{NUMERAL_GLYPHS}]+){CLASSIFIER}")
_ARABIC_RE = re.compile(r"[0-9]+")
_EPISODE_NUMBER_RE = re.compile(rf"[0-9]+\s*{CLASSIFIER}")
_ORDINAL_NUMBER_RE = re.compile(rf"{ORDINAL_MARKER}\s*[0-9]+")


class QueryEnhancer:
    """Base class for query enhancers."""
    def enhance(self, query: str) -> str:
        """Return the text used for embedding and search."""
        raise NotImplementedError


@dataclass(frozen=True)
class NoopEnhancer(QueryEnhancer):
    """Enhancer that only trims the input."""
    def enhance(self, query: str) -> str:
        return query.strip()


@dataclass(frozen=True)
class EpisodeQueryEnhancer(QueryEnhancer):
    """Rule-based enhancer that normalizes episode numbers."""
    def enhance(self, query: str) -> str:
        return enhance_query(query)


def _rewrite_ordinal(match: re.Match[str]) -> str:
    suffix = match.group(2) or ""
    return f"{ORDINAL_MARKER}{normalize_numeral(match.group(1))}{suffix}"


def _rewrite_bare(match: re.Match[str]) -> str:
    numeral = match.group(1)
    if _ARABIC_RE.fullmatch(numeral):
        return match.group(0)
    return f"{normalize_numeral(numeral)}{CLASSIFIER}"


def rewrite_numerals(text: str) -> str:
    """Rewrite Chinese episode numerals (第三集, 十二集) to Arabic digits."""
    rewritten = _ORDINAL_RE.sub(_rewrite_ordinal, text)
    return _BARE_RE.sub(_rewrite_bare, rewritten)


def mentions_episode_number(text: str) -> bool:
    """Return True when the text references an episode by number."""
    return bool(_EPISODE_NUMBER_RE.search(text) or _ORDINAL_NUMBER_RE.search(text))


def enhance_query(query: str) -> str:
    """Return the original query followed by its rewritten variant.

    Both forms are kept so lexical and semantic matching each get a chance.
    Episode-number queries are wrapped with the podcast keywords to steer the
    embedding toward episode listings.
    """
    enhanced = rewrite_numerals(query.strip())
    if mentions_episode_number(enhanced):
        enhanced = f"{DOMAIN_KEYWORD} {enhanced} {SOURCE_KEYWORD}"
    return f"{query} {enhanced}".strip()
