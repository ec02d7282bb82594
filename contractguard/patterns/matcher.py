"""Catalog-driven detector for risk-bearing contract phrasing."""

import bisect
import re
from dataclasses import dataclass

from contractguard.analysis.exceptions import DetectionError, InvalidInputError
from contractguard.analysis.models import Finding, sort_by_severity
from contractguard.logging.logger import Log
from contractguard.patterns.catalog import DEFAULT_CATALOG
from contractguard.patterns.models import PatternCatalog, RiskPattern

MIN_SENTENCE_LENGTH = 10
MAX_EXCERPT_CHARS = 500
ELLIPSIS = "..."
SENTENCE_JOINER = ". "

_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")
_WHITESPACE = re.compile(r"\s+")
_SENTENCE_BOUNDARY = re.compile(r"[.!?]+|\n")


@dataclass(frozen=True)
class Sentence:
    """A kept sentence unit and its span in the normalized text."""

    text: str
    start: int
    end: int


def normalize_text(text: str) -> str:
    """Collapse whitespace inside paragraphs, keeping paragraph breaks as newlines."""
    paragraphs = (_WHITESPACE.sub(" ", chunk).strip() for chunk in _PARAGRAPH_BREAK.split(text))
    return "\n".join(paragraph for paragraph in paragraphs if paragraph)


def split_sentences(text: str) -> list[Sentence]:
    """Split normalized text into sentence units, dropping short fragments."""
    sentences: list[Sentence] = []
    position = 0
    for boundary in _SENTENCE_BOUNDARY.finditer(text):
        _append_sentence(sentences, text, position, boundary.start())
        position = boundary.end()
    _append_sentence(sentences, text, position, len(text))
    return sentences


def _append_sentence(sentences: list[Sentence], text: str, start: int, end: int) -> None:
    unit = text[start:end]
    stripped = unit.strip()
    if len(stripped) <= MIN_SENTENCE_LENGTH:
        return
    offset = start + (len(unit) - len(unit.lstrip()))
    sentences.append(Sentence(text=stripped, start=offset, end=offset + len(stripped)))


class PatternMatcher:
    """Applies an immutable pattern catalog to contract text.

    The matcher holds no mutable state; one instance can serve any number of
    concurrent analyses.
    """

    def __init__(self, catalog: PatternCatalog = DEFAULT_CATALOG) -> None:
        self._catalog = catalog

    @property
    def catalog(self) -> PatternCatalog:
        return self._catalog

    def analyze(self, text: str) -> list[Finding]:
        """Return findings for every catalog pattern found in the text.

        Raises:
            InvalidInputError: if the text is empty or whitespace only.
            DetectionError: on any internal matching failure.
        """
        if not text or not text.strip():
            raise InvalidInputError("Contract text is required for pattern analysis")

        try:
            normalized = normalize_text(text)
            sentences = split_sentences(normalized)
            findings: list[Finding] = []
            for pattern in self._catalog:
                findings.extend(self._match_pattern(pattern, normalized, sentences))
        except Exception as exc:
            raise DetectionError(f"Pattern analysis failed: {exc}") from exc

        ordered = sort_by_severity(findings)
        Log.debug(f"Pattern analysis found {len(ordered)} potential risks")
        return ordered

    def test_pattern(self, text: str, pattern_name: str) -> bool:
        """Check whether a single named pattern matches anywhere in the text.

        Raises:
            UnknownPatternError: if the catalog has no pattern with this name.
        """
        pattern = self._catalog.get(pattern_name)
        return pattern.match_rule.search(normalize_text(text)) is not None

    def _match_pattern(
        self,
        pattern: RiskPattern,
        text: str,
        sentences: list[Sentence],
    ) -> list[Finding]:
        starts = [sentence.start for sentence in sentences]
        seen_sentences: set[int] = set()
        findings: list[Finding] = []
        for match in pattern.match_rule.finditer(text):
            index = self._containing_sentence(starts, sentences, match.start(), match.end())
            if index is None or index in seen_sentences:
                continue
            seen_sentences.add(index)
            phrase = match.group(0).strip()
            findings.append(
                Finding(
                    category=pattern.category,
                    severity=pattern.severity,
                    matched_text=self._excerpt(sentences, index, match),
                    explanation=pattern.explain(phrase),
                    source="pattern",
                )
            )
        return findings

    @staticmethod
    def _containing_sentence(
        starts: list[int],
        sentences: list[Sentence],
        match_start: int,
        match_end: int,
    ) -> int | None:
        index = bisect.bisect_right(starts, match_start) - 1
        if index >= 0 and match_start < sentences[index].end:
            return index
        # Match began in a dropped fragment: use the next kept sentence it reaches.
        following = index + 1
        if following < len(sentences) and sentences[following].start < match_end:
            return following
        return None

    @staticmethod
    def _excerpt(sentences: list[Sentence], index: int, match: re.Match[str]) -> str:
        sentence = sentences[index]
        match_start = max(match.start(), sentence.start)
        parts: list[str] = []
        if index > 0:
            parts.append(sentences[index - 1].text)
        phrase_start = sum(len(part) + len(SENTENCE_JOINER) for part in parts)
        phrase_start += match_start - sentence.start
        parts.append(sentence.text)
        if index < len(sentences) - 1:
            parts.append(sentences[index + 1].text)
        context = SENTENCE_JOINER.join(parts).strip()
        phrase_end = min(len(context), phrase_start + match.end() - match_start)
        return clip_excerpt(context, phrase_start, phrase_end)


def clip_excerpt(context: str, phrase_start: int, phrase_end: int) -> str:
    """Clip context to MAX_EXCERPT_CHARS around the phrase, marking clipped ends."""
    if len(context) <= MAX_EXCERPT_CHARS:
        return context
    budget = MAX_EXCERPT_CHARS - 2 * len(ELLIPSIS)
    phrase_length = min(max(phrase_end - phrase_start, 0), budget)
    start = max(0, phrase_start - (budget - phrase_length) // 2)
    end = min(len(context), start + budget)
    start = max(0, end - budget)
    excerpt = context[start:end].strip()
    if start > 0:
        excerpt = ELLIPSIS + excerpt
    if end < len(context):
        excerpt = excerpt + ELLIPSIS
    return excerpt
