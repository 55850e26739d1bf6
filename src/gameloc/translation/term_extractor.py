"""Mine glossary candidates from already translated text.

Candidates are term-like substrings of the source text (capitalized
phrases, acronyms, quoted words, CJK/Hangul runs ...). No word alignment is
attempted: each candidate is paired with the *whole* translation of the
entry it came from, and the translation seen most often becomes the
suggested target.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field

DEFAULT_MIN_OCCURRENCES = 2
MAX_EXAMPLES = 3
HIGH_CONFIDENCE = 0.8

# Applied independently, in this order; results are unioned per entry.
_TERM_PATTERNS: list[tuple[re.Pattern[str], int]] = [
    # Capitalized word sequences ("Dark Lord", "Eileen")
    (re.compile(r"\b[A-Z][a-z]+(?:\s+[A-Z][a-z]+)*\b", re.ASCII), 0),
    # Acronyms / stat names ("HP", "MP")
    (re.compile(r"\b[A-Z]{2,}\b", re.ASCII), 0),
    # "Quoted" words, quotes removed
    (re.compile(r'"([^"]+)"'), 1),
    # Numbers with units ("100 HP", "5MP")
    (re.compile(r"\d+\s*[A-Z]{2,}"), 0),
    # Katakana
    (re.compile(r"[\u30a1-\u30f4\u30fc]+"), 0),
    # Kanji followed by optional Hiragana okurigana
    (re.compile(r"[\u4e00-\u9faf]+[\u3040-\u309f]*"), 0),
    # Hangul
    (re.compile(r"[\uac00-\ud7a3]+"), 0),
    # Chinese runs of two or more characters
    (re.compile(r"[\u4e00-\u9fff]{2,}"), 0),
]

_RE_ALL_CAPS = re.compile(r"^[A-Z]{2,}$")
_RE_CAPITALIZED = re.compile(r"^[A-Z][a-z]+")

# Context tag → category, checked in order
_CONTEXT_CATEGORIES: list[tuple[str, str]] = [
    ("item", "Items"),
    ("quest", "Quests"),
    ("skill", "Skills"),
    ("menu", "UI"),
]


@dataclass
class TermSource:
    """Minimal view of a stored entry: what the extractor reads."""

    original_text: str
    translation: str | None = None
    context: str | None = None


@dataclass
class ExtractedTerm:
    """A glossary candidate. Never stored; callers decide whether to promote it."""

    source_term: str
    target_term: str
    occurrences: int
    contexts: list[str] = field(default_factory=list)
    confidence: float = 0.0
    category: str = "General"
    examples: list[tuple[str, str]] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "source_term": self.source_term,
            "target_term": self.target_term,
            "occurrences": self.occurrences,
            "contexts": list(self.contexts),
            "confidence": self.confidence,
            "category": self.category,
            "examples": [
                {"original": original, "translation": translation}
                for original, translation in self.examples
            ],
        }


@dataclass
class _Sighting:
    target: str
    context: str | None
    original: str


def find_candidate_terms(text: str) -> list[str]:
    """All term-like substrings of *text*, first-seen order, no duplicates."""
    found: list[str] = []
    for pattern, group in _TERM_PATTERNS:
        found.extend(m.group(group) for m in pattern.finditer(text))
    return list(dict.fromkeys(found))


def calculate_confidence(occurrences: int, context_count: int) -> float:
    """Score in [0, 1] from frequency and context variety.

    ``min(occ/10, 0.5) + min(ctx/5, 0.3) + (0.2 if occ >= 5)``, clamped.
    """
    score = min(occurrences / 10, 0.5)
    score += min(context_count / 5, 0.3)
    if occurrences >= 5:
        score += 0.2
    return max(0.0, min(score, 1.0))


def detect_category(source_term: str, contexts: Iterable[str]) -> str:
    """Heuristic category from the term's shape, then its context tags."""
    contexts = set(contexts)
    if _RE_ALL_CAPS.match(source_term):
        return "Game Terms"
    if _RE_CAPITALIZED.match(source_term):
        return "Characters" if "dialogue" in contexts else "Story"
    for tag, category in _CONTEXT_CATEGORIES:
        if tag in contexts:
            return category
    return "General"


class TermExtractor:
    """Frequency-based glossary term mining over (original, translation) pairs."""

    def __init__(self, min_occurrences: int = DEFAULT_MIN_OCCURRENCES) -> None:
        self.min_occurrences = min_occurrences

    def extract(
        self,
        entries: Iterable[TermSource],
        min_occurrences: int | None = None,
    ) -> list[ExtractedTerm]:
        """Return candidates seen at least *min_occurrences* times.

        ``occurrences`` counts every translated entry the source term was
        found in (case-insensitive). The target is the most frequent full
        translation among those entries, ties going to the first seen;
        contexts and examples are those observed with that target.
        Results are sorted by occurrences, most frequent first.
        """
        minimum = self.min_occurrences if min_occurrences is None else min_occurrences
        groups, spellings = self._find_term_pairs(entries)

        terms: list[ExtractedTerm] = []
        for key, sightings in groups.items():
            if len(sightings) < minimum:
                continue
            terms.append(self._build_term(spellings[key], sightings))

        terms.sort(key=lambda t: t.occurrences, reverse=True)
        return terms

    def _find_term_pairs(
        self, entries: Iterable[TermSource]
    ) -> tuple[dict[str, list[_Sighting]], dict[str, str]]:
        groups: dict[str, list[_Sighting]] = {}
        spellings: dict[str, str] = {}  # lowercased term → first spelling seen

        for entry in entries:
            if not entry.translation:
                continue
            for candidate in find_candidate_terms(entry.original_text):
                if candidate not in entry.original_text:
                    continue
                key = candidate.lower()
                spellings.setdefault(key, candidate)
                groups.setdefault(key, []).append(
                    _Sighting(
                        target=entry.translation,
                        context=entry.context,
                        original=entry.original_text,
                    )
                )
        return groups, spellings

    def _build_term(self, source_term: str, sightings: list[_Sighting]) -> ExtractedTerm:
        counts: dict[str, int] = {}
        for s in sightings:
            counts[s.target] = counts.get(s.target, 0) + 1
        # max() keeps the first target on ties; dicts preserve first-seen order
        target = max(counts, key=lambda t: counts[t])

        majority = [s for s in sightings if s.target == target]
        contexts = list(dict.fromkeys(s.context for s in majority if s.context))
        examples = [(s.original, s.target) for s in majority[:MAX_EXAMPLES]]
        occurrences = len(sightings)

        return ExtractedTerm(
            source_term=source_term,
            target_term=target,
            occurrences=occurrences,
            contexts=contexts,
            confidence=calculate_confidence(occurrences, len(contexts)),
            category=detect_category(source_term, contexts),
            examples=examples,
        )


def get_stats(terms: list[ExtractedTerm]) -> dict:
    """Summary counts for a list of extracted terms."""
    by_category: dict[str, int] = {}
    for term in terms:
        by_category[term.category] = by_category.get(term.category, 0) + 1
    return {
        "total_terms": len(terms),
        "by_category": by_category,
        "high_confidence": sum(1 for t in terms if t.confidence >= HIGH_CONFIDENCE),
        "most_frequent": terms[:10],
    }
