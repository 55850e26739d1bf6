"""Project glossary: approved source → target term mappings.

Used three ways: terms are shielded with placeholders around machine
translation, entries mentioning a term are flagged on import, and mined
term candidates can be promoted into a glossary file.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:
    import tomli as tomllib  # type: ignore[no-redef]

if TYPE_CHECKING:
    from gameloc.translation.term_extractor import ExtractedTerm


def _normalize_placeholders(text: str, mapping: dict[str, str]) -> str:
    """Recover placeholders an LLM reformatted (``gx 3`` → ``Gx3``)."""
    if not mapping:
        return text

    result = text
    for placeholder in mapping:
        if placeholder in result:
            continue
        m = re.match(r"([A-Z]x)(\d+)", placeholder)
        if not m:
            continue
        prefix, num = m.group(1), m.group(2)
        mangled_re = re.compile(rf"(?<!\w){prefix}\s*{num}(?!\d)", re.IGNORECASE)
        result = mangled_re.sub(placeholder, result)

    return result


def _toml_string(value: str) -> str:
    # JSON string escapes are a subset of TOML basic-string escapes
    return json.dumps(value, ensure_ascii=False)


@dataclass
class Glossary:
    """Source → target terms plus per-term aliases, categories and notes."""

    terms: dict[str, str] = field(default_factory=dict)
    aliases: dict[str, list[str]] = field(default_factory=dict)
    categories: dict[str, str] = field(default_factory=dict)
    descriptions: dict[str, str] = field(default_factory=dict)
    is_global: bool = False

    def __len__(self) -> int:
        return len(self.terms)

    @staticmethod
    def _make_pattern(source: str) -> re.Pattern[str]:
        """Case-insensitive match, bounded on word characters.

        ``Dad`` must not match inside ``Daddy`` or ``habilidades``.
        """
        escaped = re.escape(source)
        prefix = r"\b" if re.match(r"\w", source) else ""
        suffix = r"\b" if re.search(r"\w$", source) else ""
        return re.compile(prefix + escaped + suffix, re.IGNORECASE)

    # ── Loading / saving ──

    @classmethod
    def from_toml(cls, path: str | Path) -> Glossary:
        """Load a glossary file.

        Expected format::

            [meta]
            global = false

            [terms]
            HP = "Máu"
            "Dark Lord" = "Chúa Tể Bóng Tối"

            [aliases]
            "Dark Lord" = ["the Dark One"]

            [categories]
            HP = "Game Terms"
        """
        path = Path(path)
        with open(path, "rb") as f:
            data = tomllib.load(f)

        return cls(
            terms=dict(data.get("terms", {})),
            aliases={k: list(v) for k, v in data.get("aliases", {}).items()},
            categories=dict(data.get("categories", {})),
            descriptions=dict(data.get("descriptions", {})),
            is_global=bool(data.get("meta", {}).get("global", False)),
        )

    @classmethod
    def from_multiple_toml(cls, paths: list[Path]) -> Glossary:
        """Load and merge several files. Later files override earlier ones."""
        if not paths:
            return cls()
        result = cls.from_toml(paths[0])
        for p in paths[1:]:
            result.merge(cls.from_toml(p))
        return result

    @classmethod
    def from_extracted(
        cls,
        candidates: Iterable[ExtractedTerm],
        min_confidence: float = 0.0,
    ) -> Glossary:
        """Promote mined candidates with at least *min_confidence*."""
        glossary = cls()
        for term in candidates:
            if term.confidence < min_confidence:
                continue
            glossary.terms[term.source_term] = term.target_term
            glossary.categories[term.source_term] = term.category
            glossary.descriptions[term.source_term] = (
                f"Seen {term.occurrences}x, confidence {term.confidence:.2f}"
            )
        return glossary

    def to_toml(self) -> str:
        """Serialize in the format read by :meth:`from_toml`."""
        lines = ["[meta]", f"global = {'true' if self.is_global else 'false'}", "", "[terms]"]
        lines += [f"{_toml_string(s)} = {_toml_string(t)}" for s, t in self.terms.items()]
        if self.aliases:
            lines += ["", "[aliases]"]
            for source, names in self.aliases.items():
                items = ", ".join(_toml_string(n) for n in names)
                lines.append(f"{_toml_string(source)} = [{items}]")
        for table, values in (("categories", self.categories), ("descriptions", self.descriptions)):
            if values:
                lines += ["", f"[{table}]"]
                lines += [f"{_toml_string(k)} = {_toml_string(v)}" for k, v in values.items()]
        return "\n".join(lines) + "\n"

    def save(self, path: str | Path) -> None:
        Path(path).write_text(self.to_toml(), encoding="utf-8")

    def merge(self, other: Glossary) -> None:
        """Merge another glossary. Other's values override on conflict."""
        self.terms.update(other.terms)
        self.aliases.update(other.aliases)
        self.categories.update(other.categories)
        self.descriptions.update(other.descriptions)
        self.is_global = self.is_global or other.is_global

    # ── Matching ──

    def _spellings(self) -> list[tuple[str, str, str]]:
        """(spelling, canonical source, target), longest spelling first.

        Longer spellings go first so "Dark Lord" is matched before "Lord".
        """
        result = []
        for source, target in self.terms.items():
            result.append((source, source, target))
            result.extend((alias, source, target) for alias in self.aliases.get(source, []))
        result.sort(key=lambda t: len(t[0]), reverse=True)
        return result

    def find_matches(self, texts: Iterable[str]) -> dict[str, list[int]]:
        """Indices of *texts* containing each source term or alias.

        Plain case-insensitive substring match, as used when flagging entries
        on import. Terms with no match are left out.
        """
        needles = [(spelling.lower(), source) for spelling, source, _ in self._spellings()]
        matches: dict[str, list[int]] = {}
        for index, text in enumerate(texts):
            lowered = text.lower()
            hit: set[str] = set()
            for needle, source in needles:
                if source not in hit and needle in lowered:
                    hit.add(source)
                    matches.setdefault(source, []).append(index)
        return matches

    # ── Placeholder protection ──

    def protect_with_mapping(self, text: str) -> tuple[str, dict[str, str]]:
        """Replace terms (and aliases) with ``Gx<n>`` placeholders.

        Returns the protected text and the placeholder → target mapping
        needed by :meth:`restore`.
        """
        index = {source: i for i, source in enumerate(self.terms)}
        placeholders: dict[str, str] = {}
        protected = text
        for spelling, source, target in self._spellings():
            placeholder = f"Gx{index[source]}"
            pattern = self._make_pattern(spelling)
            if pattern.search(protected):
                placeholders[placeholder] = target
                protected = pattern.sub(placeholder, protected)

        return protected, placeholders

    def restore(self, text: str, placeholders: dict[str, str]) -> str:
        """Replace placeholders with target terms, repairing mangled ones first."""
        restored = _normalize_placeholders(text, placeholders)
        # Gx12 before Gx1
        ordered = sorted(placeholders.items(), key=lambda p: len(p[0]), reverse=True)
        for placeholder, target in ordered:
            restored = restored.replace(placeholder, target)
        return restored

    def protect_batch(self, texts: list[str]) -> tuple[list[str], list[dict[str, str]]]:
        """Protect terms in multiple texts. Each text gets independent placeholders."""
        protected_texts: list[str] = []
        mappings: list[dict[str, str]] = []
        for t in texts:
            protected, mapping = self.protect_with_mapping(t)
            protected_texts.append(protected)
            mappings.append(mapping)
        return protected_texts, mappings

    def restore_batch(self, texts: list[str], mappings: list[dict[str, str]]) -> list[str]:
        return [self.restore(t, m) for t, m in zip(texts, mappings, strict=True)]
