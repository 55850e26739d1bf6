"""Abstract base class for translation backends."""

from __future__ import annotations

from abc import ABC, abstractmethod


class TranslationBackend(ABC):
    """Interface for translation backends."""

    name = "base"

    @abstractmethod
    def translate_batch(
        self,
        texts: list[str],
        target_lang: str,
        source_lang: str | None = None,
        contexts: list[str | None] | None = None,
    ) -> list[str]:
        """Translate a batch of texts.

        Args:
            texts: Strings to translate.
            target_lang: Target language code (e.g. "VI").
            source_lang: Source language code, or None to let the backend guess.
            contexts: Optional context tag per text ("dialogue", "menu" ...).

        Returns:
            Translated strings, same length and order as *texts*.
        """
        ...

    def translate(
        self,
        text: str,
        target_lang: str,
        source_lang: str | None = None,
        context: str | None = None,
    ) -> str:
        """Translate a single text. Default implementation uses translate_batch."""
        results = self.translate_batch([text], target_lang, source_lang, [context])
        return results[0]
