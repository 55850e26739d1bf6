"""Dummy translation backend for testing. Prefixes strings with an [XX] tag."""

from __future__ import annotations

from gameloc.backends.base import TranslationBackend


class DummyBackend(TranslationBackend):
    """Offline backend that prefixes each string with the target language tag.

    Example: "Start Game" → "[VI] Start Game"
    """

    name = "dummy"

    def translate_batch(
        self,
        texts: list[str],
        target_lang: str,
        source_lang: str | None = None,
        contexts: list[str | None] | None = None,
    ) -> list[str]:
        tag = f"[{target_lang.upper()}]"
        return [f"{tag} {text}" for text in texts]
