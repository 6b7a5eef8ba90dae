"""
clipstudy.lang - Language codes found in container tags.

Containers label streams with ISO 639-2 codes ("eng", "fra"), while most
callers think in ISO 639-1 ("en", "fr"). Both normalise to the same Lang.
"""

from __future__ import annotations

from dataclasses import dataclass

import langcodes


@dataclass(frozen=True)
class Lang:
    """A normalised language, compared by its canonical code."""

    code: str

    @classmethod
    def iso639(cls, code: str) -> Lang:
        """Parse an ISO 639-1, 639-2 or 639-3 code.

        Raises:
            ValueError: If the code is not a usable language tag
        """
        try:
            language = langcodes.Language.get(code.strip())
        except ValueError as e:
            raise ValueError(f"Unknown language code: {code!r}") from e
        if not language.language or language.language == "und":
            raise ValueError(f"Unknown language code: {code!r}")
        return cls(language.language)

    def __str__(self) -> str:
        return self.code
