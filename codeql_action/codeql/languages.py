"""CodeQL language names."""

# Alternative spellings accepted on input
LANGUAGE_ALIASES: dict[str, str] = {
    "c": "cpp",
    "c++": "cpp",
    "c#": "csharp",
    "typescript": "javascript",
    "kotlin": "java",
}

# Languages whose database is populated by observing a real build
TRACED_LANGUAGES: frozenset[str] = frozenset({"cpp", "java", "csharp"})

# Languages for which paths / paths-ignore filters take effect
INTERPRETED_LANGUAGES: frozenset[str] = frozenset({"javascript", "python"})


def normalize_language(language: str) -> str:
    """Normalize a language name to its CodeQL spelling."""
    lang_lower = language.strip().lower()
    return LANGUAGE_ALIASES.get(lang_lower, lang_lower)


def parse_languages(value: str | None) -> list[str]:
    """Parse a comma or whitespace separated language list.

    Duplicates are dropped; first-seen order is kept.
    """
    if not value:
        return []
    languages: list[str] = []
    for raw in value.replace(",", " ").split():
        language = normalize_language(raw)
        if language and language not in languages:
            languages.append(language)
    return languages


def is_traced_language(language: str) -> bool:
    """Return True if the language's database needs an observed build."""
    return language in TRACED_LANGUAGES
