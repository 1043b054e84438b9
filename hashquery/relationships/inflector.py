"""Naive English inflection used for relation defaults."""


def pluralize(word: str) -> str:
    word = str(word)
    return word if word.endswith("s") else f"{word}s"


def singularize(word: str) -> str:
    word = str(word)
    return word[:-1] if word.endswith("s") else word
