"""Keyword extraction for knowledge linking and vocabulary derivation."""

import re

# Common English stop words filtered out of extracted keywords
STOP_WORDS: frozenset[str] = frozenset([
    # Articles, conjunctions, prepositions
    "a", "an", "the", "and", "or", "but", "in", "on", "at", "to", "for", "of",
    "with", "by", "from", "as", "if", "about", "into", "through", "during",
    "before", "after", "above", "below", "between", "under", "again", "further",
    "up", "down", "out", "off", "over", "since", "while",
    # Auxiliary and modal verbs
    "is", "was", "are", "were", "been", "be", "being", "have", "has", "had",
    "do", "does", "did", "will", "would", "could", "should", "may", "might",
    "must", "can",
    # Pronouns and determiners
    "this", "that", "these", "those", "i", "you", "he", "she", "it", "we",
    "they", "what", "which", "who", "whom", "when", "where", "why", "how",
    "all", "each", "every", "both", "few", "more", "most", "other", "some",
    "such", "any", "your", "my", "our", "their", "its", "his", "her",
    # Negation and degree
    "no", "nor", "not", "only", "own", "same", "so", "than", "too", "very",
    "just", "also", "even", "still", "much", "many",
    # Adverbs of time and place
    "now", "here", "there", "then", "once", "back",
    # Common verbs
    "get", "got", "make", "made", "take", "took", "see", "saw", "know", "knew",
    "think", "thought", "come", "came", "go", "went", "want", "need", "use",
    "used", "like", "work",
    # Common adjectives and nouns
    "new", "first", "last", "long", "great", "little", "good", "bad", "right",
    "left", "thing", "things", "way", "ways", "well",
])

_NON_WORD = re.compile(r"[^\w\s-]")
_WHITESPACE = re.compile(r"\s+")
_DIGITS = re.compile(r"^\d+$")

MIN_KEYWORD_LENGTH = 3


def extract_keywords(text: str | None) -> list[str]:
    """
    Extract significant keywords from text.

    Lowercases, strips punctuation (hyphens survive), and drops short
    words, stop words, pure numbers and repeats. First-occurrence order is kept.

    Args:
        text: Free text, usually a node's title and note

    Returns:
        Ordered, deduplicated keyword list (empty for empty input)
    """
    if not text:
        return []

    normalized = _WHITESPACE.sub(" ", _NON_WORD.sub(" ", text.lower())).strip()

    keywords: list[str] = []
    seen: set[str] = set()

    for word in normalized.split(" "):
        if len(word) < MIN_KEYWORD_LENGTH:
            continue
        if word in STOP_WORDS or word in seen:
            continue
        if _DIGITS.match(word):
            continue

        seen.add(word)
        keywords.append(word)

    return keywords
