"""Relationship classification for co-occurring concepts.

Uses an ordered table of lexical patterns checked against the text window
around two concepts. This is a heuristic, not semantic understanding; the
builder only depends on the RelationshipClassifier protocol, so a stronger
classifier can be dropped in without touching graph construction.
"""

import re
from typing import Protocol

from conceptmap.models import DEFAULT_RELATION

# Characters of context kept on each side of the concept pair
CONTEXT_MARGIN = 20

# First match wins, so more specific phrases come before generic ones
RELATIONSHIP_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"\b(leads?\s+to|results?\s+in|causes?|produces?)\b", re.IGNORECASE), "leads to"),
    (re.compile(r"\b(influences?|affects?|impacts?)\b", re.IGNORECASE), "influences"),
    (re.compile(r"\b(is\s+part\s+of|belongs?\s+to|within)\b", re.IGNORECASE), "is part of"),
    (re.compile(r"\b(includes?|contains?|comprises?)\b", re.IGNORECASE), "includes"),
    (re.compile(r"\b(requires?|needs?|depends?\s+on)\b", re.IGNORECASE), "requires"),
    (re.compile(r"\b(contrasts?\s+with|differs?\s+from|versus|vs\.?|unlike)\b", re.IGNORECASE), "contrasts with"),
    (re.compile(r"\b(similar\s+to|like|resembles?)\b", re.IGNORECASE), "similar to"),
    (re.compile(r"\b(defines?|means?|is\s+defined\s+as)\b", re.IGNORECASE), "defines"),
    (re.compile(r"\b(examples?\s+of|such\s+as|e\.g\.|for\s+instance)", re.IGNORECASE), "example of"),
    (re.compile(r"\b(types?\s+of|kinds?\s+of|forms?\s+of)\b", re.IGNORECASE), "type of"),
    (re.compile(r"\b(supports?|reinforces?|strengthens?)\b", re.IGNORECASE), "supports"),
    (re.compile(r"\b(opposes?|contradicts?|challenges?)\b", re.IGNORECASE), "opposes"),
    (re.compile(r"\b(precedes?|before|prior\s+to)\b", re.IGNORECASE), "precedes"),
    (re.compile(r"\b(follows?|after|subsequent\s+to)\b", re.IGNORECASE), "follows"),
    (re.compile(r"\b(enables?|allows?|permits?)\b", re.IGNORECASE), "enables"),
    (re.compile(r"\b(prevents?|blocks?|inhibits?)\b", re.IGNORECASE), "prevents"),
    (re.compile(r"\b(creates?|generates?|builds?)\b", re.IGNORECASE), "creates"),
    (re.compile(r"\b(uses?|utilizes?|employs?)\b", re.IGNORECASE), "uses"),
    (re.compile(r"\b(extends?|expands?|builds?\s+on)\b", re.IGNORECASE), "extends"),
    (re.compile(r"\b(criticizes?|critiques?|questions?)\b", re.IGNORECASE), "critiques"),
]


class RelationshipClassifier(Protocol):
    """Labels the relationship between two concepts found in one text."""

    def classify(self, text: str, concept_a: str, concept_b: str) -> str:
        ...


def extract_context_window(text: str, concept_a: str, concept_b: str) -> str | None:
    """
    Text spanning both concepts plus a small margin on each side.

    Returns None when either concept is absent from the text.
    """
    lower = text.lower()
    pos_a = lower.find(concept_a.lower())
    pos_b = lower.find(concept_b.lower())
    if pos_a == -1 or pos_b == -1:
        return None

    start = max(0, min(pos_a, pos_b) - CONTEXT_MARGIN)
    end = min(len(text), max(pos_a + len(concept_a), pos_b + len(concept_b)) + CONTEXT_MARGIN)
    return text[start:end]


class PatternRelationshipClassifier:
    """Classifies relationships with the ordered RELATIONSHIP_PATTERNS table."""

    def __init__(
        self,
        patterns: list[tuple[re.Pattern[str], str]] | None = None,
        default_label: str = DEFAULT_RELATION,
    ) -> None:
        self.patterns = patterns if patterns is not None else RELATIONSHIP_PATTERNS
        self.default_label = default_label

    def classify(self, text: str, concept_a: str, concept_b: str) -> str:
        window = extract_context_window(text, concept_a, concept_b)
        if window is None:
            return self.default_label

        for pattern, label in self.patterns:
            if pattern.search(window):
                return label

        return self.default_label


def classify_relationship(text: str, concept_a: str, concept_b: str) -> str:
    """Classify with the default pattern table."""
    return _default_classifier.classify(text, concept_a, concept_b)


_default_classifier = PatternRelationshipClassifier()
