"""
Index builder for Loremaster.

Turns an event list into three inverted indices in a single pass:

- keyword:   description words -> event positions
- character: capitalized words (likely names) -> event positions
- location:  lowercased location -> event positions

The character index is a heuristic, not named-entity recognition: any
capitalized word of three or more letters counts, so sentence-initial words
show up and multi-word names are split into their parts.
"""

import logging
import re
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence, Set, Tuple

from ..models import Event


STOP_WORDS = frozenset({
    'the', 'a', 'an', 'in', 'on', 'at', 'of', 'to', 'for', 'and', 'or',
    'is', 'are', 'was', 'were', 'be', 'been', 'has', 'had', 'have', 'with',
    'by', 'from', 'they', 'them', 'their', 'this', 'that', 'which', 'who',
    'its', 'but', 'not', 'all', 'into', 'also', 'more', 'than', 'about'
})

_NON_WORD = re.compile(r"[^a-z0-9\s'-]")
_PROPER_NOUN = re.compile(r"[A-Z][a-z]{2,}")

Postings = Dict[str, Tuple[int, ...]]


def split_words(text: str) -> List[str]:
    """Lowercase `text`, blank out punctuation and split on whitespace."""
    return _NON_WORD.sub(' ', text.lower()).split()


def tokenize(text: str) -> List[str]:
    """
    Extract indexable keywords from a description.

    Args:
        text: Free text

    Returns:
        Lowercase words longer than two characters that are not stop words
    """
    return [word for word in split_words(text) if len(word) > 2 and word not in STOP_WORDS]


def extract_proper_nouns(text: str) -> List[str]:
    """
    Extract likely character names from a description.

    Args:
        text: Free text in its original casing

    Returns:
        Lowercased capitalized words of three or more letters
    """
    return [noun.lower() for noun in _PROPER_NOUN.findall(text)]


@dataclass(frozen=True)
class TimelineIndices:
    """
    The three inverted indices over one event list.

    Keys are stored in sorted order and each posting is a sorted tuple, so two
    builds over the same events compare equal.
    """

    keyword: Postings = field(default_factory=dict)
    character: Postings = field(default_factory=dict)
    location: Postings = field(default_factory=dict)

    def keyword_hits(self, token: str) -> Tuple[int, ...]:
        return self.keyword.get(token, ())

    def character_hits(self, token: str) -> Tuple[int, ...]:
        return self.character.get(token, ())

    def location_hits(self, fragment: str) -> List[int]:
        """Positions of events whose location contains `fragment`, in order."""
        hits: Set[int] = set()
        for location, positions in self.location.items():
            if fragment in location:
                hits.update(positions)
        return sorted(hits)


class IndexBuilder:
    """
    Builds TimelineIndices from an event list.
    """

    def build(self, events: Sequence[Event]) -> TimelineIndices:
        """
        Build all three indices.

        Args:
            events: Events in snapshot order; positions in the indices refer
                to this order

        Returns:
            The finished indices
        """
        keyword: Dict[str, Set[int]] = defaultdict(set)
        character: Dict[str, Set[int]] = defaultdict(set)
        location: Dict[str, Set[int]] = defaultdict(set)

        for position, event in enumerate(events):
            if event.location:
                loc = event.location.strip().lower()
                if loc:
                    location[loc].add(position)

            if event.description:
                for word in tokenize(event.description):
                    keyword[word].add(position)

                for noun in extract_proper_nouns(event.description):
                    character[noun].add(position)

        indices = TimelineIndices(
            keyword=self._freeze(keyword),
            character=self._freeze(character),
            location=self._freeze(location)
        )

        logging.debug(
            f"Timeline indexes built: {len(indices.keyword)} keywords, "
            f"{len(indices.character)} characters, {len(indices.location)} locations"
        )
        return indices

    @staticmethod
    def _freeze(index: Dict[str, Iterable[int]]) -> Postings:
        return {key: tuple(sorted(index[key])) for key in sorted(index)}
