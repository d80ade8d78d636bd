"""
Timeline search for Loremaster.

Scores every event against a free-text query using the live snapshot's
indices and the name registry, and answers the simpler character, location
and year lookups.
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Set

from ..models import Event, RankedEvent
from ..resolution import NameRegistry
from .builder import STOP_WORDS, TimelineIndices, extract_proper_nouns, split_words


# Score weights
KEYWORD_WEIGHT = 10
CHARACTER_WEIGHT = 20
LOCATION_WEIGHT = 15
REGISTRY_BOOST = 30
PHRASE_BONUS = 200

# Most a single query token can add to one event
TOKEN_CEILING = KEYWORD_WEIGHT + CHARACTER_WEIGHT + LOCATION_WEIGHT


def query_tokens(query: str) -> List[str]:
    """Split a query into lowercase tokens longer than two characters."""
    return [word for word in split_words(query) if len(word) > 2]


def phrase_bonus(token_count: int) -> int:
    """
    Bonus for an exact-phrase hit.

    Normally PHRASE_BONUS; for long queries it is raised above anything a
    keyword-only match could score, so the phrase hit always ranks first.
    """
    return max(PHRASE_BONUS, token_count * TOKEN_CEILING + REGISTRY_BOOST + 1)


class SearchEngine:
    """
    Ranks timeline events for a query.

    The engine holds no index state of its own: each call reads the snapshot
    that is live at that moment from the cache manager, so a rebuild running
    in the background never affects a search in progress.
    """

    def __init__(self, cache, registry: NameRegistry):
        """
        Initialize the search engine.

        Args:
            cache: Object exposing the live `snapshot` (normally a CacheManager)
            registry: Name registry used to boost resolved characters
        """
        self.cache = cache
        self.registry = registry

    def search(self, query: Optional[str], limit: Optional[int] = None) -> List[RankedEvent]:
        """
        Search the timeline.

        Args:
            query: Free-text query
            limit: Maximum number of results (None for all)

        Returns:
            Events with a positive score, best first; ties keep event order
        """
        if not query or not isinstance(query, str) or not query.strip():
            return []

        snapshot = self.cache.snapshot
        if not snapshot.events:
            return []

        try:
            scores = self._score(query, snapshot.events, snapshot.indices)
        except Exception as e:
            logging.error(f"Error in timeline search for '{query}': {e}")
            return []

        ranked = sorted(
            (item for item in scores.items() if item[1] > 0),
            key=lambda item: (-item[1], item[0])
        )
        logging.info(f"Timeline search '{query}' matched {len(ranked)} events")
        if limit is not None:
            ranked = ranked[:limit]

        return [RankedEvent.from_event(snapshot.events[position], score) for position, score in ranked]

    def _score(self, query: str, events, indices: TimelineIndices) -> Dict[int, int]:
        tokens = query_tokens(query)
        scores: Dict[int, int] = defaultdict(int)

        for token in tokens:
            for position in indices.keyword_hits(token):
                scores[position] += KEYWORD_WEIGHT
            for position in indices.character_hits(token):
                scores[position] += CHARACTER_WEIGHT
            for position in indices.location_hits(token):
                scores[position] += LOCATION_WEIGHT

        significant = [token for token in tokens if token not in STOP_WORDS]
        if significant:
            raw_phrase = query.strip().lower()
            phrases = [" ".join(split_words(query))]
            if len(significant) > 1:
                # "queen skanktown" should still find "Queen of Skanktown"
                phrases.append(" of ".join(significant))

            bonus = phrase_bonus(len(tokens))
            for position, event in enumerate(events):
                text = event.description.lower()
                normalized = " ".join(split_words(text))
                if raw_phrase in text or any(phrase in normalized for phrase in phrases):
                    scores[position] += bonus

        for position in self._resolved_character_hits(query, indices):
            scores[position] += REGISTRY_BOOST

        return scores

    def _resolved_character_hits(self, name: str, indices: TimelineIndices) -> List[int]:
        canonical = self.registry.resolve(name, learn=False)
        if canonical is None:
            return []

        keys = [canonical.lower()] + extract_proper_nouns(canonical)
        return self._character_positions(keys, indices)

    def _character_positions(self, keys: Iterable[str], indices: TimelineIndices) -> List[int]:
        positions: Set[int] = set()
        for key in keys:
            positions.update(indices.character_hits(key))
        return sorted(positions)

    def get_character_events(self, name: str) -> List[Event]:
        """
        Get events mentioning a character.

        Falls back to the registry's canonical name when the name as typed
        does not appear in the character index.

        Args:
            name: Character name or alias

        Returns:
            Matching events in timeline order
        """
        if not name or not name.strip():
            return []

        snapshot = self.cache.snapshot
        positions = list(snapshot.indices.character_hits(name.strip().lower()))
        if not positions:
            positions = self._resolved_character_hits(name, snapshot.indices)

        return [snapshot.events[position] for position in positions]

    def get_location_events(self, location: str) -> List[Event]:
        """
        Get events whose location contains the given text.

        Args:
            location: Location name or fragment

        Returns:
            Matching events in timeline order
        """
        if not location or not location.strip():
            return []

        snapshot = self.cache.snapshot
        positions = snapshot.indices.location_hits(location.strip().lower())
        return [snapshot.events[position] for position in positions]

    def search_by_year_range(self, start_year: int, end_year: int) -> List[Event]:
        """
        Get events dated within a year range.

        Events without a parsable year are left out.

        Args:
            start_year: First year (inclusive)
            end_year: Last year (inclusive)

        Returns:
            Events sorted by year
        """
        events = self.cache.snapshot.events
        matching = [
            event for event in events
            if event.parsed_year and start_year <= event.parsed_year <= end_year
        ]
        return sorted(matching, key=lambda event: event.parsed_year)

    def get_events_around_year(self, year: int, span: int = 5) -> List[Event]:
        """Get events within `span` years either side of `year`."""
        return self.search_by_year_range(year - span, year + span)
