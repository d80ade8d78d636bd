"""
Name Registry for Loremaster.

This module maps whatever a player types ("Rhy", "rhyarca", "Rhyaerca") to a
single canonical name. Resolution tries, in order: exact alias lookup, a
unique prefix match, a unique substring match, and finally a Levenshtein
fuzzy match. Successful fuzzy matches are learned as aliases so the same
input resolves exactly next time.
"""

import logging
import threading
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from rapidfuzz.distance import Levenshtein


FUZZY_RATIO = 0.4
MIN_FUZZY_DISTANCE = 2
DEFAULT_SEARCH_LIMIT = 10


def max_edit_distance(text: str) -> int:
    """Largest edit distance a fuzzy match on `text` may have."""
    return max(MIN_FUZZY_DISTANCE, int(len(text) * FUZZY_RATIO))


def name_distance(text: str, name: str, cutoff: int) -> int:
    """
    Edit distance between `text` and a lowercase name.

    For multi-word names the closest single word also counts, so "tokla"
    is one edit away from "tokala ironfang". Distances above `cutoff` are
    reported as `cutoff + 1`.
    """
    best = Levenshtein.distance(text, name, score_cutoff=cutoff)
    if " " in name and " " not in text:
        for word in name.split():
            best = min(best, Levenshtein.distance(text, word, score_cutoff=cutoff))
    return best


class NameRegistry:
    """
    Registry of canonical names and the aliases that resolve to them.

    Usage:
        registry = NameRegistry()
        registry.register("Tokala Ironfang", ["tok"])
        registry.resolve("tokla")  # "Tokala Ironfang", learned as an alias
    """

    def __init__(self):
        """Initialize an empty registry."""
        # alias (lowercase) -> canonical name
        self._aliases: Dict[str, str] = {}
        # canonical name -> its aliases, in registration order
        self._reverse: Dict[str, Dict[str, None]] = {}
        self._canonical_names: List[str] = []
        self._lock = threading.RLock()

    def __len__(self) -> int:
        return len(self._canonical_names)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name in self._reverse

    def register(self, canonical: str, aliases: Iterable[str] = ()) -> None:
        """
        Register a canonical name with optional aliases.

        Registering the same name again is harmless; new aliases are added and
        an alias already owned by another name moves to this one.

        Args:
            canonical: The official name
            aliases: Other names it goes by
        """
        if not canonical or not canonical.strip():
            logging.warning("Ignoring registration of an empty canonical name")
            return

        canonical = canonical.strip()

        with self._lock:
            self._reverse.setdefault(canonical, {})
            self._assign(canonical.lower(), canonical)

            for alias in aliases:
                if alias and alias.strip():
                    self._assign(alias.strip().lower(), canonical)

            if canonical not in self._canonical_names:
                self._canonical_names.append(canonical)

    def register_batch(self, entries: Iterable[Mapping[str, Any]]) -> None:
        """
        Register multiple names at once.

        Args:
            entries: Mappings of the form {"name": str, "aliases": [str]}
        """
        for entry in entries:
            name = entry.get("name")
            if not isinstance(name, str):
                logging.warning(f"Skipping name entry without a name: {entry!r}")
                continue
            self.register(name, entry.get("aliases") or [])

    def learn_alias(self, alias: str, canonical: str) -> None:
        """
        Map an extra alias onto an already registered canonical name.

        Args:
            alias: The alias to learn
            canonical: The canonical name it maps to
        """
        with self._lock:
            if canonical not in self._reverse:
                logging.warning(f"Cannot learn alias '{alias}': '{canonical}' is not registered")
                return
            self._assign(alias.strip().lower(), canonical)
        logging.debug(f"Name registry: learned alias '{alias}' -> '{canonical}'")

    def _assign(self, alias: str, canonical: str) -> None:
        previous = self._aliases.get(alias)
        if previous is not None and previous != canonical:
            self._reverse[previous].pop(alias, None)
        self._aliases[alias] = canonical
        self._reverse[canonical][alias] = None

    def resolve(self, text: Optional[str], learn: bool = True) -> Optional[str]:
        """
        Resolve user input to a canonical name.

        Args:
            text: What the user typed
            learn: Whether a fuzzy match should be remembered as an alias

        Returns:
            The canonical name, or None if nothing matches
        """
        if not text or not isinstance(text, str):
            return None

        lower = text.strip().lower()
        if not lower:
            return None

        with self._lock:
            # 1. Exact alias lookup
            if lower in self._aliases:
                return self._aliases[lower]

            # 2. Prefix match ("rhy" -> "Rhyaerca")
            prefix_matches = [
                name for name in self._canonical_names if name.lower().startswith(lower)
            ]
            if len(prefix_matches) == 1:
                return prefix_matches[0]

            # 3. Substring match ("ironfang" -> "Tokala Ironfang")
            substring_matches = [
                name for name in self._canonical_names if lower in name.lower()
            ]
            if len(substring_matches) == 1:
                return substring_matches[0]

            # 4. Fuzzy match over every known alias
            match = self._closest_alias(lower)
            if match is None:
                return None

            canonical, distance = match
            if learn:
                self._assign(lower, canonical)
            logging.debug(f"Name registry: fuzzy matched '{text}' -> '{canonical}' (distance: {distance})")
            return canonical

    def _closest_alias(self, lower: str) -> Optional[Tuple[str, int]]:
        limit = max_edit_distance(lower)
        best: Optional[Tuple[str, int]] = None

        for alias, canonical in self._aliases.items():
            distance = name_distance(lower, alias, limit)
            if distance > limit:
                continue
            if best is None or distance < best[1]:
                best = (canonical, distance)

        return best

    def search(self, query: Optional[str], limit: int = DEFAULT_SEARCH_LIMIT) -> List[str]:
        """
        List canonical names matching a partial input, for autocomplete.

        Prefix matches come first, then substring matches, then fuzzy matches
        by ascending edit distance.

        Args:
            query: Partial input
            limit: Maximum number of names to return

        Returns:
            Matching canonical names
        """
        with self._lock:
            if not query or not query.strip():
                return self._canonical_names[:limit]

            lower = query.strip().lower()
            results: List[str] = []
            seen = set()

            for name in self._canonical_names:
                if name.lower().startswith(lower) and name not in seen:
                    results.append(name)
                    seen.add(name)

            for name in self._canonical_names:
                if lower in name.lower() and name not in seen:
                    results.append(name)
                    seen.add(name)

            if len(results) < limit:
                cutoff = max_edit_distance(lower)
                fuzzy = []
                for name in self._canonical_names:
                    if name in seen:
                        continue
                    distance = name_distance(lower, name.lower(), cutoff)
                    if distance <= cutoff:
                        fuzzy.append((distance, name))

                fuzzy.sort(key=lambda item: item[0])
                results.extend(name for _, name in fuzzy)

            return results[:limit]

    def get_aliases(self, canonical: str) -> List[str]:
        """
        Get all known aliases for a canonical name.

        Args:
            canonical: The canonical name

        Returns:
            Its aliases (lowercase), including the lowercased name itself
        """
        with self._lock:
            return list(self._reverse.get(canonical, {}))

    def get_all_names(self) -> List[str]:
        """Get all canonical names in registration order."""
        with self._lock:
            return list(self._canonical_names)

    def to_dict(self) -> Dict[str, List[str]]:
        """
        Export the alias table for persistence.

        Returns:
            Mapping of canonical name to its aliases
        """
        with self._lock:
            return {name: list(self._reverse[name]) for name in self._canonical_names}

    def from_dict(self, data: Mapping[str, Iterable[str]]) -> None:
        """
        Import an alias table previously produced by `to_dict()`.

        Args:
            data: Mapping of canonical name to aliases
        """
        for canonical, aliases in data.items():
            self.register(canonical, aliases)
