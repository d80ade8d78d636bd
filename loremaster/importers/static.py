"""
Static importer for Loremaster.

This module provides an in-memory event source. With no rows given it serves a
small hardcoded campaign timeline, which is what the CLI and tests use when no
real source is wired in.
"""

from typing import List, Optional, Sequence

from .base import BaseImporter, RawRow


class StaticImporter(BaseImporter):
    """
    Importer that serves a fixed list of rows.

    Rows can be appended with `append()` to simulate a growing timeline.
    """

    def __init__(self, rows: Optional[Sequence[RawRow]] = None):
        """
        Initialize the importer.

        Args:
            rows: Rows to serve; defaults to the sample campaign timeline
        """
        self._rows: List[RawRow] = list(rows) if rows is not None else self._create_sample_rows()

    def get_all_rows(self) -> List[RawRow]:
        """
        Return a copy of the configured rows.

        Returns:
            List of raw rows, oldest first
        """
        return list(self._rows)

    def append(self, *rows: RawRow) -> None:
        """Append rows to the end of the timeline."""
        self._rows.extend(rows)

    def _create_sample_rows(self) -> List[RawRow]:
        """
        Create hardcoded sample rows covering people, places and dates.

        Returns:
            List of sample rows
        """
        return [
            {
                "date": "4707.01.16",
                "location": "Kintargo",
                "category": "Hell's Rebels",
                "description": "Tokala fought the cultists in the sewers beneath the Silver Ravens' hideout."
            },
            {
                "date": "4707.02.03",
                "location": "Kintargo, Old Kintargo",
                "category": "Hell's Rebels",
                "description": "Nomkath negotiated with the Queen of Skanktown for safe passage."
            },
            {
                "date": "4707.03.21",
                "location": "Westcrown",
                "category": "Hell's Rebels",
                "description": "Rhyaerca uncovered a Thrune informant among the dockworkers."
            },
            {
                "date": "4708.06.11",
                "location": "Starfall",
                "category": "Iron Gods",
                "description": "Meyanda awakened in a Numerian vault and met Casandalee."
            },
            {
                "date": "4708.07.02",
                "location": "Torch",
                "category": "Iron Gods",
                "description": "Ulfred and Tokala sealed the burning shaft beneath Torch."
            },
            {
                "date": "-1,293.00",
                "location": "Numeria",
                "category": "History",
                "description": "The Rain of Stars brought Divinity crashing into Numeria."
            }
        ]
