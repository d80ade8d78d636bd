"""
Unit tests for core Loremaster components.

Tests configuration management, data models, date parsing and the
ingestion boundary that turns raw rows into events.
"""

import os
import tempfile
import unittest
from pathlib import Path

from loremaster.config import ConfigManager
from loremaster.importers import StaticImporter, normalize_events
from loremaster.models import Event, EventRecord, RankedEvent, parse_year


class TestConfigManager(unittest.TestCase):
    """Test configuration management functionality."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.config_path = Path(self.temp_dir) / "test_config.yaml"

    def tearDown(self):
        """Clean up test fixtures."""
        if self.config_path.exists():
            self.config_path.unlink()
        os.rmdir(self.temp_dir)

    def test_config_creation_with_defaults(self):
        """Test config manager falls back to defaults when file missing."""
        config = ConfigManager(str(self.config_path))

        self.assertEqual(config.snapshot_file, "data/cache/timeline_cache.json")
        self.assertEqual(config.max_results, 20)
        self.assertEqual(config.autocomplete_limit, 10)
        self.assertEqual(config.stale_after_hours, 24.0)
        self.assertEqual(config.known_names, [])
        self.assertEqual(config.log_filename, "loremaster.log")

    def test_config_loading_from_file(self):
        """Test loading configuration from YAML file."""
        test_config = """
cache:
  snapshot_file: "test-cache/timeline.json"

search:
  max_results: 5

registry:
  names:
    - name: Tokala Ironfang
      aliases: [tok]
"""
        with open(self.config_path, 'w') as f:
            f.write(test_config)

        config = ConfigManager(str(self.config_path))

        self.assertEqual(config.snapshot_file, "test-cache/timeline.json")
        self.assertEqual(config.max_results, 5)
        self.assertEqual(config.known_names, [{"name": "Tokala Ironfang", "aliases": ["tok"]}])
        # Values missing from the file keep their defaults
        self.assertEqual(config.stale_after_hours, 24.0)
        self.assertEqual(config.get("logging.level"), "INFO")

    def test_dot_notation_access(self):
        """Test accessing config values with dot notation."""
        config = ConfigManager(str(self.config_path))  # Uses defaults

        self.assertEqual(config.get("search.max_results"), 20)
        self.assertEqual(config.get("cache.stale_after_hours"), 24)
        self.assertEqual(config.get("nonexistent.key", "default"), "default")
        self.assertIn("snapshot_file", config.get_section("cache"))
        self.assertEqual(config.get_section("missing"), {})

    def test_config_reload(self):
        """Test configuration reloading."""
        with open(self.config_path, 'w') as f:
            f.write("search:\n  max_results: 3")

        config = ConfigManager(str(self.config_path))
        self.assertEqual(config.max_results, 3)

        with open(self.config_path, 'w') as f:
            f.write("search:\n  max_results: 7")

        config.reload()
        self.assertEqual(config.max_results, 7)

    def test_invalid_yaml_falls_back_to_defaults(self):
        """Test that a broken config file does not stop startup."""
        with open(self.config_path, 'w') as f:
            f.write("search: [unclosed")

        config = ConfigManager(str(self.config_path))
        self.assertEqual(config.max_results, 20)

    def test_non_mapping_yaml_falls_back_to_defaults(self):
        """Test that a config file holding a bare list is rejected."""
        with open(self.config_path, 'w') as f:
            f.write("- just\n- a\n- list\n")

        config = ConfigManager(str(self.config_path))
        self.assertEqual(config.snapshot_file, "data/cache/timeline_cache.json")


class TestParseYear(unittest.TestCase):
    """Test extraction of the year from timeline dates."""

    def test_dotted_dates(self):
        self.assertEqual(parse_year("4707.01.16"), 4707)
        self.assertEqual(parse_year("4707.00"), 4707)

    def test_leading_zeros(self):
        self.assertEqual(parse_year("0499.00.00"), 499)

    def test_negative_with_thousands_separator(self):
        self.assertEqual(parse_year("-1,293.00"), -1293)

    def test_quoted_date(self):
        self.assertEqual(parse_year('"4710.05.01"'), 4710)

    def test_unparsable(self):
        self.assertEqual(parse_year("unknown"), 0)
        self.assertEqual(parse_year(""), 0)
        self.assertEqual(parse_year(None), 0)


class TestDataModels(unittest.TestCase):
    """Test data model validation and functionality."""

    def test_event_record_defaults(self):
        """Missing fields become empty strings."""
        record = EventRecord.model_validate({"date": "4707.01.16"})

        self.assertEqual(record.location, "")
        self.assertEqual(record.category, "")
        self.assertEqual(record.description, "")
        self.assertFalse(record.is_well_formed())

    def test_event_record_coercion(self):
        """None and numbers are coerced to strings."""
        record = EventRecord.model_validate({
            "date": 4707,
            "location": None,
            "description": "Something happened"
        })

        self.assertEqual(record.date, "4707")
        self.assertEqual(record.location, "")
        self.assertTrue(record.is_well_formed())

    def test_event_record_accepts_legacy_category_column(self):
        record = EventRecord.model_validate({"date": "4707", "ap": "Hell's Rebels", "description": "x"})
        self.assertEqual(record.category, "Hell's Rebels")

    def test_event_from_record(self):
        """Events are stripped and carry their parsed year."""
        record = EventRecord(
            date=" 4707.01.16 ",
            location=" Kintargo ",
            category="Hell's Rebels",
            description=" Tokala fought the cultists. "
        )
        event = Event.from_record(record)

        self.assertEqual(event.date, "4707.01.16")
        self.assertEqual(event.location, "Kintargo")
        self.assertEqual(event.description, "Tokala fought the cultists.")
        self.assertEqual(event.parsed_year, 4707)

    def test_event_serializes_parsed_year_by_alias(self):
        event = Event(date="4707.01.16", description="x", parsed_year=4707)

        self.assertEqual(event.model_dump(by_alias=True)["parsedYear"], 4707)
        self.assertEqual(Event.model_validate(event.model_dump(by_alias=True)), event)

    def test_event_is_immutable(self):
        event = Event(date="4707", description="x", parsed_year=4707)
        with self.assertRaises(Exception):
            event.description = "y"

    def test_ranked_event_from_event(self):
        event = Event(date="4707", location="Torch", description="x", parsed_year=4707)
        ranked = RankedEvent.from_event(event, 42)

        self.assertEqual(ranked.score, 42)
        self.assertEqual(ranked.location, "Torch")
        self.assertEqual(ranked.parsed_year, 4707)

    def test_context_line(self):
        event = Event(date="4707.01.16", location="Kintargo", description="A fight.")
        self.assertEqual(event.to_context_line(), "4707.01.16 [Kintargo]: A fight.")


class TestImporters(unittest.TestCase):
    """Test the ingestion boundary and the static event source."""

    def test_normalize_skips_malformed_rows(self):
        rows = [
            {"date": "4707.01.16", "description": "Kept"},
            {"date": "", "description": "No date"},
            {"date": "4707.02.01"},
            "not a row",
            None,
            {"date": "4707.03.01", "location": "Torch", "description": "Also kept"}
        ]

        events = normalize_events(rows)

        self.assertEqual([event.description for event in events], ["Kept", "Also kept"])
        self.assertEqual(events[1].location, "Torch")

    def test_normalize_accepts_event_records(self):
        events = normalize_events([EventRecord(date="4708", description="Record row")])
        self.assertEqual(events[0].parsed_year, 4708)

    def test_static_importer_sample_rows(self):
        importer = StaticImporter()
        events = normalize_events(importer.get_all_rows())

        self.assertEqual(len(events), 6)
        self.assertEqual(events[0].location, "Kintargo")
        self.assertEqual(events[-1].parsed_year, -1293)

    def test_static_importer_append(self):
        importer = StaticImporter([{"date": "4707", "description": "First"}])
        importer.append({"date": "4708", "description": "Second"})

        rows = importer.get_all_rows()
        self.assertEqual(len(rows), 2)
        # get_all_rows returns a copy
        rows.clear()
        self.assertEqual(len(importer.get_all_rows()), 2)


if __name__ == '__main__':
    unittest.main()
