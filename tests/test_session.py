# /tests/test_session.py

import unittest
import sys
import os

# Add root directory to path to allow imports from 'core'
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from core.exceptions import NoGraphLoadedError, StreamInProgressError
from core.models import MeasurementRecord
from core.session import GraphSession


def make_record(region="Pacific", date="2025-01-15", **overrides):
    values = dict(depth=120.0, salinity=34.5, temperature=18.2, ph=8.1, dissolved_oxygen=6.8,
                  fish_population=540.0, plankton=1200.0, coral_coverage=35.0)
    values.update(overrides)
    return MeasurementRecord(region=region, date=date, **values)


class TestGraphSession(unittest.TestCase):

    def setUp(self):
        self.session = GraphSession()

    def test_nothing_loaded(self):
        self.assertFalse(self.session.is_loaded)
        with self.assertRaises(NoGraphLoadedError):
            self.session.engine
        with self.assertRaises(NoGraphLoadedError):
            self.session.regenerate()

    def test_load_builds_snapshot_and_engine(self):
        snapshot = self.session.load([make_record(), make_record(region="Atlantic", date="2025-02-20")])

        self.assertEqual(len(snapshot.nodes), 12)
        self.assertIs(self.session.engine.snapshot, snapshot)
        self.assertIs(self.session.drag.engine, self.session.engine)

    def test_regenerate_discards_simulation_state(self):
        self.session.load([make_record()])
        old_engine = self.session.engine
        old_engine.run(max_ticks=20)
        old_engine.pin("region:Pacific", 1.0, 1.0)

        snapshot = self.session.regenerate()

        self.assertIsNot(self.session.engine, old_engine)
        self.assertEqual(snapshot, old_engine.snapshot)
        self.assertEqual(self.session.engine.tick_count, 0)
        self.assertEqual(self.session.engine.alpha, 1.0)

    def test_new_dataset_replaces_previous_one(self):
        self.session.load([make_record(region="Pacific")])

        snapshot = self.session.load([make_record(region="Indian"), make_record(region="Arctic")])

        labels = {node.label for node in snapshot.nodes}
        self.assertIn("Indian", labels)
        self.assertNotIn("Pacific", labels)
        self.assertEqual(len(self.session.records), 2)

    def test_only_one_stream_per_engine(self):
        self.session.load([make_record()])

        engine = self.session.claim_stream()

        self.assertIs(engine, self.session.engine)
        self.assertTrue(self.session.is_streaming)
        with self.assertRaises(StreamInProgressError):
            self.session.claim_stream()
        with self.assertRaises(StreamInProgressError):
            self.session.ensure_not_streaming()

        self.session.release_stream(engine)
        self.assertFalse(self.session.is_streaming)
        self.assertIs(self.session.claim_stream(), engine)

    def test_new_engine_is_not_blocked_by_an_old_stream(self):
        self.session.load([make_record()])
        old_engine = self.session.claim_stream()

        self.session.regenerate()

        self.assertFalse(self.session.is_streaming)
        new_engine = self.session.claim_stream()
        self.session.release_stream(old_engine)
        self.assertTrue(self.session.is_streaming)
        self.session.release_stream(new_engine)
        self.assertFalse(self.session.is_streaming)

    def test_empty_dataset_gives_converged_engine(self):
        snapshot = self.session.load([])

        self.assertTrue(snapshot.is_empty)
        self.assertTrue(self.session.engine.is_converged)


if __name__ == '__main__':
    unittest.main()
