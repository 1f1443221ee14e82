from __future__ import annotations

import unittest
from collections import OrderedDict
from datetime import datetime, timezone

from arb_sync.diff import compute_delta, missing_for_locale
from arb_sync.models import Provenance, SourcePhrase, Translation

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


def stored(**kv):
    return {k: SourcePhrase(k, v, T0) for k, v in kv.items()}


class ComputeDeltaTests(unittest.TestCase):

    def test_new_and_changed_keys_in_incoming_order(self) -> None:
        incoming = OrderedDict([("c", "C2"), ("a", "A"), ("b", "B"), ("d", "D")])
        delta = compute_delta(incoming, stored(a="A", b="B-old", c="C"))
        self.assertEqual(delta, [("c", "C2"), ("b", "B"), ("d", "D")])

    def test_stored_order_is_irrelevant(self) -> None:
        incoming = OrderedDict([("x", "1"), ("y", "2"), ("z", "3")])
        s1 = OrderedDict([("z", SourcePhrase("z", "3", T0)), ("x", SourcePhrase("x", "0", T0))])
        s2 = OrderedDict([("x", SourcePhrase("x", "0", T0)), ("z", SourcePhrase("z", "3", T0))])
        self.assertEqual(compute_delta(incoming, s1), compute_delta(incoming, s2))
        self.assertEqual(compute_delta(incoming, s1), [("x", "1"), ("y", "2")])

    def test_unchanged_input_gives_empty_delta(self) -> None:
        incoming = {"greeting": "Hello", "farewell": "Bye"}
        self.assertEqual(compute_delta(incoming, stored(greeting="Hello", farewell="Bye")), [])

    def test_removed_keys_are_not_reported(self) -> None:
        self.assertEqual(compute_delta({"a": "A"}, stored(a="A", gone="G")), [])

    def test_force_all_returns_everything(self) -> None:
        incoming = OrderedDict([("a", "A"), ("b", "B")])
        self.assertEqual(compute_delta(incoming, stored(a="A", b="B"), force_all=True), [("a", "A"), ("b", "B")])

    def test_is_pure(self) -> None:
        incoming = {"a": "A"}
        s = stored(a="old")
        first = compute_delta(incoming, s)
        self.assertEqual(first, compute_delta(incoming, s))
        self.assertEqual(s["a"].value, "old")
        self.assertEqual(incoming, {"a": "A"})

    def test_missing_for_locale_skips_existing_and_delta(self) -> None:
        incoming = OrderedDict([("a", "A"), ("b", "B"), ("c", "C")])
        existing = {"a": Translation("a", "fr", "A-fr")}
        self.assertEqual(missing_for_locale(incoming, existing, skip={"c"}), [("b", "B")])

    def test_missing_for_locale_includes_stale_automatic(self) -> None:
        t1 = datetime(2024, 2, 1, tzinfo=timezone.utc)
        incoming = OrderedDict([("a", "A2"), ("b", "B2"), ("c", "C")])
        sources = {
            "a": SourcePhrase("a", "A2", t1),
            "b": SourcePhrase("b", "B2", t1),
            "c": SourcePhrase("c", "C", T0),
        }
        existing = {
            "a": Translation("a", "fr", "A-fr", Provenance.AUTOMATIC, T0),
            "b": Translation("b", "fr", "B-fr", Provenance.MANUAL, T0),
            "c": Translation("c", "fr", "C-fr", Provenance.AUTOMATIC, T0),
        }
        self.assertEqual(missing_for_locale(incoming, existing, sources), [("a", "A2")])


if __name__ == "__main__":
    unittest.main()
