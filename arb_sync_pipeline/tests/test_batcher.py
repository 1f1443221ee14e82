from __future__ import annotations

import unittest

from arb_sync.batcher import chunked, translate_batches, translate_with_retry
from arb_sync.cost_tracker import CostTracker
from arb_sync.errors import OracleFailure, RateLimited, StorageError

from stubs import RecordingSleep, StubTranslator


def entries(n: int):
    return [(f"k{i:03d}", f"text {i}") for i in range(n)]


class ChunkingTests(unittest.TestCase):

    def test_chunk_sizes(self) -> None:
        self.assertEqual([len(c) for c in chunked(entries(250), 100)], [100, 100, 50])
        self.assertEqual(chunked([], 100), [])
        with self.assertRaises(ValueError):
            chunked(entries(3), 0)


class TranslateBatchesTests(unittest.TestCase):

    def test_all_batches_succeed(self) -> None:
        sleep = RecordingSleep()
        tr = StubTranslator()
        result = translate_batches(tr, "en", "fr", entries(250), 100, sleep=sleep)
        self.assertEqual(len(result.merged), 250)
        self.assertEqual(result.merged["k007"], "[fr] text 7")
        self.assertEqual(result.failed_keys, [])
        self.assertEqual(result.batches, 3)
        self.assertEqual([len(c[2]) for c in tr.calls], [100, 100, 50])
        # pause between chunks, none after the last
        self.assertEqual(sleep.waits, [3.0, 3.0])

    def test_partition_does_not_change_outcome(self) -> None:
        a = translate_batches(StubTranslator(), "en", "de", entries(250), 100, sleep=RecordingSleep())
        b = translate_batches(StubTranslator(), "en", "de", entries(250), 37, sleep=RecordingSleep())
        self.assertEqual(a.merged, b.merged)
        self.assertEqual(a.failed_keys, b.failed_keys)

    def test_forced_failure_only_hits_its_chunk(self) -> None:
        def poisoned(texts):
            if "text 120" in texts:
                raise OracleFailure("HTTP 500")
            return [t.upper() for t in texts]

        class Poisoned(StubTranslator):
            def translate(self, f, t, texts):
                self.calls.append((f, t, list(texts)))
                return poisoned(texts)

        r100 = translate_batches(Poisoned(), "en", "fr", entries(250), 100, sleep=RecordingSleep())
        r37 = translate_batches(Poisoned(), "en", "fr", entries(250), 37, sleep=RecordingSleep())
        self.assertEqual(r100.failed_keys, [f"k{i:03d}" for i in range(100, 200)])
        self.assertEqual(r37.failed_keys, [f"k{i:03d}" for i in range(111, 148)])
        for r in (r100, r37):
            self.assertEqual(set(r.merged) | set(r.failed_keys), {k for k, _ in entries(250)})
            self.assertEqual(r.failed_batches, 1)
            self.assertEqual(r.merged["k000"], "TEXT 0")

    def test_rate_limit_exhaustion(self) -> None:
        sleep = RecordingSleep()
        tr = StubTranslator(script=[RateLimited(), RateLimited(), RateLimited()])
        result = translate_batches(tr, "en", "fr", entries(5), 100, sleep=sleep)
        self.assertEqual(len(tr.calls), 3)
        # no cooldown once the final chunk is given up
        self.assertEqual(sleep.waits, [10.0, 20.0])
        self.assertEqual(result.failed_keys, [k for k, _ in entries(5)])
        self.assertEqual(result.merged, {})

    def test_exhausted_last_chunk_ends_without_waiting(self) -> None:
        sleep = RecordingSleep()
        tr = StubTranslator(script=[["a", "b"], RateLimited(), RateLimited(), RateLimited()])
        result = translate_batches(tr, "en", "fr", entries(4), 2, sleep=sleep)
        self.assertEqual(result.failed_keys, ["k002", "k003"])
        self.assertEqual(sleep.waits, [3.0, 10.0, 20.0])

    def test_exhausted_chunk_does_not_abort_the_rest(self) -> None:
        sleep = RecordingSleep()
        tr = StubTranslator(script=[RateLimited(), RateLimited(), RateLimited()])
        result = translate_batches(tr, "en", "fr", entries(4), 2, sleep=sleep)
        self.assertEqual(len(tr.calls), 4)
        self.assertEqual(result.failed_keys, ["k000", "k001"])
        self.assertEqual(result.merged, {"k002": "[fr] text 2", "k003": "[fr] text 3"})
        # a cooldown at the longest backoff replaces the regular pause
        self.assertEqual(sleep.waits, [10.0, 20.0, 40.0])

    def test_rate_limit_then_success(self) -> None:
        sleep = RecordingSleep()
        tr = StubTranslator(script=[RateLimited()])
        result = translate_batches(tr, "en", "fr", entries(2), 100, sleep=sleep)
        self.assertEqual(len(tr.calls), 2)
        self.assertEqual(sleep.waits, [10.0])
        self.assertEqual(result.failed_keys, [])
        self.assertEqual(len(result.merged), 2)

    def test_other_failure_is_not_retried(self) -> None:
        sleep = RecordingSleep()
        tr = StubTranslator(script=[OracleFailure("HTTP 400")])
        result = translate_batches(tr, "en", "xx", entries(3), 100, sleep=sleep)
        self.assertEqual(len(tr.calls), 1)
        self.assertEqual(sleep.waits, [])
        self.assertEqual(result.failed_keys, ["k000", "k001", "k002"])

    def test_length_mismatch_fails_the_chunk(self) -> None:
        tr = StubTranslator(script=[["only one"]])
        result = translate_batches(tr, "en", "fr", entries(3), 100, sleep=RecordingSleep())
        self.assertEqual(result.failed_keys, ["k000", "k001", "k002"])
        self.assertEqual(result.merged, {})

    def test_on_batch_receives_each_successful_chunk(self) -> None:
        seen = []
        tr = StubTranslator(script=[lambda texts: [t + "!" for t in texts], OracleFailure("boom")])
        translate_batches(tr, "en", "fr", entries(5), 2, sleep=RecordingSleep(), on_batch=seen.append)
        self.assertEqual(seen, [
            [("k000", "text 0!"), ("k001", "text 1!")],
            [("k004", "[fr] text 4")],
        ])

    def test_on_batch_errors_propagate(self) -> None:
        def explode(pairs):
            raise StorageError("disk full")

        with self.assertRaises(StorageError):
            translate_batches(StubTranslator(), "en", "fr", entries(3), 2, sleep=RecordingSleep(), on_batch=explode)

    def test_cost_is_counted_per_call(self) -> None:
        cost = CostTracker(cost_per_million=10.0)
        translate_batches(StubTranslator(identity=True), "en", "fr", [("a", "abc"), ("b", "de")], 1,
                          sleep=RecordingSleep(), cost=cost)
        self.assertEqual(cost.source_chars, 5)
        self.assertEqual(cost.calls, 2)


class TranslateWithRetryTests(unittest.TestCase):

    def test_reraises_after_max_retries(self) -> None:
        sleep = RecordingSleep()
        tr = StubTranslator(script=[RateLimited()] * 5)
        with self.assertRaises(RateLimited):
            translate_with_retry(tr, "en", "fr", ["x"], max_retries=2, base_delay=1.0, sleep=sleep)
        self.assertEqual(len(tr.calls), 2)
        self.assertEqual(sleep.waits, [1.0])


if __name__ == "__main__":
    unittest.main()
