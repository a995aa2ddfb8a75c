import threading
import unittest
from unittest.mock import AsyncMock, MagicMock

from ledger_core import BusyBackoff, HookEvents, HookManager, QueryMetrics


class TestBusyBackoff(unittest.IsolatedAsyncioTestCase):
    def test_delay_stays_below_attempt_maximum(self):
        print("\nTesting Backoff: delay bounds per attempt")
        for draw in (0.0, 0.3, 0.999999):
            backoff = BusyBackoff(random_fn=lambda draw=draw: draw)
            for attempt in range(1, 8):
                with self.subTest(draw=draw, attempt=attempt):
                    delay = backoff.delay_ms(attempt)
                    self.assertGreaterEqual(delay, 0)
                    self.assertLess(delay, 500 * (2 ** attempt - 1))
        print("  -> Every delay within [0, 500 * (2^n - 1)) ms")

    def test_delay_formula(self):
        backoff = BusyBackoff(random_fn=lambda: 0.25)
        self.assertEqual(backoff.delay_ms(0), 0)
        self.assertEqual(backoff.delay_ms(1), 125)
        self.assertEqual(backoff.delay_ms(3), 875)
        self.assertEqual(backoff.max_delay_ms(3), 3500)

    async def test_wait_sleeps_for_the_delay_in_seconds(self):
        sleep = AsyncMock()
        backoff = BusyBackoff(random_fn=lambda: 0.5, sleep=sleep)

        delay = await backoff.wait(2)

        self.assertEqual(delay, 750)
        sleep.assert_awaited_once_with(0.75)


class TestHookManager(unittest.TestCase):
    def setUp(self):
        self.hooks = HookManager(max_workers=1)

    def tearDown(self):
        self.hooks.shutdown()

    def test_callbacks_receive_event_kwargs_in_priority_order(self):
        seen = []
        lock = threading.Lock()

        def record(tag):
            def callback(**kwargs):
                with lock:
                    seen.append((tag, kwargs["attempt"]))
                return tag
            return callback

        self.hooks.register_hook(HookEvents.QUERY_BUSY, record("low"), priority=0)
        self.hooks.register_hook(HookEvents.QUERY_BUSY, record("high"), priority=10)

        results = self.hooks.trigger_hook_sync(HookEvents.QUERY_BUSY, attempt=2, query="q", node="0.0.3")

        self.assertEqual(results, ["high", "low"])
        self.assertEqual(seen, [("high", 2), ("low", 2)])

    def test_failing_callback_is_counted_not_raised(self):
        failing = MagicMock(side_effect=RuntimeError("observer bug"))
        self.hooks.register_hook(HookEvents.QUERY_FAILED, failing)

        results = self.hooks.trigger_hook_sync(HookEvents.QUERY_FAILED, error="x")

        self.assertEqual(results, [None])
        stats = self.hooks.snapshot()["stats"][HookEvents.QUERY_FAILED]
        self.assertEqual(stats, {"triggered": 1, "errors": 1})

    def test_trigger_after_shutdown_is_counted_not_raised(self):
        self.hooks.register_hook(HookEvents.QUERY_COMPLETED, MagicMock())
        self.hooks.shutdown()

        futures = self.hooks.trigger_hook(HookEvents.QUERY_COMPLETED, attempts=1)

        self.assertEqual(futures, [])
        stats = self.hooks.snapshot()["stats"][HookEvents.QUERY_COMPLETED]
        self.assertEqual(stats, {"triggered": 1, "errors": 1})

    def test_unregister(self):
        callback = MagicMock()
        self.hooks.register_hook(HookEvents.COST_QUOTED, callback)
        self.hooks.unregister_hook(HookEvents.COST_QUOTED, callback)

        self.assertEqual(self.hooks.get_hook_count(HookEvents.COST_QUOTED), 0)
        self.assertEqual(self.hooks.trigger_hook(HookEvents.COST_QUOTED, cost=1), [])


class TestQueryMetrics(unittest.TestCase):
    def test_snapshot(self):
        metrics = QueryMetrics(window=2)
        metrics.record_completion(10.0, attempts=1)
        metrics.record_completion(20.0, attempts=3)
        metrics.record_completion(30.0, attempts=1)
        metrics.record_busy()
        metrics.record_failure()

        snapshot = metrics.snapshot()
        self.assertEqual(snapshot["avg_ms"], 25.0)
        self.assertEqual(snapshot["avg_attempts"], 2.0)
        self.assertEqual(snapshot["completed"], 3)
        self.assertEqual(snapshot["failed"], 1)
        self.assertEqual(snapshot["busy_retries"], 1)


if __name__ == '__main__':
    unittest.main()
