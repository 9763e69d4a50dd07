import unittest

from l2w_puzzle.scheduler import Scheduler


class TestScheduler(unittest.TestCase):

    def setUp(self):
        self.scheduler = Scheduler()
        self.fired = []

    def record(self, name):
        return lambda: self.fired.append(name)

    def test_due_order_then_scheduling_order(self):
        s = self.scheduler
        s.call_later(20, self.record("a"))
        s.call_later(10, self.record("b"))
        s.call_later(10, self.record("c"))
        self.assertEqual(s.advance(15), 2)
        self.assertEqual(self.fired, ["b", "c"])
        s.advance(5)
        self.assertEqual(self.fired, ["b", "c", "a"])
        self.assertEqual(s.now_ms, 20)

    def test_repeating_timer(self):
        s = self.scheduler
        s.call_every(100, self.record("tick"))
        s.advance(350)
        self.assertEqual(len(self.fired), 3)
        self.assertEqual(s.pending(), 1)

    def test_nested_scheduling_fires_in_same_advance(self):
        s = self.scheduler
        s.call_later(10, lambda: s.call_later(5, self.record("inner")))
        s.advance(20)
        self.assertEqual(self.fired, ["inner"])

    def test_cancel_and_cancel_group(self):
        s = self.scheduler
        handle = s.call_later(10, self.record("single"))
        s.call_later(10, self.record("g1"), group="g")
        s.call_every(10, self.record("g2"), group="g")
        s.cancel(handle)
        self.assertEqual(s.cancel_group("g"), 2)
        self.assertEqual(s.pending(), 0)
        s.advance(100)
        self.assertEqual(self.fired, [])

    def test_flush_skips_repeating_timers(self):
        s = self.scheduler
        s.call_every(100, self.record("fall"), group="g")
        s.call_later(500, self.record("lock"), group="g")
        s.call_later(50, self.record("other"), group="h")
        self.assertEqual(s.flush("g"), 1)
        self.assertEqual(self.fired, ["lock"])
        self.assertEqual(s.now_ms, 500)
        self.assertEqual(s.pending("g"), 1)
        self.assertEqual(s.pending("h"), 1)

    def test_flush_drops_fired_handles(self):
        s = self.scheduler
        s.call_every(1000, self.record("fall"), group="g")
        for _ in range(6):
            s.call_later(0, self.record("lock"), group="g")
            s.flush("g")
        self.assertEqual(self.fired, ["lock"] * 6)
        self.assertEqual(len(s._heap), 1)
        self.assertEqual(s.pending("g"), 1)
        s.advance(1000)
        self.assertEqual(self.fired[-1], "fall")

    def test_flush_follows_chained_one_shots(self):
        s = self.scheduler
        s.call_later(0, lambda: s.call_later(400, self.record("chained")))
        self.assertEqual(s.flush(), 2)
        self.assertEqual(self.fired, ["chained"])


if __name__ == '__main__':
    unittest.main()
