import dataclasses
import threading
import unittest

from wsbridge.state import *


@dataclasses.dataclass
class Counter:
    value: int = 0


class GuardedTests(unittest.TestCase):
    def test_value(self):
        """value returns the wrapped value."""
        guarded = Guarded(Counter(42))
        self.assertEqual(guarded.value, Counter(42))

    def test_value_is_a_snapshot(self):
        """Changing the snapshot doesn't change the wrapped value."""
        guarded = Guarded(Counter())
        snapshot = guarded.value
        snapshot.value = 1
        self.assertEqual(guarded.value, Counter(0))

    def test_mutate(self):
        """mutate applies changes and returns the result of the function."""
        guarded = Guarded(Counter())

        def increment(counter):
            counter.value += 1
            return counter.value

        self.assertEqual(guarded.mutate(increment), 1)
        self.assertEqual(guarded.mutate(increment), 2)
        self.assertEqual(guarded.value, Counter(2))

    def test_mutate_error(self):
        """mutate propagates errors and leaves the value unchanged."""
        guarded = Guarded(Counter())

        def increment_then_fail(counter):
            counter.value += 1
            raise RuntimeError("boom")

        with self.assertRaises(RuntimeError):
            guarded.mutate(increment_then_fail)
        self.assertEqual(guarded.value, Counter(0))

    def test_mutate_reentrant(self):
        """mutate can be called from a function passed to mutate."""
        guarded = Guarded(Counter())

        def increment(counter):
            counter.value += 1

        def increment_twice(counter):
            counter.value += 1
            guarded.mutate(increment)
            return guarded.value.value

        self.assertEqual(guarded.mutate(increment_twice), 2)
        self.assertEqual(guarded.value, Counter(2))

    def test_set(self):
        """set replaces the value."""
        guarded = Guarded(Counter())
        guarded.set(Counter(3))
        self.assertEqual(guarded.value, Counter(3))

    def test_immutable_value(self):
        """Guarded supports values that cannot be changed in place."""
        guarded = Guarded("hello")
        self.assertEqual(guarded.mutate(len), 5)
        guarded.set("world")
        self.assertEqual(guarded.value, "world")

    def test_concurrent_mutations(self):
        """Concurrent mutations don't lose updates."""
        guarded = Guarded(Counter())

        def increment(counter):
            counter.value += 1

        def run():
            for _ in range(1000):
                guarded.mutate(increment)

        threads = [threading.Thread(target=run) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(guarded.value, Counter(8000))
