import os
import platform
import time

from wsbridge.version import released


# Unit for timeouts. May be increased in slow or noisy environments by setting
# the WSBRIDGE_TESTS_TIMEOUT_FACTOR environment variable.

MS = 0.001 * float(
    os.environ.get(
        "WSBRIDGE_TESTS_TIMEOUT_FACTOR",
        "100" if released else "10",
    )
)

# PyPy and asyncio's debug mode penalize performance of this test suite.
if platform.python_implementation() == "PyPy":  # pragma: no cover
    MS *= 2
if os.environ.get("PYTHONASYNCIODEBUG"):  # pragma: no cover
    MS *= 2

# Ensure that timeouts are larger than the clock's resolution (for Windows).
MS = max(MS, 2.5 * time.get_clock_info("monotonic").resolution)


class Recorder:
    """
    Observer recording the events it receives.

    """

    def __init__(self):
        self.events = []

    def __call__(self, event):
        self.events.append(event)
