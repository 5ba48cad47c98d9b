import time
from typing import Callable, Iterable, Iterator, TypeVar

T = TypeVar("T")


class Throttle:
    """Fixed delay between outbound requests.

    The sleep function is injectable so tests can run with no delay.
    """

    def __init__(self, seconds: float, sleep: Callable[[float], None] = time.sleep):
        self.seconds = max(0.0, float(seconds))
        self._sleep = sleep
        self.waits = 0

    def wait(self) -> None:
        self.waits += 1
        if self.seconds > 0:
            self._sleep(self.seconds)

    def spaced(self, items: Iterable[T]) -> Iterator[T]:
        """Yield items with a wait between consecutive ones."""
        for index, item in enumerate(items):
            if index:
                self.wait()
            yield item

    @classmethod
    def disabled(cls) -> "Throttle":
        return cls(0, sleep=lambda _seconds: None)
