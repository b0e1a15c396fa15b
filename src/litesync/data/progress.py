"""Progress sinks for long-running exports."""

import sys
from typing import IO, Optional, Protocol

from tqdm import tqdm


class ProgressSink(Protocol):
    """Receives coarse completion updates for one unit of work."""

    def start(self, description: str, total: int) -> None: ...

    def update(self, done: int) -> None: ...

    def close(self) -> None: ...


class NullProgress:
    """Sink that discards all updates."""

    def start(self, description: str, total: int) -> None:
        pass

    def update(self, done: int) -> None:
        pass

    def close(self) -> None:
        pass


class TqdmProgress:
    """Single-line, overwritable percentage bar on a console stream."""

    def __init__(self, file: Optional[IO[str]] = None, disable: bool = False) -> None:
        self._file = file or sys.stderr
        self._disable = disable
        self._bar: Optional[tqdm] = None

    def start(self, description: str, total: int) -> None:
        self.close()
        self._bar = tqdm(
            total=total,
            desc=description,
            unit="rows",
            file=self._file,
            disable=self._disable,
            leave=False,
        )

    def update(self, done: int) -> None:
        if self._bar is not None:
            self._bar.update(done - self._bar.n)

    def close(self) -> None:
        if self._bar is not None:
            self._bar.close()
            self._bar = None
