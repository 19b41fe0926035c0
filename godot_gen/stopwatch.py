import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Checkpoint:
    name: str
    elapsed: float


class StopWatch:
    """Records named checkpoints, each with the time since the previous one.

    Diagnostics only; nothing in the pipeline reads the values back.
    """

    def __init__(self, clock: Callable[[], float] = time.perf_counter):
        self._clock = clock
        self._started = clock()
        self._last = self._started
        self.entries: list[Checkpoint] = []

    @classmethod
    def start(cls) -> "StopWatch":
        return cls()

    def record(self, name: str) -> None:
        now = self._clock()
        self.entries.append(Checkpoint(name, now - self._last))
        self._last = now

    def total(self) -> float:
        return self._last - self._started

    def format_stats(self) -> str:
        width = max((len(entry.name) for entry in self.entries), default=0)
        lines = [
            f"{entry.name:<{width}}  {entry.elapsed * 1000:10.2f} ms"
            for entry in self.entries
        ]
        lines.append(f"{'total':<{width}}  {self.total() * 1000:10.2f} ms")
        return "\n".join(lines) + "\n"

    def write_stats_to(self, path: Path) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.format_stats(), encoding="utf-8")
