from dataclasses import dataclass
from typing import Any, Callable, Iterable, NewType, Optional, TypeVar

from vrecap import errors

Json = NewType('Json', Any)

T = TypeVar('T')

def find(pred: Callable[[T], bool], items: Iterable[T]) -> Optional[T]:
    return next((x for x in items if pred(x)), None)


def find_task(job: Json, name: str) -> Optional[Json]:
    tasks = job.get('tasks') if isinstance(job, dict) else None
    if not isinstance(tasks, list):
        return None
    return find(lambda task: isinstance(task, dict) and task.get('name') == name, tasks)


@dataclass(frozen=True, order=True)
class Time:
    ms: int

    @classmethod
    def zero(cls) -> 'Time':
        return cls(0)

    @classmethod
    def seconds(cls, qty: int) -> 'Time':
        return cls(1000 * qty)

    @property
    def s(self) -> int:
        return self.ms // 1000

    @property
    def m(self) -> int:
        return self.ms // 60000

    @property
    def h(self) -> int:
        return self.ms // 3600000

    def hms(self) -> str:
        return f"{self.h:02d}:{self.m % 60:02d}:{self.s % 60:02d}"


def format_time(seconds: int) -> str:
    """Format an offset as ``HH:MM:SS``. Hours are not wrapped at 24."""
    if isinstance(seconds, bool) or not isinstance(seconds, int):
        raise errors.InvalidInput(f"Time offset must be an integer, got {seconds!r}")
    if seconds < 0:
        raise errors.InvalidInput(f"Time offset must be non-negative, got {seconds}")
    return Time.seconds(seconds).hms()
