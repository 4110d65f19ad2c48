# -----------------------------------------------------------------------------
#  bench.py
#  Benchmark client: positioned reads over a range of indices, with timing
# -----------------------------------------------------------------------------

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from fibnum.device import FibDevice


@dataclass
class Sample:
    index: int
    elapsed_ns: int   # reported by the device (compute + render)
    user_ns: int      # measured around the read call

    @property
    def overhead_ns(self) -> int:
        return self.user_ns - self.elapsed_ns

    def as_line(self) -> str:
        return f"{self.index} {self.elapsed_ns} {self.user_ns} {self.overhead_ns}"


def _decode(data: bytes) -> str:
    return data.split(b"\0", 1)[0].decode("ascii")


def run_benchmark(
    device: FibDevice,
    max_offset: int,
    buffer_size: int,
    data_path: Path,
    echo: Callable[[str], None] | None = print,
) -> list[Sample]:
    """
    For every index 0..max_offset: seek, read, and record one line
    "<index> <device ns> <user ns> <user ns - device ns>" in data_path.
    echo(None) silences the per-index "fib(i): value" lines.
    """
    samples: list[Sample] = []
    data_path.parent.mkdir(parents=True, exist_ok=True)
    with data_path.open("w", encoding="utf-8") as fh:
        for i in range(max_offset + 1):
            device.seek(i)
            start = time.perf_counter_ns()
            res = device.read(buffer_size)
            user = time.perf_counter_ns() - start

            sample = Sample(index=i, elapsed_ns=res.elapsed_ns, user_ns=user)
            samples.append(sample)
            fh.write(sample.as_line() + "\n")
            if echo is not None:
                echo(f"fib({i}): {_decode(res.data)}")
    return samples


def summarize(samples: list[Sample]) -> dict[str, float]:
    """Mean/max of device and user times, in nanoseconds."""
    if not samples:
        return {"count": 0, "mean_device_ns": 0.0, "mean_user_ns": 0.0, "max_user_ns": 0.0}
    n = len(samples)
    return {
        "count": n,
        "mean_device_ns": sum(s.elapsed_ns for s in samples) / n,
        "mean_user_ns": sum(s.user_ns for s in samples) / n,
        "max_user_ns": float(max(s.user_ns for s in samples)),
    }
