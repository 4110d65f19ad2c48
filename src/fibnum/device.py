# -----------------------------------------------------------------------------
#  device.py
#  File-like Fibonacci device: seek selects the index, read returns F(index)
# -----------------------------------------------------------------------------

from __future__ import annotations

import os
import threading
import time
from typing import NamedTuple

from fibnum.bignum import BigInt
from fibnum.fib import fib_fdoubling
from fibnum.render import render_bytes
from fibnum.runtime import CFG, debug
from fibnum.storage import LimbAllocator

SEEK_SET, SEEK_CUR, SEEK_END = os.SEEK_SET, os.SEEK_CUR, os.SEEK_END


class DeviceError(Exception):
    pass


class DeviceBusy(DeviceError):
    pass


class DeviceClosed(DeviceError):
    pass


class ReadResult(NamedTuple):
    data: bytes       # at most `size` bytes of the NUL-terminated decimal string
    elapsed_ns: int   # time spent computing and rendering


class FibDevice:
    """
    One Fibonacci "character device".

    Only one handle may hold the device open at a time. The file position is
    the Fibonacci index and is clamped to [0, max_offset]; reads never move it.

        with FibDevice() as dev:
            dev.seek(93)
            dev.read(500).data   # b'12200160415121876738\\x00'
    """

    def __init__(self, max_offset: int | None = None, *, allocator: LimbAllocator | None = None):
        self.max_offset = int(CFG("DEVICE.MAX_OFFSET", 1000) if max_offset is None else max_offset)
        if self.max_offset < 0:
            raise ValueError(f"max_offset must be non-negative, got {self.max_offset}")
        self._allocator = allocator
        self._lock = threading.Lock()
        self._open = False
        self.pos = 0

    # --- open / release -------------------------------------------------------

    def open(self) -> FibDevice:
        if not self._lock.acquire(blocking=False):
            raise DeviceBusy("fibonacci device is busy")
        self._open = True
        self.pos = 0
        debug(f"device opened (max offset {self.max_offset})")
        return self

    def close(self) -> None:
        if not self._open:
            return
        self._open = False
        self._lock.release()
        debug("device closed")

    @property
    def closed(self) -> bool:
        return not self._open

    def __enter__(self) -> FibDevice:
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _require_open(self) -> None:
        if not self._open:
            raise DeviceClosed("I/O operation on a closed fibonacci device")

    # --- file operations ------------------------------------------------------

    def seek(self, offset: int, whence: int = SEEK_SET) -> int:
        self._require_open()
        if whence == SEEK_SET:
            new_pos = offset
        elif whence == SEEK_CUR:
            new_pos = self.pos + offset
        elif whence == SEEK_END:
            new_pos = self.max_offset - offset
        else:
            raise ValueError(f"invalid whence ({whence})")

        new_pos = min(max(new_pos, 0), self.max_offset)
        self.pos = new_pos
        return new_pos

    def tell(self) -> int:
        self._require_open()
        return self.pos

    def read(self, size: int = -1) -> ReadResult:
        """
        Compute F(pos) and return up to `size` bytes of its NUL-terminated
        decimal form; size < 0 returns everything.
        """
        self._require_open()
        start = time.perf_counter_ns()
        bn = BigInt(1, allocator=self._allocator)
        try:
            fib_fdoubling(bn, self.pos)
            payload = render_bytes(bn)
        finally:
            bn.release()
        elapsed = time.perf_counter_ns() - start

        data = payload if size < 0 else payload[:size]
        debug(f"read fib({self.pos}): {len(payload) - 1} digits, {elapsed} ns")
        return ReadResult(data=data, elapsed_ns=elapsed)

    def readinto(self, buf: bytearray | memoryview) -> int:
        """Copy into `buf` (truncating); returns the number of bytes copied."""
        res = self.read(len(buf))
        buf[: len(res.data)] = res.data
        return len(res.data)
