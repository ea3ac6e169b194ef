"""
Fake sysfs tree for development and tests.

Writes the monitored nodes under a temporary root with plausible values
for a two-year-old phone: a handful of slow I/O events, speakers around
7-8 ohms, a healthy codec.
"""

from __future__ import annotations

import os
import random
import shutil
import tempfile
from typing import Optional

from sysfstats.config import CollectorPaths

CYCLE_BUCKETS = 10


class FakeSysfsTree:

    def __init__(self, root: Optional[str] = None, paths: Optional[CollectorPaths] = None, seed: int = 42):
        self.root = root or tempfile.mkdtemp(prefix="sysfstats-")
        self.paths = paths or CollectorPaths()
        self._rng = random.Random(seed)

    def real_path(self, path: str) -> str:
        return os.path.join(self.root, path.lstrip("/"))

    def write(self, path: str, content: str) -> None:
        real_path = self.real_path(path)
        os.makedirs(os.path.dirname(real_path), exist_ok=True)
        with open(real_path, "w") as f:
            f.write(content)

    def read(self, path: str) -> str:
        with open(self.real_path(path)) as f:
            return f.read()

    def remove(self, path: str) -> None:
        os.unlink(self.real_path(path))

    def cleanup(self) -> None:
        shutil.rmtree(self.root, ignore_errors=True)

    def populate(self) -> "FakeSysfsTree":
        """Fill every node with a fresh reading."""
        p = self.paths
        bins = [self._rng.randint(0, 400) for _ in range(CYCLE_BUCKETS)]
        # the driver leaves a trailing space and newline
        self.write(p.cycle_count_bins, " ".join(str(b) for b in bins) + " \n")
        self.write(p.codec_state, "0")
        for path in (p.slowio_read_cnt, p.slowio_write_cnt, p.slowio_unmap_cnt, p.slowio_sync_cnt):
            # most days nothing is slow
            count = self._rng.randint(1, 12) if self._rng.random() > 0.5 else 0
            self.write(path, f"{count}\n")
        left = self._rng.uniform(6.5, 8.5)
        right = self._rng.uniform(6.5, 8.5)
        self.write(p.speaker_impedance, f"{left:.3f},{right:.3f}\n")
        return self
