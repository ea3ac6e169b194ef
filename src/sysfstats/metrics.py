"""
Typed metric readings produced by the collectors.

Each reading is immutable and only lives for the duration of one
report call. Sinks that serialize use ``to_dict()``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple, Union


class HardwareType(Enum):
    UNKNOWN = "unknown"
    MICROPHONE = "microphone"
    CODEC = "codec"
    SPEAKER = "speaker"
    FINGERPRINT = "fingerprint"


class HardwareErrorCode(Enum):
    UNKNOWN = "unknown"
    COMPLETE = "complete"
    SPEAKER_HIGH_Z = "speaker_high_z"
    SPEAKER_SHORT = "speaker_short"


class IoOperation(Enum):
    UNKNOWN = "unknown"
    READ = "read"
    WRITE = "write"
    UNMAP = "unmap"
    SYNC = "sync"


@dataclass(frozen=True)
class ChargeCycleHistogram:
    """Battery charge-cycle buckets, reported as a comma-joined string.

    The nth bucket counts how often the battery charge level went up
    while in the n/N-full band.
    """

    bins: str

    kind = "charge_cycles"

    @property
    def buckets(self) -> Tuple[int, ...]:
        return tuple(int(b) for b in self.bins.split(",") if b.isdigit())

    def to_dict(self) -> dict:
        return {"kind": self.kind, "bins": self.bins}


@dataclass(frozen=True)
class HardwareFault:
    hardware_type: HardwareType
    hardware_location: int
    error_code: HardwareErrorCode

    kind = "hardware_fault"

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "hardware_type": self.hardware_type.value,
            "hardware_location": self.hardware_location,
            "error_code": self.error_code.value,
        }


@dataclass(frozen=True)
class SlowIoCount:
    operation: IoOperation
    count: int

    kind = "slow_io"

    def to_dict(self) -> dict:
        return {"kind": self.kind, "operation": self.operation.value, "count": self.count}


@dataclass(frozen=True)
class SpeakerImpedance:
    channel: int
    milli_ohms: int

    kind = "speaker_impedance"

    def to_dict(self) -> dict:
        return {"kind": self.kind, "channel": self.channel, "milli_ohms": self.milli_ohms}


MetricReading = Union[ChargeCycleHistogram, HardwareFault, SlowIoCount, SpeakerImpedance]
