"""
Per-station aggregation of fixed-point measurements and result rendering.
"""
import logging
from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Tuple

logger = logging.getLogger(__name__)


# Sums are kept inside the signed 64-bit range
SUM_MAX = 2 ** 63 - 1
SUM_MIN = -(2 ** 63)


class NumericOverflowError(OverflowError):
    """Raised when a station's running sum leaves the supported range."""

    def __init__(self, station: bytes, total: int):
        self.station = station
        self.total = total
        super().__init__(
            f"Sum for station {station!r} out of range: {total}"
        )


def check_sum(station: bytes, total: int) -> None:
    """Raise NumericOverflowError if `total` is outside the 64-bit range."""
    if total > SUM_MAX or total < SUM_MIN:
        raise NumericOverflowError(station, total)


def format_tenths(value: int) -> str:
    """Format a fixed-point value in tenths with one fractional digit."""
    whole, tenth = divmod(abs(value), 10)
    sign = "-" if value < 0 else ""
    return f"{sign}{whole}.{tenth}"


@dataclass
class StationRecord:
    """Running min/max/sum/count for one station, all in tenths."""
    min: int
    max: int
    sum: int
    count: int = 1

    @classmethod
    def first(cls, measurement: int) -> "StationRecord":
        return cls(measurement, measurement, measurement, 1)

    def mean_tenths(self) -> int:
        """
        Mean in tenths, rounded half away from zero.

        Computed on the integer sum so there is no float drift:
        a sum of 73 over 2 observations (3.65) gives 37 (3.7).
        """
        quotient, remainder = divmod(abs(self.sum), self.count)
        if 2 * remainder >= self.count:
            quotient += 1
        return -quotient if self.sum < 0 else quotient

    @property
    def mean(self) -> float:
        """Mean rounded to one fractional digit."""
        return self.mean_tenths() / 10

    def merge(self, other: "StationRecord") -> None:
        """Fold another partial record for the same station into this one."""
        if other.min < self.min:
            self.min = other.min
        if other.max > self.max:
            self.max = other.max
        self.sum += other.sum
        self.count += other.count

    def render(self) -> str:
        """Format as `min/mean/max`."""
        return (
            f"{format_tenths(self.min)}/"
            f"{format_tenths(self.mean_tenths())}/"
            f"{format_tenths(self.max)}"
        )


class StationTable:
    """Mapping from station name to its running record."""

    def __init__(self):
        self._records: Dict[bytes, StationRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, station: bytes) -> bool:
        return station in self._records

    def __iter__(self) -> Iterator[bytes]:
        return iter(self._records)

    def get(self, station: bytes) -> Optional[StationRecord]:
        return self._records.get(station)

    def items(self) -> Iterator[Tuple[bytes, StationRecord]]:
        return iter(self._records.items())

    def observe(self, station: bytes, measurement: int) -> None:
        """
        Add one measurement to a station's record.

        Args:
            station: Station name as raw bytes
            measurement: Measurement in tenths

        Raises:
            NumericOverflowError: If the station's sum leaves the 64-bit range
        """
        record = self._records.get(station)
        if record is None:
            check_sum(station, measurement)
            self._records[station] = StationRecord.first(measurement)
            return

        total = record.sum + measurement
        check_sum(station, total)

        if measurement < record.min:
            record.min = measurement
        if measurement > record.max:
            record.max = measurement
        record.sum = total
        record.count += 1

    def merge(self, other: "StationTable") -> "StationTable":
        """
        Combine another table into this one.

        Args:
            other: Partial table built from a disjoint part of the input

        Returns:
            This table, for chaining

        Raises:
            NumericOverflowError: If a combined sum leaves the 64-bit range
        """
        for station, record in other.items():
            existing = self._records.get(station)
            if existing is None:
                check_sum(station, record.sum)
                self._records[station] = StationRecord(
                    record.min, record.max, record.sum, record.count
                )
                continue

            check_sum(station, existing.sum + record.sum)
            existing.merge(record)

        logger.debug(f"Merged {len(other)} stations, table now holds {len(self)}")
        return self

    def summary(self) -> Dict[str, int]:
        """Station and observation counts."""
        return {
            "stations": len(self._records),
            "observations": sum(r.count for r in self._records.values()),
        }

    def render(self) -> str:
        """
        Render `{name=min/mean/max, ...}` sorted byte-wise by station name.

        Returns:
            Result line without trailing newline; `{}` for an empty table
        """
        entries = [
            f"{station.decode('utf-8')}={self._records[station].render()}"
            for station in sorted(self._records)
        ]
        return "{" + ", ".join(entries) + "}"
