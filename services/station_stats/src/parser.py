"""
Measurement line parser

Turns one raw `<station>;<measurement>` line into the station name and a
fixed-point integer holding the measurement in tenths. The numeric tail is
parsed with explicit digit accumulation, never through float().
"""
from typing import Optional, Tuple


SEPARATOR = 0x3B  # ';'
MINUS = 0x2D  # '-'
DOT = 0x2E  # '.'
ZERO = 0x30  # '0'
NINE = 0x39  # '9'


class MalformedRecordError(ValueError):
    """Raised when a line does not match `<name>;<sign?><digits>.<digit>`."""

    def __init__(self, line: bytes, reason: str):
        self.line = line
        self.reason = reason
        super().__init__(f"Malformed record {line!r}: {reason}")


def parse_measurement(raw: bytes, line: Optional[bytes] = None) -> int:
    """
    Parse a measurement like b'12.3' or b'-7.8' into integer tenths.

    Args:
        raw: Numeric tail of a record, without separator or line terminator
        line: Full record, only used for error reporting

    Returns:
        Measurement scaled by 10 (b'-7.8' -> -78)
    """
    record = raw if line is None else line
    end = len(raw)
    pos = 0
    negative = False

    if end and raw[0] == MINUS:
        negative = True
        pos = 1

    value = 0
    dot = -1
    for i in range(pos, end):
        byte = raw[i]
        if byte == DOT:
            if dot != -1:
                raise MalformedRecordError(record, "more than one decimal point")
            dot = i
        elif ZERO <= byte <= NINE:
            value = value * 10 + (byte - ZERO)
        else:
            raise MalformedRecordError(record, f"unexpected byte {bytes([byte])!r}")

    if dot == -1:
        raise MalformedRecordError(record, "missing decimal point")
    if dot == pos:
        raise MalformedRecordError(record, "missing integer digits")
    if dot != end - 2:
        raise MalformedRecordError(record, "expected exactly one fractional digit")

    return -value if negative else value


def parse_line(line: bytes) -> Tuple[bytes, int]:
    """
    Split a record into station name and fixed-point measurement.

    Args:
        line: One record without its line terminator

    Returns:
        Tuple of (station name bytes, measurement in tenths)

    Raises:
        MalformedRecordError: If the line does not follow the record grammar
    """
    sep = line.find(SEPARATOR)
    if sep == -1:
        raise MalformedRecordError(line, "missing ';' separator")
    if sep == 0:
        raise MalformedRecordError(line, "empty station name")

    return line[:sep], parse_measurement(line[sep + 1:], line)
