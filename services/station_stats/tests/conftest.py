"""
Pytest configuration and fixtures for station stats tests.
"""
import pytest

from station_stats.src.config import StationStatsConfig


@pytest.fixture
def sample_lines():
    """Raw records as produced by the reader."""
    return [
        b"Hamburg;12.3",
        b"Hamburg;-5.0",
        b"Berlin;20.0",
    ]


@pytest.fixture
def mixed_lines():
    """Records covering sign, magnitude and multi-byte station names."""
    return [
        b"Abha;-23.0",
        b"Abidjan;25.8",
        b"Abha;18.0",
        b"\xc3\x96rebro;0.0",
        b"Abidjan;99.9",
        b"Abha;-0.4",
        b"Zanzibar City;7.1",
        b"\xc3\x96rebro;-99.9",
    ]


@pytest.fixture
def measurements_file(tmp_path, sample_lines):
    """Measurement file with the sample records, newline terminated."""
    path = tmp_path / "measurements.txt"
    path.write_bytes(b"\n".join(sample_lines) + b"\n")
    return path


@pytest.fixture
def empty_file(tmp_path):
    """Measurement file without any records."""
    path = tmp_path / "empty.txt"
    path.write_bytes(b"")
    return path


@pytest.fixture
def config(measurements_file):
    """Configuration pointing at the sample file, progress logging off."""
    return StationStatsConfig(
        input_path=str(measurements_file),
        progress_interval_lines=None,
    )
