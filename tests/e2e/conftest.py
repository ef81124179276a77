"""
Pytest fixtures for end-to-end tests.

Provides fixtures for:
- Synthetic measurement file generation
- Reference results computed with decimal arithmetic
- Running the CLI in a subprocess
"""

import os
import random
import subprocess
import sys
from decimal import Decimal, ROUND_HALF_UP
from pathlib import Path
from typing import Dict, List

import pytest


PROJECT_ROOT = Path(__file__).parent.parent.parent
SERVICES_DIR = PROJECT_ROOT / "services"

STATIONS = [
    "Abha", "Abidjan", "Accra", "Bamako", "Berlin", "Hamburg", "Kraków",
    "Lodwar", "Montréal", "Nouakchott", "Sankt Pölten", "São Paulo",
    "Zanzibar City", "Ürümqi", "İzmir",
]


def generate_lines(count: int, seed: int = 1234) -> List[str]:
    """Random records with one fractional digit in [-99.9, 99.9]."""
    rng = random.Random(seed)
    lines = []
    for _ in range(count):
        station = rng.choice(STATIONS)
        value = rng.randint(-999, 999)
        sign = "-" if value < 0 else ""
        lines.append(f"{station};{sign}{abs(value) // 10}.{abs(value) % 10}")
    return lines


def reference_result(lines: List[str]) -> str:
    """Expected output computed independently with Decimal."""
    values: Dict[str, List[Decimal]] = {}
    for line in lines:
        station, raw = line.split(";")
        values.setdefault(station, []).append(Decimal(raw))

    tenth = Decimal("0.1")
    entries = []
    for station in sorted(values, key=lambda s: s.encode("utf-8")):
        readings = values[station]
        mean = (sum(readings) / len(readings)).quantize(tenth, rounding=ROUND_HALF_UP)
        if mean == 0:
            mean = abs(mean)
        entries.append(f"{station}={min(readings)}/{mean}/{max(readings)}")
    return "{" + ", ".join(entries) + "}"


@pytest.fixture(scope="session")
def generated_dataset(tmp_path_factory):
    """Measurement file with 20k records and its expected output."""
    lines = generate_lines(20_000)
    path = tmp_path_factory.mktemp("data") / "measurements.txt"
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path, reference_result(lines)


@pytest.fixture
def run_cli():
    """Run the station-stats CLI as a separate process."""
    def _run(*args: str) -> subprocess.CompletedProcess:
        env = dict(os.environ, PYTHONIOENCODING="utf-8")
        env["PYTHONPATH"] = os.pathsep.join(
            p for p in [str(SERVICES_DIR), env.get("PYTHONPATH", "")] if p
        )
        return subprocess.run(
            [sys.executable, "-m", "station_stats.src.orchestrator", *args],
            cwd=PROJECT_ROOT,
            env=env,
            capture_output=True,
            text=True,
            encoding="utf-8",
            timeout=120,
        )

    return _run
