"""
Orchestration and CLI for station measurement aggregation.

This module drives a run:
1. Read measurement lines from each input file
2. Parse every line into station name and fixed-point measurement
3. Aggregate per station and merge the per-file tables
4. Render the sorted summary to stdout
"""
import argparse
import logging
import sys
import time
from contextlib import closing
from typing import Dict, Any, Iterator, Optional

from .config import StationStatsConfig, get_config
from .parser import parse_line
from .aggregator import StationTable
from .reader import iter_lines, iter_lines_threaded
from .profiling import cpu_profile, memory_profile


logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class StationStatsOrchestrator:
    """Runs the read, parse and aggregate loop for the configured files."""

    def __init__(self, config: StationStatsConfig):
        """
        Initialize orchestrator.

        Args:
            config: Configuration object
        """
        self.config = config
        self.lines_processed = 0

    def open_lines(self, path: str) -> Iterator[bytes]:
        """Line source for one file, threaded or direct per configuration."""
        if self.config.threaded_reader:
            return iter_lines_threaded(
                path,
                buffer_size=self.config.read_buffer_size,
                queue_size=self.config.reader_queue_size,
                batch_lines=self.config.reader_batch_lines
            )
        return iter_lines(path, buffer_size=self.config.read_buffer_size)

    def aggregate_lines(
        self,
        lines: Iterator[bytes],
        table: Optional[StationTable] = None
    ) -> StationTable:
        """
        Feed raw lines through the parser into a station table.

        Args:
            lines: Raw records without line terminators
            table: Table to update (a new one is created if omitted)

        Returns:
            The updated table
        """
        if table is None:
            table = StationTable()

        interval = self.config.progress_interval_lines or 0
        observe = table.observe
        count = self.lines_processed

        try:
            for line in lines:
                station, measurement = parse_line(line)
                observe(station, measurement)
                count += 1
                if interval and count % interval == 0:
                    logger.info(f"Parsed {count} lines")
        finally:
            self.lines_processed = count

        return table

    def aggregate_file(self, path: str) -> StationTable:
        """
        Aggregate all measurements in one file.

        Args:
            path: Path to the measurement file

        Returns:
            Station table for that file
        """
        start = self.lines_processed
        with closing(self.open_lines(path)) as lines:
            table = self.aggregate_lines(lines)
        logger.info(
            f"Aggregated {self.lines_processed - start} lines from {path} "
            f"into {len(table)} stations"
        )
        return table

    def run(self) -> Dict[str, Any]:
        """
        Run the aggregation over every configured input file.

        Returns:
            Dictionary with the rendered result and run metrics
        """
        start_time = time.time()
        paths = self.config.input_paths

        logger.info(f"Starting aggregation of {len(paths)} file(s)")

        with memory_profile(self.config.mem_profile_path):
            with cpu_profile(self.config.cpu_profile_path):
                table = StationTable()
                for path in paths:
                    table.merge(self.aggregate_file(path))

            result = table.render()

        elapsed = round(time.time() - start_time, 2)
        summary = table.summary()

        logger.info(
            f"Aggregation complete: {summary['observations']} observations, "
            f"{summary['stations']} stations in {elapsed}s"
        )

        return {
            "result": result,
            "input_paths": paths,
            "lines_processed": self.lines_processed,
            "station_count": summary["stations"],
            "elapsed_seconds": elapsed,
        }


def run_file(path: str, **overrides) -> str:
    """Aggregate one file and return the rendered summary line."""
    config = get_config(input_path=path, **overrides)
    return StationStatsOrchestrator(config).run()["result"]


def build_arg_parser() -> argparse.ArgumentParser:
    """Command line interface definition."""
    parser = argparse.ArgumentParser(
        description="Per-station min/mean/max of a measurements file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Aggregate one file
  station-stats --file measurements.txt

  # Profile a run and log progress every 10M lines
  station-stats --file measurements.txt --cpuprofile cpu.prof --progress-interval 10000000
        """
    )

    parser.add_argument(
        "--file",
        dest="files",
        action="append",
        required=True,
        metavar="PATH",
        help="Input file for the measurements (repeat to merge several files)"
    )

    parser.add_argument(
        "--cpuprofile",
        metavar="FILE",
        help="Write a CPU profile (pstats format) to FILE"
    )

    parser.add_argument(
        "--memprofile",
        metavar="FILE",
        help="Write a tracemalloc snapshot to FILE"
    )

    parser.add_argument(
        "--progress-interval",
        type=int,
        metavar="N",
        help="Log progress every N lines (0 disables)"
    )

    parser.add_argument(
        "--threaded-reader",
        action="store_true",
        help="Read the input on a background thread"
    )

    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: from config, INFO)"
    )

    return parser


def config_from_args(args: argparse.Namespace) -> StationStatsConfig:
    """Build the run configuration, letting CLI flags override settings."""
    overrides = {
        "input_path": args.files[0],
        "extra_input_paths": args.files[1:],
    }
    if args.cpuprofile:
        overrides["cpu_profile_path"] = args.cpuprofile
    if args.memprofile:
        overrides["mem_profile_path"] = args.memprofile
    if args.progress_interval is not None:
        overrides["progress_interval_lines"] = args.progress_interval
    if args.threaded_reader:
        overrides["threaded_reader"] = True
    if args.log_level:
        overrides["log_level"] = args.log_level
    return get_config(**overrides)


def main(argv=None):
    """CLI entry point for the station stats service."""
    args = build_arg_parser().parse_args(argv)
    config = config_from_args(args)

    logging.basicConfig(level=config.log_level, format=LOG_FORMAT)

    try:
        metrics = StationStatsOrchestrator(config).run()
    except Exception as e:
        logger.error(f"Aggregation failed: {e}", exc_info=True)
        sys.exit(1)

    print(metrics["result"])
    sys.exit(0)


if __name__ == "__main__":
    main()
