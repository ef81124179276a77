"""CPU and memory profile output for an aggregation run."""
import cProfile
import logging
import tracemalloc
from contextlib import contextmanager
from typing import Iterator, Optional

logger = logging.getLogger(__name__)


@contextmanager
def cpu_profile(path: Optional[str]) -> Iterator[Optional[cProfile.Profile]]:
    """
    Profile the enclosed block and write pstats data to `path`.

    Does nothing when `path` is empty.
    """
    if not path:
        yield None
        return

    profiler = cProfile.Profile()
    logger.info(f"CPU profiling enabled, writing to {path}")
    profiler.enable()
    try:
        yield profiler
    finally:
        profiler.disable()
        profiler.dump_stats(path)
        logger.info(f"CPU profile written: {path}")


@contextmanager
def memory_profile(path: Optional[str]) -> Iterator[None]:
    """
    Trace allocations in the enclosed block and dump a snapshot to `path`.

    The snapshot is only written when the block completes; load it with
    `tracemalloc.Snapshot.load`.
    """
    if not path:
        yield
        return

    started = not tracemalloc.is_tracing()
    if started:
        tracemalloc.start()
    logger.info(f"Memory profiling enabled, writing to {path}")
    try:
        yield
        snapshot = tracemalloc.take_snapshot()
        snapshot.dump(path)
        current, peak = tracemalloc.get_traced_memory()
        logger.info(
            f"Memory profile written: {path} "
            f"(current {current / 1024 / 1024:.1f} MB, peak {peak / 1024 / 1024:.1f} MB)"
        )
    finally:
        if started:
            tracemalloc.stop()
