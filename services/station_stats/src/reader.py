"""
Measurement file reader

Produces the lazy, forward-only sequence of raw record lines consumed by the
aggregation loop, either directly or from a background producer thread.
"""
import logging
import queue
import threading
from contextlib import closing
from typing import Iterator, List, Optional

logger = logging.getLogger(__name__)


_END = object()

# Seconds between stop-flag checks while the queue is full
PUT_TIMEOUT = 0.1


def strip_terminator(line: bytes) -> bytes:
    """Drop a trailing `\\n` or `\\r\\n`."""
    if line.endswith(b"\n"):
        line = line[:-1]
        if line.endswith(b"\r"):
            line = line[:-1]
    return line


def iter_lines(path: str, buffer_size: int = 1024 * 1024) -> Iterator[bytes]:
    """
    Yield the records of a measurement file without line terminators.

    Args:
        path: Path to the measurement file
        buffer_size: Read buffer size in bytes

    Yields:
        One raw record per line

    Raises:
        OSError: If the file cannot be opened or read
    """
    logger.info(f"Reading measurements from {path}")

    with open(path, "rb", buffering=buffer_size) as f:
        for line in f:
            yield strip_terminator(line)


class LineProducer:
    """
    Reads a measurement file on a background thread.

    Lines are handed over in batches through a bounded queue and consumed
    strictly in file order. A read error on the producer side is re-raised
    in the consumer.
    """

    def __init__(
        self,
        path: str,
        buffer_size: int = 1024 * 1024,
        queue_size: int = 64,
        batch_lines: int = 10_000
    ):
        self.path = path
        self.buffer_size = buffer_size
        self.batch_lines = batch_lines
        self._queue: "queue.Queue" = queue.Queue(maxsize=queue_size)
        self._error: Optional[BaseException] = None
        self._stop = threading.Event()
        self._thread = threading.Thread(
            target=self._produce,
            name=f"line-producer:{path}",
            daemon=True
        )

    def _put(self, item) -> bool:
        """Enqueue unless the consumer has stopped; False once stopped."""
        while not self._stop.is_set():
            try:
                self._queue.put(item, timeout=PUT_TIMEOUT)
                return True
            except queue.Full:
                continue
        return False

    def _produce(self):
        batch: List[bytes] = []
        try:
            with closing(iter_lines(self.path, self.buffer_size)) as lines:
                for line in lines:
                    batch.append(line)
                    if len(batch) >= self.batch_lines:
                        if not self._put(batch):
                            logger.debug(f"Consumer stopped, producer for {self.path} exiting")
                            return
                        batch = []
        except BaseException as e:
            self._error = e
        finally:
            if batch:
                self._put(batch)
            self._put(_END)

    def _drain(self):
        while True:
            try:
                self._queue.get_nowait()
            except queue.Empty:
                return

    def __iter__(self) -> Iterator[bytes]:
        self._thread.start()
        try:
            while True:
                batch = self._queue.get()
                if batch is _END:
                    break
                yield from batch
        finally:
            self._stop.set()
            self._drain()
            self._thread.join()

        if self._error is not None:
            logger.error(f"Reader thread failed for {self.path}: {self._error}")
            raise self._error


def iter_lines_threaded(
    path: str,
    buffer_size: int = 1024 * 1024,
    queue_size: int = 64,
    batch_lines: int = 10_000
) -> Iterator[bytes]:
    """
    Yield records read by a producer thread.

    Args:
        path: Path to the measurement file
        buffer_size: Read buffer size in bytes
        queue_size: Maximum number of batches waiting in the queue
        batch_lines: Lines per batch handed to the consumer

    Yields:
        One raw record per line, in file order
    """
    return iter(LineProducer(path, buffer_size, queue_size, batch_lines))
