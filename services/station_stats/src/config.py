"""
Configuration management for the station stats service.
"""
from typing import List, Optional

from pydantic_settings import BaseSettings


class StationStatsConfig(BaseSettings):
    """Configuration for a single aggregation run."""

    # Input configuration
    input_path: str = ""
    extra_input_paths: List[str] = []

    # Reader configuration
    threaded_reader: bool = False
    read_buffer_size: int = 1024 * 1024
    reader_queue_size: int = 64
    reader_batch_lines: int = 10_000

    # Progress logging (None or 0 disables it)
    progress_interval_lines: Optional[int] = 50_000_000

    # Profiling output
    cpu_profile_path: Optional[str] = None
    mem_profile_path: Optional[str] = None

    # Logging
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "STATION_STATS_"

    @property
    def input_paths(self) -> List[str]:
        """All input files in the order they are aggregated."""
        if not self.input_path:
            raise ValueError("input_path is required")
        return [self.input_path, *self.extra_input_paths]

    @property
    def progress_enabled(self) -> bool:
        """Whether periodic progress messages are logged."""
        return bool(self.progress_interval_lines)


def get_config(**overrides) -> StationStatsConfig:
    """Get station stats configuration instance"""
    return StationStatsConfig(**overrides)
