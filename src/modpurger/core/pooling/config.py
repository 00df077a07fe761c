"""Pool configuration for concurrent deletion."""

from __future__ import annotations

from typing import Self

from pydantic import BaseModel, Field, model_validator


class PoolConfig(BaseModel):
    """Deletion pool configuration.

    Attributes:
        workers: Number of worker threads (max deletions in flight)
        queue_size: Capacity of the bounded job queue
        delete_timeout_seconds: Ceiling for a single delete request
        retry_initial_delay_seconds: Backoff before the single retry
        retry_max_delay_seconds: Cap on the backoff
        progress_interval: Log progress every N processed jobs
    """

    model_config = {"extra": "forbid", "frozen": True}

    workers: int = Field(250, ge=1, description="Number of concurrent delete workers")
    queue_size: int = Field(1000, ge=1, description="Bounded job queue capacity")
    delete_timeout_seconds: float = Field(5.0, gt=0, description="Per-object delete timeout in seconds")
    retry_initial_delay_seconds: float = Field(0.5, ge=0, description="Backoff before retrying a failed delete")
    retry_max_delay_seconds: float = Field(5.0, ge=0, description="Maximum retry backoff")
    progress_interval: int = Field(1000, ge=1, description="Log progress every N processed jobs")

    @model_validator(mode="after")
    def _validate_delay_invariants(self) -> Self:
        """Validate retry_initial_delay_seconds <= retry_max_delay_seconds."""
        if self.retry_initial_delay_seconds > self.retry_max_delay_seconds:
            raise ValueError(
                f"retry_initial_delay_seconds ({self.retry_initial_delay_seconds}) cannot exceed "
                f"retry_max_delay_seconds ({self.retry_max_delay_seconds})"
            )
        return self
