"""Retry configuration model."""

from pydantic import BaseModel, ConfigDict, Field


class RetryConfig(BaseModel):
    """Configuration for retry logic.

    Attributes:
        max_retries: Retries after the first attempt (0 = single attempt)
        base_delay_millis: Delay before the first retry, doubled for each next one
        max_delay_millis: Upper bound for a single delay
        jitter: Randomize each delay within 0.5x-1.5x of its computed value
    """

    max_retries: int = Field(5, ge=0, le=50)
    base_delay_millis: int = Field(200, gt=0)
    max_delay_millis: int = Field(30000, gt=0)
    jitter: bool = True

    model_config = ConfigDict(frozen=True, extra="forbid")
