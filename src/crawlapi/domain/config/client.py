"""Client configuration model."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from crawlapi.domain.config.retry import RetryConfig

DEFAULT_BASE_URL = "https://api.apify.com"


class ClientConfig(BaseModel):
    """Root configuration of the API client.

    Validation is performed at load time to fail fast on configuration errors.

    Attributes:
        base_url: API origin (paths like /v2/datasets are appended)
        token: API token, sent as the ``token`` query parameter
        timeout_secs: Transport timeout for a single request
        retry: Default retry policy, may be overridden per call
    """

    base_url: str = DEFAULT_BASE_URL
    token: Optional[str] = None
    timeout_secs: float = Field(360.0, gt=0.0)
    retry: RetryConfig = Field(default_factory=RetryConfig)

    model_config = ConfigDict(
        validate_assignment=True,
        extra="forbid",
        json_schema_extra={
            "example": {
                "base_url": DEFAULT_BASE_URL,
                "token": None,
                "timeout_secs": 360.0,
                "retry": {
                    "max_retries": 5,
                    "base_delay_millis": 200,
                    "max_delay_millis": 30000,
                    "jitter": True,
                },
            }
        },
    )
