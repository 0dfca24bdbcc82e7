from typing import Optional
from functools import lru_cache

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """
    Global configuration for the TupleMR queue service and job coordinators.

    Values are loaded automatically from environment variables prefixed with
    `TUPLEMR_` or from an `.env` file.

    Attributes:
        host (str): Host address where the tuple-space service binds.
        port (int): Port number for the tuple-space service.
        debug (bool): Enable/disable auto-reload of the service.
        log_level (str): Logging level for the application (e.g., info, debug, error).
        max_take_wait (float): Longest single blocking take the service will hold
            an HTTP request open for; clients re-issue the take after it.
        default_map_tasks (int): Map task count used when a job does not set one.
        default_reduce_tasks (int): Reduce task count used when a job does not set one.
        task_timeout (Optional[float]): Seconds to wait for each task result;
            None waits forever.
    """
    host: str = Field("0.0.0.0", description="Host for the tuple-space service")
    port: int = Field(8000, description="Port for the tuple-space service")
    debug: bool = Field(False, description="Enable auto-reload for the service")
    log_level: str = Field("info", description="Logging level")
    max_take_wait: float = Field(30.0, description="Maximum seconds one HTTP take may block")
    default_map_tasks: int = Field(10, description="Default number of map tasks per job")
    default_reduce_tasks: int = Field(2, description="Default number of reduce tasks per job")
    task_timeout: Optional[float] = Field(None, description="Per-result collection timeout in seconds")

    class Config:
        """
        Configuration for environment variable loading.

        - `env_file`: Path to the environment file to load variables from.
        - `env_file_encoding`: Encoding for the environment file.
        - `env_prefix`: Prefix shared by all variables of this service.
        """
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "TUPLEMR_"


class WorkerSettings(BaseSettings):
    worker_id: str = Field("worker-001", description="Unique worker ID")
    master_host: str = Field("localhost", description="Host of the tuple-space service")
    master_port: int = Field(8000, description="Port of the tuple-space service")
    request_timeout: float = Field(30.0, description="Timeout for non-blocking HTTP requests")
    poll_interval: float = Field(1.0, description="Seconds each task take blocks before re-checking for shutdown")
    metrics_port: int = Field(0, description="Prometheus metrics port (0 disables the exporter)")
    log_level: str = Field("info", description="Logging level")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "TUPLEMR_WORKER_"


@lru_cache()
def get_settings() -> Settings:
    """
    Retrieve a cached instance of the service settings.

    Returns:
        Settings: The global application configuration.
    """
    return Settings()


@lru_cache()
def get_worker_settings() -> WorkerSettings:
    return WorkerSettings()
