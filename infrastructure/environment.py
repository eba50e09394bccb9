"""
Deployment configuration for the benchmark CDK app.

Per-environment settings live in cdk.json under context.environments and are
validated with EnvironmentConfig. Which environment to deploy, and to which
account/region, comes from DeploySettings (CDK_ENV, CDK_DEFAULT_ACCOUNT,
CDK_DEFAULT_REGION), falling back to the environment entry.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings


class DeploySettings(BaseSettings):
    """Deployment target from environment variables."""
    cdk_env: str = "dev"
    cdk_default_account: Optional[str] = None
    cdk_default_region: Optional[str] = None


class EnvironmentConfig(BaseModel):
    """Settings for one benchmark environment (dev/prod)."""
    account: Optional[str] = None
    region: str = "us-east-2"

    # Schedule: one dispatcher run per runtime every N hours
    schedule_rate_hours: int = Field(default=3, ge=1)

    # Workload functions share these so runtimes compete on equal terms
    workload_memory_mb: int = Field(default=128, ge=128, le=10240)
    workload_timeout_seconds: int = Field(default=30, ge=1, le=900)

    # Lambda cannot run longer than 15 minutes
    dispatcher_timeout_minutes: int = Field(default=15, ge=1, le=15)
    queue_visibility_timeout_minutes: int = Field(default=30, ge=1, le=720)

    log_retention_days: int = Field(default=30, ge=1)


def load_environment_config(environments: Optional[Dict[str, Any]], env_name: str) -> EnvironmentConfig:
    """
    Validate the cdk.json entry for an environment.

    Args:
        environments: The context.environments mapping
        env_name: Environment to load

    Returns:
        EnvironmentConfig

    Raises:
        ValueError: If the environment is not defined
    """
    entry = (environments or {}).get(env_name)
    if entry is None:
        available = ", ".join(sorted(environments or {})) or "none"
        raise ValueError(
            f"Environment '{env_name}' not found in cdk.json. "
            f"Available: {available}"
        )
    return EnvironmentConfig.model_validate(entry)
