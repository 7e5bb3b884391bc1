"""
TASKBOARD - Configuration
=========================
Store settings from environment variables, overridable by CLI flags.

    TASKBOARD_API_URL      REST API base, e.g. http://localhost:5000/api
    TASKBOARD_TOKEN        bearer token for the API
    TASKBOARD_COMPANY_ID   company whose board is shown (default 1)
    TASKBOARD_DATA_DIR     local store directory (default .taskboard)
    TASKBOARD_TIMEOUT      HTTP timeout in seconds (default 10)

Without an API URL the local file store is used.
"""

import os
from typing import Optional, Mapping, Any

from pydantic import BaseModel, Field

from .store import FileTaskStore, HttpTaskStore, TaskStore

ENV_VARS = {
    "api_url": "TASKBOARD_API_URL",
    "token": "TASKBOARD_TOKEN",
    "company_id": "TASKBOARD_COMPANY_ID",
    "data_dir": "TASKBOARD_DATA_DIR",
    "timeout": "TASKBOARD_TIMEOUT",
}


class StoreConfig(BaseModel):
    api_url: Optional[str] = None
    token: Optional[str] = None
    company_id: int = 1
    data_dir: str = ".taskboard"
    timeout: float = Field(default=10.0, gt=0)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides: Any) -> "StoreConfig":
        """Env values first, then any non-None overrides on top"""
        env = os.environ if environ is None else environ
        values = {field: env[var] for field, var in ENV_VARS.items() if env.get(var)}
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


def build_store(config: StoreConfig) -> TaskStore:
    if config.api_url:
        return HttpTaskStore(config.api_url, token=config.token, timeout=config.timeout)
    return FileTaskStore(config.data_dir)
