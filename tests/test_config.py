"""Tests for taskboard.config module."""

import pytest
from pydantic import ValidationError

from taskboard.config import StoreConfig, build_store
from taskboard.store import FileTaskStore, HttpTaskStore


class TestStoreConfig:
    """Tests for env loading and store selection."""

    def test_defaults(self):
        config = StoreConfig.from_env({})
        assert config.api_url is None
        assert config.company_id == 1
        assert config.data_dir == ".taskboard"
        assert config.timeout == 10.0

    def test_reads_env(self):
        config = StoreConfig.from_env({
            "TASKBOARD_API_URL": "http://api.test/api",
            "TASKBOARD_TOKEN": "secret",
            "TASKBOARD_COMPANY_ID": "7",
            "TASKBOARD_TIMEOUT": "2.5",
        })
        assert config.api_url == "http://api.test/api"
        assert config.company_id == 7
        assert config.timeout == 2.5

    def test_overrides_win(self):
        """CLI flags beat env values; None means 'not given'."""
        config = StoreConfig.from_env({"TASKBOARD_COMPANY_ID": "7"}, company_id=3, api_url=None)
        assert config.company_id == 3
        assert config.api_url is None

    def test_invalid_values(self):
        with pytest.raises(ValidationError):
            StoreConfig.from_env({"TASKBOARD_COMPANY_ID": "acme"})
        with pytest.raises(ValidationError):
            StoreConfig.from_env({}, timeout=0)

    def test_build_store(self, tmp_path):
        assert isinstance(build_store(StoreConfig(data_dir=str(tmp_path))), FileTaskStore)
        http = build_store(StoreConfig(api_url="http://api.test/api", token="t", timeout=3))
        assert isinstance(http, HttpTaskStore)
        assert http.timeout == 3
        assert http.session.headers["Authorization"] == "Bearer t"
