"""Tests for settings parsing."""

import pytest
from pydantic import ValidationError

from workspace_sync.config import Settings


def test_bucket_per_target_env():
    cfg = Settings(oss_bucket_dev="d", oss_bucket_test="t", oss_bucket_prod="p")
    assert [cfg.bucket_for(env) for env in ("dev", "test", "prod")] == ["d", "t", "p"]


def test_worker_pool_needs_one_worker():
    with pytest.raises(ValidationError):
        Settings(sync_max_parallel=0)


def test_mode_is_the_only_deployment_switch():
    cfg = Settings(mode="prod", environment="production")
    assert cfg.is_dev_mode is False
    assert "environment" not in Settings.model_fields
    assert not hasattr(cfg, "environment")


def test_cors_origins_from_comma_string():
    cfg = Settings(cors_origins="http://a.test, http://b.test")
    assert cfg.cors_origins == ["http://a.test", "http://b.test"]
