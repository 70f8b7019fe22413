"""Shared fixtures."""

from pathlib import Path

import pytest

from fakes import FakeRunner, FakeStore
from slicr.config import Settings


@pytest.fixture
def work_dir(tmp_path: Path) -> Path:
    return tmp_path / "work"


@pytest.fixture
def test_settings(tmp_path: Path, work_dir: Path) -> Settings:
    return Settings(
        _env_file=None,
        temp_dir=work_dir,
        output_dir=tmp_path / "outputs",
        api_key="secret-key",
        openai_api_key=None,
        anthropic_api_key=None,
        nocodb_api_url=None,
        nocodb_auth_token=None,
        s3_bucket_name=None,
        aws_region=None,
    )


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore()
