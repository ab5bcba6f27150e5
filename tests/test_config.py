import os
import pathlib

import pydantic
import pytest
from pydantic import HttpUrl, WebsocketUrl

from lendrecon.config import (
    CONFIG_FILE,
    ChainSettings,
    DatabaseSettings,
    Settings,
    ValidationSettings,
    load_config_from_file,
    save_config_to_file,
    settings,
)
from lendrecon.validation import DEFAULT_POLICY, TolerancePolicy


def test_config_file_location_from_environment():
    assert pathlib.Path(os.environ["LENDRECON_CONFIG_FILE"]) == CONFIG_FILE
    assert CONFIG_FILE.exists()
    assert settings.database.path.exists()


def test_default_settings():
    assert settings.chain.chain_id == 1
    assert settings.chain.rpc is None
    assert settings.chain.pool_address is None
    assert settings.validation.tolerance_policy() == DEFAULT_POLICY
    assert settings.validation.max_concurrency == 16


def test_round_trip(tmp_path: pathlib.Path):
    config_path = tmp_path / "config.toml"
    config = Settings(
        database=DatabaseSettings(path=tmp_path / "ledger.db"),
        chain=ChainSettings(
            chain_id=8453,
            rpc=HttpUrl("https://mainnet.base.org"),
            pool_address="0xa238dd80c259a72e81d7e4664a9801593f98d1c5",
        ),
        validation=ValidationSettings(absolute_floor=10, relative_floor=0.5),
    )
    save_config_to_file(config, config_path)

    loaded = load_config_from_file(config_path)
    assert loaded == config
    assert loaded.validation.tolerance_policy() == TolerancePolicy(
        absolute_floor=10, relative_floor=0.5
    )


def test_rpc_endpoint_types(tmp_path: pathlib.Path):
    assert isinstance(ChainSettings(rpc="http://localhost:8545").rpc, HttpUrl)
    assert isinstance(ChainSettings(rpc="ws://localhost:8546").rpc, WebsocketUrl)

    ipc = ChainSettings(rpc="~/geth.ipc").rpc
    assert isinstance(ipc, pathlib.Path)
    assert ipc.is_absolute()


def test_invalid_validation_settings():
    with pytest.raises(pydantic.ValidationError):
        ValidationSettings(max_concurrency=0)
    with pytest.raises(pydantic.ValidationError):
        ValidationSettings(rpc_timeout=0)
    with pytest.raises(pydantic.ValidationError):
        ValidationSettings(absolute_floor=-1)
