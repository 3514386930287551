"""
Zerochain Configuration Tests
"""

import json

import pytest

from zerochain.config import (
    ClientConfig,
    LogConfig,
    NodeConfig,
    ParamsConfig,
    DEFAULT_PROVING_KEY_PATH,
    DEFAULT_VERIFYING_KEY_PATH,
    setup_logging,
)
from zerochain.constants import DEFAULT_NODE_URL, PARAMS, ProtocolParams


class TestClientConfig:
    """Tests for ClientConfig."""

    def test_defaults(self):
        config = ClientConfig()
        assert config.node.url == DEFAULT_NODE_URL
        assert str(config.proving_key_path) == DEFAULT_PROVING_KEY_PATH
        assert str(config.verifying_key_path) == DEFAULT_VERIFYING_KEY_PATH
        assert config.validate() == []

    def test_invalid_values(self):
        config = ClientConfig(
            node=NodeConfig(url="ws://127.0.0.1:9944", timeout=0),
            params=ParamsConfig(proving_key_path=""),
            log=LogConfig(level="LOUD"),
        )
        errors = config.validate()
        assert len(errors) == 4

    def test_save_load_roundtrip(self, tmp_path):
        path = str(tmp_path / "zeroc.json")
        config = ClientConfig(node=NodeConfig(url="http://10.0.0.1:9933", timeout=5.0))
        config.log.level = "DEBUG"
        config.save(path)

        assert ClientConfig.load(path) == config

    def test_partial_file(self, tmp_path):
        path = tmp_path / "zeroc.json"
        path.write_text(json.dumps({"node": {"url": "http://example:9933"}}))

        config = ClientConfig.load(str(path))
        assert config.node.url == "http://example:9933"
        assert config.params == ParamsConfig()
        assert config.log == LogConfig()

    def test_to_dict(self):
        data = ClientConfig().to_dict()
        assert set(data) == {"node", "params", "log"}
        assert data["params"]["proving_key_path"] == DEFAULT_PROVING_KEY_PATH

    def test_setup_logging_with_file(self, tmp_path):
        setup_logging(LogConfig(level="debug", file=str(tmp_path / "zeroc.log")))


class TestProtocolParams:
    """Tests for ProtocolParams."""

    def test_defaults(self):
        assert PARAMS.ciphertext_size == 40
        assert PARAMS.max_value == 2**32 - 1
        assert len(set(PARAMS.personalizations)) == 5

    def test_duplicate_personalization(self):
        with pytest.raises(ValueError):
            ProtocolParams(crh_ivk_personalization=b"zech_KDF")

    def test_short_personalization(self):
        with pytest.raises(ValueError):
            ProtocolParams(kdf_personalization=b"short")

    def test_value_width(self):
        with pytest.raises(ValueError):
            ProtocolParams(value_bits=65)
