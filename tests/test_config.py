"""Tests for engine configuration loading."""

import json

import pytest

from validator_suite.config import EngineConfig, load_config
from validator_suite.errors import ConfigError


class TestLoadConfig:
    """Test configuration sources."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("VALIDATOR_SUITE_CONFIG", raising=False)
        monkeypatch.delenv("VALIDATOR_SUITE_MAX_WORKERS", raising=False)
        monkeypatch.delenv("VALIDATOR_SUITE_MAX_FILE_BYTES", raising=False)
        config = load_config()
        assert config.base_score == 100
        assert config.per_violation == 10
        assert config.weight_for("code-quality") == 40
        assert config.weight_for("unknown") == 1.0

    def test_file_overrides(self, temp_dir, monkeypatch):
        monkeypatch.delenv("VALIDATOR_SUITE_MAX_WORKERS", raising=False)
        path = temp_dir / "config.json"
        path.write_text(json.dumps({"per_violation": 5, "tier_thresholds": {"excellent": 95}}))
        config = load_config(str(path))
        assert config.per_violation == 5
        assert config.tier_thresholds.excellent == 95
        assert config.tier_thresholds.good == 75

    def test_env_file_and_overrides(self, temp_dir, monkeypatch):
        path = temp_dir / "config.json"
        path.write_text(json.dumps({"top_recommendations": 3}))
        monkeypatch.setenv("VALIDATOR_SUITE_CONFIG", str(path))
        monkeypatch.setenv("VALIDATOR_SUITE_MAX_WORKERS", "2")
        config = load_config()
        assert config.top_recommendations == 3
        assert config.max_workers == 2
        assert config.worker_count() == 2

    def test_missing_file(self, temp_dir):
        with pytest.raises(ConfigError):
            load_config(str(temp_dir / "absent.json"))

    def test_invalid_value(self, temp_dir):
        path = temp_dir / "config.json"
        path.write_text(json.dumps({"base_score": "lots"}))
        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_config(str(path))

    def test_partial_tier_weights_keep_defaults(self, temp_dir, monkeypatch):
        monkeypatch.delenv("VALIDATOR_SUITE_MAX_WORKERS", raising=False)
        path = temp_dir / "config.json"
        path.write_text(json.dumps({"per_violation": 5, "tier_weights": {"security": 50}}))
        config = load_config(str(path))
        assert config.weight_for("security") == 50
        assert config.weight_for("testing") == 40
        assert config.weight_for("branch-strategy") == 15
        assert config.weight_for("code-quality") == 40

    @pytest.mark.parametrize("content", ["[]", "42", '"text"'])
    def test_non_object_config_is_rejected(self, temp_dir, monkeypatch, content):
        monkeypatch.setenv("VALIDATOR_SUITE_MAX_WORKERS", "2")
        path = temp_dir / "config.json"
        path.write_text(content)
        with pytest.raises(ConfigError, match="JSON object"):
            load_config(str(path))

    def test_documentation_and_evidence_thresholds_are_tunable(self, temp_dir, monkeypatch):
        monkeypatch.delenv("VALIDATOR_SUITE_MAX_WORKERS", raising=False)
        path = temp_dir / "config.json"
        path.write_text(json.dumps({
            "readme_pass": 100,
            "comments_warning": 20,
            "keyword_match_ratio": 0.8,
            "max_subject_length": 50,
        }))
        config = load_config(str(path))
        assert config.readme_pass == 100
        assert config.readme_warning == 60
        assert config.comments_warning == 20
        assert config.keyword_match_ratio == 0.8
        assert config.max_subject_length == 50

    def test_worker_count_falls_back_to_cpu_count(self):
        assert EngineConfig().worker_count() >= 1
