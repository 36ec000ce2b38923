"""Tests for configuration system."""

import os
from pathlib import Path

import pytest
from pydantic import ValidationError as ConfigValidationError

from featuretoggle import FeatureRegistry, ValidationError
from featuretoggle.config import (
    FeatureEntryConfig,
    LoggingConfig,
    RegistryConfig,
    ToggleConfig,
    build_registry,
    load_config,
)
from featuretoggle.features.processors import context_in

CONFIG = """
project: shop

registry:
  preserve: true
  strict: false

features:
  beta:
    processor: true
  dark-mode:
  checkout-v2:
    processor: featuretoggle.features.processors:context_in
    params:
      key: country
      values: [DE, AT]
  kill-switch:
    processor: featuretoggle.features.processors.always_on
    staticResult: false
"""


class TestFeatureEntryConfig:
    """Tests for single feature entries."""

    def test_defaults(self) -> None:
        """Test an empty entry."""
        entry = FeatureEntryConfig()
        assert entry.processor is None
        assert entry.params == {}
        assert entry.static_result is None

    def test_resolves_import_string(self) -> None:
        """Test processors referenced by import path are imported."""
        entry = FeatureEntryConfig(processor="featuretoggle.features.processors:context_in")
        assert entry.processor is context_in

    def test_keeps_bool_and_callable(self) -> None:
        """Test bool and callable processors pass through."""
        assert FeatureEntryConfig(processor=True).processor is True
        assert FeatureEntryConfig(processor=context_in).processor is context_in

    def test_rejects_unimportable_processor(self) -> None:
        """Test a bad import path fails validation."""
        with pytest.raises(ConfigValidationError):
            FeatureEntryConfig(processor="featuretoggle.features.processors:nope")

    def test_rejects_non_callable(self) -> None:
        """Test a non-callable processor fails validation."""
        with pytest.raises(ConfigValidationError, match="callable"):
            FeatureEntryConfig(processor=42)

    def test_static_result_alias_and_normalization(self) -> None:
        """Test staticResult alias and non-bool values."""
        assert FeatureEntryConfig(staticResult=True).static_result is True
        assert FeatureEntryConfig(static_result=False).static_result is False
        assert FeatureEntryConfig(static_result="yes").static_result is None


class TestLoggingConfig:
    """Tests for LoggingConfig."""

    def test_level_normalized(self) -> None:
        """Test level names are upper-cased."""
        assert LoggingConfig(level="debug").level == "DEBUG"

    def test_invalid_level(self) -> None:
        """Test unknown levels raise."""
        with pytest.raises(ValueError, match="level must be one of"):
            LoggingConfig(level="chatty")


class TestToggleConfig:
    """Tests for the complete configuration model."""

    def test_defaults(self) -> None:
        """Test an empty configuration."""
        config = ToggleConfig()
        assert config.registry == RegistryConfig()
        assert config.features == {}
        assert config.logging.level == "INFO"

    def test_to_registry(self) -> None:
        """Test building a registry from the model."""
        config = ToggleConfig(
            registry={"preserve": False, "strict": True},
            features={"on": {"processor": True}, "off": None},
        )
        registry = config.to_registry()
        assert isinstance(registry, FeatureRegistry)
        assert registry.names() == ["on", "off"]
        assert registry.preserve is False
        assert registry.strict is True
        assert registry.is_active("on") is True
        assert registry.is_active("off") is False


class TestLoadConfig:
    """Tests for config loading from YAML."""

    def test_load_config(self, write_config) -> None:
        """Test loading a full config file."""
        config = load_config(write_config(CONFIG))
        assert config.project == "shop"
        assert config.feature_names == ["beta", "dark-mode", "checkout-v2", "kill-switch"]
        assert config.features["checkout-v2"].processor is context_in
        assert config.features["kill-switch"].static_result is False

    def test_build_registry(self, write_config) -> None:
        """Test the loaded registry evaluates as configured."""
        registry = build_registry(write_config(CONFIG))
        assert registry.is_active("beta") is True
        assert registry.is_active("dark-mode") is False
        assert registry.is_active("checkout-v2", {"country": "AT"}) is True
        assert registry.is_active("kill-switch") is False
        assert registry.params("checkout-v2", "key") == "country"

    def test_empty_file(self, write_config) -> None:
        """Test an empty file yields an empty configuration."""
        config = load_config(write_config(""))
        assert config.features == {}

    def test_base_config_inheritance(self, write_config) -> None:
        """Test base.yaml next to the config is merged underneath it."""
        write_config(
            """
registry:
  strict: true
features:
  beta:
    processor: false
  legacy:
    processor: true
""",
            name="base.yaml",
        )
        path = write_config(
            """
features:
  beta:
    processor: true
"""
        )
        config = load_config(path)
        assert config.registry.strict is True
        assert config.feature_names == ["beta", "legacy"]
        assert config.features["beta"].processor is True

    def test_explicit_base_path(self, write_config) -> None:
        """Test an explicit base path."""
        base = write_config("project: from-base\n", name="shared.yaml")
        path = write_config("features: {}\n")
        assert load_config(path, base_path=base).project == "from-base"

    def test_env_var_interpolation(self, write_config) -> None:
        """Test environment variable interpolation."""
        os.environ["FEATURETOGGLE_TEST_PROJECT"] = "from-env"
        try:
            path = write_config(
                """
project: ${FEATURETOGGLE_TEST_PROJECT}
features:
  beta:
    processor: featuretoggle.features.processors:context_equals
    params:
      key: plan
      value: ${FEATURETOGGLE_TEST_PLAN:pro}
"""
            )
            config = load_config(path)
            assert config.project == "from-env"
            assert config.features["beta"].params["value"] == "pro"
        finally:
            del os.environ["FEATURETOGGLE_TEST_PROJECT"]

    def test_non_mapping_document(self, write_config) -> None:
        """Test a YAML list at the top level is rejected."""
        with pytest.raises(ValidationError, match="must contain a mapping"):
            load_config(write_config("- beta\n- gamma\n"))

    def test_non_mapping_features(self, write_config) -> None:
        """Test a features list is rejected."""
        with pytest.raises(ValidationError, match="'features' must be a mapping"):
            load_config(write_config("features:\n  - beta\n"))

    def test_invalid_processor_reference(self, write_config) -> None:
        """Test an unimportable processor fails model validation."""
        path = write_config("features:\n  beta:\n    processor: no.such.module:thing\n")
        with pytest.raises(ConfigValidationError):
            load_config(path)

    def test_missing_file(self, temp_dir: Path) -> None:
        """Test a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_config(temp_dir / "missing.yaml")
