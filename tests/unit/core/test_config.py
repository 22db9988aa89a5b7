"""Unit tests for configuration models and the templated YAML loader."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from src.authgate.core.errors import ConfigurationError
from src.authgate.core.models.auth_mode import AuthenticationMode
from src.authgate.runtime.config.config_data import (
    AuthConfig,
    ConfigData,
    DatabaseConfig,
    OAuthAuthConfig,
)
from src.authgate.runtime.config.config_template import (
    load_templated_yaml,
    substitute_env_vars,
)

_YAML = """
config:
  app:
    environment: test
  auth:
    mode: ${AUTH_MODE:-disabled}
    jwt:
      issuer: https://issuer.test
      audience: api://tools
      signing_key_ref: env:JWT_SIGNING_KEY
    oauth:
      tenant_allowlist: ["tenant-a"]
      scope_to_role_map:
        Admin.All: Admin
        Support.ReadWrite: [CustomerService, ReadOnly]
  database:
    url: ${DATABASE_URL:-sqlite:///./authgate.db}
"""


class TestSubstituteEnvVars:
    def test_substitute_simple_env_var(self):
        with patch.dict(os.environ, {"TEST_VAR": "test_value"}):
            assert substitute_env_vars("${TEST_VAR}") == "test_value"

    def test_default_used_when_missing(self):
        with patch.dict(os.environ, {}, clear=True):
            assert substitute_env_vars("${MISSING_VAR:-fallback}") == "fallback"

    def test_default_ignored_when_set(self):
        with patch.dict(os.environ, {"PRESENT_VAR": "actual"}):
            assert substitute_env_vars("${PRESENT_VAR:-fallback}") == "actual"

    def test_required_with_message(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValueError, match="set the key"):
                substitute_env_vars("${SECRET:?set the key}")

    def test_required_missing(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValueError, match="MISSING_VAR"):
                substitute_env_vars("value: ${MISSING_VAR}")


class TestConfigModels:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("disabled", AuthenticationMode.DISABLED),
            ("None", AuthenticationMode.DISABLED),
            ("Authenticated", AuthenticationMode.AUTHENTICATED),
            ("bearer_token", AuthenticationMode.AUTHENTICATED),
            ("oauth", AuthenticationMode.OAUTH),
            ("EntraExternalId", AuthenticationMode.OAUTH),
        ],
    )
    def test_mode_aliases(self, raw: str, expected: AuthenticationMode):
        assert AuthConfig(mode=raw).mode is expected

    def test_unknown_mode_rejected(self):
        with pytest.raises(ValidationError):
            AuthConfig(mode="kerberos")

    def test_config_is_frozen(self):
        config = ConfigData()
        with pytest.raises(ValidationError):
            config.auth = AuthConfig(mode="oauth")

    def test_scope_map_values_normalized_to_tuples(self):
        oauth = OAuthAuthConfig(scope_to_role_map={"a": "Admin", "b": ["Sales", "ReadOnly"]})
        assert oauth.scope_to_role_map == {"a": ("Admin",), "b": ("Sales", "ReadOnly")}

    def test_negative_retries_rejected(self):
        with pytest.raises(ValidationError):
            OAuthAuthConfig(provider_retries=-1)

    def test_sqlite_detection(self):
        assert DatabaseConfig().is_sqlite
        assert not DatabaseConfig(url="postgresql://db/authgate").is_sqlite


class TestLoadTemplatedYaml:
    @pytest.fixture
    def config_file(self, tmp_path: Path) -> Path:
        path = tmp_path / "config.yaml"
        path.write_text(_YAML)
        return path

    def test_loads_config_section(self, config_file: Path):
        with patch.dict(os.environ, {}, clear=True):
            config = load_templated_yaml(config_file)

        assert config.app.environment == "test"
        assert config.auth.mode is AuthenticationMode.DISABLED
        assert config.auth.jwt.signing_key_ref == "env:JWT_SIGNING_KEY"
        assert config.auth.oauth.scope_to_role_map["Admin.All"] == ("Admin",)
        assert config.database.url == "sqlite:///./authgate.db"

    def test_environment_variables_substituted(self, config_file: Path):
        env = {"AUTH_MODE": "EntraExternalId", "DATABASE_URL": "sqlite:///:memory:"}
        with patch.dict(os.environ, env, clear=True):
            config = load_templated_yaml(config_file)

        assert config.auth.mode is AuthenticationMode.OAUTH
        assert config.database.url == "sqlite:///:memory:"

    def test_environment_prefixed_overrides(self, config_file: Path):
        env = {"APP_ENVIRONMENT": "production", "PRODUCTION_AUTH_MODE": "authenticated"}
        with patch.dict(os.environ, env, clear=True):
            config = load_templated_yaml(config_file)

        assert config.auth.mode is AuthenticationMode.AUTHENTICATED

    def test_invalid_values_raise_configuration_error(self, config_file: Path):
        with patch.dict(os.environ, {"AUTH_MODE": "kerberos"}, clear=True):
            with pytest.raises(ConfigurationError):
                load_templated_yaml(config_file)

    def test_missing_required_variable(self, tmp_path: Path):
        path = tmp_path / "config.yaml"
        path.write_text("config:\n  database:\n    url: ${DB_URL:?database url required}\n")
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ConfigurationError, match="database url required"):
                load_templated_yaml(path)

    def test_non_mapping_document(self, tmp_path: Path):
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ConfigurationError):
            load_templated_yaml(path)

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_templated_yaml(tmp_path / "absent.yaml")
