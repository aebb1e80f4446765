"""Configuration management for gold-digger.

Handles the TOML config file, environment variables, named profiles,
and configuration precedence resolution.

Precedence order (highest to lowest):
1. CLI flags (--db-url, --output, --format, TLS flags, ...)
2. Environment variables (DATABASE_URL, OUTPUT_FILE)
3. Named profile (--profile or GOLD_DIGGER_PROFILE env var)
4. Config file defaults
5. Built-in defaults
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any
from urllib.parse import parse_qs, unquote, urlparse

from pydantic import BaseModel, ValidationError, field_validator, model_validator

from gold_digger.core.exceptions import ConfigError

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "gold-digger" / "config.toml"

PROFILE_ENV_VAR = "GOLD_DIGGER_PROFILE"

_URL_SCHEMES = ("mysql", "mariadb")

_PEM_CERT_MARKER = "-----BEGIN CERTIFICATE-----"

_BUILTIN_DEFAULTS: dict[str, Any] = {
    "host": "localhost",
    "port": 3306,
    "database": None,
    "user": None,
    "password": None,
    "connect_timeout": 10,
    "tls_ca_file": None,
    "tls_skip_hostname_verify": False,
    "tls_allow_invalid_certificate": False,
    "output_file": None,
    "format": None,
    "pretty": False,
    "allow_empty": False,
}

_TLS_FIELDS = (
    "tls_ca_file",
    "tls_skip_hostname_verify",
    "tls_allow_invalid_certificate",
)

_TLS_CLI_FLAGS = (
    "tls_ca_file",
    "insecure_skip_hostname_verify",
    "allow_invalid_certificate",
)


def _reset_tls_mode(resolved: dict[str, Any], sources: dict[str, str]) -> None:
    # A layer choosing a TLS mode replaces the mode of every lower layer.
    for key in _TLS_FIELDS:
        resolved[key] = _BUILTIN_DEFAULTS[key]
        sources[key] = "default"


def parse_database_url(url: str) -> dict[str, Any]:
    """Supports mysql:// and mariadb:// schemes with query params."""
    parsed = urlparse(url)
    if parsed.scheme not in _URL_SCHEMES:
        msg = f"Invalid database URL scheme: '{parsed.scheme}'. Expected 'mysql' or 'mariadb'"
        raise ConfigError(msg)

    result: dict[str, Any] = {}
    if parsed.hostname:
        result["host"] = parsed.hostname
    try:
        port = parsed.port
    except ValueError:
        msg = f"Invalid port in database URL: '{parsed.netloc}'"
        raise ConfigError(msg) from None
    if port:
        result["port"] = port
    if parsed.path and parsed.path.strip("/"):
        result["database"] = unquote(parsed.path.strip("/"))
    if parsed.username:
        result["user"] = unquote(parsed.username)
    if parsed.password:
        result["password"] = unquote(parsed.password)
    query_params = parse_qs(parsed.query)
    if "connect_timeout" in query_params:
        try:
            result["connect_timeout"] = int(query_params["connect_timeout"][0])
        except ValueError:
            msg = "Invalid connect_timeout in database URL. Must be an integer"
            raise ConfigError(msg) from None
    return result


class TlsConfig(BaseModel):
    """TLS settings for the MySQL connection.

    The three modes are mutually exclusive. No mode set means the
    connection is made without TLS.
    """

    ca_file: Path | None = None
    skip_hostname_verify: bool = False
    allow_invalid_certificate: bool = False

    @model_validator(mode="after")
    def check_exclusive_modes(self) -> TlsConfig:
        chosen = []
        if self.ca_file is not None:
            chosen.append("--tls-ca-file")
        if self.skip_hostname_verify:
            chosen.append("--insecure-skip-hostname-verify")
        if self.allow_invalid_certificate:
            chosen.append("--allow-invalid-certificate")
        if len(chosen) > 1:
            msg = f"TLS options are mutually exclusive: {', '.join(chosen)}"
            raise ValueError(msg)
        return self

    @property
    def enabled(self) -> bool:
        return (
            self.ca_file is not None
            or self.skip_hostname_verify
            or self.allow_invalid_certificate
        )

    def to_ssl_options(self) -> dict[str, Any] | None:
        """Build the ``ssl`` argument for pymysql.connect()."""
        if self.ca_file is not None:
            return {"ca": str(self.ca_file), "check_hostname": True, "verify_mode": True}
        if self.skip_hostname_verify:
            return {"check_hostname": False, "verify_mode": True}
        if self.allow_invalid_certificate:
            return {"check_hostname": False, "verify_mode": False}
        return None


def validate_ca_file(path: Path) -> Path:
    """Check that a CA file exists and holds at least one PEM certificate."""
    if not path.is_file():
        msg = f"TLS CA file not found: {path}"
        raise ConfigError(msg)
    try:
        content = path.read_text(errors="replace")
    except OSError as e:
        msg = f"Cannot read TLS CA file {path}: {e}"
        raise ConfigError(msg) from e
    if _PEM_CERT_MARKER not in content:
        msg = f"Invalid TLS CA file {path}: no PEM certificate found"
        raise ConfigError(msg)
    return path


class MySqlProfile(BaseModel):
    url: str | None = None
    host: str = "localhost"
    port: int = 3306
    database: str | None = None
    user: str | None = None
    password: str | None = None
    connect_timeout: int = 10
    tls_ca_file: Path | None = None
    tls_skip_hostname_verify: bool = False
    tls_allow_invalid_certificate: bool = False

    @model_validator(mode="before")
    @classmethod
    def parse_url_into_components(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("url"):
            url_fields = parse_database_url(data["url"])
            for key, value in url_fields.items():
                if key not in data:
                    data[key] = value
        return data

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if not (1 <= v <= 65535):
            msg = f"Invalid port: {v}. Must be 1-65535"
            raise ValueError(msg)
        return v


class AppConfig(BaseModel):
    connect_timeout: int = 10
    pretty: bool = False
    allow_empty: bool = False
    default_profile: str | None = None
    profiles: dict[str, MySqlProfile] = {}


class ResolvedConfig(BaseModel):
    host: str = "localhost"
    port: int = 3306
    database: str | None = None
    user: str | None = None
    password: str | None = None
    connect_timeout: int = 10
    tls_ca_file: Path | None = None
    tls_skip_hostname_verify: bool = False
    tls_allow_invalid_certificate: bool = False
    output_file: str | None = None
    format: str | None = None
    pretty: bool = False
    allow_empty: bool = False
    active_profile: str | None = None
    sources: dict[str, str] = {}

    @property
    def tls(self) -> TlsConfig:
        return TlsConfig(
            ca_file=self.tls_ca_file,
            skip_hostname_verify=self.tls_skip_hostname_verify,
            allow_invalid_certificate=self.tls_allow_invalid_certificate,
        )

    def redacted(self) -> dict[str, Any]:
        """Plain-data view for --dump-config, with the password masked."""
        data = self.model_dump(mode="json")
        if data.get("password") is not None:
            data["password"] = "***"
        return data


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load configuration from TOML file.

    Returns default AppConfig if file doesn't exist.
    Raises ConfigError on malformed TOML or invalid config.
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    if not config_path.exists():
        return AppConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Malformed TOML in {config_path}: {e}"
        raise ConfigError(msg) from e

    try:
        return AppConfig.model_validate(data)
    except (ValidationError, ConfigError) as e:
        msg = f"Invalid configuration in {config_path}: {e}"
        raise ConfigError(msg) from e


def resolve_config(
    config: AppConfig,
    profile_name: str | None = None,
    **cli_overrides: Any,
) -> ResolvedConfig:
    """Resolve configuration using precedence chain.

    CLI > env > profile > config defaults > built-in defaults.
    """
    sources: dict[str, str] = {}
    resolved: dict[str, Any] = {}

    # Layer 1: Built-in defaults
    resolved.update(_BUILTIN_DEFAULTS)
    for key in resolved:
        sources[key] = "default"

    # Layer 2: Config file global defaults
    for key in ("connect_timeout", "pretty", "allow_empty"):
        if key in config.model_fields_set:
            resolved[key] = getattr(config, key)
            sources[key] = "config"

    # Layer 3: Named profile
    effective_profile = profile_name
    if not effective_profile:
        effective_profile = os.environ.get(PROFILE_ENV_VAR)
    if not effective_profile:
        effective_profile = config.default_profile

    if effective_profile:
        if effective_profile not in config.profiles:
            available = (
                ", ".join(sorted(config.profiles.keys())) if config.profiles else "none"
            )
            msg = f"Unknown profile: '{effective_profile}'. Available profiles: {available}"
            raise ConfigError(msg)
        profile = config.profiles[effective_profile]
        if profile.model_fields_set.intersection(_TLS_FIELDS):
            _reset_tls_mode(resolved, sources)
        for key in profile.model_fields_set:
            if key == "url":
                continue
            if key in resolved:
                resolved[key] = getattr(profile, key)
                sources[key] = f"profile: {effective_profile}"

    # Layer 4: Environment variables
    env_url = os.environ.get("DATABASE_URL")
    if env_url:
        for key, value in parse_database_url(env_url).items():
            resolved[key] = value
            sources[key] = "env: DATABASE_URL"
    env_output = os.environ.get("OUTPUT_FILE")
    if env_output:
        resolved["output_file"] = env_output
        sources["output_file"] = "env: OUTPUT_FILE"

    # Layer 5: CLI flags (highest priority)
    db_url = cli_overrides.get("db_url")
    if db_url:
        for key, value in parse_database_url(db_url).items():
            resolved[key] = value
            sources[key] = "cli: --db-url"

    cli_to_field = {
        "output": "output_file",
        "format": "format",
        "pretty": "pretty",
        "allow_empty": "allow_empty",
        "tls_ca_file": "tls_ca_file",
        "insecure_skip_hostname_verify": "tls_skip_hostname_verify",
        "allow_invalid_certificate": "tls_allow_invalid_certificate",
    }
    if any(cli_overrides.get(name) for name in _TLS_CLI_FLAGS):
        _reset_tls_mode(resolved, sources)
    for cli_name, field_name in cli_to_field.items():
        value = cli_overrides.get(cli_name)
        if value is not None and value is not False:
            resolved[field_name] = value
            sources[field_name] = f"cli: --{cli_name.replace('_', '-')}"

    resolved["active_profile"] = effective_profile
    resolved["sources"] = sources
    try:
        resolved_config = ResolvedConfig(**resolved)
        tls = resolved_config.tls
    except ValidationError as e:
        msg = f"Invalid configuration: {e}"
        raise ConfigError(msg) from e

    if tls.ca_file is not None:
        validate_ca_file(tls.ca_file)
    return resolved_config
