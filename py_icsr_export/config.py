# Copyright (c) 2025-2026 Gowtham Adamane Rao. All Rights Reserved.
#
# Licensed under the Prosperity Public License 3.0.0 (the "License").
# You may not use this file except in compliance with the License.
# You may obtain a copy of the License in the LICENSE file at the root
# of this repository, or at: https://prosperitylicense.com/versions/3.0.0
#
# Commercial use beyond a 30-day trial requires a separate license.
"""
This module handles the configuration management for the ICSR exporter.

It uses a hierarchical configuration approach, allowing settings to be loaded
from a YAML file, environment variables, and CLI arguments.
"""
import os
import yaml
from pathlib import Path
from typing import Optional, Self
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import (
    DEFAULT_CODING_DICTIONARY_VERSION,
    DEFAULT_COUNTRY_CODE,
    DEFAULT_RECEIVER_ORGANIZATION,
    DEFAULT_SENDER_ORGANIZATION,
    ExportOptions,
)


class ExportSettings(BaseModel):
    """Defaults for the exported ICSR document."""

    receiver_organization: str = Field(
        DEFAULT_RECEIVER_ORGANIZATION, description="Regulatory destination of the report."
    )
    sender_organization: str = Field(
        DEFAULT_SENDER_ORGANIZATION, description="Organisation sending the report."
    )
    country_code: str = Field(DEFAULT_COUNTRY_CODE, description="ISO 3166-1 alpha-2 country.")
    coding_dictionary_version: str = Field(
        DEFAULT_CODING_DICTIONARY_VERSION, description="MedDRA version written into reactions."
    )
    report_id_prefix: str = Field("NARC", description="Prefix of the safety report id.")
    max_excerpt_length: int = Field(
        500, description="Maximum characters of a finding excerpt in a reaction."
    )
    max_narrative_excerpt_length: int = Field(
        200, description="Maximum characters of the case body quoted in the narrative."
    )
    unknown_drug_placeholder: str = Field(
        "Unknown - see narrative",
        description="Medicinal product written when no suspect drug could be extracted.",
    )

    def to_options(self, exported_by: str = "") -> ExportOptions:
        """Build the per-call export options from these defaults."""
        return ExportOptions(
            exported_by=exported_by,
            receiver_organization=self.receiver_organization,
            sender_organization=self.sender_organization,
            country_code=self.country_code,
            coding_dictionary_version=self.coding_dictionary_version,
        )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Settings are loaded from the following sources in order of precedence:
    1. Environment variables (e.g., `PY_ICSR_EXPORT_EXPORT__COUNTRY_CODE=...`)
    2. YAML configuration file (`config.yaml` or path specified by `CONFIG_FILE` env var)
    3. Default values defined in this class.
    """

    model_config = SettingsConfigDict(
        env_prefix="PY_ICSR_EXPORT_",
        env_nested_delimiter="__",
        env_file_encoding="utf-8",
    )

    export: ExportSettings = Field(default_factory=ExportSettings)  # type: ignore
    log_level: str = "INFO"

    @classmethod
    def from_yaml(cls, path: Path) -> Self:
        """Load configuration from a YAML file."""
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found at: {path}")

        with open(path, "r") as f:
            config_data = yaml.safe_load(f)

        return cls.model_validate(config_data or {})


_ENV_OVERRIDABLE_EXPORT_FIELDS = (
    "receiver_organization",
    "sender_organization",
    "country_code",
    "coding_dictionary_version",
    "report_id_prefix",
    "max_excerpt_length",
    "max_narrative_excerpt_length",
    "unknown_drug_placeholder",
)


def load_config(profile: Optional[str] = None, config_file: Optional[str] = None) -> AppSettings:
    """
    Load application configuration.

    It loads settings from a YAML file and then overrides with any
    environment variables. A specific profile can be selected from the config file.

    :param profile: The configuration profile to load (e.g., 'dev', 'prod').
    :param config_file: Path to a specific YAML config file.
    :return: An instance of AppSettings.
    """
    # pydantic-settings gives file values priority over env vars for nested
    # models, so load the environment first and only fill in unset fields
    # from the file.
    env_settings = AppSettings()

    cfg_path_str = config_file or os.environ.get("CONFIG_FILE", "config.yaml")
    cfg_path = Path(cfg_path_str)

    if cfg_path.exists():
        with open(cfg_path, "r") as f:
            yaml_data = yaml.safe_load(f) or {}

        profile_data = yaml_data.get(profile, {}) if profile else yaml_data

        if profile_data:
            file_settings = AppSettings.model_validate(profile_data)
            for field_name in _ENV_OVERRIDABLE_EXPORT_FIELDS:
                if os.getenv(f"PY_ICSR_EXPORT_EXPORT__{field_name.upper()}") is None:
                    setattr(env_settings.export, field_name, getattr(file_settings.export, field_name))
            if os.getenv("PY_ICSR_EXPORT_LOG_LEVEL") is None:
                env_settings.log_level = file_settings.log_level

    return env_settings


# Example of how to create a default config file for users
DEFAULT_CONFIG = """
# Default configuration for py-icsr-export
# You can create profiles like 'dev', 'staging', 'prod'
dev:
  export:
    receiver_organization: Health Canada MedEffect Canada
    sender_organization: NARC Pharmacovigilance System (DEV)
    country_code: CA
    coding_dictionary_version: "27.0"
  log_level: DEBUG

prod:
  export:
    receiver_organization: Health Canada MedEffect Canada
    sender_organization: NARC Pharmacovigilance System
    country_code: CA
    coding_dictionary_version: "27.0"
  log_level: INFO
"""
