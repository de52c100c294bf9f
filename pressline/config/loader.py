"""Configuration loader."""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from .models import ConfigModel, SectionConfig, SectionsFile


class Config:
    """Configuration manager."""

    def __init__(self, config_path: Optional[Path] = None) -> None:
        """Initialize config manager."""
        if config_path is None:
            config_path = Path.home() / ".config" / "pressline" / "config.yaml"
        self.config_path = config_path
        self._config: Optional[ConfigModel] = None
        self._sections: Optional[SectionsFile] = None

    @property
    def config(self) -> ConfigModel:
        """Get loaded config."""
        if self._config is None:
            self._config = load_config(self.config_path)
        return self._config

    @property
    def sections_path(self) -> Path:
        """Path of sections.yaml, next to the config file."""
        return self.config_path.parent / "sections.yaml"

    @property
    def sections(self) -> SectionsFile:
        """Get loaded sections and label table."""
        if self._sections is None:
            self._sections = load_sections(self.sections_path)
        return self._sections

    @property
    def workspace_root(self) -> Path:
        """Get workspace root path."""
        path = Path(self.config.workspace_root).expanduser()
        path.mkdir(parents=True, exist_ok=True)
        return path

    @property
    def state_dir(self) -> Path:
        """Directory holding per-section processing state."""
        path = self.workspace_root / ".state"
        path.mkdir(parents=True, exist_ok=True)
        return path

    def get_llm_config(self) -> Dict[str, Any]:
        """Get LLM configuration dict."""
        llm_config = self.config.llm.model_dump()

        # Handle API key from environment if specified
        if llm_config.get("api_key_env") and not llm_config.get("api_key"):
            api_key = os.environ.get(llm_config["api_key_env"])
            if api_key:
                llm_config["api_key"] = api_key

        return llm_config

    def get_sink_config(self) -> Dict[str, Any]:
        """Get publish sink configuration dict."""
        sink_config = self.config.sink.model_dump()

        for field in ("token", "base_id"):
            env_name = sink_config.get(f"{field}_env")
            if env_name and not sink_config.get(field):
                value = os.environ.get(env_name)
                if value:
                    sink_config[field] = value

        if sink_config["kind"] == "jsonl" and not sink_config.get("output_path"):
            sink_config["output_path"] = str(self.workspace_root / "records.jsonl")

        return sink_config


def load_config(config_path: Path) -> ConfigModel:
    """Load configuration from YAML file."""
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with open(config_path) as f:
            config_data = yaml.safe_load(f)

        if config_data is None:
            config_data = {}

        return ConfigModel(**config_data)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in config file: {e}")
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}")


def load_sections(sections_path: Path) -> SectionsFile:
    """Load sections and category labels from YAML file."""
    if not sections_path.exists():
        raise FileNotFoundError(f"Sections file not found: {sections_path}")

    try:
        with open(sections_path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in sections file: {e}")

    if data is None:
        return SectionsFile()

    sections = []
    for section_data in data.get("sections") or []:
        try:
            sections.append(SectionConfig(**section_data))
        except ValidationError as e:
            print(f"Skipping invalid section {section_data.get('id', 'unknown')}: {e}")

    labels = {str(k): str(v) for k, v in (data.get("labels") or {}).items()}
    return SectionsFile(sections=sections, labels=labels)


def save_config(config: ConfigModel, config_path: Path) -> None:
    """Save configuration to YAML file."""
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w") as f:
        yaml.dump(config.model_dump(), f, default_flow_style=False, sort_keys=False)


def save_sections(sections: SectionsFile, sections_path: Path) -> None:
    """Save sections and labels to YAML file."""
    sections_path.parent.mkdir(parents=True, exist_ok=True)

    data = {
        "sections": [s.model_dump(exclude_none=True) for s in sections.sections],
        "labels": dict(sections.labels),
    }

    with open(sections_path, "w") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False, allow_unicode=True)
