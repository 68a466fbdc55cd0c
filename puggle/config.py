from __future__ import annotations

from pathlib import Path
from typing import Optional

import pydantic
import yaml

from .errors import ConfigError
from .models import Config

CONFIG_NAMES = ("puggle.yaml", "puggle.yml")


def find_config(root: Optional[Path] = None) -> Path:
    root = Path.cwd() if root is None else root
    for name in CONFIG_NAMES:
        path = root / name
        if path.exists():
            return path
    raise ConfigError(f"Config file not found: looked for {' or '.join(CONFIG_NAMES)} in {root}")


def load_config(path: Optional[Path] = None) -> Config:
    if path is None:
        path = find_config()
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise ConfigError(f"Config file is not valid UTF-8: {path}: {exc}") from exc
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"YAML config must be a mapping: {path}")
    try:
        return Config.model_validate(data)
    except pydantic.ValidationError as exc:
        raise ConfigError(f"Invalid config file {path}: {exc}") from exc
