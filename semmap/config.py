"""Configuration loading.

Sources are applied in order:
  1) built-in defaults
  2) ``semmap.yaml`` or ``.semmap.yaml`` at the scan root, or the file named
     by ``$SEMMAP_CONFIG`` (an explicit path wins over both)
  3) keyword overrides passed by the caller
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, ValidationError, field_validator

from .errors import SemmapError

logger = logging.getLogger(__name__)

CONFIG_FILENAMES = ("semmap.yaml", ".semmap.yaml")
CONFIG_ENV_VAR = "SEMMAP_CONFIG"

DEFAULT_EXCLUDE_DIRS: List[str] = ["node_modules", "target", "dist", "build", "__pycache__", "venv", ".git"]
DEFAULT_INCLUDE_EXTS: List[str] = [
	".py",
	".pyi",
	".rs",
	".go",
	".js",
	".jsx",
	".mjs",
	".cjs",
	".ts",
	".tsx",
	".mts",
	".cts",
	".toml",
	".yaml",
	".yml",
	".json",
]


class SemmapConfig(BaseModel):
	project_name: Optional[str] = None
	purpose: Optional[str] = None
	include_exts: List[str] = list(DEFAULT_INCLUDE_EXTS)
	exclude_dirs: List[str] = list(DEFAULT_EXCLUDE_DIRS)
	# None means any tag is accepted
	allowed_tags: Optional[List[str]] = None
	fan_in_threshold: int = 3
	fan_out_low: int = 1
	fan_out_threshold: int = 5

	@field_validator("include_exts")
	@classmethod
	def _dotted(cls, value: List[str]) -> List[str]:
		return [ext if ext.startswith(".") else f".{ext}" for ext in value]


def find_config_file(root: str, explicit: Optional[str] = None) -> Optional[str]:
	if explicit:
		return explicit
	env_path = os.getenv(CONFIG_ENV_VAR)
	if env_path:
		return env_path
	for name in CONFIG_FILENAMES:
		candidate = os.path.join(root, name)
		if os.path.isfile(candidate):
			return candidate
	return None


def _load_yaml(path: str) -> Dict[str, Any]:
	try:
		with open(path, "r", encoding="utf-8") as fh:
			data = yaml.safe_load(fh)
	except OSError as e:
		raise SemmapError(f"Cannot read config file {path}: {e}") from e
	except yaml.YAMLError as e:
		raise SemmapError(f"Invalid YAML in config file {path}: {e}") from e
	if data is None:
		return {}
	if not isinstance(data, dict):
		raise SemmapError(f"Config file {path} must contain a mapping")
	return data


def load_config(root: str = ".", path: Optional[str] = None, **overrides: Any) -> SemmapConfig:
	values: Dict[str, Any] = {}
	config_path = find_config_file(root, path)
	if config_path:
		logger.debug("Loading config from %s", config_path)
		values.update(_load_yaml(config_path))
	values.update({k: v for k, v in overrides.items() if v is not None})
	try:
		return SemmapConfig(**values)
	except ValidationError as e:
		raise SemmapError(f"Invalid configuration: {e}") from e
