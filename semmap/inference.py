"""Deterministic layer, stereotype and description inference.

Every function here is pure: the same path, facts and metrics always give the
same answer. Pattern tables are module-level constants built at import time.
"""

from __future__ import annotations

import posixpath
from typing import Dict, FrozenSet, Iterable, List, Optional, Pattern

from .lang import EXTRACTORS, extractor_for
from .lang.base import Extractor, compile_all
from .model import FileFacts, FileMetrics, Inference, Stereotype
from .swum import expand_identifier, split_identifier

LAYER_CONFIG = 0
LAYER_ENTRY = 1
LAYER_DOMAIN = 2
LAYER_UTILITIES = 3
LAYER_TESTS = 4

LAYER_NAMES: Dict[int, str] = {
	LAYER_CONFIG: "Config",
	LAYER_ENTRY: "Entry",
	LAYER_DOMAIN: "Domain",
	LAYER_UTILITIES: "Utilities",
	LAYER_TESTS: "Tests",
}

WHY_SENTENCES: Dict[Stereotype, str] = {
	Stereotype.CONFIG: "Centralizes project configuration.",
	Stereotype.ENTRY: "Provides the application entry point.",
	Stereotype.DOMAIN: "Implements core domain logic.",
	Stereotype.SERVICE: "Orchestrates business logic.",
	Stereotype.UTILITY: "Provides reusable helper functions.",
	Stereotype.TEST: "Verifies correctness.",
	Stereotype.UNKNOWN: "Supports application functionality.",
}

_STEREOTYPE_BY_LAYER: Dict[int, Stereotype] = {
	LAYER_CONFIG: Stereotype.CONFIG,
	LAYER_ENTRY: Stereotype.ENTRY,
	LAYER_UTILITIES: Stereotype.UTILITY,
	LAYER_TESTS: Stereotype.TEST,
}

CONFIG_EXTENSIONS: FrozenSet[str] = frozenset({".toml", ".yaml", ".yml", ".json", ".ini", ".cfg", ".lock"})

_GENERIC_MANIFESTS: FrozenSet[str] = frozenset(
	{"Makefile", "Dockerfile", "docker-compose.yml", "docker-compose.yaml", "Justfile"}
)
MANIFEST_NAMES: FrozenSet[str] = _GENERIC_MANIFESTS.union(*(e.manifest_names for e in EXTRACTORS))
_CONFIG_PATTERNS = tuple(p for e in EXTRACTORS for p in e.config_patterns)
_GENERIC_TEST_PATTERNS = compile_all(r"(^|/)(tests?|specs?|__tests__)/")
_GENERIC_UTILITY_PATTERNS = compile_all(r"(^|/)(utils?|helpers?|common)/")

_MANIFEST_WHAT: Dict[str, str] = {
	"Cargo.toml": "Rust package manifest and dependencies.",
	"pyproject.toml": "Python project manifest and dependencies.",
	"setup.py": "Python package build script.",
	"package.json": "Node.js package manifest.",
	"go.mod": "Go module definition and dependencies.",
	"Dockerfile": "Container image build definition.",
	"Makefile": "Build automation targets.",
}

_STEM_WHAT: Dict[str, str] = {
	"main": "Application entry point.",
	"__main__": "Application entry point.",
	"lib": "Library root and public exports.",
	"mod": "Module definitions for {parent}.",
	"__init__": "Package definitions for {parent}.",
	"index": "Module index for {parent}.",
}

FAN_IN_THRESHOLD = 3
FAN_OUT_LOW = 1
FAN_OUT_THRESHOLD = 5


def _matches(patterns: Iterable[Pattern[str]], path: str) -> bool:
	return any(p.search(path) for p in patterns)


def is_config_file(path: str) -> bool:
	name = posixpath.basename(path)
	_, ext = posixpath.splitext(name)
	return name in MANIFEST_NAMES or ext.lower() in CONFIG_EXTENSIONS or _matches(_CONFIG_PATTERNS, path)


def infer_layer(path: str) -> int:
	"""Priority chain: config, entry, tests, utilities, then domain."""
	extractor = extractor_for(path)
	if is_config_file(path):
		return LAYER_CONFIG
	if extractor and _matches(extractor.entry_patterns, path):
		return LAYER_ENTRY
	if _matches(_GENERIC_TEST_PATTERNS, path) or (extractor and _matches(extractor.test_patterns, path)):
		return LAYER_TESTS
	if _matches(_GENERIC_UTILITY_PATTERNS, path) or (extractor and _matches(extractor.utility_patterns, path)):
		return LAYER_UTILITIES
	return LAYER_DOMAIN


def _signature_stereotype(extractor: Optional[Extractor], facts: FileFacts) -> Optional[Stereotype]:
	if extractor is None:
		return None
	found = {extractor.signature_for(hint) for hint in facts.imports}
	if Stereotype.TEST in found:
		return Stereotype.TEST
	if Stereotype.ENTRY in found:
		return Stereotype.ENTRY
	return None


def classify(
	facts: FileFacts,
	metrics: Optional[FileMetrics] = None,
	fan_in_threshold: int = FAN_IN_THRESHOLD,
	fan_out_low: int = FAN_OUT_LOW,
	fan_out_threshold: int = FAN_OUT_THRESHOLD,
) -> Stereotype:
	# Only extracted import hints are compared against framework signatures,
	# never the raw text, so a file holding signature literals is not matched.
	stereotype = _STEREOTYPE_BY_LAYER.get(infer_layer(facts.path))
	if stereotype is not None:
		return stereotype

	extractor = extractor_for(facts.path)
	stereotype = _signature_stereotype(extractor, facts)
	if stereotype is not None:
		return stereotype

	if metrics is not None:
		if metrics.fan_in >= fan_in_threshold and metrics.fan_out <= fan_out_low:
			return Stereotype.UTILITY
		if metrics.fan_out >= fan_out_threshold:
			return Stereotype.SERVICE

	return Stereotype.DOMAIN if extractor else Stereotype.UNKNOWN


def _normalized(name: str) -> str:
	return name.replace("_", "").replace("-", "").lower()


def primary_identifier(stem: str, exports: List[str]) -> Optional[str]:
	wanted = _normalized(stem)
	for name in exports:
		if _normalized(name) == wanted:
			return name
	if len(exports) == 1:
		return exports[0]
	if split_identifier(stem):
		return stem
	return None


def infer_what(path: str, doc: Optional[str], exports: List[str]) -> str:
	if doc:
		return doc
	name = posixpath.basename(path)
	stem, ext = posixpath.splitext(name)
	if name in _MANIFEST_WHAT:
		return _MANIFEST_WHAT[name]
	if ext.lower() in CONFIG_EXTENSIONS:
		return f"Configuration for {stem}."
	if extractor_for(path) and stem in _STEM_WHAT:
		parent = posixpath.basename(posixpath.dirname(path)) or "the project root"
		return _STEM_WHAT[stem].format(parent=parent)
	identifier = primary_identifier(stem, exports)
	if identifier:
		return expand_identifier(identifier)
	return f"Implements {name} functionality."


def infer_why(stereotype: Stereotype) -> str:
	return WHY_SENTENCES[stereotype]


def infer(
	facts: FileFacts,
	metrics: Optional[FileMetrics] = None,
	fan_in_threshold: int = FAN_IN_THRESHOLD,
	fan_out_low: int = FAN_OUT_LOW,
	fan_out_threshold: int = FAN_OUT_THRESHOLD,
) -> Inference:
	stereotype = classify(facts, metrics, fan_in_threshold, fan_out_low, fan_out_threshold)
	return Inference(
		layer=infer_layer(facts.path),
		stereotype=stereotype,
		what=infer_what(facts.path, facts.doc, facts.exports),
		why=infer_why(stereotype),
		exports=facts.exports,
	)
