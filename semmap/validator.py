from __future__ import annotations

import os
import posixpath
from typing import Dict, Iterable, List, Optional, Set

from .codec import SourcePositions
from .config import SemmapConfig
from .fs_scan import scan_codebase
from .lang import EXTRACTORS
from .model import Document, ValidationIssue, ValidationReport
from .paths import prefix_path

_SOURCE_EXTS = tuple(ext for extractor in EXTRACTORS for ext in extractor.extensions)
_CONFIG_DESCRIPTION_EXTS = {".toml", ".json", ".yaml", ".yml"}


def is_generic_description(what: str, path: str) -> bool:
	_, ext = posixpath.splitext(path)
	if ext.lower() in _CONFIG_DESCRIPTION_EXTS:
		return False
	return what.startswith("Implements ") or what.endswith("functionality.")


def _check_header(document: Document, positions: SourcePositions) -> List[ValidationIssue]:
	issues: List[ValidationIssue] = []
	if not document.project_name.strip():
		issues.append(ValidationIssue.error("Missing project name", line=positions.title))
	if not document.purpose:
		issues.append(ValidationIssue.warning("Missing purpose statement", line=positions.title))
	return issues


def _check_layers(document: Document, positions: SourcePositions) -> List[ValidationIssue]:
	if not document.layers:
		return [ValidationIssue.error("No layers defined")]
	issues: List[ValidationIssue] = []
	seen: Set[int] = set()
	prev: Optional[int] = None
	for i, layer in enumerate(document.layers):
		line = positions.layers[i] if i < len(positions.layers) else None
		if layer.number in seen:
			issues.append(ValidationIssue.error(f"Duplicate layer: {layer.number}", line=line))
		elif prev is not None and layer.number < prev:
			issues.append(ValidationIssue.error(f"Layer {layer.number} follows layer {prev}", line=line))
		elif prev is not None and layer.number > prev + 1:
			issues.append(ValidationIssue.warning(f"Layer gap after {prev}", line=line))
		seen.add(layer.number)
		prev = layer.number
	return issues


def _check_entries(
	document: Document, positions: SourcePositions, allowed_tags: Optional[Iterable[str]]
) -> List[ValidationIssue]:
	issues: List[ValidationIssue] = []
	allowed = set(allowed_tags) if allowed_tags is not None else None
	occurrences: Dict[str, int] = {}
	for layer in document.layers:
		for entry in layer.entries:
			lines = positions.entries.get(entry.path, [])
			seen_count = occurrences.get(entry.path, 0)
			occurrences[entry.path] = seen_count + 1
			line = lines[seen_count] if seen_count < len(lines) else None

			if seen_count:
				issues.append(ValidationIssue.error("Duplicate path", line=line, path=entry.path))
			if not entry.what.strip():
				issues.append(ValidationIssue.error("Missing WHAT", line=line, path=entry.path))
			elif is_generic_description(entry.what, entry.path):
				issues.append(ValidationIssue.warning("Generic description, add a doc comment", line=line, path=entry.path))
			if not entry.why.strip():
				issues.append(ValidationIssue.error("Missing WHY", line=line, path=entry.path))
			if allowed is not None:
				for tag in entry.tags:
					if tag not in allowed:
						issues.append(ValidationIssue.error(f"Unknown tag [{tag}]", line=line, path=entry.path))
	return issues


def validate(
	document: Document,
	positions: Optional[SourcePositions] = None,
	allowed_tags: Optional[Iterable[str]] = None,
) -> ValidationReport:
	"""Structural checks that need nothing but the document itself."""
	positions = positions or SourcePositions()
	issues: List[ValidationIssue] = []
	issues.extend(_check_header(document, positions))
	issues.extend(_check_layers(document, positions))
	issues.extend(_check_entries(document, positions, allowed_tags))
	return ValidationReport(issues=issues)


def check_files_exist(
	document: Document, base_dir: str, positions: Optional[SourcePositions] = None
) -> List[ValidationIssue]:
	"""Every documented path must exist relative to ``base_dir``."""
	positions = positions or SourcePositions()
	issues: List[ValidationIssue] = []
	for path in document.all_paths():
		if not os.path.exists(os.path.join(base_dir, path)):
			issues.append(ValidationIssue.error("File not found", line=positions.entry_line(path), path=path))
	return issues


def check_undocumented(
	document: Document,
	root: str,
	root_prefix: str = "",
	exclude_dirs: Optional[Iterable[str]] = None,
) -> List[ValidationIssue]:
	"""Source files under ``root`` that the document does not mention."""
	documented = set(document.all_paths())
	issues: List[ValidationIssue] = []
	for path in scan_codebase(root, _SOURCE_EXTS, exclude_dirs):
		full = prefix_path(root_prefix, path)
		if full not in documented:
			issues.append(ValidationIssue.warning("Not in semantic map", path=full))
	return issues


def validate_against_codebase(
	document: Document,
	root: str,
	positions: Optional[SourcePositions] = None,
	base_dir: Optional[str] = None,
	root_prefix: str = "",
	strict: bool = False,
	config: Optional[SemmapConfig] = None,
) -> ValidationReport:
	config = config or SemmapConfig()
	report = validate(document, positions, config.allowed_tags)
	report.issues.extend(check_files_exist(document, base_dir if base_dir is not None else root, positions))
	if strict:
		report.issues.extend(check_undocumented(document, root, root_prefix, config.exclude_dirs))
	return report
