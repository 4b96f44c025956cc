"""File-level operations shared by the command line and the HTTP API.

Each operation reads its input once, computes in memory, and writes at most
one output file through a temporary file in the same directory.
"""

from __future__ import annotations

import logging
import os
import tempfile
from typing import List, Optional, Tuple

from .codec import SourcePositions, dumps, loads, parse_with_positions
from .config import SemmapConfig, load_config
from .deps import analyze, check_violations
from .generator import generate
from .model import DependencyGraph, Document, GenerationResult, LayerViolation, ReconcileResult, ValidationReport
from .paths import build_root_prefix_relative
from .reconcile import reconcile
from .validator import validate, validate_against_codebase

logger = logging.getLogger(__name__)

DEFAULT_DOCUMENT = "SEMMAP.md"


def format_for_path(path: str) -> str:
	_, ext = os.path.splitext(path)
	ext = ext.lower()
	if ext == ".json":
		return "json"
	if ext in (".yaml", ".yml"):
		return "yaml"
	return "md"


def document_dir(path: str) -> str:
	return os.path.dirname(os.path.abspath(path))


def read_text(path: str) -> str:
	with open(path, "r", encoding="utf-8") as fh:
		return fh.read()


def write_atomic(path: str, content: str) -> None:
	"""Replace ``path`` with ``content`` without exposing a partial file."""
	directory = document_dir(path)
	fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".semmap-", suffix=".tmp")
	try:
		with os.fdopen(fd, "w", encoding="utf-8", newline="") as fh:
			fh.write(content)
		os.replace(tmp_path, path)
	except BaseException:
		if os.path.exists(tmp_path):
			os.unlink(tmp_path)
		raise
	logger.debug("Wrote %s (%d bytes)", path, len(content))


def load_document(path: str) -> Tuple[Document, SourcePositions]:
	text = read_text(path)
	fmt = format_for_path(path)
	if fmt == "md":
		return parse_with_positions(text)
	return loads(text, fmt), SourcePositions()


def generate_file(
	root: str,
	output: str,
	name: Optional[str] = None,
	purpose: Optional[str] = None,
	fmt: str = "md",
	config_path: Optional[str] = None,
) -> GenerationResult:
	config = load_config(root, config_path, project_name=name, purpose=purpose)
	result = generate(root, config)
	write_atomic(output, dumps(result.document, fmt))
	return result


def validate_file(
	path: str,
	root: str = ".",
	strict: bool = False,
	check_files: bool = False,
	config: Optional[SemmapConfig] = None,
) -> ValidationReport:
	document, positions = load_document(path)
	config = config or load_config(root)
	if not (strict or check_files):
		return validate(document, positions, config.allowed_tags)
	base_dir = document_dir(path)
	return validate_against_codebase(
		document,
		root,
		positions=positions,
		base_dir=base_dir,
		root_prefix=build_root_prefix_relative(base_dir, root),
		strict=strict,
		config=config,
	)


def deps_for_file(path: str, root: str = ".") -> Tuple[DependencyGraph, List[LayerViolation]]:
	document, _ = load_document(path)
	root_prefix = build_root_prefix_relative(document_dir(path), root)
	graph = analyze(root, document, root_prefix)
	return graph, check_violations(graph)


def update_file(path: str, root: str = ".", config: Optional[SemmapConfig] = None) -> ReconcileResult:
	"""Bring the document at ``path`` in line with the codebase under ``root``.

	Entries that still exist keep their hand-edited text; the file is only
	rewritten when the result differs.
	"""
	original = read_text(path)
	fmt = format_for_path(path)
	existing = loads(original, fmt)
	config = config or load_config(root)
	fresh = generate(root, config, project_name=existing.project_name, purpose=existing.purpose)
	root_prefix = build_root_prefix_relative(document_dir(path), root)
	result = reconcile(existing, fresh.document, root_prefix)
	content = dumps(result.document, fmt)
	if content != original:
		write_atomic(path, content)
	return result
