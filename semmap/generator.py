from __future__ import annotations

import logging
import os
from typing import Dict, List, Optional, Tuple

from .config import SemmapConfig
from .deps import build_graph, compute_metrics, extract_facts
from .fs_scan import scan_codebase
from .inference import LAYER_NAMES, infer
from .model import Document, FileEntry, FileFacts, GenerationResult, Layer, LegendEntry, SkippedFile

logger = logging.getLogger(__name__)

DEFAULT_LEGEND: List[LegendEntry] = [
	LegendEntry(tag="ENTRY", definition="Application entry point"),
	LegendEntry(tag="CORE", definition="Core business logic"),
	LegendEntry(tag="TYPE", definition="Data structures and types"),
	LegendEntry(tag="UTIL", definition="Utility functions"),
]


def _read_facts(root: str, paths: List[str]) -> Tuple[List[FileFacts], List[SkippedFile]]:
	facts: List[FileFacts] = []
	skipped: List[SkippedFile] = []
	for path in paths:
		try:
			with open(os.path.join(root, path), "r", encoding="utf-8") as fh:
				text = fh.read()
		except (OSError, UnicodeDecodeError) as e:
			# the file still exists, so it keeps a filename-based entry
			logger.warning("Could not read %s, describing it from its name: %s", path, e)
			skipped.append(SkippedFile(path=path, reason=str(e)))
			text = ""
		facts.append(extract_facts(path, text))
	return facts, skipped


def default_project_name(root: str) -> str:
	return os.path.basename(os.path.abspath(root)) or "project"


def generate(
	root: str,
	config: Optional[SemmapConfig] = None,
	project_name: Optional[str] = None,
	purpose: Optional[str] = None,
) -> GenerationResult:
	"""Derive a Document for the codebase under ``root``.

	Paths are relative to ``root``. Fan-in and fan-out come from a first pass
	over the dependency graph of the scanned files; classification uses them
	when path patterns and framework imports are inconclusive.
	"""
	config = config or SemmapConfig()
	paths = scan_codebase(root, config.include_exts, config.exclude_dirs)
	logger.info("Scanned %d files under %s", len(paths), root)
	facts, skipped = _read_facts(root, paths)
	metrics = compute_metrics(build_graph(facts))

	grouped: Dict[int, List[FileEntry]] = {}
	for file_facts in facts:
		inference = infer(
			file_facts,
			metrics.get(file_facts.path),
			fan_in_threshold=config.fan_in_threshold,
			fan_out_low=config.fan_out_low,
			fan_out_threshold=config.fan_out_threshold,
		)
		grouped.setdefault(inference.layer, []).append(
			FileEntry(path=file_facts.path, what=inference.what, why=inference.why, exports=inference.exports)
		)

	layers = [
		Layer(number=number, name=LAYER_NAMES.get(number, ""), entries=grouped[number])
		for number in sorted(grouped)
	]
	document = Document(
		project_name=project_name or config.project_name or default_project_name(root),
		purpose=purpose or config.purpose,
		legend=[entry.model_copy() for entry in DEFAULT_LEGEND],
		layers=layers,
	)
	return GenerationResult(document=document, skipped=skipped)
