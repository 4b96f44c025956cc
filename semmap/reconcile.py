"""Merge a freshly generated Document into a hand-edited one.

Entries present in both are left exactly as the existing document has them;
only additions and removals touch the existing layers.
"""

from __future__ import annotations

import logging
from typing import Dict, Tuple

from .model import Document, FileEntry, Layer, ReconcileResult
from .paths import canonical_path, is_under, prefix_path

logger = logging.getLogger(__name__)


def _insert_layer(document: Document, number: int, name: str) -> Layer:
	layer = Layer(number=number, name=name)
	position = len(document.layers)
	for i, existing in enumerate(document.layers):
		if existing.number > number:
			position = i
			break
	document.layers.insert(position, layer)
	return layer


def reconcile(existing: Document, fresh: Document, root_prefix: str = "") -> ReconcileResult:
	"""Apply the difference between ``fresh`` and ``existing``.

	``fresh`` paths are relative to the scan root and get ``root_prefix``
	prepended. Only existing entries under that prefix can be removed.
	Neither input is modified.
	"""
	document = existing.model_copy(deep=True)
	for layer in document.layers:
		for entry in layer.entries:
			entry.path = canonical_path(entry.path)

	fresh_entries: Dict[str, Tuple[Layer, FileEntry]] = {}
	for layer in fresh.layers:
		for entry in layer.entries:
			fresh_entries.setdefault(prefix_path(root_prefix, entry.path), (layer, entry))

	current = set(document.all_paths())
	added = sorted(set(fresh_entries) - current)
	# entries outside the scanned root were never looked at
	scanned = {p for p in current if is_under(root_prefix, p)}
	removed = sorted(scanned - set(fresh_entries))

	for path in added:
		fresh_layer, fresh_entry = fresh_entries[path]
		target = document.find_layer(fresh_layer.number)
		if target is None:
			target = _insert_layer(document, fresh_layer.number, fresh_layer.name)
		target.entries.append(fresh_entry.model_copy(update={"path": path}, deep=True))

	if removed:
		gone = set(removed)
		kept = []
		for layer in document.layers:
			had_entries = bool(layer.entries)
			layer.entries = [e for e in layer.entries if e.path not in gone]
			if layer.entries or not had_entries:
				kept.append(layer)
		document.layers = kept

	logger.info("Reconciled %s: +%d -%d", document.project_name, len(added), len(removed))
	return ReconcileResult(document=document, added=added, removed=removed)
