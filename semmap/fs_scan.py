from __future__ import annotations

import os
from typing import Iterable, List, Optional

from .config import DEFAULT_EXCLUDE_DIRS, DEFAULT_INCLUDE_EXTS
from .errors import SemmapError
from .paths import canonical_path


def _wanted(filename: str, include_exts: Iterable[str]) -> bool:
	_, ext = os.path.splitext(filename)
	return ext.lower() in include_exts


def scan_codebase(
	root: str,
	include_exts: Optional[Iterable[str]] = None,
	exclude_dirs: Optional[Iterable[str]] = None,
) -> List[str]:
	"""Return the canonical paths under ``root``, relative to it and sorted.

	Dotfiles and dot-directories are skipped below the root; the root itself is
	walked even when its own name starts with a dot.
	"""
	if not os.path.isdir(root):
		raise SemmapError(f"Not a directory: {root}")
	exts = {e.lower() for e in (include_exts if include_exts is not None else DEFAULT_INCLUDE_EXTS)}
	excluded = set(exclude_dirs if exclude_dirs is not None else DEFAULT_EXCLUDE_DIRS)

	paths: List[str] = []
	for dirpath, dirnames, filenames in os.walk(root):
		dirnames[:] = sorted(d for d in dirnames if d not in excluded and not d.startswith("."))
		for filename in filenames:
			if filename.startswith(".") or not _wanted(filename, exts):
				continue
			rel_path = os.path.relpath(os.path.join(dirpath, filename), root)
			paths.append(canonical_path(rel_path))
	return sorted(paths)
