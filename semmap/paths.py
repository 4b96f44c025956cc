"""Canonical path handling.

Every path stored in a Document uses forward slashes, is relative to the
project root and carries no leading ``./``. Paths from a scan are relative to
the scan root and must be prefixed before they are compared with a document.
"""

from __future__ import annotations

import os
import posixpath


def canonical_path(path: str) -> str:
	cleaned = path.replace("\\", "/").strip()
	if not cleaned:
		return ""
	cleaned = posixpath.normpath(cleaned)
	if cleaned == ".":
		return ""
	while cleaned.startswith("./"):
		cleaned = cleaned[2:]
	return cleaned.rstrip("/")


def build_root_prefix(root: str) -> str:
	return canonical_path(root)


def build_root_prefix_relative(document_dir: str, root: str) -> str:
	"""Prefix of ``root`` relative to the directory holding the document.

	Falls back to the canonical form of ``root`` as given when it does not
	live under ``document_dir``.
	"""
	doc_abs = os.path.abspath(document_dir)
	root_abs = os.path.abspath(root)
	try:
		rel = os.path.relpath(root_abs, doc_abs)
	except ValueError:
		# different drives on windows
		return build_root_prefix(root)
	rel = rel.replace(os.sep, "/")
	if rel == ".." or rel.startswith("../"):
		return build_root_prefix(root)
	return canonical_path(rel)


def prefix_path(prefix: str, path: str) -> str:
	prefix = canonical_path(prefix)
	path = canonical_path(path)
	if not prefix:
		return path
	return f"{prefix}/{path}"


def strip_prefix(prefix: str, path: str) -> str:
	prefix = canonical_path(prefix)
	path = canonical_path(path)
	if prefix and path.startswith(prefix + "/"):
		return path[len(prefix) + 1:]
	return path


def is_under(prefix: str, path: str) -> bool:
	prefix = canonical_path(prefix)
	path = canonical_path(path)
	return not prefix or path == prefix or path.startswith(prefix + "/")
