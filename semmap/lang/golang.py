from __future__ import annotations

import re
from typing import List, Optional

from ..model import ImportHint, Stereotype
from .base import Extractor, collapse_doc_lines, compile_all, sorted_names

_NOISE_RE = re.compile(r"\"(?:\\.|[^\"\\\n])*\"|`[^`]*`|//[^\n]*|/\*.*?\*/", re.DOTALL)
_FUNC_RE = re.compile(r"^func\s+(?:\([^)]*\)\s*)?([A-Z]\w*)", re.MULTILINE)
_DECL_RE = re.compile(r"^(?:type|const|var)\s+([A-Z]\w*)", re.MULTILINE)
_GROUP_RE = re.compile(r"^(?:type|const|var)\s*\((?P<body>.*?)^\)", re.MULTILINE | re.DOTALL)
_GROUP_ITEM_RE = re.compile(r"^(?:\t| {4})([A-Z]\w*)\b", re.MULTILINE)
_IMPORT_RE = re.compile(r"^import\s+(?:[\w.]+\s+)?\"([^\"]+)\"", re.MULTILINE)
_IMPORT_GROUP_RE = re.compile(r"^import\s*\((?P<body>.*?)^\)", re.MULTILINE | re.DOTALL)
_IMPORT_ITEM_RE = re.compile(r"^\s*(?:[\w.]+\s+)?\"([^\"]+)\"", re.MULTILINE)
_EXPORTED_DECL_RE = re.compile(r"^(?:func\s+(?:\([^)]*\)\s*)?|type\s+|const\s+|var\s+)[A-Z]")


def _strip_comments(text: str) -> str:
	def replace(match: "re.Match[str]") -> str:
		token = match.group(0)
		if token.startswith(("\"", "`")):
			return token
		return "\n" * token.count("\n")

	return _NOISE_RE.sub(replace, text)


def _blank_strings(text: str) -> str:
	def replace(match: "re.Match[str]") -> str:
		token = match.group(0)
		if token.startswith("//") or token.startswith("/*"):
			return "\n" * token.count("\n")
		return '""' + "\n" * token.count("\n")

	return _NOISE_RE.sub(replace, text)


class GoExtractor(Extractor):
	name = "go"
	extensions = (".go",)
	manifest_names = frozenset({"go.mod", "go.sum", "go.work", "go.work.sum"})
	entry_patterns = compile_all(r"(^|/)main\.go$", r"(^|/)cmd/")
	test_patterns = compile_all(r"_test\.go$", r"(^|/)testdata/")
	utility_patterns = compile_all(r"(^|/)(utils?|helpers?|common)(/|\.go$)")
	framework_signatures = (
		("flag", Stereotype.ENTRY),
		("github.com/spf13/cobra", Stereotype.ENTRY),
		("github.com/urfave/cli", Stereotype.ENTRY),
		("testing", Stereotype.TEST),
		("github.com/stretchr/testify", Stereotype.TEST),
	)
	signature_separator = "/"

	def extract_doc(self, text: str) -> Optional[str]:
		block: List[str] = []
		first_exported: Optional[List[str]] = None
		for line in text.splitlines():
			stripped = line.strip()
			if stripped.startswith("//"):
				block.append(stripped[2:])
				continue
			if stripped.startswith("package "):
				if block:
					return collapse_doc_lines(block)
			elif first_exported is None and _EXPORTED_DECL_RE.match(line):
				first_exported = block
				break
			block = []
		if first_exported:
			return collapse_doc_lines(first_exported)
		return None

	def extract_exports(self, text: str) -> List[str]:
		code = _blank_strings(text)
		names = [m.group(1) for m in _FUNC_RE.finditer(code)]
		names += [m.group(1) for m in _DECL_RE.finditer(code)]
		for group in _GROUP_RE.finditer(code):
			names += [m.group(1) for m in _GROUP_ITEM_RE.finditer(group.group("body"))]
		return sorted_names(names)

	def extract_imports(self, text: str, file_path: str) -> List[ImportHint]:
		code = _strip_comments(text)
		hints = [ImportHint(target=m.group(1)) for m in _IMPORT_RE.finditer(code)]
		for group in _IMPORT_GROUP_RE.finditer(code):
			hints += [ImportHint(target=m.group(1)) for m in _IMPORT_ITEM_RE.finditer(group.group("body"))]
		return hints
