from __future__ import annotations

import re
from typing import List, Optional

from ..model import DepKind, ImportHint, Stereotype
from .base import Extractor, collapse_doc_lines, compile_all, sorted_names

# char literals first so '"' is not read as the start of a string
_NOISE_RE = re.compile(r"'(?:\\.|[^'\\])'|\"(?:\\.|[^\"\\])*\"|//[^\n]*|/\*.*?\*/", re.DOTALL)
_PUB_ITEM_RE = re.compile(
	r"^\s*pub\s+(?:(?:async|const|unsafe|extern\s+\"[^\"]*\")\s+)*"
	r"(?:fn|struct|enum|trait|type|const|static|mod|union)\s+([A-Za-z_]\w*)",
	re.MULTILINE,
)
_USE_RE = re.compile(r"^\s*(?:pub(?:\([^)]*\))?\s+)?use\s+([^;]+);", re.MULTILINE)
_MOD_RE = re.compile(r"^\s*(?:pub(?:\([^)]*\))?\s+)?mod\s+([A-Za-z_]\w*)\s*;", re.MULTILINE)
_PUB_DECL_RE = re.compile(r"^pub\s")
_ALIAS_RE = re.compile(r"\s+as\s+[A-Za-z_]\w*")


def _strip_noise(text: str) -> str:
	def replace(match: "re.Match[str]") -> str:
		token = match.group(0)
		if token.startswith('"'):
			return '""'
		if token.startswith("'"):
			return "' '"
		# keep line structure of block comments
		return "\n" * token.count("\n")

	return _NOISE_RE.sub(replace, text)


def _expand_use(tree: str) -> List[str]:
	"""Flatten ``a::{b, c::d as e}`` into ``a::b`` and ``a::c::d``."""
	return _expand("".join(_ALIAS_RE.sub("", tree).split()).lstrip(":"))


def _expand(tree: str) -> List[str]:
	if "{" not in tree:
		return [tree]
	prefix, _, rest = tree.partition("{")
	body = rest[: rest.rfind("}")] if "}" in rest else rest
	items: List[str] = []
	depth = 0
	current = ""
	for ch in body:
		if ch == "{":
			depth += 1
		elif ch == "}":
			depth -= 1
		if ch == "," and depth == 0:
			items.append(current)
			current = ""
		else:
			current += ch
	items.append(current)

	paths: List[str] = []
	for item in items:
		if not item:
			continue
		if item == "self":
			paths.append(prefix.rstrip(":"))
			continue
		paths.extend(_expand(prefix + item))
	return paths


class RustExtractor(Extractor):
	name = "rust"
	extensions = (".rs",)
	manifest_names = frozenset({"Cargo.toml", "Cargo.lock", "build.rs", "rust-toolchain.toml", "rustfmt.toml", "clippy.toml"})
	entry_patterns = compile_all(r"(^|/)(main|lib)\.rs$", r"(^|/)src/bin/[^/]+\.rs$")
	test_patterns = compile_all(r"(^|/)(tests|benches)/", r"_tests?\.rs$", r"(^|/)tests?\.rs$")
	utility_patterns = compile_all(r"(^|/)(utils?|helpers?|common)(/|\.rs$)", r"_(utils?|helpers?)\.rs$")
	framework_signatures = (
		("clap", Stereotype.ENTRY),
		("structopt", Stereotype.ENTRY),
		("axum", Stereotype.ENTRY),
		("actix_web", Stereotype.ENTRY),
		("rocket", Stereotype.ENTRY),
		("proptest", Stereotype.TEST),
	)
	signature_separator = "::"

	def extract_doc(self, text: str) -> Optional[str]:
		return self._module_doc(text) or self._first_item_doc(text)

	def _module_doc(self, text: str) -> Optional[str]:
		lines: List[str] = []
		for line in text.splitlines():
			stripped = line.strip()
			if stripped.startswith("//!"):
				lines.append(stripped[3:])
			elif stripped and not stripped.startswith("//") and not stripped.startswith("#!["):
				break
		return collapse_doc_lines(lines) if lines else None

	def _first_item_doc(self, text: str) -> Optional[str]:
		block: List[str] = []
		for line in text.splitlines():
			stripped = line.strip()
			if stripped.startswith("///") and not stripped.startswith("////"):
				block.append(stripped[3:])
			elif stripped.startswith("#[") or not stripped:
				continue
			elif _PUB_DECL_RE.match(stripped):
				return collapse_doc_lines(block) if block else None
			else:
				block = []
		return None

	def extract_exports(self, text: str) -> List[str]:
		code = _strip_noise(text)
		return sorted_names(m.group(1) for m in _PUB_ITEM_RE.finditer(code))

	def extract_imports(self, text: str, file_path: str) -> List[ImportHint]:
		code = _strip_noise(text)
		hints: List[ImportHint] = []
		for match in _USE_RE.finditer(code):
			for path in _expand_use(match.group(1)):
				if path:
					hints.append(ImportHint(target=path))
		for match in _MOD_RE.finditer(code):
			hints.append(ImportHint(target=match.group(1), kind=DepKind.MODULE_DECLARATION))
		return hints
