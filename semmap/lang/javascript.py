from __future__ import annotations

import re
from typing import List, Optional

from ..model import ImportHint, Stereotype
from .base import Extractor, collapse_doc_lines, compile_all, sorted_names

# comments and template literals; quoted strings are kept since import
# specifiers live in them
_NOISE_RE = re.compile(r"'(?:\\.|[^'\\\n])*'|\"(?:\\.|[^\"\\\n])*\"|`(?:\\.|[^`\\])*`|//[^\n]*|/\*.*?\*/", re.DOTALL)
_JSDOC_RE = re.compile(r"/\*\*(?P<body>.*?)\*/", re.DOTALL)
_LEADING_RE = re.compile(r"\A(?:\s+|#![^\n]*\n|//[^\n]*\n|(['\"])use strict\1;?)*")
_FIRST_EXPORT_RE = re.compile(r"^\s*export\b", re.MULTILINE)
_EXPORT_DECL_RE = re.compile(
	r"^\s*export\s+(?:default\s+)?(?:declare\s+)?(?:abstract\s+)?(?:const\s+(?=enum\b))?(?:async\s+)?"
	r"(?:function\s*\*?|class|const|let|var|interface|type|enum|namespace)\s+([A-Za-z_$][\w$]*)",
	re.MULTILINE,
)
_EXPORT_LIST_RE = re.compile(r"^\s*export\s+(?:type\s+)?\{([^}]*)\}", re.MULTILINE)
_IMPORT_FROM_RE = re.compile(
	r"^\s*import\s+(?:type\s+)?(?:[\w$*{}\s,]+?\s+from\s+)?['\"]([^'\"]+)['\"]",
	re.MULTILINE,
)
_REEXPORT_RE = re.compile(r"^\s*export\s+(?:type\s+)?(?:\*(?:\s+as\s+[\w$]+)?|\{[^}]*\})\s+from\s+['\"]([^'\"]+)['\"]", re.MULTILINE)
_REQUIRE_RE = re.compile(r"\b(?:require|import)\s*\(\s*['\"]([^'\"]+)['\"]\s*\)")


def _strip_noise(text: str) -> str:
	def replace(match: "re.Match[str]") -> str:
		token = match.group(0)
		if token[0] in "'\"":
			return token
		if token.startswith("`"):
			return "``"
		return "\n" * token.count("\n")

	return _NOISE_RE.sub(replace, text)


def _jsdoc_lines(body: str) -> List[str]:
	lines: List[str] = []
	for raw in body.splitlines():
		line = raw.strip().lstrip("*").strip()
		if line.startswith("@"):
			break
		lines.append(line)
	return lines


class JavaScriptExtractor(Extractor):
	name = "javascript"
	extensions = (".js", ".jsx", ".mjs", ".cjs", ".ts", ".tsx", ".mts", ".cts")
	manifest_names = frozenset(
		{"package.json", "package-lock.json", "yarn.lock", "pnpm-lock.yaml", "tsconfig.json", "deno.json"}
	)
	config_patterns = compile_all(
		r"(^|/)(vite|webpack|rollup|jest|babel|eslint|vitest|tsup|next|tailwind|postcss)\.config\.[cm]?[jt]s$",
		r"(^|/)\.eslintrc(\.[cm]?js)?$",
	)
	entry_patterns = compile_all(r"(^|/)(index|main|server|cli)\.[cm]?[jt]sx?$")
	test_patterns = compile_all(
		r"\.(test|spec)\.[cm]?[jt]sx?$",
		r"(^|/)(__tests__|tests?)/",
	)
	utility_patterns = compile_all(
		r"(^|/)(utils?|helpers?|common)(/|\.[cm]?[jt]sx?$)",
	)
	framework_signatures = (
		("express", Stereotype.ENTRY),
		("commander", Stereotype.ENTRY),
		("yargs", Stereotype.ENTRY),
		("koa", Stereotype.ENTRY),
		("fastify", Stereotype.ENTRY),
		("jest", Stereotype.TEST),
		("vitest", Stereotype.TEST),
		("mocha", Stereotype.TEST),
		("@testing-library", Stereotype.TEST),
	)
	signature_separator = "/"

	def extract_doc(self, text: str) -> Optional[str]:
		leading = _LEADING_RE.match(text)
		start = leading.end() if leading else 0
		if text.startswith("/**", start):
			match = _JSDOC_RE.match(text, start)
			if match:
				return collapse_doc_lines(_jsdoc_lines(match.group("body"))) or None

		export = _FIRST_EXPORT_RE.search(text)
		if not export:
			return None
		before = text[: export.start()].rstrip()
		if not before.endswith("*/"):
			return None
		opening = before.rfind("/**")
		if opening < 0:
			return None
		return collapse_doc_lines(_jsdoc_lines(before[opening + 3 : -2]))

	def extract_exports(self, text: str) -> List[str]:
		code = _strip_noise(text)
		names = [m.group(1) for m in _EXPORT_DECL_RE.finditer(code)]
		for match in _EXPORT_LIST_RE.finditer(code):
			for item in match.group(1).split(","):
				parts = item.split()
				if parts[:1] == ["type"] and len(parts) > 1:
					parts = parts[1:]
				if not parts:
					continue
				name = parts[-1] if len(parts) >= 3 and parts[-2] == "as" else parts[0]
				if name != "default" and name != "type":
					names.append(name)
		return sorted_names(names)

	def extract_imports(self, text: str, file_path: str) -> List[ImportHint]:
		code = _strip_noise(text)
		hints: List[ImportHint] = []
		for regex in (_IMPORT_FROM_RE, _REEXPORT_RE, _REQUIRE_RE):
			for match in regex.finditer(code):
				hints.append(ImportHint(target=match.group(1)))
		return hints
