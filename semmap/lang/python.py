from __future__ import annotations

import ast
import logging
import re
from typing import List, Optional

from ..model import ImportHint, Stereotype
from .base import Extractor, compile_all, first_sentence, sorted_names

logger = logging.getLogger(__name__)

_MODULE_DOC_RE = re.compile(r"\A(?:\s*#[^\n]*\n)*\s*[rRuU]?(\"\"\"|''')(?P<doc>.*?)\1", re.DOTALL)
_DEF_RE = re.compile(r"^(?:async\s+)?def\s+([A-Za-z]\w*)|^class\s+([A-Za-z]\w*)", re.MULTILINE)
_FROM_RE = re.compile(r"^\s*from\s+(\.*[\w.]*)\s+import\s+\(?([\w\s,*]+)", re.MULTILINE)
_IMPORT_RE = re.compile(r"^\s*import\s+([\w.]+(?:\s*,\s*[\w.]+)*)", re.MULTILINE)
_CONSTANT_RE = re.compile(r"^[A-Z][A-Z0-9_]*$")


def _public(name: str) -> bool:
	return not name.startswith("_")


def _literal_all(tree: ast.Module) -> Optional[List[str]]:
	for node in tree.body:
		if not isinstance(node, ast.Assign):
			continue
		if not any(isinstance(t, ast.Name) and t.id == "__all__" for t in node.targets):
			continue
		if isinstance(node.value, (ast.List, ast.Tuple)):
			names = [
				elt.value
				for elt in node.value.elts
				if isinstance(elt, ast.Constant) and isinstance(elt.value, str)
			]
			return names
	return None


class PythonExtractor(Extractor):
	name = "python"
	extensions = (".py", ".pyi")
	manifest_names = frozenset(
		{
			"pyproject.toml",
			"setup.py",
			"setup.cfg",
			"requirements.txt",
			"requirements-dev.txt",
			"Pipfile",
			"Pipfile.lock",
			"poetry.lock",
			"tox.ini",
			"noxfile.py",
		}
	)
	config_patterns = compile_all(r"(^|/)requirements[\w-]*\.txt$", r"(^|/)(settings|config)\.py$")
	entry_patterns = compile_all(
		r"(^|/)__main__\.py$",
		r"(^|/)(main|cli|manage|app|wsgi|asgi)\.py$",
	)
	test_patterns = compile_all(
		r"(^|/)tests?/",
		r"(^|/)test_[^/]*\.py$",
		r"_test\.py$",
		r"(^|/)conftest\.py$",
	)
	utility_patterns = compile_all(
		r"(^|/)(utils?|helpers?|common)(/|\.py$)",
		r"_(utils?|helpers?)\.py$",
	)
	framework_signatures = (
		("argparse", Stereotype.ENTRY),
		("click", Stereotype.ENTRY),
		("typer", Stereotype.ENTRY),
		("fastapi", Stereotype.ENTRY),
		("flask", Stereotype.ENTRY),
		("uvicorn", Stereotype.ENTRY),
		("pytest", Stereotype.TEST),
		("unittest", Stereotype.TEST),
		("hypothesis", Stereotype.TEST),
	)

	def _parse(self, text: str) -> Optional[ast.Module]:
		try:
			return ast.parse(text)
		except (SyntaxError, ValueError) as e:
			logger.debug("Falling back to pattern matching, ast.parse failed: %s", e)
			return None

	def extract_doc(self, text: str) -> Optional[str]:
		tree = self._parse(text)
		if tree is None:
			match = _MODULE_DOC_RE.match(text)
			return first_sentence(match.group("doc")) if match else None

		doc = ast.get_docstring(tree)
		if doc:
			return first_sentence(doc)
		for node in tree.body:
			if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)) and _public(node.name):
				return first_sentence(ast.get_docstring(node))
		return None

	def extract_exports(self, text: str) -> List[str]:
		tree = self._parse(text)
		if tree is None:
			names = [m.group(1) or m.group(2) for m in _DEF_RE.finditer(text)]
			return sorted_names(n for n in names if _public(n))

		declared = _literal_all(tree)
		if declared is not None:
			return sorted_names(declared)

		names: List[str] = []
		for node in tree.body:
			if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)):
				if _public(node.name):
					names.append(node.name)
			elif isinstance(node, (ast.Assign, ast.AnnAssign)):
				targets = node.targets if isinstance(node, ast.Assign) else [node.target]
				for target in targets:
					if isinstance(target, ast.Name) and _CONSTANT_RE.match(target.id):
						names.append(target.id)
		return sorted_names(names)

	def extract_imports(self, text: str, file_path: str) -> List[ImportHint]:
		tree = self._parse(text)
		if tree is None:
			return self._imports_by_pattern(text)

		hints: List[ImportHint] = []
		for node in ast.walk(tree):
			if isinstance(node, ast.Import):
				for alias in node.names:
					hints.append(ImportHint(target=alias.name))
			elif isinstance(node, ast.ImportFrom):
				module = "." * (node.level or 0) + (node.module or "")
				names = [alias.name for alias in node.names if alias.name != "*"]
				hints.append(ImportHint(target=module, names=names))
		return hints

	def _imports_by_pattern(self, text: str) -> List[ImportHint]:
		hints: List[ImportHint] = []
		for match in _FROM_RE.finditer(text):
			names = [n.strip() for n in match.group(2).split(",")]
			names = [n.split()[0] for n in names if n and n != "*"]
			hints.append(ImportHint(target=match.group(1), names=names))
		for match in _IMPORT_RE.finditer(text):
			for module in match.group(1).split(","):
				hints.append(ImportHint(target=module.strip()))
		return hints
