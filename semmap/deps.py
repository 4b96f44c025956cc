from __future__ import annotations

import logging
import os
import posixpath
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple

from .lang import extractor_for
from .model import (
	DependencyEdge,
	DependencyGraph,
	DependencyNode,
	DepKind,
	Document,
	ExternalReference,
	FileFacts,
	FileMetrics,
	ImportHint,
	LayerViolation,
)
from .paths import canonical_path, strip_prefix

logger = logging.getLogger(__name__)

_JS_EXTS = (".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs", ".mts", ".cts")
_JS_EMITTED_EXTS = (".js", ".jsx", ".mjs", ".cjs")
_RUST_ROOT_FILES = ("lib.rs", "main.rs")


def _join(*parts: str) -> str:
	return "/".join(p.strip("/") for p in parts if p and p.strip("/"))


def _common_prefix_len(a: str, b: str) -> int:
	count = 0
	for x, y in zip(a.split("/"), b.split("/")):
		if x != y:
			break
		count += 1
	return count


class ImportResolver:
	"""Maps import hints to project paths using per-language rules.

	``known`` holds the paths that may become graph nodes. When ``exists`` is
	given, a candidate missing from ``known`` but present on disk still
	resolves and is remembered in ``orphans``.
	"""

	def __init__(self, known: Iterable[str], exists: Optional[Callable[[str], bool]] = None) -> None:
		self.known: Set[str] = {canonical_path(p) for p in known}
		self.exists = exists
		self.orphans: Set[str] = set()
		self._python_index: Optional[Dict[Tuple[str, ...], List[str]]] = None
		self._go_dirs: Optional[Dict[str, List[str]]] = None

	def _first(self, candidates: Iterable[str]) -> Optional[str]:
		candidates = [canonical_path(c) for c in candidates if c]
		for candidate in candidates:
			if candidate in self.known:
				return candidate
		if self.exists is not None:
			for candidate in candidates:
				if candidate and not candidate.startswith("../") and self.exists(candidate):
					self.orphans.add(candidate)
					return candidate
		return None

	def resolve(self, path: str, hint: ImportHint) -> List[str]:
		extractor = extractor_for(path)
		if extractor is None or not hint.target:
			return []
		resolver = getattr(self, f"_resolve_{extractor.name}", None)
		if resolver is None:
			return []
		targets = [t for t in resolver(path, hint) if t]
		return sorted(set(targets), key=targets.index)

	# -- python ---------------------------------------------------------

	def _python_modules(self) -> Dict[Tuple[str, ...], List[str]]:
		if self._python_index is None:
			index: Dict[Tuple[str, ...], List[str]] = {}
			for known in sorted(self.known):
				stem, ext = posixpath.splitext(known)
				if ext not in (".py", ".pyi"):
					continue
				parts = stem.split("/")
				if parts[-1] == "__init__":
					parts = parts[:-1]
				for i in range(len(parts)):
					index.setdefault(tuple(parts[i:]), []).append(known)
			self._python_index = index
		return self._python_index

	def _python_absolute(self, parts: List[str], origin: str) -> Optional[str]:
		matches = self._python_modules().get(tuple(parts))
		if not matches:
			return None
		origin_dir = posixpath.dirname(origin)
		return sorted(matches, key=lambda m: (-_common_prefix_len(origin_dir, m), len(m), m))[0]

	def _resolve_python(self, path: str, hint: ImportHint) -> List[str]:
		target = hint.target
		if target.startswith("."):
			level = len(target) - len(target.lstrip("."))
			base = posixpath.dirname(path)
			for _ in range(level - 1):
				base = posixpath.dirname(base)
			parts = [p for p in target[level:].split(".") if p]
			module_dir = _join(base, *parts)
			found = [
				hit
				for hit in (self._first([_join(module_dir, f"{n}.py"), _join(module_dir, n, "__init__.py")]) for n in hint.names)
				if hit
			]
			if found:
				return found
			candidates = [_join(module_dir, "__init__.py")]
			if parts:
				candidates.insert(0, module_dir + ".py")
			hit = self._first(candidates)
			return [hit] if hit else []

		parts = [p for p in target.split(".") if p]
		found = [hit for hit in (self._python_absolute(parts + [n], path) for n in hint.names) if hit]
		if found:
			return found
		hit = self._python_absolute(parts, path)
		return [hit] if hit else []

	# -- rust -----------------------------------------------------------

	@staticmethod
	def _rust_module_dir(path: str) -> str:
		directory = posixpath.dirname(path)
		stem = posixpath.splitext(posixpath.basename(path))[0]
		if stem in ("main", "lib", "mod"):
			return directory
		return _join(directory, stem)

	def _rust_crate_root(self, path: str) -> str:
		directory = posixpath.dirname(path)
		probe = directory
		while True:
			if any(_join(probe, name) in self.known for name in _RUST_ROOT_FILES):
				return probe
			if not probe:
				break
			probe = posixpath.dirname(probe)
		parts = directory.split("/")
		if "src" in parts:
			last = len(parts) - 1 - parts[::-1].index("src")
			return "/".join(parts[: last + 1])
		return directory

	def _rust_module_file(self, directory: str, crate_root: str) -> Optional[str]:
		candidates = [directory + ".rs", _join(directory, "mod.rs")] if directory else []
		if directory == crate_root:
			candidates += [_join(directory, name) for name in _RUST_ROOT_FILES]
		return self._first(candidates)

	def _resolve_rust(self, path: str, hint: ImportHint) -> List[str]:
		if hint.kind == DepKind.MODULE_DECLARATION:
			base = _join(self._rust_module_dir(path), hint.target)
			hit = self._first([base + ".rs", _join(base, "mod.rs")])
			return [hit] if hit else []

		segments = [s for s in hint.target.split("::") if s and s != "*"]
		if not segments:
			return []
		crate_root = self._rust_crate_root(path)
		if segments[0] == "crate":
			children = crate_root
			segments = segments[1:]
		elif segments[0] in ("self", "super"):
			children = self._rust_module_dir(path)
			while segments and segments[0] in ("self", "super"):
				if segments[0] == "super":
					children = posixpath.dirname(children)
				segments = segments[1:]
		else:
			return []

		for k in range(len(segments), 0, -1):
			base = _join(children, *segments[:k])
			hit = self._first([base + ".rs", _join(base, "mod.rs")])
			if hit:
				return [hit]
		hit = self._rust_module_file(children, crate_root)
		return [hit] if hit else []

	# -- javascript / typescript ----------------------------------------

	def _resolve_javascript(self, path: str, hint: ImportHint) -> List[str]:
		spec = hint.target
		if not spec.startswith("."):
			return []
		base = posixpath.normpath(posixpath.join(posixpath.dirname(path), spec))
		if base.startswith(".."):
			return []
		stem, ext = posixpath.splitext(base)
		candidates = [base]
		if ext in _JS_EMITTED_EXTS:
			candidates += [stem + e for e in (".ts", ".tsx", ".mts", ".cts")]
		candidates += [base + e for e in _JS_EXTS]
		candidates += [_join(base, "index" + e) for e in _JS_EXTS]
		hit = self._first(candidates)
		return [hit] if hit else []

	# -- go -------------------------------------------------------------

	def _go_packages(self) -> Dict[str, List[str]]:
		if self._go_dirs is None:
			dirs: Dict[str, List[str]] = {}
			for known in sorted(self.known):
				if known.endswith(".go") and not known.endswith("_test.go"):
					directory = posixpath.dirname(known)
					if directory:
						dirs.setdefault(directory, []).append(known)
			self._go_dirs = dirs
		return self._go_dirs

	def _resolve_go(self, path: str, hint: ImportHint) -> List[str]:
		target = hint.target.strip("/")
		best: Optional[str] = None
		for directory in self._go_packages():
			if target == directory or target.endswith("/" + directory):
				if best is None or len(directory) > len(best):
					best = directory
		if best is None:
			return []
		return list(self._go_packages()[best])


def compute_metrics(graph: DependencyGraph) -> Dict[str, FileMetrics]:
	fan_in = graph.fan_in()
	fan_out = graph.fan_out()
	return {node.path: FileMetrics(fan_in=fan_in.get(node.path, 0), fan_out=fan_out.get(node.path, 0)) for node in graph.nodes}


def build_graph(
	facts: Iterable[FileFacts],
	document: Optional[Document] = None,
	exists: Optional[Callable[[str], bool]] = None,
) -> DependencyGraph:
	"""Resolve every file's import hints into a directed graph.

	Nodes are the document's paths in document order when a document is given,
	otherwise the paths of ``facts`` in the order supplied.
	"""
	facts = list(facts)
	graph = DependencyGraph()
	if document is not None:
		for layer in document.layers:
			for entry in layer.entries:
				graph.nodes.append(DependencyNode(path=entry.path, layer=layer.number, layer_name=layer.name))
	else:
		graph.nodes = [DependencyNode(path=f.path) for f in facts]

	resolver = ImportResolver((n.path for n in graph.nodes), exists=exists)
	seen_edges: Set[Tuple[str, str, DepKind]] = set()
	seen_external: Set[Tuple[str, str]] = set()
	for file_facts in facts:
		for hint in file_facts.imports:
			targets = resolver.resolve(file_facts.path, hint)
			if not targets:
				key = (file_facts.path, hint.target)
				if key not in seen_external:
					seen_external.add(key)
					logger.debug("External reference in %s: %s", file_facts.path, hint.target)
					graph.external.append(ExternalReference(from_path=file_facts.path, hint=hint.target))
				continue
			for target in targets:
				edge_key = (file_facts.path, target, hint.kind)
				if target == file_facts.path or edge_key in seen_edges:
					continue
				seen_edges.add(edge_key)
				graph.edges.append(DependencyEdge(from_path=file_facts.path, to_path=target, kind=hint.kind))

	for orphan in sorted(resolver.orphans):
		graph.nodes.append(DependencyNode(path=orphan, orphan=True))
	return graph


def extract_facts(path: str, text: str) -> FileFacts:
	extractor = extractor_for(path)
	if extractor is None:
		return FileFacts(path=path)
	return FileFacts(
		path=path,
		language=extractor.name,
		doc=extractor.extract_doc(text),
		exports=extractor.extract_exports(text),
		imports=extractor.extract_imports(text, path),
	)


def analyze(root: str, document: Document, root_prefix: str = "") -> DependencyGraph:
	"""Read every documented file under ``root`` and build its graph.

	Document paths carry ``root_prefix``; it is stripped to locate files on disk.
	"""
	facts: List[FileFacts] = []
	for path in document.all_paths():
		full_path = os.path.join(root, strip_prefix(root_prefix, path))
		try:
			with open(full_path, "r", encoding="utf-8") as fh:
				text = fh.read()
		except (OSError, UnicodeDecodeError) as e:
			logger.warning("Skipping %s: %s", path, e)
			continue
		facts.append(extract_facts(path, text))

	def exists(candidate: str) -> bool:
		return os.path.isfile(os.path.join(root, strip_prefix(root_prefix, candidate)))

	return build_graph(facts, document=document, exists=exists)


def check_violations(graph: DependencyGraph) -> List[LayerViolation]:
	"""Edges where a more foundational file depends on a less foundational one."""
	layers = {node.path: node.layer for node in graph.nodes if node.layer is not None}
	violations: List[LayerViolation] = []
	for edge in graph.edges:
		from_layer = layers.get(edge.from_path)
		to_layer = layers.get(edge.to_path)
		if from_layer is None or to_layer is None:
			continue
		if to_layer > from_layer:
			violations.append(
				LayerViolation(from_path=edge.from_path, to_path=edge.to_path, from_layer=from_layer, to_layer=to_layer)
			)
	return violations


def _node_label(node: DependencyNode) -> str:
	name = posixpath.basename(node.path) or node.path
	if node.orphan or node.layer is None:
		return f"{name} (orphan)"
	layer = f"L{node.layer} {node.layer_name}".strip()
	return f"{name} ({layer})"


def render_mermaid(graph: DependencyGraph, violations: Optional[List[LayerViolation]] = None) -> str:
	if violations is None:
		violations = check_violations(graph)
	violating = {(v.from_path, v.to_path) for v in violations}
	ids = {node.path: f"n{i}" for i, node in enumerate(graph.nodes)}

	lines = ["graph TD"]
	for node in graph.nodes:
		label = _node_label(node).replace('"', "'")
		lines.append(f'    {ids[node.path]}["{label}"]')

	styles: List[str] = []
	for i, edge in enumerate(graph.edges):
		src, dst = ids.get(edge.from_path), ids.get(edge.to_path)
		if src is None or dst is None:
			continue
		if (edge.from_path, edge.to_path) in violating:
			lines.append(f"    {src} ==>|violation| {dst}")
			styles.append(f"    linkStyle {i} stroke:#d33,stroke-width:2px")
		elif edge.kind == DepKind.MODULE_DECLARATION:
			lines.append(f"    {src} -.-> {dst}")
		else:
			lines.append(f"    {src} --> {dst}")

	orphans = [ids[n.path] for n in graph.nodes if n.orphan]
	if orphans:
		lines.append("    classDef orphan stroke-dasharray: 5 5")
		lines.append(f"    class {','.join(orphans)} orphan")
	return "\n".join(lines + styles) + "\n"
