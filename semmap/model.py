from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, field_validator


def _sorted_unique(values: List[str]) -> List[str]:
	return sorted({v for v in values if v})


class LegendEntry(BaseModel):
	tag: str
	definition: str


class FileEntry(BaseModel):
	"""One file of the semantic map.

	``what`` is a single sentence ending in a period; ``why`` holds the rest of
	the description. Tags and exports are kept as sorted, de-duplicated lists.
	"""

	path: str
	what: str
	why: str = ""
	tags: List[str] = []
	exports: List[str] = []
	touch: Optional[str] = None

	@field_validator("tags", "exports")
	@classmethod
	def _normalize_set(cls, value: List[str]) -> List[str]:
		return _sorted_unique(value)

	@property
	def description(self) -> str:
		if not self.why:
			return self.what
		return f"{self.what} {self.why}"


class Layer(BaseModel):
	number: int
	name: str = ""
	entries: List[FileEntry] = []

	def paths(self) -> List[str]:
		return [e.path for e in self.entries]


class Document(BaseModel):
	project_name: str
	purpose: Optional[str] = None
	legend: List[LegendEntry] = []
	layers: List[Layer] = []

	@field_validator("purpose")
	@classmethod
	def _empty_purpose(cls, value: Optional[str]) -> Optional[str]:
		if value is None or not value.strip():
			return None
		return value

	def all_paths(self) -> List[str]:
		return [e.path for layer in self.layers for e in layer.entries]

	def find_entry(self, path: str) -> Optional[FileEntry]:
		for layer in self.layers:
			for entry in layer.entries:
				if entry.path == path:
					return entry
		return None

	def find_layer(self, number: int) -> Optional[Layer]:
		for layer in self.layers:
			if layer.number == number:
				return layer
		return None

	def layer_of(self, path: str) -> Optional[Layer]:
		for layer in self.layers:
			if any(e.path == path for e in layer.entries):
				return layer
		return None

	def path_to_layer(self) -> Dict[str, int]:
		mapping: Dict[str, int] = {}
		for layer in self.layers:
			for entry in layer.entries:
				mapping.setdefault(entry.path, layer.number)
		return mapping

	def file_count(self) -> int:
		return sum(len(layer.entries) for layer in self.layers)


class Stereotype(str, Enum):
	CONFIG = "config"
	ENTRY = "entry"
	DOMAIN = "domain"
	SERVICE = "service"
	UTILITY = "utility"
	TEST = "test"
	UNKNOWN = "unknown"


class DepKind(str, Enum):
	IMPORT = "import"
	MODULE_DECLARATION = "module_declaration"


class ImportHint(BaseModel):
	"""An unresolved import reference as written in the source file."""

	target: str
	kind: DepKind = DepKind.IMPORT
	names: List[str] = []


class FileFacts(BaseModel):
	path: str
	language: str = "unknown"
	doc: Optional[str] = None
	exports: List[str] = []
	imports: List[ImportHint] = []


class FileMetrics(BaseModel):
	fan_in: int = 0
	fan_out: int = 0


class Inference(BaseModel):
	layer: int
	stereotype: Stereotype
	what: str
	why: str
	exports: List[str] = []


class DependencyNode(BaseModel):
	path: str
	layer: Optional[int] = None
	layer_name: str = ""
	orphan: bool = False


class DependencyEdge(BaseModel):
	from_path: str
	to_path: str
	kind: DepKind = DepKind.IMPORT


class ExternalReference(BaseModel):
	from_path: str
	hint: str


class LayerViolation(BaseModel):
	from_path: str
	to_path: str
	from_layer: int
	to_layer: int

	def describe(self) -> str:
		return (
			f"Layer violation: {self.from_path} (L{self.from_layer}) "
			f"depends on {self.to_path} (L{self.to_layer})"
		)


class DependencyGraph(BaseModel):
	nodes: List[DependencyNode] = []
	edges: List[DependencyEdge] = []
	external: List[ExternalReference] = []

	def index(self) -> Dict[str, int]:
		return {node.path: i for i, node in enumerate(self.nodes)}

	def adjacency(self) -> List[List[int]]:
		"""Outgoing edges as node indices, one list per node."""
		positions = self.index()
		adjacency: List[List[int]] = [[] for _ in self.nodes]
		for edge in self.edges:
			src = positions.get(edge.from_path)
			dst = positions.get(edge.to_path)
			if src is None or dst is None:
				continue
			adjacency[src].append(dst)
		return adjacency

	def fan_in(self) -> Dict[str, int]:
		counts = {node.path: 0 for node in self.nodes}
		for edge in self.edges:
			counts[edge.to_path] = counts.get(edge.to_path, 0) + 1
		return counts

	def fan_out(self) -> Dict[str, int]:
		counts = {node.path: 0 for node in self.nodes}
		for edge in self.edges:
			counts[edge.from_path] = counts.get(edge.from_path, 0) + 1
		return counts


class Severity(str, Enum):
	ERROR = "error"
	WARNING = "warning"


class ValidationIssue(BaseModel):
	severity: Severity
	message: str
	line: Optional[int] = None
	path: Optional[str] = None

	@classmethod
	def error(cls, message: str, line: Optional[int] = None, path: Optional[str] = None) -> "ValidationIssue":
		return cls(severity=Severity.ERROR, message=message, line=line, path=path)

	@classmethod
	def warning(cls, message: str, line: Optional[int] = None, path: Optional[str] = None) -> "ValidationIssue":
		return cls(severity=Severity.WARNING, message=message, line=line, path=path)


class ValidationReport(BaseModel):
	issues: List[ValidationIssue] = []

	@property
	def error_count(self) -> int:
		return sum(1 for i in self.issues if i.severity == Severity.ERROR)

	@property
	def warning_count(self) -> int:
		return sum(1 for i in self.issues if i.severity == Severity.WARNING)

	@property
	def is_valid(self) -> bool:
		return self.error_count == 0


class SkippedFile(BaseModel):
	path: str
	reason: str


class GenerationResult(BaseModel):
	document: Document
	skipped: List[SkippedFile] = []


class ReconcileResult(BaseModel):
	document: Document
	added: List[str] = []
	removed: List[str] = []
