"""Conversion between a Document and its textual forms.

The markdown form is canonical and line oriented::

	# <project> — Semantic Map

	**Purpose:** <purpose>

	## Legend

	- `[TAG]` definition

	## Layer 0 — Config

	`path/to/file` `[TAG]`
	What sentence. Why sentence.
	→ Exports: a, b
	→ Touch: free text

``parse_markdown(format_markdown(doc)) == doc`` holds for every document whose
WHAT fields are single sentences ending in a period. JSON and YAML forms are
plain dumps of the same model.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Dict, List, Optional, Tuple

import yaml
from pydantic import BaseModel, ValidationError

from .errors import ParseError
from .model import Document, FileEntry, Layer, LegendEntry
from .paths import canonical_path

logger = logging.getLogger(__name__)

FORMATS = ("md", "json", "yaml")

EXPORTS_MARKER = "→ Exports:"
TOUCH_MARKER = "→ Touch:"

_TITLE_RE = re.compile(r"^#\s+(?P<name>.+?)\s*(?:—|--|-)\s*Semantic Map\s*$")
_BARE_TITLE_RE = re.compile(r"^#\s+(?P<name>\S.*?)\s*$")
_PURPOSE_RE = re.compile(r"^(?:\*\*Purpose:\*\*|Purpose:)\s*(?P<text>.*?)\s*$")
_LEGEND_HEADER_RE = re.compile(r"^##\s+Legend\s*$")
_LEGEND_ITEM_RE = re.compile(r"^(?:[-*]\s+)?`\[(?P<tag>[^\]`]+)\]`\s*(?P<definition>.*?)\s*$")
_LAYER_PREFIX_RE = re.compile(r"^##\s+Layer\b")
_LAYER_RE = re.compile(r"^##\s+Layer\s+(?P<number>\d+)(?:\s*(?:—|--|-)\s*(?P<name>.*?))?\s*$")
_ENTRY_RE = re.compile(r"^`(?P<path>[^`]+)`(?P<tags>(?:\s+`\[[^\]`]+\]`)*)\s*$")
_TAG_RE = re.compile(r"`\[([^\]`]+)\]`")
# canonical "→ Exports:", legacy "-> Exports:" and bare "Exports:"
_META_RE = re.compile(r"^(?:→|->)?\s*(?P<key>Exports|Touch):(?P<value>.*)$")


class SourcePositions(BaseModel):
	"""1-based line numbers recorded while parsing markdown."""

	title: Optional[int] = None
	purpose: Optional[int] = None
	layers: List[int] = []
	entries: Dict[str, List[int]] = {}

	def entry_line(self, path: str) -> Optional[int]:
		lines = self.entries.get(path)
		return lines[0] if lines else None


def split_description(text: str) -> Tuple[str, str]:
	"""Split a description into its WHAT sentence and the WHY remainder."""
	text = text.strip()
	head, sep, tail = text.partition(". ")
	if not sep:
		return text, ""
	return head + ".", tail.strip()


def _parse_exports(value: str) -> List[str]:
	return [item.strip() for item in value.split(",") if item.strip()]


class _MarkdownParser:
	def __init__(self, text: str) -> None:
		self.lines = text.splitlines()
		self.pos = 0
		self.positions = SourcePositions()

	# -- cursor helpers -------------------------------------------------

	def _line(self) -> str:
		return self.lines[self.pos]

	def _at_end(self) -> bool:
		return self.pos >= len(self.lines)

	def _skip_blank(self) -> None:
		while not self._at_end() and not self._line().strip():
			self.pos += 1

	def _error(self, reason: str, message: str = "") -> ParseError:
		line = min(self.pos, max(len(self.lines) - 1, 0)) + 1
		return ParseError(line, reason, message)

	# -- sections -------------------------------------------------------

	def parse(self) -> Document:
		project_name = self._parse_title()
		purpose = self._parse_purpose()
		legend: List[LegendEntry] = []
		self._skip_blank()
		if not self._at_end() and _LEGEND_HEADER_RE.match(self._line().strip()):
			self.pos += 1
			legend = self._parse_legend()
		layers = self._parse_layers()
		return Document(project_name=project_name, purpose=purpose, legend=legend, layers=layers)

	def _parse_title(self) -> str:
		self._skip_blank()
		if self._at_end():
			raise ParseError(1, "missing_title", "Missing project title (# name — Semantic Map)")
		line = self._line().strip()
		match = _TITLE_RE.match(line) or _BARE_TITLE_RE.match(line)
		if not match or line.startswith("##"):
			raise self._error("missing_title", "Missing project title (# name — Semantic Map)")
		self.positions.title = self.pos + 1
		self.pos += 1
		return match.group("name").strip()

	def _parse_purpose(self) -> Optional[str]:
		self._skip_blank()
		if self._at_end():
			return None
		match = _PURPOSE_RE.match(self._line().strip())
		if not match:
			return None
		self.positions.purpose = self.pos + 1
		self.pos += 1
		return match.group("text") or None

	def _parse_legend(self) -> List[LegendEntry]:
		legend: List[LegendEntry] = []
		while True:
			self._skip_blank()
			if self._at_end():
				break
			line = self._line().strip()
			if line.startswith("#"):
				break
			match = _LEGEND_ITEM_RE.match(line)
			if not match:
				raise self._error("unexpected_text", f"Unrecognized legend line: {line}")
			legend.append(LegendEntry(tag=match.group("tag"), definition=match.group("definition")))
			self.pos += 1
		return legend

	def _parse_layers(self) -> List[Layer]:
		layers: List[Layer] = []
		while True:
			self._skip_blank()
			if self._at_end():
				break
			line = self._line().strip()
			if _LAYER_PREFIX_RE.match(line):
				match = _LAYER_RE.match(line)
				if not match:
					raise self._error("malformed_layer_header", f"Expected '## Layer N — Name', got: {line}")
				self.positions.layers.append(self.pos + 1)
				self.pos += 1
				layers.append(
					Layer(
						number=int(match.group("number")),
						name=(match.group("name") or "").strip(),
						entries=self._parse_entries(),
					)
				)
			elif line.startswith("#"):
				raise self._error("unexpected_section", f"Unexpected section: {line}")
			else:
				raise self._error("unexpected_text", f"Text outside of a layer section: {line}")
		return layers

	def _parse_entries(self) -> List[FileEntry]:
		entries: List[FileEntry] = []
		while True:
			self._skip_blank()
			if self._at_end():
				break
			line = self._line().strip()
			if line.startswith("#"):
				break
			match = _ENTRY_RE.match(line)
			if not match:
				raise self._error("unparsable_entry", f"Expected a backtick-quoted path, got: {line}")
			entries.append(self._parse_entry(match))
		return entries

	def _parse_entry(self, match: "re.Match[str]") -> FileEntry:
		path = canonical_path(match.group("path"))
		tags = _TAG_RE.findall(match.group("tags") or "")
		entry_line = self.pos + 1
		self.positions.entries.setdefault(path, []).append(entry_line)
		self.pos += 1

		description: List[str] = []
		exports: List[str] = []
		touch: Optional[str] = None
		while not self._at_end():
			line = self._line().strip()
			if not line or line.startswith("`") or line.startswith("#"):
				break
			# the first line is always the description, even if it reads like metadata
			meta = _META_RE.match(line) if description else None
			if meta and meta.group("key") == "Exports":
				exports = _parse_exports(meta.group("value"))
			elif meta:
				touch = meta.group("value").strip()
			else:
				description.append(line)
			self.pos += 1

		if not description:
			raise ParseError(entry_line, "missing_description", f"Entry {path} has no description line")
		what, why = split_description(" ".join(description))
		return FileEntry(path=path, what=what, why=why, tags=tags, exports=exports, touch=touch)


def parse_with_positions(text: str) -> Tuple[Document, SourcePositions]:
	parser = _MarkdownParser(text)
	document = parser.parse()
	logger.debug("Parsed %s: %d layers, %d files", document.project_name, len(document.layers), document.file_count())
	return document, parser.positions


def parse_markdown(text: str) -> Document:
	document, _ = parse_with_positions(text)
	return document


def _format_entry(entry: FileEntry) -> List[str]:
	head = f"`{entry.path}`" + "".join(f" `[{tag}]`" for tag in entry.tags)
	lines = [head, entry.description]
	if entry.exports:
		lines.append(f"{EXPORTS_MARKER} {', '.join(entry.exports)}")
	if entry.touch is not None:
		lines.append(f"{TOUCH_MARKER} {entry.touch}".rstrip())
	return lines


def format_markdown(document: Document) -> str:
	out: List[str] = [f"# {document.project_name} — Semantic Map", ""]
	if document.purpose:
		out += [f"**Purpose:** {document.purpose}", ""]
	if document.legend:
		out += ["## Legend", ""]
		out += [f"- `[{item.tag}]` {item.definition}".rstrip() for item in document.legend]
		out.append("")
	for layer in sorted(document.layers, key=lambda l: l.number):
		header = f"## Layer {layer.number}"
		if layer.name:
			header += f" — {layer.name}"
		out += [header, ""]
		for entry in layer.entries:
			out += _format_entry(entry)
			out.append("")
	return "\n".join(out).rstrip("\n") + "\n"


def to_json(document: Document) -> str:
	return document.model_dump_json(indent=2) + "\n"


def _validate(data: object) -> Document:
	try:
		return Document.model_validate(data)
	except ValidationError as e:
		raise ParseError(1, "invalid_document", str(e)) from e


def from_json(text: str) -> Document:
	try:
		data = json.loads(text)
	except json.JSONDecodeError as e:
		raise ParseError(e.lineno, "invalid_json", e.msg) from e
	return _validate(data)


def to_yaml(document: Document) -> str:
	return yaml.safe_dump(document.model_dump(mode="json"), sort_keys=False, allow_unicode=True)


def from_yaml(text: str) -> Document:
	try:
		data = yaml.safe_load(text)
	except yaml.YAMLError as e:
		mark = getattr(e, "problem_mark", None)
		line = mark.line + 1 if mark is not None else 1
		raise ParseError(line, "invalid_yaml", str(e)) from e
	return _validate(data)


def dumps(document: Document, fmt: str = "md") -> str:
	if fmt == "json":
		return to_json(document)
	if fmt == "yaml":
		return to_yaml(document)
	if fmt == "md":
		return format_markdown(document)
	raise ValueError(f"Unknown format: {fmt}")


def loads(text: str, fmt: str = "md") -> Document:
	if fmt == "json":
		return from_json(text)
	if fmt == "yaml":
		return from_yaml(text)
	if fmt == "md":
		return parse_markdown(text)
	raise ValueError(f"Unknown format: {fmt}")
