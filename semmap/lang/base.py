from __future__ import annotations

import re
from typing import FrozenSet, Iterable, List, Optional, Pattern, Tuple

from ..model import ImportHint, Stereotype


def first_sentence(text: Optional[str]) -> Optional[str]:
	"""Collapse doc text into one sentence ending in a period."""
	if not text:
		return None
	joined = " ".join(text.replace("`", "").split())
	joined = joined.lstrip("#>*- ").strip()
	if not joined:
		return None
	head, sep, _ = joined.partition(". ")
	if sep:
		return head + "."
	if joined.endswith("."):
		return joined
	return joined.rstrip("!?:;,") + "."


def collapse_doc_lines(lines: Iterable[str]) -> Optional[str]:
	return first_sentence(" ".join(line.strip() for line in lines))


def sorted_names(names: Iterable[str]) -> List[str]:
	return sorted({n for n in names if n})


class Extractor:
	"""Language plug-in: doc text, exported symbols and import hints.

	Subclasses also carry the path patterns the inference chain consults for
	their language.
	"""

	name = "generic"
	extensions: Tuple[str, ...] = ()
	manifest_names: FrozenSet[str] = frozenset()
	config_patterns: Tuple[Pattern[str], ...] = ()
	entry_patterns: Tuple[Pattern[str], ...] = ()
	test_patterns: Tuple[Pattern[str], ...] = ()
	utility_patterns: Tuple[Pattern[str], ...] = ()
	# (module prefix, stereotype); matched against import hints only
	framework_signatures: Tuple[Tuple[str, Stereotype], ...] = ()
	signature_separator = "."

	def extract_doc(self, text: str) -> Optional[str]:
		return None

	def extract_exports(self, text: str) -> List[str]:
		return []

	def extract_imports(self, text: str, file_path: str) -> List[ImportHint]:
		return []

	def signature_for(self, hint: ImportHint) -> Optional[Stereotype]:
		target = hint.target
		for prefix, stereotype in self.framework_signatures:
			if target == prefix or target.startswith(prefix + self.signature_separator):
				return stereotype
		return None


def compile_all(*patterns: str) -> Tuple[Pattern[str], ...]:
	return tuple(re.compile(p) for p in patterns)
