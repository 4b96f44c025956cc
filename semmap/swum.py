"""Turns identifiers into short English sentences.

``get_user_profile`` and ``getUserProfile`` both read "Gets the user profile."
"""

from __future__ import annotations

import re
from typing import Dict, List

_WORD_RE = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+|[A-Z]+|\d+")

_VERB_TEMPLATES: Dict[str, str] = {}
for _verbs, _template in (
	(("get", "fetch", "load", "read", "retrieve"), "Gets the {rest}."),
	(("set", "update", "write", "save", "store"), "Sets the {rest}."),
	(("is", "has", "can", "should", "will"), "Checks if {rest}."),
	(("create", "new", "build", "make", "init"), "Creates {rest}."),
	(("delete", "remove", "drop", "clear"), "Removes {rest}."),
	(("parse", "extract", "decode"), "Parses {rest}."),
	(("validate", "check", "verify"), "Validates {rest}."),
	(("render", "format", "display", "print"), "Formats {rest} for output."),
	(("handle", "process", "run", "exec"), "Processes {rest}."),
	(("convert", "transform", "map"), "Converts {rest}."),
	(("find", "search", "lookup", "query"), "Finds {rest}."),
	(("test", "spec"), "Tests {rest}."),
):
	for _verb in _verbs:
		_VERB_TEMPLATES[_verb] = _template


def split_identifier(name: str) -> List[str]:
	"""Split snake_case, kebab-case, camelCase and PascalCase into lower-case words."""
	words: List[str] = []
	for part in re.split(r"[_\-\s.]+", name):
		words.extend(w.lower() for w in _WORD_RE.findall(part))
	return words


def expand_identifier(name: str) -> str:
	words = split_identifier(name)
	if not words:
		return f"Implements {name} functionality."
	verb, rest = words[0], " ".join(words[1:])
	template = _VERB_TEMPLATES.get(verb)
	if template and rest:
		return template.format(rest=rest)
	if rest:
		return f"Implements {verb} {rest}."
	return f"Implements {verb} functionality."
