from __future__ import annotations


class SemmapError(Exception):
	"""Base class for errors raised by semmap."""


class ParseError(SemmapError):
	"""Malformed textual input; no partial Document is ever produced."""

	def __init__(self, line: int, reason: str, message: str = "") -> None:
		self.line = line
		self.reason = reason
		self.message = message or reason.replace("_", " ")
		super().__init__(f"Parse error at line {line} ({reason}): {self.message}")
