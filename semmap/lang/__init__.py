"""Per-language extractors, selected by file extension."""

from __future__ import annotations

import posixpath
from typing import Dict, Optional, Tuple

from .base import Extractor, first_sentence
from .golang import GoExtractor
from .javascript import JavaScriptExtractor
from .python import PythonExtractor
from .rust import RustExtractor

EXTRACTORS: Tuple[Extractor, ...] = (
	PythonExtractor(),
	RustExtractor(),
	JavaScriptExtractor(),
	GoExtractor(),
)

_BY_EXTENSION: Dict[str, Extractor] = {ext: e for e in EXTRACTORS for ext in e.extensions}


def extractor_for(path: str) -> Optional[Extractor]:
	_, ext = posixpath.splitext(path)
	return _BY_EXTENSION.get(ext.lower())


def language_of(path: str) -> str:
	extractor = extractor_for(path)
	return extractor.name if extractor else "unknown"


__all__ = [
	"EXTRACTORS",
	"Extractor",
	"GoExtractor",
	"JavaScriptExtractor",
	"PythonExtractor",
	"RustExtractor",
	"extractor_for",
	"first_sentence",
	"language_of",
]
