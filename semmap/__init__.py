"""Semantic map generation, validation and reconciliation for codebases.

Modules:
- model.py: Document, graph and report data structures.
- errors.py: SemmapError and ParseError.
- paths.py: Canonical paths and root prefixes.
- codec.py: Markdown, JSON and YAML forms of a Document.
- lang/: Per-language doc, export and import extraction.
- swum.py: Identifier splitting and verb-template sentences.
- inference.py: Layer, stereotype and description inference.
- deps.py: Import resolution, layer violations and Mermaid output.
- fs_scan.py: Codebase discovery.
- generator.py: Builds a Document from a scanned codebase.
- validator.py: Structural and on-disk checks of a Document.
- reconcile.py: Merges a fresh Document into an edited one.
- config.py: SemmapConfig loading from defaults and YAML.
- operations.py: Read, compute and atomic write of document files.
- summarize.py: Human-readable summaries of operation results.
"""

__all__ = [
	"model",
	"errors",
	"paths",
	"codec",
	"lang",
	"swum",
	"inference",
	"deps",
	"fs_scan",
	"generator",
	"validator",
	"reconcile",
	"config",
	"operations",
	"summarize",
]
