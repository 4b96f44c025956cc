from __future__ import annotations

from typing import List

from .model import GenerationResult, LayerViolation, ReconcileResult, Severity, ValidationIssue, ValidationReport


def summarize_generation(result: GenerationResult, output: str) -> str:
	doc = result.document
	parts: List[str] = [f"* Generated {output} ({len(doc.layers)} layers, {doc.file_count()} files)"]
	for layer in doc.layers:
		parts.append(f"  Layer {layer.number} {layer.name}: {len(layer.entries)} files".rstrip())
	if result.skipped:
		parts.append(f"  Described {len(result.skipped)} unreadable files from their names: {', '.join(s.path for s in result.skipped)}")
	return "\n".join(parts)


def format_issue(issue: ValidationIssue) -> str:
	icon = "X" if issue.severity == Severity.ERROR else "!"
	if issue.path and issue.line:
		return f"{icon} [{issue.path}:{issue.line}] {issue.message}"
	if issue.path:
		return f"{icon} [{issue.path}] {issue.message}"
	if issue.line:
		return f"{icon} [line {issue.line}] {issue.message}"
	return f"{icon} {issue.message}"


def summarize_validation(report: ValidationReport, strict: bool = False) -> str:
	parts = [format_issue(issue) for issue in report.issues]
	if parts:
		parts.append("")
	failed = report.error_count > 0 or (strict and report.warning_count > 0)
	if failed:
		parts.append(f"{report.error_count} errors, {report.warning_count} warnings")
	else:
		parts.append("* Semantic map is valid")
	return "\n".join(parts)


def summarize_violations(violations: List[LayerViolation]) -> str:
	if not violations:
		return "* No layer violations"
	parts = [f"X {v.describe()}" for v in violations]
	parts.append(f"{len(violations)} layer violations")
	return "\n".join(parts)


def summarize_update(result: ReconcileResult) -> str:
	parts = [f"* Updated semantic map: +{len(result.added)} -{len(result.removed)}"]
	parts.extend(f"  + {path}" for path in result.added)
	parts.extend(f"  - {path}" for path in result.removed)
	return "\n".join(parts)
