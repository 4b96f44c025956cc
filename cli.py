from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

import uvicorn

from semmap.codec import FORMATS
from semmap.deps import render_mermaid
from semmap.errors import SemmapError
from semmap.operations import DEFAULT_DOCUMENT, deps_for_file, generate_file, update_file, validate_file
from semmap.summarize import (
	summarize_generation,
	summarize_update,
	summarize_validation,
	summarize_violations,
)


def cmd_generate(args: argparse.Namespace) -> int:
	result = generate_file(
		args.root,
		args.output,
		name=args.name,
		purpose=args.purpose,
		fmt=args.format,
		config_path=args.config,
	)
	print(summarize_generation(result, args.output))
	return 0


def cmd_validate(args: argparse.Namespace) -> int:
	report = validate_file(args.file, args.root, strict=args.strict, check_files=args.check_files)
	print(summarize_validation(report, strict=args.strict))
	if report.error_count or (args.strict and report.warning_count):
		return 1
	return 0


def cmd_deps(args: argparse.Namespace) -> int:
	graph, violations = deps_for_file(args.file, args.root)
	status = 0
	if args.check:
		print(summarize_violations(violations))
		if violations:
			status = 1
	if args.format == "json":
		payload = {
			"graph": graph.model_dump(mode="json"),
			"violations": [[v.from_path, v.to_path] for v in violations],
		}
		print(json.dumps(payload, indent=2))
	else:
		print(render_mermaid(graph, violations), end="")
	return status


def cmd_update(args: argparse.Namespace) -> int:
	result = update_file(args.file, args.root)
	print(summarize_update(result))
	return 0


def cmd_serve(args: argparse.Namespace) -> int:
	uvicorn.run("api:app", host=args.host, port=args.port, reload=args.reload)
	return 0


def build_parser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(prog="semmap", description="Generate and maintain semantic maps of a codebase")
	parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
	sub = parser.add_subparsers(dest="cmd", required=True)

	pg = sub.add_parser("generate", help="Generate a semantic map from source code")
	pg.add_argument("--root", default=".", help="Root directory to scan")
	pg.add_argument("--output", default=DEFAULT_DOCUMENT)
	pg.add_argument("--name", help="Project name (defaults to the root directory name)")
	pg.add_argument("--purpose")
	pg.add_argument("--format", choices=FORMATS, default="md")
	pg.add_argument("--config", help="Path to a semmap.yaml config file")
	pg.set_defaults(func=cmd_generate)

	pv = sub.add_parser("validate", help="Check a semantic map for problems")
	pv.add_argument("--file", default=DEFAULT_DOCUMENT)
	pv.add_argument("--root", default=".")
	pv.add_argument("--strict", action="store_true", help="Also report undocumented files and fail on warnings")
	pv.add_argument("--check-files", action="store_true", help="Check that documented files exist")
	pv.set_defaults(func=cmd_validate)

	pd = sub.add_parser("deps", help="Show the dependency graph of documented files")
	pd.add_argument("--file", default=DEFAULT_DOCUMENT)
	pd.add_argument("--root", default=".")
	pd.add_argument("--format", choices=("mermaid", "json"), default="mermaid")
	pd.add_argument("--check", action="store_true", help="Fail when a layer violation is found")
	pd.set_defaults(func=cmd_deps)

	pu = sub.add_parser("update", help="Add new files and drop deleted ones, keeping hand edits")
	pu.add_argument("--file", default=DEFAULT_DOCUMENT)
	pu.add_argument("--root", default=".", help="Root to rescan; entries outside it are kept")
	pu.set_defaults(func=cmd_update)

	ps = sub.add_parser("serve", help="Run FastAPI server")
	ps.add_argument("--host", default="127.0.0.1")
	ps.add_argument("--port", type=int, default=8000)
	ps.add_argument("--reload", action="store_true")
	ps.set_defaults(func=cmd_serve)
	return parser


def main(argv: Optional[List[str]] = None) -> int:
	args = build_parser().parse_args(argv)
	logging.basicConfig(
		level=logging.DEBUG if args.verbose else logging.INFO,
		format="%(levelname)s %(name)s: %(message)s",
	)
	try:
		return args.func(args)
	except (SemmapError, OSError) as e:
		print(f"Error: {e}", file=sys.stderr)
	return 1


if __name__ == "__main__":
	sys.exit(main())
