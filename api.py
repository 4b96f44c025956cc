from __future__ import annotations

import os
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from semmap.codec import FORMATS, dumps, format_markdown, parse_with_positions
from semmap.config import SemmapConfig, load_config
from semmap.deps import analyze, check_violations, render_mermaid
from semmap.errors import ParseError, SemmapError
from semmap.generator import generate as generate_document
from semmap.model import DependencyGraph, LayerViolation, ValidationReport
from semmap.reconcile import reconcile as reconcile_documents
from semmap.validator import validate as validate_document
from semmap.validator import validate_against_codebase


app = FastAPI(title="Semantic Map")


class GenerateRequest(BaseModel):
	root_path: str
	name: Optional[str] = None
	purpose: Optional[str] = None
	format: str = "md"


class GenerateResponse(BaseModel):
	content: str
	layers: int
	files: int


class ValidateRequest(BaseModel):
	content: str
	root_path: Optional[str] = None
	strict: bool = False
	check_files: bool = False


class DepsRequest(BaseModel):
	content: str
	root_path: str


class DepsResponse(BaseModel):
	graph: DependencyGraph
	violations: List[LayerViolation]
	mermaid: str


class ReconcileRequest(BaseModel):
	content: str
	root_path: str
	root_prefix: str = ""


class ReconcileResponse(BaseModel):
	content: str
	added: List[str]
	removed: List[str]


@app.exception_handler(ParseError)
async def parse_error_handler(request: Request, exc: ParseError) -> JSONResponse:
	return JSONResponse(
		status_code=422,
		content={"detail": {"line": exc.line, "reason": exc.reason, "message": exc.message}},
	)


def _root(root_path: str) -> str:
	root = os.path.abspath(root_path)
	if not os.path.isdir(root):
		raise HTTPException(status_code=400, detail=f"Invalid root_path: {root}")
	return root


def _config(root: str) -> SemmapConfig:
	try:
		return load_config(root)
	except SemmapError as e:
		raise HTTPException(status_code=400, detail=str(e))


@app.post("/generate", response_model=GenerateResponse)
def generate(req: GenerateRequest) -> GenerateResponse:
	if req.format not in FORMATS:
		raise HTTPException(status_code=400, detail=f"Unknown format: {req.format}")
	root = _root(req.root_path)
	config = _config(root)
	result = generate_document(root, config, project_name=req.name, purpose=req.purpose)
	doc = result.document
	return GenerateResponse(content=dumps(doc, req.format), layers=len(doc.layers), files=doc.file_count())


@app.post("/validate", response_model=ValidationReport)
def validate(req: ValidateRequest) -> ValidationReport:
	document, positions = parse_with_positions(req.content)
	if req.root_path is None:
		return validate_document(document, positions)
	root = _root(req.root_path)
	config = _config(root)
	if not (req.strict or req.check_files):
		return validate_document(document, positions, config.allowed_tags)
	return validate_against_codebase(document, root, positions=positions, strict=req.strict, config=config)


@app.post("/deps", response_model=DepsResponse)
def deps(req: DepsRequest) -> DepsResponse:
	document, _ = parse_with_positions(req.content)
	graph = analyze(_root(req.root_path), document)
	violations = check_violations(graph)
	return DepsResponse(graph=graph, violations=violations, mermaid=render_mermaid(graph, violations))


@app.post("/reconcile", response_model=ReconcileResponse)
def reconcile(req: ReconcileRequest) -> ReconcileResponse:
	existing, _ = parse_with_positions(req.content)
	root = _root(req.root_path)
	fresh = generate_document(root, _config(root), project_name=existing.project_name, purpose=existing.purpose)
	result = reconcile_documents(existing, fresh.document, req.root_prefix)
	return ReconcileResponse(content=format_markdown(result.document), added=result.added, removed=result.removed)


def create_app() -> FastAPI:
	return app
