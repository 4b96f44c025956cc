from fastapi.testclient import TestClient

from api import app
from semmap.codec import format_markdown
from semmap.generator import generate


client = TestClient(app)


def test_generate(project):
	resp = client.post("/generate", json={"root_path": str(project), "purpose": "Sample."})
	assert resp.status_code == 200
	body = resp.json()
	assert body["content"].startswith("# proj — Semantic Map\n\n**Purpose:** Sample.\n")
	assert body["layers"] == 5
	assert body["files"] == 6


def test_generate_rejects_bad_input(tmp_path):
	resp = client.post("/generate", json={"root_path": str(tmp_path / "missing")})
	assert resp.status_code == 400
	resp = client.post("/generate", json={"root_path": str(tmp_path), "format": "toml"})
	assert resp.status_code == 400


def test_validate_reports_parse_errors():
	resp = client.post("/validate", json={"content": "no title here"})
	assert resp.status_code == 422
	detail = resp.json()["detail"]
	assert detail["reason"] == "missing_title"
	assert detail["line"] == 1


def test_validate_report(project):
	content = format_markdown(generate(str(project)).document)
	resp = client.post("/validate", json={"content": content, "root_path": str(project), "check_files": True})
	assert resp.status_code == 200
	issues = resp.json()["issues"]
	assert {i["severity"] for i in issues} == {"warning"}
	assert any(i["message"] == "Missing purpose statement" for i in issues)


def test_deps(project):
	content = format_markdown(generate(str(project)).document)
	resp = client.post("/deps", json={"content": content, "root_path": str(project)})
	assert resp.status_code == 200
	body = resp.json()
	edges = {(e["from_path"], e["to_path"]) for e in body["graph"]["edges"]}
	assert ("cli.py", "app/core.py") in edges
	assert ("app/core.py", "app/helpers.py") in edges
	assert body["mermaid"].startswith("graph TD\n")
	assert [(v["from_path"], v["to_path"]) for v in body["violations"]] == [
		("cli.py", "app/core.py"),
		("app/core.py", "app/helpers.py"),
	]


def test_reconcile_does_not_write(project):
	doc = generate(str(project)).document
	doc.layers = [layer for layer in doc.layers if layer.number != 4]
	resp = client.post("/reconcile", json={"content": format_markdown(doc), "root_path": str(project)})
	assert resp.status_code == 200
	body = resp.json()
	assert body["added"] == ["tests/test_core.py"]
	assert body["removed"] == []
	assert "## Layer 4 — Tests" in body["content"]
	assert not (project / "SEMMAP.md").exists()
