import json
from textwrap import dedent

from cli import main


def test_generate_validate_update(project, capsys):
	out = project / "SEMMAP.md"
	assert main(["generate", "--root", str(project), "--output", str(out), "--purpose", "Sample."]) == 0
	assert out.read_text().startswith("# proj — Semantic Map")
	assert "Generated" in capsys.readouterr().out

	assert main(["validate", "--file", str(out), "--root", str(project), "--check-files"]) == 0
	# generic descriptions are warnings, which fail only in strict mode
	assert main(["validate", "--file", str(out), "--root", str(project), "--strict"]) == 1

	assert main(["update", "--file", str(out), "--root", str(project)]) == 0
	assert "+0 -0" in capsys.readouterr().out


def test_missing_file_exits_with_error(tmp_path, capsys):
	assert main(["validate", "--file", str(tmp_path / "none.md")]) == 1
	assert "Error:" in capsys.readouterr().err


def test_parse_error_exits_with_error(tmp_path, capsys):
	doc = tmp_path / "SEMMAP.md"
	doc.write_text("## Layer 1\n")
	assert main(["validate", "--file", str(doc)]) == 1
	assert "missing_title" in capsys.readouterr().err


def _violating_project(tmp_path):
	(tmp_path / "a.py").write_text("import b\n")
	(tmp_path / "b.py").write_text("VALUE = 1\n")
	doc = tmp_path / "SEMMAP.md"
	doc.write_text(
		dedent(
			"""\
			# v — Semantic Map

			## Layer 1 — Entry

			`a.py`
			Starts things. Provides the application entry point.

			## Layer 3 — Utilities

			`b.py`
			Holds a value. Provides reusable helper functions.
			"""
		)
	)
	return doc


def test_deps_check_fails_on_violation(tmp_path, capsys):
	doc = _violating_project(tmp_path)
	assert main(["deps", "--file", str(doc), "--root", str(tmp_path), "--check"]) == 1
	out = capsys.readouterr().out
	assert "Layer violation: a.py (L1) depends on b.py (L3)" in out
	assert "==>|violation|" in out


def test_deps_json(tmp_path, capsys):
	doc = _violating_project(tmp_path)
	assert main(["deps", "--file", str(doc), "--root", str(tmp_path), "--format", "json"]) == 0
	payload = json.loads(capsys.readouterr().out)
	assert payload["violations"] == [["a.py", "b.py"]]
	assert [n["path"] for n in payload["graph"]["nodes"]] == ["a.py", "b.py"]
