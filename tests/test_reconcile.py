from textwrap import dedent

from semmap.codec import format_markdown, parse_markdown
from semmap.model import Document, FileEntry, Layer
from semmap.paths import build_root_prefix
from semmap.reconcile import reconcile


EXISTING = dedent(
	"""\
	# demo — Semantic Map

	**Purpose:** Demo project.

	## Layer 1 — Entry

	`src/main.rs` `[ENTRY]`
	Starts the demo. Hand-written notes that must survive updates.
	→ Touch: keep the banner

	## Layer 2 — Domain

	`src/keep.rs`
	Keeps state. Coordinates core domain logic.

	`src/old.rs`
	Old module. Coordinates core domain logic.
	"""
)


def _fresh(*layers) -> Document:
	return Document(
		project_name="demo",
		layers=[
			Layer(
				number=number,
				name=name,
				entries=[FileEntry(path=p, what="Generated text.", why="Generated why.") for p in paths],
			)
			for number, name, paths in layers
		],
	)


def test_plus_one_minus_one_keeps_other_entries():
	existing = parse_markdown(EXISTING)
	fresh = _fresh((1, "Entry", ["src/main.rs"]), (2, "Domain", ["src/keep.rs", "src/new.rs"]))
	result = reconcile(existing, fresh)

	assert result.added == ["src/new.rs"]
	assert result.removed == ["src/old.rs"]
	doc = result.document
	assert doc.layers[0] == existing.layers[0]
	assert doc.find_layer(2).paths() == ["src/keep.rs", "src/new.rs"]
	assert doc.find_entry("src/keep.rs") == existing.find_entry("src/keep.rs")
	assert doc.find_entry("src/new.rs").what == "Generated text."


def test_update_is_idempotent():
	existing = parse_markdown(EXISTING)
	fresh = _fresh((1, "Entry", ["src/main.rs"]), (2, "Domain", ["src/keep.rs", "src/new.rs"]))
	first = reconcile(existing, fresh)
	second = reconcile(first.document, fresh)
	assert second.added == []
	assert second.removed == []
	assert format_markdown(second.document) == format_markdown(first.document)


def test_unchanged_codebase_gives_identical_output():
	existing = parse_markdown(EXISTING)
	fresh = _fresh((1, "Entry", ["src/main.rs"]), (2, "Domain", ["src/keep.rs", "src/old.rs"]))
	result = reconcile(existing, fresh)
	assert (result.added, result.removed) == ([], [])
	assert format_markdown(result.document) == EXISTING


def test_root_prefix_matches_nested_scan_root():
	existing = Document(
		project_name="ws",
		layers=[Layer(number=1, name="Entry", entries=[FileEntry(path="crates/a/lib.rs", what="Lib.", why="Root.")])],
	)
	fresh = _fresh((1, "Entry", ["a/lib.rs"]))
	result = reconcile(existing, fresh, build_root_prefix("./crates"))
	assert result.removed == []
	assert result.added == []
	assert result.document == existing


def test_nested_scan_root_only_removes_paths_under_it():
	existing = Document(
		project_name="ws",
		layers=[
			Layer(
				number=1,
				name="Entry",
				entries=[
					FileEntry(path="crates/a/lib.rs", what="Lib.", why="Root."),
					FileEntry(path="crates/b/lib.rs", what="Gone.", why="Root."),
					FileEntry(path="crates-extra/lib.rs", what="Sibling.", why="Root."),
					FileEntry(path="tools/gen.py", what="Tool.", why="Outside."),
				],
			)
		],
	)
	fresh = _fresh((1, "Entry", ["a/lib.rs"]))
	result = reconcile(existing, fresh, build_root_prefix("./crates"))
	assert result.removed == ["crates/b/lib.rs"]
	assert result.document.find_layer(1).paths() == ["crates/a/lib.rs", "crates-extra/lib.rs", "tools/gen.py"]


def test_missing_layers_are_created_in_numeric_position():
	existing = parse_markdown(EXISTING)
	fresh = _fresh(
		(0, "Config", ["Cargo.toml"]),
		(1, "Entry", ["src/main.rs"]),
		(2, "Domain", ["src/keep.rs", "src/old.rs"]),
		(4, "Tests", ["tests/b.rs", "tests/a.rs"]),
	)
	result = reconcile(existing, fresh)
	assert [layer.number for layer in result.document.layers] == [0, 1, 2, 4]
	assert result.document.layers[0].name == "Config"
	assert result.document.find_layer(4).paths() == ["tests/a.rs", "tests/b.rs"]


def test_layers_emptied_by_removal_are_dropped():
	existing = parse_markdown(EXISTING)
	fresh = _fresh((2, "Domain", ["src/keep.rs", "src/old.rs"]))
	result = reconcile(existing, fresh)
	assert result.removed == ["src/main.rs"]
	assert [layer.number for layer in result.document.layers] == [2]


def test_inputs_are_not_modified():
	existing = parse_markdown(EXISTING)
	snapshot = existing.model_copy(deep=True)
	fresh = _fresh((3, "Utilities", ["src/util.rs"]))
	reconcile(existing, fresh)
	assert existing == snapshot


def test_existing_paths_are_canonicalized():
	existing = Document(
		project_name="p",
		layers=[Layer(number=2, entries=[FileEntry(path="./src\\a.py", what="A.", why="B.")])],
	)
	result = reconcile(existing, _fresh((2, "Domain", ["src/a.py"])))
	assert result.added == []
	assert result.document.all_paths() == ["src/a.py"]
