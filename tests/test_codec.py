from textwrap import dedent

import pytest

from semmap.codec import dumps, format_markdown, loads, parse_markdown, parse_with_positions, split_description
from semmap.errors import ParseError
from semmap.model import Document, FileEntry, Layer, LegendEntry


CANONICAL = dedent(
	"""\
	# demo — Semantic Map

	**Purpose:** Keeps a map of the code.

	## Legend

	- `[CORE]` Core business logic

	## Layer 0 — Config

	`Cargo.toml`
	Rust package manifest and dependencies. Centralizes project configuration.

	## Layer 2 — Domain

	`src/parser.rs` `[CORE]`
	Parses the map. Coordinates core domain logic.
	→ Exports: Parser, parse
	→ Touch: keep grammar stable
	"""
)


def _sample_document() -> Document:
	return Document(
		project_name="sample",
		purpose=None,
		legend=[LegendEntry(tag="UTIL", definition="Utility functions")],
		layers=[
			Layer(
				number=1,
				name="Entry",
				entries=[FileEntry(path="src/main.rs", what="Application entry point.", why="Provides the application entry point.")],
			),
			Layer(number=3),
			Layer(
				number=4,
				name="Tests",
				entries=[
					FileEntry(path="tests/a.rs", what="Tests a.", why="", exports=["new"], touch=""),
					FileEntry(path="tests/b.rs", what="Tests b.", why="Verifies correctness. Twice.", exports=["new"], tags=["T"]),
				],
			),
		],
	)


def test_format_of_parsed_canonical_text_is_identical():
	assert format_markdown(parse_markdown(CANONICAL)) == CANONICAL


def test_parse_reads_all_fields():
	doc = parse_markdown(CANONICAL)
	assert doc.project_name == "demo"
	assert doc.purpose == "Keeps a map of the code."
	assert doc.legend == [LegendEntry(tag="CORE", definition="Core business logic")]
	assert [layer.number for layer in doc.layers] == [0, 2]
	assert doc.layers[1].name == "Domain"
	entry = doc.find_entry("src/parser.rs")
	assert entry.tags == ["CORE"]
	assert entry.what == "Parses the map."
	assert entry.why == "Coordinates core domain logic."
	assert entry.exports == ["Parser", "parse"]
	assert entry.touch == "keep grammar stable"


def test_parse_of_formatted_document_round_trips():
	doc = _sample_document()
	assert parse_markdown(format_markdown(doc)) == doc


def test_layer_without_name_round_trips():
	text = format_markdown(_sample_document())
	assert "## Layer 3\n" in text


def test_legacy_spellings_are_accepted_and_emitted_canonically():
	text = dedent(
		"""\
		# legacy -- Semantic Map
		Purpose: Old style.

		## Layer 1 -- Entry

		`./src/main.rs`
		Application entry point. Provides the application entry point.
		  Exports: main
		-> Touch: careful
		"""
	)
	doc = parse_markdown(text)
	assert doc.project_name == "legacy"
	assert doc.purpose == "Old style."
	entry = doc.layers[0].entries[0]
	assert entry.path == "src/main.rs"
	assert entry.exports == ["main"]
	assert entry.touch == "careful"

	out = format_markdown(doc)
	assert "# legacy — Semantic Map" in out
	assert "**Purpose:** Old style." in out
	assert "→ Exports: main" in out
	assert "→ Touch: careful" in out


def test_metadata_lines_are_unordered_on_parse():
	text = dedent(
		"""\
		# m — Semantic Map

		## Layer 2 — Domain

		`a.py`
		Does a thing. Because.
		→ Touch: t
		→ Exports: b, a, a
		"""
	)
	out = format_markdown(parse_markdown(text))
	assert out.endswith("Does a thing. Because.\n→ Exports: a, b\n→ Touch: t\n")


@pytest.mark.parametrize(
	"what",
	["Touch: gesture handling for pads.", "Exports: data to disk.", "-> Exports: arrows."],
)
def test_description_that_looks_like_metadata_round_trips(what):
	doc = Document(
		project_name="m",
		layers=[
			Layer(
				number=2,
				name="Domain",
				entries=[FileEntry(path="a.py", what=what, why="Because.", exports=["x"], touch="t")],
			)
		],
	)
	assert parse_markdown(format_markdown(doc)) == doc


def test_multiline_description_is_joined():
	text = "# m — Semantic Map\n\n## Layer 2\n\n`a.py`\nDoes a thing.\nBecause reasons.\n"
	entry = parse_markdown(text).layers[0].entries[0]
	assert entry.what == "Does a thing."
	assert entry.why == "Because reasons."


def test_split_description():
	assert split_description("A thing. More words. End.") == ("A thing.", "More words. End.")
	assert split_description("Only one.") == ("Only one.", "")


@pytest.mark.parametrize(
	"text,reason,line",
	[
		("", "missing_title", 1),
		("## Layer 1\n", "missing_title", 1),
		("# p — Semantic Map\n\n## Layer two — Oops\n", "malformed_layer_header", 3),
		("# p — Semantic Map\n\n## Layer 2 — Domain\n\n`src/a.py`\n\n", "missing_description", 5),
		("# p — Semantic Map\n\n## Layer 2 — Domain\n\nsrc/a.py\nDoes.\n", "unparsable_entry", 5),
		("# p — Semantic Map\n\nRandom prose\n", "unexpected_text", 3),
		("# p — Semantic Map\n\n## Notes\n", "unexpected_section", 3),
	],
)
def test_parse_errors_carry_line_and_reason(text, reason, line):
	with pytest.raises(ParseError) as info:
		parse_markdown(text)
	assert info.value.reason == reason
	assert info.value.line == line


def test_positions_point_at_source_lines():
	_, positions = parse_with_positions(CANONICAL)
	assert positions.title == 1
	assert positions.purpose == 3
	assert positions.layers == [9, 14]
	assert positions.entry_line("src/parser.rs") == 16
	assert positions.entry_line("missing.rs") is None


@pytest.mark.parametrize("fmt", ["json", "yaml"])
def test_structured_formats_round_trip(fmt):
	doc = _sample_document()
	assert loads(dumps(doc, fmt), fmt) == doc


def test_invalid_structured_input_raises_parse_error():
	with pytest.raises(ParseError) as info:
		loads("{", "json")
	assert info.value.reason == "invalid_json"

	with pytest.raises(ParseError) as info:
		loads('{"layers": []}', "json")
	assert info.value.reason == "invalid_document"

	with pytest.raises(ParseError) as info:
		loads("a: [unclosed", "yaml")
	assert info.value.reason == "invalid_yaml"


def test_unknown_format_is_rejected():
	with pytest.raises(ValueError):
		dumps(_sample_document(), "toml")
