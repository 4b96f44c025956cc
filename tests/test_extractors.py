from textwrap import dedent

from semmap.lang import extractor_for, language_of
from semmap.lang.base import first_sentence
from semmap.model import DepKind


def test_extractor_is_chosen_by_extension():
	assert extractor_for("a/b.py").name == "python"
	assert extractor_for("src/lib.rs").name == "rust"
	assert extractor_for("web/App.TSX").name == "javascript"
	assert extractor_for("cmd/main.go").name == "go"
	assert extractor_for("README.md") is None
	assert language_of("Cargo.toml") == "unknown"


def test_first_sentence():
	assert first_sentence("Parses `input`.  More text here.") == "Parses input."
	assert first_sentence("No period") == "No period."
	assert first_sentence("Really?") == "Really."
	assert first_sentence("   ") is None
	assert first_sentence(None) is None


def test_python_doc_exports_and_imports():
	code = dedent(
		'''\
		"""Parses configuration files. Extra detail here."""

		import os
		from . import helpers
		from ..core.models import User, Group

		MAX_SIZE = 10
		_private = 1

		def load(path):
			return path

		class Loader:
			pass

		def _hidden():
			pass
		'''
	)
	py = extractor_for("pkg/config_loader.py")
	assert py.extract_doc(code) == "Parses configuration files."
	assert py.extract_exports(code) == ["Loader", "MAX_SIZE", "load"]
	hints = py.extract_imports(code, "pkg/config_loader.py")
	assert [h.target for h in hints] == ["os", ".", "..core.models"]
	assert hints[1].names == ["helpers"]
	assert hints[2].names == ["User", "Group"]


def test_python_all_wins_and_doc_falls_back_to_first_public_def():
	code = dedent(
		'''\
		__all__ = ["b", "a", "a"]

		def _private():
			"""Not this one."""

		def run():
			"""Runs the job. In the background."""
		'''
	)
	py = extractor_for("x.py")
	assert py.extract_exports(code) == ["a", "b"]
	assert py.extract_doc(code) == "Runs the job."


def test_python_syntax_error_falls_back_to_patterns():
	code = "def broken(:\n    pass\ndef ok():\n    pass\nfrom .sib import thing\n"
	py = extractor_for("x.py")
	assert py.extract_exports(code) == ["broken", "ok"]
	hints = py.extract_imports(code, "x.py")
	assert hints[0].target == ".sib"
	assert hints[0].names == ["thing"]


def test_rust_doc_exports_and_imports():
	code = dedent(
		"""\
		//! Parses semantic map files.
		//! More lines.

		use crate::model::{Document, Layer};
		use super::util::helper as h;
		use std::collections::HashMap;
		mod lexer;
		pub mod ast;

		/// A parser.
		pub struct Parser;

		pub fn parse() {}
		pub(crate) fn internal() {}
		fn private() {}
		const X: &str = "pub fn fake() {}";
		// pub fn commented() {}
		"""
	)
	rs = extractor_for("src/parser.rs")
	assert rs.extract_doc(code) == "Parses semantic map files."
	assert rs.extract_exports(code) == ["Parser", "ast", "parse"]

	hints = rs.extract_imports(code, "src/parser.rs")
	uses = [h.target for h in hints if h.kind == DepKind.IMPORT]
	mods = [h.target for h in hints if h.kind == DepKind.MODULE_DECLARATION]
	assert uses == ["crate::model::Document", "crate::model::Layer", "super::util::helper", "std::collections::HashMap"]
	assert mods == ["lexer", "ast"]


def test_rust_doc_falls_back_to_first_public_item():
	code = dedent(
		"""\
		use std::fmt;

		/// Formats output nicely.
		#[derive(Debug)]
		pub struct Formatter;
		"""
	)
	assert extractor_for("src/fmt.rs").extract_doc(code) == "Formats output nicely."


def test_rust_constructor_in_two_impl_blocks_is_exported_once():
	code = dedent(
		"""\
		pub struct Meters(f64);

		impl Meters {
			pub fn new(v: f64) -> Self { Meters(v) }
		}

		impl From<f64> for Meters {
			fn from(v: f64) -> Self { Meters::new(v) }
		}

		impl Meters {
			pub fn new(v: f64) -> Self { Meters(v) }
			pub fn value(&self) -> f64 { self.0 }
		}
		"""
	)
	assert extractor_for("src/units.rs").extract_exports(code) == ["Meters", "new", "value"]


def test_rust_nested_use_groups():
	code = "use crate::{a::{B, C}, d, self};\n"
	hints = extractor_for("src/x.rs").extract_imports(code, "src/x.rs")
	assert [h.target for h in hints] == ["crate::a::B", "crate::a::C", "crate::d", "crate"]


def test_javascript_doc_exports_and_imports():
	code = dedent(
		"""\
		/**
		 * Renders the dashboard view.
		 * @module dashboard
		 */
		import React from 'react';
		import { api } from './api';
		import './styles.css';
		const lodash = require('lodash');
		export { helper as assist, type Props };
		export default function Dashboard() {}
		export const enum Mode { A }
		export async function load() {}
		export * from './types';
		"""
	)
	js = extractor_for("src/dashboard.ts")
	assert js.extract_doc(code) == "Renders the dashboard view."
	assert js.extract_exports(code) == ["Dashboard", "Mode", "Props", "assist", "load"]
	targets = {h.target for h in js.extract_imports(code, "src/dashboard.ts")}
	assert targets == {"react", "./api", "./styles.css", "./types", "lodash"}


def test_javascript_doc_before_first_export():
	code = dedent(
		"""\
		import x from 'x';

		/** Builds the router. */
		export function router() {}
		"""
	)
	assert extractor_for("src/router.js").extract_doc(code) == "Builds the router."


def test_javascript_ignores_imports_in_comments():
	code = "// import a from './a';\n/* require('./b') */\nimport c from './c';\n"
	hints = extractor_for("src/x.js").extract_imports(code, "src/x.js")
	assert [h.target for h in hints] == ["./c"]


def test_go_doc_exports_and_imports():
	code = dedent(
		"""\
		// Package store persists records.
		package store

		import "fmt"

		import (
			"strings"
			db "example.com/app/internal/db"
		)

		// Store keeps records.
		type Store struct {
			Name string
		}

		const (
			MaxItems = 10
			minItems = 1
		)

		func New() *Store { return nil }
		func (s *Store) Save() error { return nil }
		func helper() {}
		var Default = New()
		"""
	)
	go = extractor_for("internal/store/store.go")
	assert go.extract_doc(code) == "Package store persists records."
	assert go.extract_exports(code) == ["Default", "MaxItems", "New", "Save", "Store"]
	hints = go.extract_imports(code, "internal/store/store.go")
	assert [h.target for h in hints] == ["fmt", "strings", "example.com/app/internal/db"]


def test_go_doc_falls_back_to_first_exported_declaration():
	code = dedent(
		"""\
		package util

		func lower() {}

		// Trim removes whitespace.
		func Trim(s string) string { return s }
		"""
	)
	assert extractor_for("util/trim.go").extract_doc(code) == "Trim removes whitespace."
