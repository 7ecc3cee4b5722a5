from pathlib import Path

import pytest

from dxforge.server.semantic_analyzer import (
    DxPattern,
    Range,
    SemanticAnalyzer,
    SymbolKind,
)

RUST_SOURCE = """
            fn main() {
                println!("Hello");
            }

            struct MyStruct {
                field: i32,
            }
        """

NESTED_SOURCE = """
            mod my_mod {
                struct Inner {
                    x: i32
                }

                impl Inner {
                    fn new() -> Self { Self { x: 0 } }
                }
            }
        """

LOOKUP_SOURCE = """
            fn target_function() {
                // code
            }
        """


@pytest.fixture
def analyzer():
    return SemanticAnalyzer()


def test_analyzer_starts_with_empty_table(analyzer):
    assert analyzer.get_symbols("anything.rs") is None


def test_rust_parsing(analyzer):
    symbols = analyzer.analyze_file(Path("test.rs"), RUST_SOURCE)
    assert symbols
    assert any(s.kind == SymbolKind.FUNCTION for s in symbols)
    assert any(s.kind == SymbolKind.STRUCT for s in symbols)
    assert [(s.name, s.kind) for s in symbols] == [
        ("main", SymbolKind.FUNCTION),
        ("MyStruct", SymbolKind.STRUCT),
    ]


def test_nested_symbols(analyzer):
    symbols = analyzer.analyze_file(Path("nested.rs"), NESTED_SOURCE)
    mod_symbol = next(s for s in symbols if s.kind == SymbolKind.MOD)
    assert mod_symbol.name == "my_mod"
    assert mod_symbol.children
    struct_symbol = next(s for s in mod_symbol.children if s.kind == SymbolKind.STRUCT)
    assert struct_symbol.name == "Inner"


def test_find_symbol_at_position(analyzer):
    path = Path("lookup.rs")
    analyzer.analyze_file(path, LOOKUP_SOURCE)
    symbol = analyzer.find_symbol_at_position(path, 2, 15)
    assert symbol is not None
    assert symbol.name == "target_function"
    assert analyzer.find_symbol_at_position(path, 10, 0) is None


def test_symbol_range_columns(analyzer):
    symbols = analyzer.analyze_file("lookup.rs", LOOKUP_SOURCE)
    assert symbols[0].range == Range(start_line=2, start_col=12, end_line=2, end_col=34)


@pytest.mark.parametrize("column, expected", [(11, None), (12, "target_function"), (34, "target_function"), (35, None)])
def test_position_bounds(analyzer, column, expected):
    analyzer.analyze_file("lookup.rs", LOOKUP_SOURCE)
    found = analyzer.find_symbol_at_position("lookup.rs", 2, column)
    assert (found.name if found else None) == expected


def test_child_preferred_over_parent(analyzer):
    source = "mod outer\nfn inner() {}\n"
    analyzer.analyze_file("m.rs", source)
    # the module spans only its own line, so line 2 finds nothing at top level
    assert analyzer.find_symbol_at_position("m.rs", 2, 0) is None
    symbols = analyzer.get_symbols("m.rs")
    assert [c.name for c in symbols[0].children] == ["inner"]


def test_find_symbol_in_unknown_file(analyzer):
    assert analyzer.find_symbol_at_position("missing.rs", 1, 0) is None


@pytest.mark.parametrize(
    "line, name, kind",
    [
        ("enum Color {", "Color", SymbolKind.ENUM),
        ("const MAX: u32 = 3;", "MAX", SymbolKind.CONST),
        ("static NAME: &str = \"x\";", "NAME", SymbolKind.STATIC),
        ("trait Shape {", "Shape", SymbolKind.TRAIT),
        ("type Alias = u8;", "Alias", SymbolKind.TYPE),
        ("impl Foo {", "Foo", SymbolKind.IMPL),
        ("fn run(x: u8) {", "run", SymbolKind.FUNCTION),
    ],
)
def test_item_kinds(analyzer, line, name, kind):
    symbols = analyzer.analyze_file("k.rs", line)
    assert [(s.name, s.kind) for s in symbols] == [(name, kind)]


def test_closing_brace_ends_module(analyzer):
    symbols = analyzer.analyze_file(Path("nested.rs"), NESTED_SOURCE)
    assert [(s.name, s.kind) for s in symbols] == [
        ("my_mod", SymbolKind.MOD),
        ("Inner", SymbolKind.IMPL),
    ]
    assert [c.name for c in symbols[0].children] == ["Inner"]


def test_reanalysis_replaces_table_entry(analyzer):
    analyzer.analyze_file("a.rs", "fn first() {}")
    analyzer.analyze_file("a.rs", "fn second() {}")
    assert [s.name for s in analyzer.get_symbols("a.rs")] == ["second"]


def test_unnamed_items_are_skipped(analyzer):
    assert analyzer.analyze_file("u.rs", "fn (x)\nmod {\nlet y = 1;") == []


def test_detect_dx_patterns(analyzer):
    source = "<div>\n  <dxButton onClick={x}>Hi</dxButton>\n<dxiHome />\n"
    assert analyzer.detect_dx_patterns(source) == [
        DxPattern(component_name="dxButton", line=2, col=2),
        DxPattern(component_name="dxiHome", line=3, col=0),
    ]


def test_detect_dx_patterns_none(analyzer):
    assert analyzer.detect_dx_patterns("<div><span>plain</span></div>") == []