"""Tests for the macro_rules! engine: rule parsing, matching and transcription."""

import pytest

from macroscope.macros import ExpandError, MacroDefinition, MacroRulesExpander
from macroscope.macros.rules import CrateRef, Repeat, Var
from macroscope.syntax.ast import MacroCall
from macroscope.syntax.kinds import SyntaxKind
from macroscope.syntax.lexer import tokenize


def significant(text):
    return [token for token in tokenize(text) if not token.kind.is_trivia()]


def define(source):
    return MacroDefinition.parse(significant(source))


def expand(source, arguments):
    """Expand a definition against argument text, joining tokens with spaces."""
    tokens = MacroRulesExpander.expand_tokens(define(source), significant(arguments))
    return " ".join(token.text for token in tokens)


class TestDefinitionParsing:
    """Turning macro_rules! source into rules."""

    def test_name_and_rules(self):
        """Rules separated by `;` are all collected."""
        definition = define("macro_rules! pick { (a) => { 1 }; (b) => { 2 }; }")
        assert definition.name == "pick"
        assert len(definition.rules) == 2

    def test_variables_and_repetitions(self):
        """`$($x:expr),*` parses into a separated repetition."""
        definition = define("macro_rules! vec_of { ($($x:expr),*) => { [$($x),*] } }")
        (rule,) = definition.rules
        (repeat,) = rule.pattern
        assert isinstance(repeat, Repeat)
        assert repeat.separator.text == ","
        assert repeat.op == "*"
        assert repeat.elements == (Var("x", "expr"),)

    def test_crate_reference(self):
        """`$crate` in a body is a crate reference."""
        definition = define("macro_rules! m { () => { $crate::bar!() } }")
        assert isinstance(definition.rules[0].body[0], CrateRef)

    def test_any_delimiters(self):
        """Rules and their block can use any delimiter."""
        definition = define("macro_rules! m [ {} => (x) ]")
        assert len(definition.rules) == 1

    @pytest.mark.parametrize(
        "source",
        [
            "macro_rules! { () => {} }",
            "macro_rules! m;",
            "macro_rules! m {}",
            "macro_rules! m { () {} }",
            "macro_rules! m { ($x) => {} }",
            "macro_rules! m { ($x:foo) => {} }",
            "macro_rules! m { ($(a)) => {} }",
            "macro_rules! m { (a => {} }",
        ],
    )
    def test_malformed_definitions(self, source):
        """Malformed definitions raise ExpandError."""
        with pytest.raises(ExpandError):
            define(source)


class TestMatching:
    """Selecting a rule and binding fragments."""

    def test_no_arguments(self):
        """An empty pattern matches an empty call."""
        assert expand("macro_rules! foo { () => { fn b(){} } }", "") == "fn b ( ) { }"

    def test_first_matching_rule_wins(self):
        """Rules are tried in order."""
        source = "macro_rules! pick { (a) => { 1 }; (b) => { 2 }; ($x:ident) => { 3 } }"
        assert expand(source, "a") == "1"
        assert expand(source, "b") == "2"
        assert expand(source, "c") == "3"

    def test_no_rule_matches(self):
        """Arguments no rule accepts raise ExpandError."""
        with pytest.raises(ExpandError):
            expand("macro_rules! pick { (a) => { 1 } }", "b")

    def test_trailing_input_does_not_match(self):
        """A pattern must consume every argument."""
        with pytest.raises(ExpandError):
            expand("macro_rules! pick { (a) => { 1 } }", "a a")

    def test_expressions_stop_at_separators(self):
        """An expr ends at a comma outside its groups."""
        source = "macro_rules! add { ($a:expr, $b:expr) => { $a + $b } }"
        assert expand(source, "1 * 2, f(x, y)") == "1 * 2 + f ( x , y )"

    def test_ident_fragment(self):
        """ident accepts identifiers only."""
        source = "macro_rules! make { ($name:ident) => { fn $name() {} } }"
        assert expand(source, "hello") == "fn hello ( ) { }"
        with pytest.raises(ExpandError):
            expand(source, "1")

    def test_literal_fragment_accepts_negation(self):
        """A literal may carry a leading minus."""
        source = "macro_rules! lit { ($l:literal) => { $l } }"
        assert expand(source, "-1") == "- 1"
        assert expand(source, '"s"') == '"s"'

    def test_type_stops_before_equals(self):
        """A ty ends before `=`."""
        source = "macro_rules! alias { ($t:ty = $e:expr) => { let _: $t = $e; } }"
        assert expand(source, "Vec<u8> = vec![]") == "let _ : Vec < u8 > = vec ! [ ] ;"

    def test_token_trees(self):
        """tt takes one token or one delimited group."""
        source = "macro_rules! all { ($($t:tt)*) => { $($t)* } }"
        assert expand(source, "a (b c) d") == "a ( b c ) d"

    def test_block_fragment(self):
        """block takes a braced group."""
        source = "macro_rules! run { ($b:block) => { loop $b } }"
        assert expand(source, "{ x }") == "loop { x }"

    def test_visibility_is_optional(self):
        """vis may match nothing."""
        source = "macro_rules! item { ($v:vis struct $n:ident) => { $v struct $n; } }"
        assert expand(source, "pub(crate) struct A") == "pub ( crate ) struct A ;"
        assert expand(source, "struct A") == "struct A ;"

    def test_group_delimiter_must_match(self):
        """A pattern group only matches the same delimiter."""
        source = "macro_rules! paren { (($x:tt)) => { $x } }"
        assert expand(source, "(a)") == "a"
        with pytest.raises(ExpandError):
            expand(source, "[a]")


class TestRepetition:
    """$(...) sep op in patterns and bodies."""

    def test_separated_list(self):
        """Separators are matched between iterations and re-emitted."""
        source = "macro_rules! vec_of { ($($x:expr),*) => { [$($x),*] } }"
        assert expand(source, "1, 2 + 3, x") == "[ 1 , 2 + 3 , x ]"

    def test_empty_star_repetition(self):
        """`*` accepts zero iterations."""
        source = "macro_rules! vec_of { ($($x:expr),*) => { [$($x),*] } }"
        assert expand(source, "") == "[ ]"

    def test_plus_needs_one_iteration(self):
        """`+` rejects zero iterations."""
        source = "macro_rules! some { ($($x:ident)+) => { $($x)+ } }"
        assert expand(source, "a b") == "a b"
        with pytest.raises(ExpandError):
            expand(source, "")

    def test_optional(self):
        """`?` accepts zero or one iteration."""
        source = "macro_rules! opt { ($(pub)? fn) => { ok } }"
        assert expand(source, "fn") == "ok"
        assert expand(source, "pub fn") == "ok"

    def test_nested_repetition(self):
        """Repetitions nest to any depth."""
        source = "macro_rules! flat { ($([$($v:literal)*])*) => { $($($v)*)* } }"
        assert expand(source, "[1 2] [3] []") == "1 2 3"

    def test_mismatched_counts(self):
        """Variables in one repetition must repeat equally often."""
        source = "macro_rules! zip { ($($a:ident)* ; $($b:ident)*) => { $($a $b)* } }"
        assert expand(source, "x y ; z w") == "x z y w"
        with pytest.raises(ExpandError):
            expand(source, "x y ; z")

    def test_repetition_without_variables(self):
        """A body repetition needs a repeating variable."""
        with pytest.raises(ExpandError):
            expand("macro_rules! m { () => { $(a)* } }", "")

    def test_variable_used_outside_its_repetition(self):
        """A repeated variable cannot be used outside its repetition."""
        with pytest.raises(ExpandError):
            expand("macro_rules! m { ($($x:ident)*) => { $x } }", "a b")


class TestTranscription:
    """Body-only constructs."""

    def test_crate_becomes_keyword(self):
        """`$crate` transcribes to the crate keyword."""
        tokens = MacroRulesExpander.expand_tokens(
            define("macro_rules! m { () => { $crate::bar!() } }"), []
        )
        assert tokens[0].kind is SyntaxKind.KEYWORD
        assert tokens[0].text == "crate"

    def test_unbound_variable_passes_through(self):
        """Unknown `$name` is copied as written."""
        assert expand("macro_rules! m { () => { $x } }", "") == "$ x"


class TestMacroRulesExpander:
    """The one-level expansion service over syntax nodes."""

    def test_expands_known_call(self, expansion_tree):
        """A known call yields its expansion tree."""
        expander = MacroRulesExpander({"foo": define("macro_rules! foo { ($x:ident) => { bar!($x); } }")})
        expanded = expander.expand(expansion_tree("foo!(a)"))
        assert expanded.kind is SyntaxKind.MACRO_CALL
        assert MacroCall(expanded).name() == "bar"
        assert expanded.text == "bar!(a);"

    def test_unknown_macro(self, expansion_tree):
        """Unknown macros give None."""
        assert MacroRulesExpander().expand(expansion_tree("nope!()")) is None

    def test_no_matching_rule(self, expansion_tree):
        """Matching failures give None instead of raising."""
        expander = MacroRulesExpander({"foo": define("macro_rules! foo { () => {} }")})
        assert expander.expand(expansion_tree("foo!(1)")) is None

    def test_non_call_node(self, expansion_tree):
        """Nodes that are not calls give None."""
        expander = MacroRulesExpander({"foo": define("macro_rules! foo { () => {} }")})
        assert expander.expand(expansion_tree("a b")) is None

    def test_definitions_from_parsed_file(self, rust_parser):
        """Definitions are collected from a parsed file."""
        root = rust_parser.parse_text(
            "macro_rules! foo { () => { 1 } }\n"
            "macro_rules! bar { () => { 2 } }\n"
            "macro_rules! foo { () => { 3 } }\n"
        )
        expander = MacroRulesExpander.from_tree(root)
        assert sorted(expander.definitions) == ["bar", "foo"]
        # Later definitions win
        rule = expander.definitions["foo"].rules[0]
        assert [element.token.text for element in rule.body] == ["3"]

    def test_definitions_before_offset(self, rust_parser):
        """Only definitions starting before the offset are collected."""
        source = "macro_rules! foo { () => { 1 } }\nfn main() { foo!(); }\nmacro_rules! bar { () => { 2 } }\n"
        root = rust_parser.parse_text(source)
        expander = MacroRulesExpander.from_tree(root, before=source.index("foo!()"))
        assert sorted(expander.definitions) == ["foo"]
