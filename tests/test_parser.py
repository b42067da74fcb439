"""
Parser tests: line handling, operand shapes, two-pass label resolution and
the parse error taxonomy.
"""

import pytest

from hrm_interpreter.instructions import Addr, Instruction, Opcode
from hrm_interpreter.parser import ParseError, ParseErrorKind, ScriptParser, parse


ADD_PAIRS = """-- HUMAN RESOURCE MACHINE PROGRAM --

a:
    INBOX
    COPYTO   0
    INBOX
    ADD      0
    OUTBOX
    JUMP     a


"""


def _ops(program):
    return [instr.opcode for instr in program]


def _error(source: str) -> ParseError:
    with pytest.raises(ParseError) as exc:
        parse(source)
    return exc.value


# ─── Basic parsing ─────────────────────────

class TestBasicParsing:
    def test_game_export(self):
        program = parse(ADD_PAIRS)
        assert list(program) == [
            Instruction(Opcode.INBOX),
            Instruction(Opcode.COPYTO, addr=Addr(0)),
            Instruction(Opcode.INBOX),
            Instruction(Opcode.ADD, addr=Addr(0)),
            Instruction(Opcode.OUTBOX),
            Instruction(Opcode.JUMP, target=0),
        ]
        assert program.labels == {"a": 0}

    def test_source_lines_recorded(self):
        program = parse(ADD_PAIRS)
        assert program[0].line == 4
        assert program[5].line == 9

    def test_every_mnemonic(self):
        program = parse(
            "s:\nINBOX\nOUTBOX\nCOPYFROM 1\nCOPYTO 2\nADD 3\nSUB 4\n"
            "BUMPUP 5\nBUMPDN 6\nJUMP s\nJUMPZ s\nJUMPN s\n")
        assert _ops(program) == list(Opcode)

    def test_indirect_operands(self):
        program = parse("COPYFROM [10]\nCOPYTO [80]\nADD [0]\nSUB [88]\nBUMPUP [5]\nBUMPDN [9]\n")
        assert all(instr.addr.indirect for instr in program)
        assert [instr.addr.index for instr in program] == [10, 80, 0, 88, 5, 9]

    def test_empty_script(self):
        assert len(parse("")) == 0
        assert len(parse("-- HUMAN RESOURCE MACHINE PROGRAM --\n")) == 0

    def test_parse_is_deterministic(self):
        assert parse(ADD_PAIRS) == parse(ADD_PAIRS)

    def test_parser_instance_reusable(self):
        p = ScriptParser()
        first = p.parse(ADD_PAIRS)
        second = p.parse("b:\nJUMP b\n")
        assert p.labels == {"b": 0}
        assert first != second
        assert first == parse(ADD_PAIRS)


# ─── Whitespace, comments, DEFINE ─────────────

class TestLineHandling:
    def test_whitespace_insensitive(self):
        messy = "a:\n  INBOX   \n\tCOPYTO \t  0\nINBOX\n      ADD 0\nOUTBOX\n JUMP    a"
        assert parse(messy) == parse(ADD_PAIRS)

    def test_comment_lines_dropped(self):
        program = parse("-- header --\n  -- indented comment\nINBOX\nCOMMENT  0\nOUTBOX\n")
        assert _ops(program) == [Opcode.INBOX, Opcode.OUTBOX]

    def test_comment_must_be_the_command(self):
        err = _error("INBOX COMMENT\n")
        assert err.kind == ParseErrorKind.BAD_OPERAND

    def test_define_stops_parsing(self):
        source = (
            "INBOX\nOUTBOX\n\n"
            "DEFINE COMMENT 0\n"
            "eJzzYGBg0GLOMDxl4dQtF:\n"
            "NOTANOP 12 13;\n"
            "DEFINE LABEL 1\n"
        )
        program = parse(source)
        assert _ops(program) == [Opcode.INBOX, Opcode.OUTBOX]

    def test_error_line_counts_skipped_lines(self):
        err = _error("-- header --\n\nCOMMENT 0\nINBOX\nFOO\n")
        assert err.line_num == 5
        assert err.line_text == "FOO"
        assert str(err).startswith("Line 5:")


# ─── Labels ─────────────────────────────────

class TestLabels:
    def test_forward_and_backward_jumps(self):
        program = parse("a:\nJUMP b\nb:\nJUMPZ b\nJUMP a\nc:\nJUMPN b\n")
        assert [instr.target for instr in program] == [1, 1, 0, 1]

    def test_stacked_labels_share_index(self):
        program = parse("a:\nb:\nCOPYTO 0\nJUMP a\nc:\nJUMPN b\n")
        assert program.labels == {"a": 0, "b": 0, "c": 2}

    def test_label_at_end_targets_program_length(self):
        program = parse("JUMP done\nOUTBOX\ndone:\n")
        assert program[0].target == 2 == len(program)

    def test_unused_label_is_fine(self):
        program = parse("unused:\nINBOX\nOUTBOX\n")
        assert program.labels == {"unused": 0}

    def test_numeric_label_name(self):
        program = parse("0:\nJUMP 0\n")
        assert program[0].target == 0

    def test_unknown_label(self):
        err = _error("a:\nJUMP a\nJUMPZ z\n")
        assert err.kind == ParseErrorKind.UNKNOWN_LABEL
        assert err.line_num == 3

    def test_duplicate_label(self):
        err = _error("a:\nINBOX\na:\nOUTBOX\n")
        assert err.kind == ParseErrorKind.DUPLICATE_LABEL
        assert err.line_num == 3
        assert "line 1" in str(err)


# ─── Errors ──────────────────────────────────

class TestParseErrors:
    def test_unknown_mnemonic(self):
        err = _error("INBOX\nMULTIPLY 3\n")
        assert err.kind == ParseErrorKind.UNKNOWN_MNEMONIC
        assert err.line_num == 2

    def test_mnemonics_are_case_sensitive(self):
        assert _error("inbox\n").kind == ParseErrorKind.UNKNOWN_MNEMONIC

    @pytest.mark.parametrize("line", [
        "INBOX 3",
        "OUTBOX [1]",
        "COPYTO",
        "COPYFROM -1",
        "COPYFROM [a]",
        "ADD 1 2",
        "SUB [1",
        "BUMPUP [[1]]",
        "JUMP",
        "JUMP [a]",
        "JUMPZ a b",
    ])
    def test_bad_operands(self, line):
        err = _error(f"a:\n{line}\n")
        assert err.kind == ParseErrorKind.BAD_OPERAND
        assert err.line_num == 2

    @pytest.mark.parametrize("line", [
        "a: INBOX",
        "a :",
        "a b:",
        "COPYTO 0:",
        ":",
        "a::",
    ])
    def test_malformed_colon(self, line):
        err = _error(f"INBOX\n{line}\n")
        assert err.kind == ParseErrorKind.MALFORMED_COLON
        assert err.line_num == 2


# ─── Listing ─────────────────────────────────

class TestListing:
    def test_listing_reparses_to_same_program(self):
        program = parse(ADD_PAIRS)
        assert parse(program.listing()) == program

    def test_listing_keeps_declared_labels(self):
        text = parse(ADD_PAIRS).listing()
        assert text.splitlines()[0] == "-- HUMAN RESOURCE MACHINE PROGRAM --"
        assert "a:" in text.splitlines()
        assert "    JUMP     a" in text.splitlines()
        assert "    COPYTO   0" in text.splitlines()

    def test_listing_indirect_and_end_label(self):
        program = parse("COPYFROM [3]\nJUMPZ end\nOUTBOX\nend:\n")
        text = program.listing()
        assert "    COPYFROM [3]" in text.splitlines()
        assert text.rstrip().endswith("end:")
        assert parse(text) == program
