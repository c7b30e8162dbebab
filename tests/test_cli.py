# =============================================================================
# test_cli.py - m6502asm Command-Line Tests
# =============================================================================
# Tests for the click front end: output files, options and exit codes.
# =============================================================================

import json

import pytest
from click.testing import CliRunner

from m6502_asm import __version__
from m6502_asm.cli.errors import ExitCode
from m6502_asm.cli.m6502asm import main, source_map_path


PROGRAM = ".org $8000\nstart:\n  lda #$01\n  rts\n"


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def source(tmp_path):
    path = tmp_path / "prog.s"
    path.write_text(PROGRAM)
    return path


# =============================================================================
# Basic Usage
# =============================================================================

class TestBasicUsage:
    """Help, version and the default outputs."""

    def test_help(self, runner):
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "INPUT_FILE" in result.output
        assert "--no-map" in result.output

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_default_output_names(self, runner, source, tmp_path):
        with runner.isolated_filesystem(temp_dir=tmp_path):
            result = runner.invoke(main, [str(source)])
            assert result.exit_code == ExitCode.SUCCESS, result.output
            with open("out.rom", "rb") as f:
                assert f.read() == bytes([0xA9, 0x01, 0x60])
            with open("out.rom.map") as f:
                data = json.load(f)
            assert [e["address"] for e in data["entries"]] == [0x8000, 0x8002]

    def test_source_map_path(self, tmp_path):
        assert source_map_path(tmp_path / "game.rom") == tmp_path / "game.rom.map"


# =============================================================================
# Options
# =============================================================================

class TestOptions:
    """Output, include, symbol and map options."""

    def test_output_option(self, runner, source, tmp_path):
        rom = tmp_path / "game.rom"
        result = runner.invoke(main, [str(source), "-o", str(rom)])
        assert result.exit_code == 0, result.output
        assert rom.read_bytes() == bytes([0xA9, 0x01, 0x60])
        assert (tmp_path / "game.rom.map").exists()

    def test_no_map(self, runner, source, tmp_path):
        rom = tmp_path / "game.rom"
        result = runner.invoke(main, [str(source), "-o", str(rom), "--no-map"])
        assert result.exit_code == 0, result.output
        assert rom.exists()
        assert not (tmp_path / "game.rom.map").exists()

    def test_symbols(self, runner, source, tmp_path):
        sym = tmp_path / "prog.sym"
        result = runner.invoke(main, [str(source), "-o", str(tmp_path / "p.rom"), "-s", str(sym)])
        assert result.exit_code == 0, result.output
        assert "start $8000" in sym.read_text()

    def test_include_path(self, runner, tmp_path):
        inc = tmp_path / "inc"
        inc.mkdir()
        (inc / "util.s").write_text("util: rts\n")
        src_dir = tmp_path / "src"
        src_dir.mkdir()
        main_file = src_dir / "main.s"
        main_file.write_text('.org $8000\n  jsr util\n.include "util.s"\n')
        rom = tmp_path / "main.rom"

        result = runner.invoke(main, [str(main_file), "-I", str(inc), "-o", str(rom)])
        assert result.exit_code == 0, result.output
        assert rom.read_bytes() == bytes([0x20, 0x03, 0x80, 0x60])

    def test_verbose(self, runner, source, tmp_path):
        result = runner.invoke(main, [str(source), "-o", str(tmp_path / "p.rom"), "-v"])
        assert result.exit_code == 0, result.output
        assert "Assembly complete: 3 bytes at $8000" in result.output
        assert "Defined 1 labels" in result.output


# =============================================================================
# Errors
# =============================================================================

class TestErrors:
    """Exit codes and messages."""

    def test_assembly_error(self, runner, tmp_path):
        bad = tmp_path / "bad.s"
        bad.write_text("  nop\n  jmp nowhere\n")
        rom = tmp_path / "bad.rom"

        result = runner.invoke(main, [str(bad), "-o", str(rom)])
        assert result.exit_code == ExitCode.BUILD_ERROR
        assert f'Assembly error: {bad}:2:7: unknown label: "nowhere"' in result.output
        assert not rom.exists()

    def test_verbose_error_shows_source_line(self, runner, tmp_path):
        bad = tmp_path / "bad.s"
        bad.write_text("  nop\n  jmp nowhere ; far away\n")

        result = runner.invoke(main, [str(bad), "-o", str(tmp_path / "bad.rom"), "-v"])
        assert result.exit_code == ExitCode.BUILD_ERROR
        assert f"    {bad}:2:7: nowhere ; far away" in result.output

    def test_quiet_error_has_no_source_line(self, runner, tmp_path):
        bad = tmp_path / "bad.s"
        bad.write_text("  jmp nowhere\n")

        result = runner.invoke(main, [str(bad), "-o", str(tmp_path / "bad.rom")])
        assert result.exit_code == ExitCode.BUILD_ERROR
        assert f"    {bad}:1:7:" not in result.output

    def test_missing_input(self, runner, tmp_path):
        result = runner.invoke(main, [str(tmp_path / "absent.s")])
        assert result.exit_code == ExitCode.INVALID_ARGS

    def test_missing_include_dir(self, runner, source, tmp_path):
        result = runner.invoke(main, [str(source), "-I", str(tmp_path / "nope")])
        assert result.exit_code == ExitCode.INVALID_ARGS
