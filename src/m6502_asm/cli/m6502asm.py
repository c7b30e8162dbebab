"""
m6502asm - 6502 Assembler Command-Line Interface
================================================

Usage Examples
--------------
Basic assembly (writes out.rom and out.rom.map):
    $ m6502asm game.s

With output file:
    $ m6502asm game.s -o game.rom

With include path and symbol file:
    $ m6502asm -I ./include game.s -o game.rom -s game.sym

Verbose mode (debug logging from every assembler stage):
    $ m6502asm -v game.s
"""

from pathlib import Path
from typing import Optional
import logging

import click

from m6502_asm import __version__
from m6502_asm.assembler import Assembler
from m6502_asm.cli.errors import handle_cli_exception
from m6502_asm.errors import AssemblyFailedError

# Output file name used when -o is not given
DEFAULT_OUTPUT = Path("out.rom")


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


def source_map_path(output: Path) -> Path:
    """The source map lives next to the ROM as '<output>.map'."""
    return output.with_name(output.name + ".map")


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=DEFAULT_OUTPUT,
    show_default=True,
    help="Output ROM image",
)
@click.option(
    "-I", "--include",
    multiple=True,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Add include search path (can be repeated)",
)
@click.option(
    "-s", "--symbols",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate symbol file",
)
@click.option(
    "--map/--no-map", "write_map",
    default=True,
    help="Write the JSON source map to OUTPUT.map (default: enabled)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="m6502asm")
def main(
    input_file: Path,
    output: Path,
    include: tuple[Path, ...],
    symbols: Optional[Path],
    write_map: bool,
    verbose: bool,
) -> None:
    """
    Assemble 6502 source code into a ROM image.

    INPUT_FILE is the assembly source file to assemble.

    \b
    Examples:
        m6502asm game.s                 # Outputs out.rom, out.rom.map
        m6502asm game.s -o game.rom     # Specify output file
        m6502asm -I inc/ game.s         # Add include path
    """
    setup_logging(verbose)
    asm = Assembler(include_paths=list(include))

    try:
        if verbose:
            click.echo(f"Assembling {input_file}...")

        asm.parse_file(input_file)
        result = asm.assemble()

        result.write_rom(output)
        if verbose:
            click.echo(f"Wrote {len(result.code)} bytes to {output}")

        if write_map:
            map_file = source_map_path(output)
            result.write_source_map(map_file)
            if verbose:
                click.echo(f"Wrote source map to {map_file}")

        if symbols:
            result.write_symbols(symbols)
            if verbose:
                click.echo(f"Wrote symbols to {symbols}")

        if verbose:
            click.echo(f"Assembly complete: {len(result.code)} bytes at ${result.origin:04X}")
            click.echo(f"Defined {len(result.labels)} labels")

    except AssemblyFailedError as e:
        # Show the offending line under the message
        source_line = None
        if verbose and e.error.is_tagged:
            source_line = asm.units.line_comment(e.error.tag)
        handle_cli_exception(e, verbose=verbose, error_type="Assembly", source_line=source_line)

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Assembly")


if __name__ == "__main__":
    main()
