"""
Kaleidoscope REPL.

Reads units from a file or stdin, reporting each one as it is compiled:

    $ kaleidoscope
    ready> def add(a b) a + b
    Parsed a function definition.
    ready> add(1, 2)
    Parsed a top-level expression.

Diagnostics and prompts go to stderr; IR goes to stdout.
"""

import logging
from typing import Optional, TextIO

import click

from . import __version__
from .config import SessionConfig, DEFAULT_MODULE_NAME
from .session import CompilationSession, UnitOutcome

PROMPT = "ready> "


def report(outcome: UnitOutcome, emit_ir: bool = False) -> None:
    """Print one unit's outcome the way the interactive loop does."""
    click.echo(outcome.message, err=True)
    if outcome.ok and emit_ir and outcome.ir:
        click.echo(outcome.ir)
    if outcome.value is not None:
        click.echo(f"Evaluated to {outcome.value:f}", err=True)


def run_session(session: CompilationSession, emit_ir: bool = False,
                dump_module: bool = False) -> int:
    """
    Drive `session` to the end of its input.

    Returns:
        Number of units that failed
    """
    failures = 0
    while True:
        click.echo(PROMPT, nl=False, err=True)
        outcome = session.step()
        if outcome is None:
            break
        report(outcome, emit_ir)
        if not outcome.ok:
            failures += 1

    click.echo(err=True)
    if dump_module:
        click.echo(session.module_ir())
    return failures


@click.command()
@click.argument("source", type=click.File("r"), default="-")
@click.option("--emit-ir", is_flag=True, help="Print the IR of every compiled unit.")
@click.option("--dump-module", is_flag=True, help="Print the whole module at end of input.")
@click.option("--jit", is_flag=True, help="Evaluate top-level expressions natively.")
@click.option("--no-verify", is_flag=True, help="Skip the LLVM verifier.")
@click.option("--module-name", default=DEFAULT_MODULE_NAME, show_default=True,
              help="Name of the LLVM module.")
@click.option("--target-triple", default=None, help="Target triple (defaults to the host).")
@click.option("-v", "--verbose", is_flag=True, help="Log compiler internals to stderr.")
@click.version_option(__version__, prog_name="kaleidoscope")
def main(source: TextIO, emit_ir: bool, dump_module: bool, jit: bool, no_verify: bool,
         module_name: str, target_triple: Optional[str], verbose: bool):
    """Compile Kaleidoscope from SOURCE (stdin by default)."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    config = SessionConfig(
        module_name=module_name,
        verify=not no_verify,
        target_triple=target_triple,
        jit=jit,
    )
    session = CompilationSession(source, config)
    run_session(session, emit_ir, dump_module)


if __name__ == "__main__":
    main()
