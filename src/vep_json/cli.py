"""vep-json: VEP-annotated VCF to JSON records CLI."""

import json
import logging
import sys
from pathlib import Path
from typing import Annotated, TextIO

import typer
from rich.console import Console

from . import __version__
from .assembler import RecordAssembler
from .config import ConfigValidationError, OutputConfig, load_config
from .frequencies import TableFrequencySource
from .severity import DEFAULT_CONSEQUENCE_RANKS


def version_callback(value: bool) -> None:
    if value:
        print(__version__)
        raise typer.Exit()


app = typer.Typer(
    name="vep-json", help="Convert VEP-annotated variants into consolidated JSON records"
)
console = Console(stderr=True)


@app.callback()
def main_callback(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version", callback=version_callback, is_eager=True, help="Show version and exit"
        ),
    ] = None,
) -> None:
    pass


def setup_logging(verbose: bool, quiet: bool) -> None:
    """Configure logging based on verbosity flags."""
    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )
    logging.getLogger("vep_json").setLevel(level)


def _resolve_config(
    config_file: Path | None,
    assembly: str | None,
    delimiter: str | None,
) -> OutputConfig:
    overrides = {"assembly": assembly, "delimiter": delimiter}
    if config_file is not None:
        return load_config(config_file, overrides)

    return OutputConfig(**{k: v for k, v in overrides.items() if v is not None})


def _write_records(assembler: RecordAssembler, variants, out: TextIO) -> int:
    count = 0
    for record in assembler.iter_records(variants):
        out.write(json.dumps(record) + "\n")
        count += 1
    return count


@app.command()
def convert(
    vcf_path: Path = typer.Argument(..., help="Path to VEP-annotated VCF file (.vcf, .vcf.gz)"),
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Write JSON lines to file")
    ] = None,
    config_file: Annotated[
        Path | None, typer.Option("--config", "-c", help="TOML configuration file")
    ] = None,
    assembly: Annotated[
        str | None, typer.Option("--assembly", "-a", help="Assembly name for every record")
    ] = None,
    delimiter: Annotated[
        str | None, typer.Option("--delimiter", help="Delimiter for the input field ('+' = space)")
    ] = None,
    custom: Annotated[
        list[str] | None,
        typer.Option("--custom", help="INFO field to attach as a custom annotation"),
    ] = None,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-error output"),
) -> None:
    """Convert a VEP-annotated VCF file into one JSON record per line."""
    setup_logging(verbose, quiet)

    if not vcf_path.exists():
        console.print(f"[red]Error: VCF file not found: {vcf_path}[/red]")
        raise typer.Exit(1)

    try:
        config = _resolve_config(config_file, assembly, delimiter)
    except (FileNotFoundError, ConfigValidationError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1) from None

    if not verbose and not quiet:
        logging.getLogger("vep_json").setLevel(config.log_level.upper())

    from .vcf_parser import VEPVariantReader

    assembler = RecordAssembler(
        config,
        DEFAULT_CONSEQUENCE_RANKS,
        TableFrequencySource(
            af_1kg=config.af_1kg,
            af_esp=config.af_esp,
            af_exac=config.af_exac,
            af_gnomad=config.af_gnomad,
        ),
    )

    try:
        with VEPVariantReader(vcf_path, custom_fields=custom or []) as reader:
            if output:
                with open(output, "w") as out:
                    count = _write_records(assembler, reader, out)
            else:
                count = _write_records(assembler, reader, sys.stdout)
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1) from None

    if not quiet:
        destination = str(output) if output else "stdout"
        console.print(f"[green]✓[/green] Wrote {count:,} records to {destination}")


@app.command()
def doctor() -> None:
    """Check system dependencies.

    Verifies that all required dependencies are installed and
    provides installation instructions for any that are missing.
    """
    from .doctor import DependencyChecker

    console.print("\n[bold]vep-json System Check[/bold]")
    console.print("─" * 30)

    checker = DependencyChecker()

    all_passed = True
    for result in checker.check_all():
        if result.passed:
            version_str = f" ({result.version})" if result.version else ""
            console.print(f"[green]✓[/green] {result.name}{version_str}")
        else:
            all_passed = False
            console.print(f"[red]✗[/red] {result.name}")
            if result.message:
                console.print(f"    {result.message}")

    console.print()

    if all_passed:
        console.print("[green]All systems ready![/green]")
    else:
        console.print("[yellow]Some checks failed.[/yellow]")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
