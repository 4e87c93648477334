"""CLI entry point for api-doc-assembler."""

import logging
from pathlib import Path

import click

from api_doc_assembler.assembler.builder import DocumentAssembler
from api_doc_assembler.config import AssemblerConfig, load_config
from api_doc_assembler.encoder import encode_document
from api_doc_assembler.errors import AssemblerError
from api_doc_assembler.metadata.base import BatchResult, SupportLevel
from api_doc_assembler.metadata.collector import collect_metadata
from api_doc_assembler.metadata.loader import dump_batch, load_batch

SUPPORT_LEVELS = [level.value for level in SupportLevel]


def _configure_logging(verbose: int) -> None:
    level = {0: logging.WARNING, 1: logging.INFO}.get(verbose, logging.DEBUG)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _build_config(
    config_path: Path | None,
    excludes: tuple[str, ...],
    strip_prefixes: tuple[str, ...],
    support_level: str | None,
    no_utilities: bool,
) -> AssemblerConfig:
    """Config file values, overridden by command-line options."""
    config = load_config(config_path)
    updates = {}
    if excludes:
        updates["excluded_prefixes"] = [*config.excluded_prefixes, *excludes]
    if strip_prefixes:
        updates["strip_prefixes"] = [*config.strip_prefixes, *strip_prefixes]
    if support_level:
        updates["support_level"] = SupportLevel(support_level)
    if no_utilities:
        updates["exclude_utilities"] = True
    return config.model_copy(update=updates)


def _write_document(batch: BatchResult, config: AssemblerConfig, output: Path, fmt: str) -> None:
    document = DocumentAssembler(config).assemble(batch)
    accept = output.suffix.lstrip(".") if fmt == "auto" else fmt
    _, text = encode_document(document, accept)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding="utf-8")
    click.echo(f"Wrote {len(document.paths)} paths, {len(document.definitions)} definitions to {output}")


def _assembly_options(func):
    options = [
        click.option("-o", "--output", required=True, type=click.Path(path_type=Path), help="Output file for the Swagger document."),
        click.option("--config", "config_path", default=None, type=click.Path(exists=True, path_type=Path), help="YAML configuration file."),
        click.option("--format", "fmt", default="auto", type=click.Choice(["auto", "json", "yaml"]), help="Output encoding (auto: from the output file suffix)."),
        click.option("--exclude", "excludes", multiple=True, help="Path prefix to leave out (repeatable)."),
        click.option("--strip-prefix", "strip_prefixes", multiple=True, help="Package prefix to strip from schema names (repeatable)."),
        click.option("--support-level", default=None, type=click.Choice(SUPPORT_LEVELS), help="Lowest route support level to document."),
        click.option("--no-utilities", is_flag=True, help="Do not document the utility sub-paths."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.option("-v", "--verbose", count=True, help="Log progress (-vv for debug output).")
def main(verbose: int):
    """API Doc Assembler: build Swagger documents from live service metadata."""
    _configure_logging(verbose)


@main.command()
@click.argument("base_url")
@click.option("-o", "--output", required=True, type=click.Path(path_type=Path), help="Output file for the metadata batch (YAML or .json).")
@click.option("--link", "links", multiple=True, help="Only fetch this service link (repeatable).")
def fetch(base_url: str, output: Path, links: tuple[str, ...]):
    """Fetch the metadata of every service of a host into a batch file."""
    click.echo(f"Fetching metadata from {base_url}...")
    try:
        batch = collect_metadata(base_url, links=list(links) or None)
        dump_batch(batch, output)
    except AssemblerError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Fetched {len(batch.resources)} resources ({len(batch.errors)} failed) into {output}")


@main.command()
@click.argument("batch_path", type=click.Path(exists=True, path_type=Path))
@_assembly_options
def assemble(batch_path: Path, output: Path, config_path: Path | None, fmt: str,
             excludes: tuple[str, ...], strip_prefixes: tuple[str, ...],
             support_level: str | None, no_utilities: bool):
    """Assemble a Swagger document from a metadata batch file."""
    click.echo(f"Reading metadata batch {batch_path}...")
    try:
        config = _build_config(config_path, excludes, strip_prefixes, support_level, no_utilities)
        batch = load_batch(batch_path)
        _write_document(batch, config, output, fmt)
    except AssemblerError as e:
        raise click.ClickException(str(e)) from e


@main.command()
@click.argument("base_url")
@_assembly_options
def run(base_url: str, output: Path, config_path: Path | None, fmt: str,
        excludes: tuple[str, ...], strip_prefixes: tuple[str, ...],
        support_level: str | None, no_utilities: bool):
    """Full pipeline: fetch metadata -> assemble the document."""
    click.echo(f"Fetching metadata from {base_url}...")
    try:
        config = _build_config(config_path, excludes, strip_prefixes, support_level, no_utilities)
        batch = collect_metadata(base_url)
        click.echo(f"Fetched {len(batch.resources)} resources ({len(batch.errors)} failed).")
        _write_document(batch, config, output, fmt)
    except AssemblerError as e:
        raise click.ClickException(str(e)) from e
