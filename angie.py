#!/usr/bin/env python3
"""Angie's Cleaning Service management CLI."""

import os
import subprocess
import sys
from pathlib import Path

import click

from angicleans.catalog.models import AddOn, AddOnSelection, PropertySize
from angicleans.catalog.pricing import (
    SERVICE_DESCRIPTIONS,
    calculate_quote,
    normalize_service_type,
    parse_service_type,
)
from angicleans.quote.document import format_rand, load_branding, sample_quote_document
from angicleans.settings import get_settings


def _run(args: list[str], *, replace: bool = False) -> None:
    click.echo(
        f"  {click.style('>', dim=True)} {click.style(' '.join(args), dim=True)}\n"
    )
    if replace:
        os.execvp(args[0], args)
    result = subprocess.run(args)
    if result.returncode != 0:
        click.echo(
            f"  {click.style('✗', fg='red')} exited with code {result.returncode}"
        )
        sys.exit(result.returncode)


def _ok(text: str) -> None:
    click.echo(f"  {click.style('✓', fg='green')} {text}")


def _warn(text: str) -> None:
    click.echo(f"  {click.style('!', fg='yellow')} {text}")


def _header(text: str) -> None:
    click.echo(f"\n  {click.style(text, fg='cyan', bold=True)}\n")


def _parse_add_on(value: str) -> AddOnSelection:
    name, sep, quantity = value.rpartition("=")
    if not sep:
        return AddOnSelection(name=value)
    try:
        return AddOnSelection(name=name, quantity=int(quantity))
    except ValueError:
        raise click.BadParameter(f"quantity must be a number: {value!r}") from None


@click.group()
def cli() -> None:
    """Angie's Cleaning Service management CLI."""


@cli.command()
@click.argument("uvicorn_args", nargs=-1)
def app(uvicorn_args: tuple[str, ...]) -> None:
    """Start uvicorn with --reload."""
    _header("Starting quote server")
    _run(
        ["uv", "run", "uvicorn", "angicleans.app:app", "--reload", *uvicorn_args],
        replace=True,
    )


@cli.command()
@click.argument("service_type")
@click.argument("property_size", type=click.Choice([s.value for s in PropertySize]))
@click.option(
    "--add-on",
    "add_ons",
    multiple=True,
    help="Add-on name, optionally NAME=QUANTITY. Repeatable.",
)
def quote(service_type: str, property_size: str, add_ons: tuple[str, ...]) -> None:
    """Price a cleaning from the catalog."""
    selections = [_parse_add_on(value) for value in add_ons]
    priced = calculate_quote(service_type, property_size, selections)

    _header(normalize_service_type(service_type))
    service = parse_service_type(service_type)
    if service is not None:
        click.echo(f"  {click.style(SERVICE_DESCRIPTIONS[service], dim=True)}\n")
    click.echo(f"  Base ({property_size}): {format_rand(priced.base_price)}")
    for item in priced.line_items:
        click.echo(f"  {item.name} x{item.quantity}: {format_rand(item.total)}")
    click.echo(f"\n  {click.style('Total', bold=True)}: {format_rand(priced.total)}")
    for key in priced.unknown_keys:
        _warn(f"not in the catalog, priced as zero: {key}")


@cli.command("add-ons")
def add_ons() -> None:
    """List the add-on names accepted by `quote --add-on`."""
    for add_on in AddOn:
        click.echo(f"  {add_on.value}")


@cli.command("preview-email")
@click.argument("output", type=click.Path(dir_okay=False, path_type=Path))
def preview_email(output: Path) -> None:
    """Render the sample quote email to OUTPUT."""
    _header("Rendering sample quote email")
    document = sample_quote_document(load_branding(get_settings().logo_path))
    output.write_text(document.html, encoding="utf-8")
    _ok(f"Wrote {output} ({'with' if document.has_logo else 'without'} logo)")


@cli.command()
@click.argument("pytest_args", nargs=-1)
def test(pytest_args: tuple[str, ...]) -> None:
    """Run pytest."""
    _header("Running tests")
    _run(["uv", "run", "pytest", "tests/", "-v", *pytest_args], replace=True)


@cli.command()
def lint() -> None:
    """Run mypy."""
    _header("Running mypy")
    _run(["uv", "run", "mypy", "."])
    _ok("Type check passed")


if __name__ == "__main__":
    cli()
