# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Inspection commands for types bound with jsonbind."""

from __future__ import annotations

import importlib
from pathlib import Path
from typing import Annotated

import typer
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..decoding import Deserializer
from ..descriptors import describe
from ..encoding import Serializer
from ..errors import DecodeError, EncodeError, JsonBindError
from ..options import DecodeOptions, EncodeOptions

app = typer.Typer(
    name="jsonbind",
    help="Inspect type descriptors and round-trip JSON documents through declared types.",
    no_args_is_help=True,
)


def load_type(reference: str) -> type:
    """Import the class named by ``reference`` (``package.module:QualName``).

    Raises:
        typer.BadParameter: If the reference is malformed or does not name a class.
    """

    module_name, _, qualname = reference.partition(":")
    if not module_name or not qualname:
        raise typer.BadParameter(f"expected MODULE:TYPE, got {reference!r}")
    try:
        target: object = importlib.import_module(module_name)
    except ImportError as exc:
        raise typer.BadParameter(f"cannot import {module_name!r}: {exc}") from exc
    for attribute in qualname.split("."):
        target = getattr(target, attribute, None)
    if not isinstance(target, type):
        raise typer.BadParameter(f"{reference!r} does not name a class")
    return target


@app.command("describe")
def describe_command(
    reference: Annotated[str, typer.Argument(help="Target class as MODULE:TYPE.")],
    include_private: Annotated[bool, typer.Option("--include-private", help="Show underscore-prefixed fields.")] = False,
) -> None:
    """Print the fields jsonbind walks for a class."""

    target = load_type(reference)
    console = Console(highlight=False)
    try:
        descriptor = describe(target)
    except JsonBindError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(code=1) from exc

    table = Table(title=target.__qualname__, box=box.SIMPLE)
    table.add_column("Field", style="bold")
    table.add_column("Key")
    table.add_column("Shape")
    table.add_column("Private")
    for field in descriptor.visible_fields(include_private=include_private):
        table.add_row(
            escape(field.name),
            escape(field.key),
            escape(field.shape.describe()),
            "yes" if field.private else "",
        )
    console.print(table)


@app.command("roundtrip")
def roundtrip_command(
    reference: Annotated[str, typer.Argument(help="Target class as MODULE:TYPE.")],
    source: Annotated[Path, typer.Argument(exists=True, dir_okay=False, readable=True, help="JSON document.")],
    pretty: Annotated[bool, typer.Option("--pretty", help="Indent the output.")] = False,
    tag_types: Annotated[bool, typer.Option("--tag-types", help="Embed type identity tags.")] = False,
    include_private: Annotated[bool, typer.Option("--include-private", help="Walk underscore-prefixed fields.")] = False,
) -> None:
    """Decode a document into a class and print it re-encoded."""

    target = load_type(reference)
    deserializer = Deserializer(options=DecodeOptions(include_private=include_private))
    serializer = Serializer(EncodeOptions(pretty=pretty, tag_types=tag_types, include_private=include_private))
    try:
        instance = deserializer.deserialize(target, source.read_bytes())
        text = serializer.serialize(instance)
    except (DecodeError, EncodeError) as exc:
        Console(stderr=True, highlight=False).print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(code=1) from exc
    typer.echo(text)


__all__ = ["app", "load_type"]
