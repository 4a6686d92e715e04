"""Command-line interface for inspecting filter configuration messages."""

from __future__ import annotations

import json
import sys
from typing import TYPE_CHECKING

import click
from google.protobuf import descriptor_pb2, json_format
from rich.console import Console
from rich.table import Table

from filterproto.filters.network import init_demo_proto
from filterproto.proto import (
    JSONFormatError,
    MalformedEncoding,
    SerializationError,
    TextFormatError,
    field_type_name,
    message_class,
)

if TYPE_CHECKING:
    from filterproto.proto import Message

DEFAULT_TYPE = "greymatter_io.gm_proxy.source.filters.network.DemoConfig"

BINDINGS = [init_demo_proto]


def _load_bindings() -> list[descriptor_pb2.FileDescriptorProto]:
    return [descriptor_pb2.FileDescriptorProto.FromString(init().serialized_pb) for init in BINDINGS]


def _message_type(full_name: str) -> type[Message]:
    _load_bindings()
    try:
        return message_class(full_name)
    except KeyError:
        print(f"Unknown message type: {full_name}")
        sys.exit(1)


@click.group()
def cli() -> None:
    """Filter configuration message tools."""


@cli.command()
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def describe(output_json: bool) -> None:
    """Display the registered files, messages and fields."""
    files = _load_bindings()

    if output_json:
        print(json.dumps([json_format.MessageToDict(file) for file in files], indent=2))
        return

    console = Console()
    for file in files:
        console.print(f"[bold cyan]{file.name}[/bold cyan]")

        file_table = Table(show_header=False, box=None, padding=(0, 2, 0, 2))
        file_table.add_column("Label", style="dim")
        file_table.add_column("Value", style="white")
        file_table.add_row("Package", file.package)
        file_table.add_row("Syntax", file.syntax or "proto2")
        console.print(file_table)
        console.print()

        for message in file.message_type:
            console.print(f"[bold cyan]{message.name}[/bold cyan]")
            field_table = Table(show_header=True, box=None, padding=(0, 2, 0, 0))
            field_table.add_column("Name", style="white")
            field_table.add_column("Number", style="green", justify="right")
            field_table.add_column("Type", style="yellow")
            field_table.add_column("JSON name", style="dim")

            for fd in message.field:
                field_table.add_row(fd.name, str(fd.number), field_type_name(fd.type), fd.json_name)

            console.print(field_table)
            console.print()


@cli.command()
@click.option("--hex", "hex_data", default=None, help="Encoded message as hex")
@click.option("--input", "-i", "input_file", default=None, help="File holding the encoded message")
@click.option("--type", "-t", "type_name", default=DEFAULT_TYPE, help="Full message type name")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def decode(hex_data: str | None, input_file: str | None, type_name: str, output_json: bool) -> None:
    """Decode a binary message and print it."""
    if (hex_data is None) == (input_file is None):
        print("Exactly one of --hex or --input is required")
        sys.exit(1)

    if input_file is not None:
        with open(input_file, "rb") as f:
            data = f.read()
    else:
        try:
            data = bytes.fromhex(hex_data or "")
        except ValueError:
            print(f"Invalid hex: {hex_data}")
            sys.exit(1)

    msg_type = _message_type(type_name)
    try:
        message, _ = msg_type.unpack(data)
    except MalformedEncoding as ex:
        print(f"Decode failed: {ex}")
        sys.exit(1)

    if output_json:
        print(message.to_json(indent=2))
    else:
        print(message.to_text(), end="")


@cli.command()
@click.option("--text", "text", default=None, help="Message in text form")
@click.option("--input", "-i", "input_file", default=None, help="File holding the text form")
@click.option("--type", "-t", "type_name", default=DEFAULT_TYPE, help="Full message type name")
@click.option("--json", "input_json", is_flag=True, help="Input is JSON rather than text form")
def encode(text: str | None, input_file: str | None, type_name: str, input_json: bool) -> None:
    """Encode a message given in text (or JSON) form and print it as hex."""
    if (text is None) == (input_file is None):
        print("Exactly one of --text or --input is required")
        sys.exit(1)

    if input_file is not None:
        with open(input_file, encoding="utf-8") as f:
            text = f.read()

    msg_type = _message_type(type_name)
    try:
        if input_json:
            message = msg_type.from_json(text or "")
        else:
            message = msg_type.from_text(text or "")
        print(message.pack().hex())
    except (TextFormatError, JSONFormatError, SerializationError) as ex:
        print(f"Encode failed: {ex}")
        sys.exit(1)


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
