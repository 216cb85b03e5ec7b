import json
import sys
from typing import Optional

import typer

from chat_commands.router import CommandRouter
from log_config import setup_logging
from protocol_config import ConfigurationError, load_config
from script_results.marker import format_result_marker, parse_script_result

logger = setup_logging("app")

app = typer.Typer(help="Night Watch command and result protocol.")


@app.command()
def route(message: str):
    """Route a chat message and print the request as JSON (null when it is not a command)."""
    try:
        config = load_config()
    except ConfigurationError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(code=2)

    request = CommandRouter(config).route(message)
    typer.echo(json.dumps(request.to_dict() if request else None))


@app.command("parse-result")
def parse_result(path: Optional[str] = typer.Argument(None, help="Script output file, '-' or omitted for stdin.")):
    """Print the final result marker of a script's output as JSON."""
    if path is None or path == "-":
        output = sys.stdin.read()
    else:
        try:
            with open(path, "rb") as f:
                output = f.read()
        except OSError as e:
            typer.echo(f"Cannot read {path}: {e}", err=True)
            raise typer.Exit(code=2)

    result = parse_script_result(output)
    if result is None:
        logger.info("No result marker found")
        typer.echo(json.dumps(None))
        raise typer.Exit(code=1)

    logger.info(f"Result: {result.status} ({result.outcome})")
    typer.echo(json.dumps(result.to_dict()))


@app.command("emit-result")
def emit_result(status: str, pairs: Optional[list[str]] = typer.Argument(None, help="KEY=VALUE metadata.")):
    """Print a result marker line, the way automation scripts report their status."""
    data: dict[str, str] = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep:
            typer.echo(f"Expected KEY=VALUE, got {pair!r}", err=True)
            raise typer.Exit(code=2)
        data[key] = value

    try:
        line = format_result_marker(status, data)
    except ValueError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=2)
    typer.echo(line)


if __name__ == "__main__":
    app()
