"""hmacsign CLI - sign and verify request signatures."""

import functools
import json
import sys
from collections.abc import Callable
from pathlib import Path
from typing import IO, Any, TypeVar, cast

import click
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from hmacsign.common.errors import ErrorCode, SigningError, error_payload
from hmacsign.common.hmac import includes_body
from hmacsign.common.logging import setup_logging
from hmacsign.common.metrics import render_metrics
from hmacsign.common.settings import Settings
from hmacsign.common.tracing import setup_tracing
from hmacsign.signer.clock import current_millis
from hmacsign.signer.generator import SignatureGenerator, validate_request
from hmacsign.signer.models import OutcomeStatus, SigningRequest

tomllib: Any | None
tomllib_module: Any | None = None
try:
    import tomllib as tomllib_module
except ImportError:  # pragma: no cover - Python <3.11
    tomllib_module = None
tomllib = tomllib_module

console = Console(soft_wrap=True, highlight=False, emoji=False)
err_console = Console(stderr=True, soft_wrap=True, highlight=False, emoji=False)

F = TypeVar("F", bound=Callable[..., Any])

EXIT_FAILED = 1
EXIT_INVALID = 2


def _load_config(path: str | None) -> dict[str, Any]:
    if not path:
        return {}
    config_path = Path(path).expanduser()
    if not config_path.exists():
        err_console.print(f"[red]Config not found: {config_path}[/red]")
        sys.exit(EXIT_INVALID)

    raw = config_path.read_bytes()
    if config_path.suffix.lower() == ".toml":
        if tomllib is None:
            err_console.print("[red]TOML config requires Python 3.11+[/red]")
            sys.exit(EXIT_INVALID)
        data = tomllib.loads(raw.decode("utf-8"))
    else:
        data = json.loads(raw.decode("utf-8"))

    if isinstance(data, dict) and isinstance(data.get("cli"), dict):
        return cast(dict[str, Any], data["cli"])
    return cast(dict[str, Any], data) if isinstance(data, dict) else {}


def _request_options(f: F) -> F:
    """Attach the Key/Secret/Method/Payload/TimeStamp options to a command."""
    options = [
        click.option("--key", "-k", help="Identity key"),
        click.option("--secret", "-s", help="Shared secret"),
        click.option("--method", "-m", help="HTTP method (case-insensitive)"),
        click.option("--payload", "-p", help="Request body"),
        click.option(
            "--payload-file",
            type=click.File("rb"),
            help="Read the request body from a UTF-8 file, byte for byte ('-' for stdin)",
        ),
        click.option("--timestamp", "-t", type=int, help="Milliseconds since epoch (default: now)"),
    ]
    for option in reversed(options):
        f = option(f)
    return f


def _build_request(
    ctx: click.Context,
    key: str | None,
    secret: str | None,
    method: str | None,
    payload: str | None,
    payload_file: IO[bytes] | None,
    timestamp: int | None,
) -> SigningRequest:
    defaults = ctx.obj["defaults"]
    if payload_file is not None:
        try:
            payload = payload_file.read().decode("utf-8")
        except UnicodeDecodeError as exc:
            raise click.BadParameter(f"not valid UTF-8 ({exc.reason})", param_hint="--payload-file") from exc
    return SigningRequest(
        key=key if key is not None else defaults.get("key"),
        secret=secret if secret is not None else defaults.get("secret"),
        method=method if method is not None else defaults.get("method"),
        payload=payload if payload is not None else defaults.get("payload"),
        timestamp=timestamp,
    )


def _fail(exc: SigningError, status: int) -> None:
    err_console.print(f"[red]Error: {escape(exc.message)}[/red]")
    err_console.print(json.dumps(error_payload(exc), indent=2), markup=False)
    sys.exit(status)


def _handle_errors(f: F) -> F:
    @functools.wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return f(*args, **kwargs)
        except SigningError as exc:
            status = EXIT_FAILED if exc.code == ErrorCode.SIGNING_FAILED else EXIT_INVALID
            _fail(exc, status)

    return cast(F, wrapper)


@click.group()
@click.option(
    "--config",
    type=click.Path(exists=False, dir_okay=False),
    help="Path to CLI config (JSON or TOML with optional [cli] section)",
)
@click.option("--encoding", help="Text encoding for key, secret and payload (default: ascii)")
@click.option(
    "--encoding-errors",
    type=click.Choice(["strict", "replace"]),
    help="strict rejects unencodable characters, replace substitutes '?'",
)
@click.option("--allow-empty-payload", is_flag=True, help="Accept an empty payload")
@click.option("--log-level", help="Log level (default: INFO)")
@click.option("--json-logs", is_flag=True, help="Emit logs as JSON")
@click.pass_context
def cli(
    ctx: click.Context,
    config: str | None,
    encoding: str | None,
    encoding_errors: str | None,
    allow_empty_payload: bool,
    log_level: str | None,
    json_logs: bool,
) -> None:
    """hmacsign CLI - HMAC-SHA256 request signatures."""
    config_data = _load_config(config)

    overrides: dict[str, Any] = {}
    encoding = encoding or config_data.get("encoding")
    if encoding:
        overrides["text_encoding"] = encoding
    encoding_errors = encoding_errors or config_data.get("encoding_errors")
    if encoding_errors:
        overrides["encoding_errors"] = encoding_errors
    if allow_empty_payload or config_data.get("allow_empty_payload"):
        overrides["allow_empty_payload"] = True
    log_level = log_level or config_data.get("log_level")
    if log_level:
        overrides["log_level"] = log_level
    if json_logs or config_data.get("json_logs"):
        overrides["log_format"] = "json"

    try:
        settings = Settings(**overrides)
    except ValidationError as exc:
        err_console.print(f"[red]Invalid configuration: {escape(str(exc))}[/red]")
        sys.exit(EXIT_INVALID)

    setup_logging(settings.log_level, settings.log_format)
    if settings.tracing_enabled:
        setup_tracing(
            service_name=settings.tracing_service_name,
            otlp_endpoint=settings.tracing_otlp_endpoint,
            enable_console=settings.tracing_console,
        )

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    ctx.obj["generator"] = SignatureGenerator(settings)
    ctx.obj["defaults"] = {
        name: config_data[name] for name in ("key", "secret", "method", "payload") if name in config_data
    }


@cli.command("sign")
@_request_options
@click.option("--json", "as_json", is_flag=True, help="Print the signature with echoed inputs as JSON")
@click.option("--show-secret", is_flag=True, help="Include the secret in JSON output")
@click.pass_context
def sign_cmd(
    ctx: click.Context,
    key: str | None,
    secret: str | None,
    method: str | None,
    payload: str | None,
    payload_file: IO[bytes] | None,
    timestamp: int | None,
    as_json: bool,
    show_secret: bool,
) -> None:
    """Compute the signature for a request."""
    generator: SignatureGenerator = ctx.obj["generator"]
    request = _build_request(ctx, key, secret, method, payload, payload_file, timestamp)
    outcome = generator.run(request)

    if outcome.status is OutcomeStatus.INVALID:
        err_console.print(f"[red]Error: {escape(outcome.message)}[/red]")
        sys.exit(EXIT_INVALID)
    if outcome.status is OutcomeStatus.FAILED:
        err_console.print(f"[red]{outcome.message}[/red]")
        err_console.print(outcome.details, markup=False)
        sys.exit(EXIT_FAILED)

    if as_json:
        data = {name.lower(): value for name, value in outcome.inputs.items()}
        data["signature"] = outcome.signature
        if not show_secret:
            data["secret"] = "***"
        console.print(json.dumps(data, indent=2), markup=False)
    else:
        console.print(outcome.signature, markup=False)


@cli.command("verify")
@_request_options
@click.option("--signature", required=True, help="Expected base64 signature")
@click.pass_context
@_handle_errors
def verify_cmd(
    ctx: click.Context,
    key: str | None,
    secret: str | None,
    method: str | None,
    payload: str | None,
    payload_file: IO[bytes] | None,
    timestamp: int | None,
    signature: str,
) -> None:
    """Verify a signature against a request (timestamp required)."""
    generator: SignatureGenerator = ctx.obj["generator"]
    request = _build_request(ctx, key, secret, method, payload, payload_file, timestamp)

    if generator.verify(request, signature):
        console.print("[green]✓ Signature is valid[/green]")
    else:
        console.print("[red]✗ Signature is invalid[/red]")
        sys.exit(EXIT_FAILED)


@cli.command("canonical")
@_request_options
@click.pass_context
@_handle_errors
def canonical_cmd(
    ctx: click.Context,
    key: str | None,
    secret: str | None,
    method: str | None,
    payload: str | None,
    payload_file: IO[bytes] | None,
    timestamp: int | None,
) -> None:
    """Show the canonical string that would be signed (--secret is not needed)."""
    generator: SignatureGenerator = ctx.obj["generator"]
    settings: Settings = ctx.obj["settings"]
    request = _build_request(ctx, key, secret, method, payload, payload_file, timestamp)
    validate_request(request, settings, require_secret=False)

    resolved = request.timestamp if request.timestamp is not None else current_millis()
    message = generator.canonical_message(request, resolved)
    assert request.method is not None

    table = Table(title="Canonical Message")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Method", request.method.upper())
    table.add_row("TimeStamp", str(resolved))
    table.add_row("Body included", "yes" if includes_body(request.method) else "no")
    err_console.print(table)

    console.print(message.decode(settings.text_encoding), markup=False)


@cli.command("metrics")
def metrics_cmd() -> None:
    """Print signing metrics for this process in Prometheus format."""
    console.print(render_metrics(), markup=False, end="")


def main() -> None:
    """CLI entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
