"""Command-line interface for pop-courier."""

import sys
from collections.abc import Callable, Iterator
from contextlib import contextmanager

import click
import structlog

from pop_courier.client import POP3Client, connect
from pop_courier.config import Settings, get_settings
from pop_courier.core import configure_logging
from pop_courier.decoder import RawDecoder
from pop_courier.exceptions import AuthenticationError, ConfigurationError, PopCourierError

logger = structlog.get_logger(__name__)


def _load_settings() -> Settings:
    try:
        return get_settings()
    except ConfigurationError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)


@contextmanager
def _session() -> Iterator[POP3Client]:
    """Yield a logged-in client; QUIT on success, plain close on error."""
    settings = _load_settings()
    try:
        with connect(settings) as client:
            yield client
    except AuthenticationError as e:
        click.echo(f"Login rejected: {e.reply or e.message}", err=True)
        sys.exit(2)
    except PopCourierError as e:
        logger.error("pop3_command_failed", error=str(e))
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@click.group()
@click.option("--debug/--no-debug", default=None, help="Enable debug logging [env: POP3_DEBUG]")
@click.option(
    "--json-logs/--no-json-logs", default=None, help="JSON log format [env: POP3_LOG_FORMAT]"
)
@click.pass_context
def main(ctx: click.Context, debug: bool | None, json_logs: bool | None) -> None:
    """pop-courier - inspect a POP3 maildrop."""
    if debug is None or json_logs is None:
        try:
            settings = get_settings()
        except ConfigurationError:
            # Reported by the subcommand that needs the settings
            settings = None
        if debug is None:
            debug = settings.debug if settings else False
        if json_logs is None:
            json_logs = settings.log_format == "json" if settings else False
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    ctx.obj["json_logs"] = json_logs
    configure_logging(json_format=json_logs, debug=debug)


@main.command()
def stat() -> None:
    """Show message count and maildrop size."""
    with _session() as client:
        result = client.stat()
    click.echo(f"{result.count} messages, {result.total_size} octets")


@main.command(name="list")
@click.argument("msg_id", type=int, required=False)
def list_(msg_id: int | None) -> None:
    """List message numbers and sizes."""
    with _session() as client:
        summaries = [client.list(msg_id)] if msg_id is not None else client.list_all()
    for summary in summaries:
        click.echo(f"{summary.id}\t{summary.size}")


@main.command()
@click.argument("msg_id", type=int, required=False)
def uidl(msg_id: int | None) -> None:
    """List message numbers and unique ids."""
    with _session() as client:
        uids = [client.uid_list(msg_id)] if msg_id is not None else client.uid_list_all()
    for entry in uids:
        click.echo(f"{entry.id}\t{entry.uid}")


def _dump_raw(fetch: Callable[[POP3Client], bytes]) -> None:
    with _session() as client:
        client.decoder_factory = RawDecoder
        raw = fetch(client)
    click.echo(raw.decode("utf-8", errors="replace"), nl=False)


@main.command()
@click.argument("msg_id", type=int)
@click.option("--lines", "-n", type=click.IntRange(min=0), default=0, show_default=True)
def top(msg_id: int, lines: int) -> None:
    """Print the headers and first LINES body lines of a message."""
    _dump_raw(lambda client: client.top(msg_id, lines))


@main.command()
@click.argument("msg_id", type=int)
def retr(msg_id: int) -> None:
    """Print a whole message."""
    _dump_raw(lambda client: client.retrieve(msg_id))


@main.command()
@click.argument("msg_ids", type=int, nargs=-1, required=True)
def dele(msg_ids: tuple[int, ...]) -> None:
    """Delete messages; committed when the session quits cleanly."""
    with _session() as client:
        for msg_id in msg_ids:
            client.delete(msg_id)
    click.echo(f"Deleted {len(msg_ids)} message(s)")


if __name__ == "__main__":
    main()
