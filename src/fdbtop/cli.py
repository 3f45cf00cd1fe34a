"""Command-line entry point for fdbtop."""

import logging
import sys
from pathlib import Path

import click

from fdbtop.config import Config
from fdbtop.errors import MalformedSnapshot

EPILOG = """\b
Examples:
  fdbtop
  fdbtop -i 10 -- -C fdb.cluster --tls_certificate_file cert
  ssh foo "fdbcli --exec 'status json'" | fdbtop

\b
Use '<' and '>' to change the sort column.
Press ESC, q or CTRL-C to exit.
Pipe a 'status json' document in to render it once and exit.
Arguments after '--' are passed to fdbcli.
"""

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class PassthroughCommand(click.Command):
    """Command that only accepts extra fdbcli arguments after a literal ``--``.

    Any other leftover argument or unknown option shows the help and exits.
    """

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        passthrough: list[str] = []
        if "--" in args:
            split = args.index("--")
            args, passthrough = args[:split], args[split + 1 :]
        rest = super().parse_args(ctx, args)
        if ctx.args and not ctx.resilient_parsing:
            click.echo(ctx.get_help())
            ctx.exit()
        ctx.meta["fdbtop.fdbcli_args"] = passthrough
        return rest


def configure_logging(log_level: str, log_file: Path | None, interactive: bool) -> None:
    """Attach log handlers that never write over the full-screen display."""
    handlers: list[logging.Handler] = []
    if log_file:
        handlers.append(logging.FileHandler(log_file.expanduser(), encoding="utf-8"))
    elif not interactive:
        handlers.append(logging.StreamHandler(sys.stderr))
    else:
        handlers.append(logging.NullHandler())
    logging.basicConfig(
        level=getattr(logging, log_level, logging.WARNING),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )


@click.command(
    cls=PassthroughCommand,
    context_settings={
        "help_option_names": ["-h", "--help"],
        "ignore_unknown_options": True,
        "allow_extra_args": True,
    },
    epilog=EPILOG,
)
@click.option(
    "-i",
    "--interval",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    metavar="SEC",
    help="Refresh interval in seconds (default: 1)",
)
@click.option(
    "--show-stateless-iops",
    is_flag=True,
    help="Show disk usage for all roles (otherwise shown only for storage and log)",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: ~/.config/fdbtop/config.toml)",
)
@click.option("--log-file", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Write logs to this file")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Log level",
)
@click.pass_context
def main(
    ctx: click.Context,
    interval: float | None,
    show_stateless_iops: bool,
    config_path: Path | None,
    log_file: Path | None,
    log_level: str,
) -> None:
    """fdbtop - display and update sorted information about FoundationDB processes."""
    stdin = click.get_text_stream("stdin")
    interactive = stdin.isatty()
    configure_logging(log_level.upper(), log_file, interactive)

    try:
        config = Config.load(config_path)
    except ValueError as e:
        raise click.ClickException(str(e)) from e
    if config_path or Config.default_path().exists():
        logging.getLogger(__name__).info("Loaded config from %s", config_path or Config.default_path())

    if interval is not None:
        config.interval = interval
    if show_stateless_iops:
        config.show_stateless_iops = True
    config.fdbcli_args = [*config.fdbcli_args, *ctx.meta.get("fdbtop.fdbcli_args", [])]

    if interactive:
        run_interactive(config)
    else:
        try:
            snapshot = stdin.read()
        except UnicodeDecodeError as e:
            raise click.ClickException(f"Status input is not valid UTF-8: {e}") from e
        run_piped(snapshot, config)


def run_piped(snapshot: str, config: Config) -> None:
    """Render one snapshot read from a pipe to standard output."""
    from fdbtop.loop import RefreshLoop

    refresh_loop = RefreshLoop(
        show_stateless_iops=config.show_stateless_iops,
        iops_divisor=config.iops_divisor,
    )
    try:
        output = refresh_loop.run_once(snapshot)
    except MalformedSnapshot as e:
        raise click.ClickException(str(e)) from e
    click.echo(output, nl=False)


def run_interactive(config: Config) -> None:
    """Run the full-screen dashboard until the user quits."""
    from fdbtop.app import FdbtopApp
    from fdbtop.fetch import StatusCommand

    command = StatusCommand(
        fdbcli=config.fdbcli,
        status_timeout=config.status_timeout,
        fetch_timeout=config.fetch_timeout,
        extra_args=tuple(config.fdbcli_args),
    )
    app = FdbtopApp(
        command,
        interval=config.interval,
        show_stateless_iops=config.show_stateless_iops,
        iops_divisor=config.iops_divisor,
    )
    app.run()


if __name__ == "__main__":
    main()
