"""CLI entrypoint: Typer app definition, logging setup, and command registration"""

import logging
from typing import Annotated

import typer

from cguide.cli.commands import (
    _settings,
    blocks_cmd,
    discard_cmd,
    export_cmd,
    history_cmd,
    import_cmd,
    init_cmd,
    lint_cmd,
    packet_cmd,
    playground_cmd,
    publish_cmd,
    restore_cmd,
    set_block_cmd,
    show_cmd,
)


app = typer.Typer(name="cguide", no_args_is_help=True, help="Site content guidelines: packets, lint, and playground")


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
    ):
    level = "DEBUG" if verbose else _settings().log_level
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", force=True)


app.command(name="init")(init_cmd)
app.command(name="show")(show_cmd)
app.command(name="import")(import_cmd)
app.command(name="export")(export_cmd)
app.command(name="publish")(publish_cmd)
app.command(name="discard")(discard_cmd)
app.command(name="history")(history_cmd)
app.command(name="restore")(restore_cmd)
app.command(name="packet")(packet_cmd)
app.command(name="lint")(lint_cmd)
app.command(name="test")(playground_cmd)
app.command(name="blocks")(blocks_cmd)
app.command(name="set-block")(set_block_cmd)
