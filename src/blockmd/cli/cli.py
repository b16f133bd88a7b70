"""CLI entrypoint: Typer app definition and command registration"""

import typer

from blockmd.cli.commands import ast_cmd, check_cmd, convert_cmd


app = typer.Typer(name="blockmd", no_args_is_help=True, help="Convert block-tree document snapshots to Markdown")

app.command(name="convert")(convert_cmd)
app.command(name="ast")(ast_cmd)
app.command(name="check")(check_cmd)
