import logging

import typer
from rich.logging import RichHandler

from registry_explorer.cli.browse import search, tree
from registry_explorer.cli.serve import serve_app

app = typer.Typer(
    name="registry-explorer",
    help="Registry Explorer CLI — browse and search a schema registry as a tree.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.callback()
def _configure(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log explorer activity to stderr."),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(show_path=False)],
    )


app.command("tree")(tree)
app.command("search")(search)
app.add_typer(serve_app, name="serve")


def main() -> None:
    app()
