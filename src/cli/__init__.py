"""Main CLI application module."""

import typer

from .auth_commands import register_commands

app = typer.Typer(
    help="authgate - authentication gate for tool invocation",
    no_args_is_help=True,
    rich_markup_mode="rich",
)
register_commands(app)


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
