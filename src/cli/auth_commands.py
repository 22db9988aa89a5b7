"""Configuration, database and server commands."""

from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from src.authgate.core.errors import ConfigurationError
from src.authgate.core.models.auth_mode import AuthenticationMode
from src.authgate.core.services.auth.mode_resolver import resolve_mode
from src.authgate.runtime.config.config_data import ConfigData
from src.authgate.runtime.config.config_template import load_templated_yaml
from src.authgate.runtime.settings import EnvironmentVariables

console = Console()

CONFIG_OPTION = typer.Option(
    None, "--config", "-c", help="Path to config.yaml (defaults to CONFIG_FILE or ./config.yaml)"
)


def _load(config_path: Path | None) -> ConfigData:
    path = config_path or Path(EnvironmentVariables().config_file)
    try:
        return load_templated_yaml(path)
    except FileNotFoundError:
        console.print(f"[red]Configuration file not found:[/red] {path}")
        raise typer.Exit(code=2) from None
    except ConfigurationError as e:
        console.print(f"[red]Invalid configuration:[/red] {e.message}")
        raise typer.Exit(code=2) from None


def _mode_rows(config: ConfigData, mode: AuthenticationMode) -> list[tuple[str, str]]:
    auth = config.auth
    if mode is AuthenticationMode.DISABLED:
        return [
            ("GUID format", auth.guid_validation.format),
            ("Reject empty GUID", str(auth.guid_validation.reject_empty)),
        ]
    if mode is AuthenticationMode.AUTHENTICATED:
        return [
            ("Issuer", auth.jwt.issuer or "-"),
            ("Audience", auth.jwt.audience or "-"),
            ("Algorithms", ", ".join(auth.jwt.allowed_algorithms)),
            ("Clock skew", f"{auth.jwt.clock_skew}s"),
        ]
    strategy = "JWKS" if auth.oauth.jwks_uri else "introspection"
    return [
        ("Client id", auth.oauth.client_id or "-"),
        ("Tenants", ", ".join(auth.oauth.tenant_allowlist)),
        ("Verification", strategy),
        ("Provider timeout", f"{auth.oauth.timeout_seconds}s"),
        ("Provider retries", str(auth.oauth.provider_retries)),
        ("Mapped scopes", str(len(auth.oauth.scope_to_role_map))),
    ]


def check_config(config_path: Path | None = CONFIG_OPTION) -> None:
    """
    Validate the configuration and show the active authentication mode.

    Exits with code 2 when the mode is misconfigured.
    """
    config = _load(config_path)
    try:
        mode = resolve_mode(config.auth)
    except ConfigurationError as e:
        console.print(
            Panel.fit(f"[bold red]{e.message}[/bold red]", title="Configuration error", border_style="red")
        )
        raise typer.Exit(code=2) from None

    table = Table(title="authgate configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("Environment", config.app.environment)
    table.add_row("Auth mode", f"[bold green]{mode.value}[/bold green]")
    for name, value in _mode_rows(config, mode):
        table.add_row(name, value)
    table.add_row("Database", config.database.url.split("@")[-1])
    console.print(table)


def init_db(config_path: Path | None = CONFIG_OPTION) -> None:
    """Create the identity tables."""
    from src.authgate.core.services.database.db_session import DbSessionService

    config = _load(config_path)
    service = DbSessionService(config)
    service.create_all()
    service.dispose()
    console.print("[green]Identity tables are ready.[/green]")


def serve(
    config_path: Path | None = CONFIG_OPTION,
    host: str | None = typer.Option(None, help="Host to bind (defaults to app.host)"),
    port: int | None = typer.Option(None, help="Port to bind (defaults to app.port)"),
) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    from src.authgate.api.http.app import create_app
    from src.authgate.api.utils.app_startup import configure_logging

    config = _load(config_path)
    try:
        resolve_mode(config.auth)
    except ConfigurationError as e:
        console.print(f"[red]Refusing to start:[/red] {e.message}")
        raise typer.Exit(code=2) from None

    configure_logging(config, EnvironmentVariables().log_level)
    uvicorn.run(
        create_app(config),
        host=host or config.app.host,
        port=port or config.app.port,
        access_log=False,
    )


def register_commands(app: typer.Typer) -> None:
    app.command(name="check-config")(check_config)
    app.command(name="init-db")(init_db)
    app.command(name="serve")(serve)
