"""Server CLI command."""

import typer

from catalog_grader.runtime.context import get_config

from .utils import console


def serve(
    host: str | None = typer.Option(None, help="Host to bind (defaults to config)"),
    port: int | None = typer.Option(None, help="Port to bind (defaults to config)"),
    reload: bool = typer.Option(False, help="Enable auto-reload on code changes"),
    log_level: str = typer.Option("info", help="Uvicorn log level"),
) -> None:
    """Start the API server."""
    import uvicorn

    config = get_config()
    host = host or config.app.host
    port = port or config.app.port
    console.print(f"[blue]Server will be available at:[/blue] http://{host}:{port}")
    uvicorn.run(
        "catalog_grader.api.http.app:app",
        host=host,
        port=port,
        reload=reload,
        log_level=log_level,
        access_log=False,
    )
