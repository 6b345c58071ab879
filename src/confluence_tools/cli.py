"""Command-line interface for publishing Markdown to Confluence."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import ConfluenceConfig, ensure_config
from .confluence.errors import ConfluenceClientError
from .local.document import PAGE_FILENAME, load_page, new_page
from .log import configure_logging
from .markup.converters import ContentConverter
from .pages.service import PageService, create_client

app = typer.Typer(help="Convert Markdown to Confluence storage format and publish it as pages.")
console = Console()
err_console = Console(stderr=True)


class OutputFormat(str, Enum):
    storage = "storage"
    markdown = "markdown"


BASE_URL_OPTION = typer.Option(None, "--base-url", help="Base URL of the Confluence instance")
PAT_OPTION = typer.Option(None, "--pat", help="Personal access token (takes precedence over email + token)")
EMAIL_OPTION = typer.Option(None, "--email", help="Account email used for authentication")
API_TOKEN_OPTION = typer.Option(None, "--api-token", help="Confluence API token")
SPACE_ID_OPTION = typer.Option(None, "--space-id", help="Confluence space ID")
SPACE_KEY_OPTION = typer.Option(None, "--space-key", "-s", help="Confluence space key, resolved to a space ID")


def _build_service(config: ConfluenceConfig) -> tuple[PageService, callable]:
    credentials = config.credentials
    client = create_client(
        base_url=str(credentials.base_url),
        pat=credentials.pat,
        email=credentials.email,
        api_token=credentials.api_token,
    )
    service = PageService(client, ContentConverter())

    def _cleanup() -> None:
        client.close()

    return service, _cleanup


def _fail(exc: ConfluenceClientError) -> NoReturn:
    err_console.print(f"[bold red]Error[/bold red] [dim]({exc.code})[/dim]: {escape(exc.message)}", highlight=False)
    if exc.remediation:
        err_console.print(f"[yellow]Hint:[/yellow] {escape(exc.remediation)}", highlight=False)
    raise typer.Exit(code=1)


def _read_source(source: str) -> str:
    if source == "-":
        return typer.get_text_stream("stdin").read()
    path = Path(source)
    if not path.exists():
        raise typer.BadParameter(f"{path} does not exist")
    return path.read_text(encoding="utf-8")


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to a configuration TOML file",
    ),
    verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="Increase log verbosity"),
) -> None:
    configure_logging(verbose)
    ctx.obj = {"config_path": config_path}


def _resolve_config(
    ctx: typer.Context,
    *,
    base_url: Optional[str],
    pat: Optional[str],
    email: Optional[str],
    api_token: Optional[str],
    space_id: Optional[str] = None,
    space_key: Optional[str] = None,
    parent_page_id: Optional[str] = None,
) -> ConfluenceConfig:
    config_path: Optional[Path] = ctx.obj.get("config_path")
    try:
        return ensure_config(
            base_url=base_url,
            pat=pat,
            email=email,
            api_token=api_token,
            space_id=space_id,
            space_key=space_key,
            parent_page_id=parent_page_id,
            config_path=config_path,
        )
    except ConfluenceClientError as exc:
        _fail(exc)


@app.command()
def convert(
    source: str = typer.Argument("-", help="Markdown file to convert, or '-' for standard input"),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the storage markup to this file instead of standard output",
    ),
) -> None:
    """Convert Markdown to Confluence storage markup without contacting Confluence."""

    storage = ContentConverter().markdown_to_storage(_read_source(source))
    if output:
        output.write_text(storage, encoding="utf-8")
        err_console.print(f"Wrote storage markup to [bold]{output}[/bold].")
    else:
        typer.echo(storage)


@app.command()
def read(
    ctx: typer.Context,
    page_id: Optional[str] = typer.Option(None, "--page-id", "-p", help="ID of the page to read"),
    title: Optional[str] = typer.Option(None, "--title", "-t", help="Title of the page (requires a space)"),
    space_id: Optional[str] = SPACE_ID_OPTION,
    space_key: Optional[str] = SPACE_KEY_OPTION,
    output_format: OutputFormat = typer.Option(
        OutputFormat.storage,
        "--format",
        "-f",
        help="Print the body as stored or converted back to Markdown",
    ),
    base_url: Optional[str] = BASE_URL_OPTION,
    pat: Optional[str] = PAT_OPTION,
    email: Optional[str] = EMAIL_OPTION,
    api_token: Optional[str] = API_TOKEN_OPTION,
) -> None:
    """Read a page by ID, or by title within a space."""

    if not page_id and not title:
        raise typer.BadParameter("Provide either --page-id or --title to identify the page")

    config = _resolve_config(
        ctx,
        base_url=base_url,
        pat=pat,
        email=email,
        api_token=api_token,
        space_id=space_id,
        space_key=space_key,
    )
    defaults = config.defaults

    service, cleanup = _build_service(config)
    try:
        result = service.read_page(
            page_id=page_id,
            space_id=defaults.space_id,
            space_key=defaults.space_key,
            title=title,
        )
    except ConfluenceClientError as exc:
        _fail(exc)
    finally:
        cleanup()

    table = Table(title=result.title)
    table.add_column("Field")
    table.add_column("Value")
    table.add_row("ID", result.id)
    table.add_row("Space ID", result.space_id)
    table.add_row("Version", str(result.version))
    table.add_row("Last modified", result.last_modified or "-")
    table.add_row("URL", result.url)
    err_console.print(table)

    content = result.content
    if output_format is OutputFormat.markdown:
        content = service.converter.storage_to_markdown(content)
    typer.echo(content)


@app.command()
def create(
    ctx: typer.Context,
    title: str = typer.Option(..., "--title", "-t", help="Title of the new page"),
    file: Path = typer.Option(..., "--file", "-f", help="Markdown file holding the page content"),
    space_id: Optional[str] = SPACE_ID_OPTION,
    space_key: Optional[str] = SPACE_KEY_OPTION,
    parent_page_id: Optional[str] = typer.Option(None, "--parent-id", help="Parent page ID"),
    base_url: Optional[str] = BASE_URL_OPTION,
    pat: Optional[str] = PAT_OPTION,
    email: Optional[str] = EMAIL_OPTION,
    api_token: Optional[str] = API_TOKEN_OPTION,
) -> None:
    """Create a page from a Markdown file."""

    config = _resolve_config(
        ctx,
        base_url=base_url,
        pat=pat,
        email=email,
        api_token=api_token,
        space_id=space_id,
        space_key=space_key,
        parent_page_id=parent_page_id,
    )
    defaults = config.defaults
    if not (defaults.space_id or defaults.space_key):
        raise typer.BadParameter("A space ID or key is required (via options or configuration defaults)")

    content = _read_source(str(file))
    service, cleanup = _build_service(config)
    try:
        result = service.create_page(
            title=title,
            content=content,
            space_id=defaults.space_id,
            space_key=defaults.space_key,
            parent_page_id=defaults.parent_page_id,
        )
    except ConfluenceClientError as exc:
        _fail(exc)
    finally:
        cleanup()

    console.print(f"Created page [bold]{result.title}[/bold] ({result.id}) at {result.url}")


@app.command()
def update(
    ctx: typer.Context,
    page_id: str = typer.Option(..., "--page-id", "-p", help="ID of the page to update"),
    file: Path = typer.Option(..., "--file", "-f", help="Markdown file holding the new content"),
    title: Optional[str] = typer.Option(None, "--title", "-t", help="New title (keeps the current one by default)"),
    expected_version: Optional[int] = typer.Option(
        None,
        "--expected-version",
        help="Refuse the update unless the page is still at this version",
    ),
    base_url: Optional[str] = BASE_URL_OPTION,
    pat: Optional[str] = PAT_OPTION,
    email: Optional[str] = EMAIL_OPTION,
    api_token: Optional[str] = API_TOKEN_OPTION,
) -> None:
    """Replace the content of a page with a Markdown file."""

    config = _resolve_config(ctx, base_url=base_url, pat=pat, email=email, api_token=api_token)
    content = _read_source(str(file))

    service, cleanup = _build_service(config)
    try:
        result = service.update_page(
            page_id=page_id,
            content=content,
            title=title,
            expected_version=expected_version,
        )
    except ConfluenceClientError as exc:
        _fail(exc)
    finally:
        cleanup()

    console.print(f"{result.message} (version {result.version}).")


@app.command()
def init(
    directory: Path = typer.Option(
        Path.cwd(),
        "--directory",
        "-d",
        help="Directory that will hold the page file",
    ),
    title: str = typer.Option(..., "--title", "-t", help="Title of the page"),
    space_key: Optional[str] = typer.Option(
        None,
        "--space-key",
        "-s",
        help="Space key to include in the metadata",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        help="Overwrite an existing page.md file if it already exists",
    ),
) -> None:
    """Create a new local Markdown page with publishing metadata."""

    directory = directory.resolve()
    directory.mkdir(parents=True, exist_ok=True)
    page_file = directory / PAGE_FILENAME
    if page_file.exists() and not force:
        raise typer.BadParameter(f"{page_file} already exists. Use --force to overwrite it.")

    new_page(page_file, title=title, space_key=space_key)
    console.print(f"Initialized page at [bold]{page_file}[/bold].")


@app.command()
def publish(
    ctx: typer.Context,
    path: Path = typer.Argument(Path.cwd(), help="Page file, or a directory containing page.md"),
    space_id: Optional[str] = SPACE_ID_OPTION,
    space_key: Optional[str] = SPACE_KEY_OPTION,
    parent_page_id: Optional[str] = typer.Option(None, "--parent-id", help="Parent page ID for new pages"),
    base_url: Optional[str] = BASE_URL_OPTION,
    pat: Optional[str] = PAT_OPTION,
    email: Optional[str] = EMAIL_OPTION,
    api_token: Optional[str] = API_TOKEN_OPTION,
) -> None:
    """Create or update the page described by a local Markdown file."""

    try:
        page = load_page(path)
    except FileNotFoundError as exc:
        raise typer.BadParameter(str(exc)) from exc

    config = _resolve_config(
        ctx,
        base_url=base_url,
        pat=pat,
        email=email,
        api_token=api_token,
        space_id=space_id,
        space_key=space_key,
        parent_page_id=parent_page_id,
    )
    defaults = config.defaults
    if not page.metadata.space_id and not page.metadata.space_key:
        page.metadata.space_id = defaults.space_id
        page.metadata.space_key = defaults.space_key
    if not page.metadata.parent_id:
        page.metadata.parent_id = defaults.parent_page_id

    service, cleanup = _build_service(config)
    try:
        result = service.publish(page)
    except ConfluenceClientError as exc:
        _fail(exc)
    finally:
        cleanup()

    action = "Created" if result.created else "Updated"
    console.print(f"{action} page [bold]{page.title}[/bold] ({page.metadata.page_id}), version {result.version}.")


def run() -> None:
    """Entry point for console scripts."""

    app()


if __name__ == "__main__":  # pragma: no cover
    run()
