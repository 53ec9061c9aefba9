"""CLI interface for blogctl."""

import contextlib
import json
import logging
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from blogctl.blogs import Blog, BlogDraft, BlogSynchronizer
from blogctl.client import ApiClient
from blogctl.config import BlogctlConfig, load_config, merge_cli_overrides
from blogctl.errors import ErrorKind, OperationError, suggests_bootstrap
from blogctl.session import FileSessionStore, SessionManager
from blogctl.transport import UrllibTransport

app = typer.Typer(
    name="blogctl",
    help="Manage posts on a blog content service.",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)


@dataclass
class AppContext:
    """Services shared by every command."""

    config: BlogctlConfig
    sessions: SessionManager
    blogs: BlogSynchronizer


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from blogctl import __version__

        console.print(f"blogctl {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    config_file: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to a .blogctl.toml file."),
    ] = None,
    api_url: Annotated[
        Optional[str],
        typer.Option("--api-url", help="Base URL of the blog API."),
    ] = None,
    session_file: Annotated[
        Optional[str],
        typer.Option("--session-file", help="Where the login session is kept."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Log every request and fallback."),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """blogctl - log in, then list, write and publish blog posts."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )

    config = merge_cli_overrides(
        load_config(config_file), api_url=api_url, session_file=session_file
    )
    client = ApiClient(config, UrllibTransport(timeout=config.api.timeout))
    sessions = SessionManager(client, FileSessionStore(config.session.path))
    ctx.obj = AppContext(
        config=config,
        sessions=sessions,
        blogs=BlogSynchronizer(client, sessions),
    )


@contextlib.contextmanager
def _reporting_errors(action: str) -> Iterator[None]:
    """Print an OperationError and exit with status 1."""
    try:
        yield
    except OperationError as exc:
        status = f" (HTTP {exc.http_status})" if exc.http_status else ""
        err_console.print(f"[red]Error {action}:[/red] {exc.message}{status}")
        if exc.kind == ErrorKind.UNAUTHENTICATED:
            err_console.print("Run [bold]blogctl login[/bold] to start a session.")
        raise typer.Exit(1) from exc


def _render_blogs(blogs: list[Blog]) -> None:
    if not blogs:
        console.print("No blogs found. Create your first blog post!")
        return

    table = Table(title="Blog Posts")
    table.add_column("ID", style="dim")
    table.add_column("Title")
    table.add_column("Slug")
    table.add_column("Tags")
    table.add_column("Status")
    table.add_column("Created At")
    for blog in blogs:
        status_style = "green" if blog.published else "yellow"
        table.add_row(
            blog.id,
            blog.title,
            blog.slug,
            blog.tags_display,
            f"[{status_style}]{blog.status_label}[/{status_style}]",
            blog.created_at.date().isoformat() if blog.created_at else "",
        )
    console.print(table)


def _refresh(app_ctx: AppContext) -> None:
    """Re-list after a write so the view shows what the server holds."""
    with _reporting_errors("refreshing blogs"):
        _render_blogs(app_ctx.blogs.list())


def _build_draft(**fields: str) -> BlogDraft:
    try:
        return BlogDraft(**fields)
    except ValidationError as exc:
        missing = ", ".join(str(err["loc"][0]) for err in exc.errors())
        err_console.print(f"[red]Error:[/red] invalid draft fields: {missing}")
        raise typer.Exit(1) from exc


def _read_content(content: str | None, content_file: Path | None) -> str | None:
    if content_file is not None:
        return content_file.read_text(encoding="utf-8")
    return content


# ---------------------------------------------------------------------------
# Session commands
# ---------------------------------------------------------------------------


@app.command()
def login(
    ctx: typer.Context,
    email: Annotated[str, typer.Option("--email", "-e", prompt=True)],
    password: Annotated[str, typer.Option("--password", "-p", prompt=True, hide_input=True)],
) -> None:
    """Log in as an administrator."""
    app_ctx: AppContext = ctx.obj
    try:
        session = app_ctx.sessions.login(email, password)
    except OperationError as exc:
        err_console.print(f"[red]Login failed:[/red] {exc.message}")
        if suggests_bootstrap(exc):
            err_console.print(
                "No admin yet? Run [bold]blogctl bootstrap[/bold] to create one."
            )
        raise typer.Exit(1) from exc

    name = (session.admin or {}).get("email", email)
    console.print(f"[green]Logged in as {name}[/green]")


@app.command()
def logout(ctx: typer.Context) -> None:
    """Forget the current session."""
    ctx.obj.sessions.logout()
    console.print("Logged out.")


@app.command()
def whoami(ctx: typer.Context) -> None:
    """Show the logged-in administrator."""
    session = ctx.obj.sessions.current_session()
    if not session.is_authenticated:
        console.print("Not logged in.")
        raise typer.Exit(1)
    console.print_json(json.dumps(session.admin))


@app.command()
def bootstrap(ctx: typer.Context) -> None:
    """Create the first administrator account."""
    app_ctx: AppContext = ctx.obj
    try:
        result = app_ctx.sessions.bootstrap_admin()
    except OperationError as exc:
        if exc.kind == ErrorKind.NO_VIABLE_ENDPOINT:
            err_console.print(
                "[red]No admin creation endpoint found on the backend.[/red] "
                f"Last error: {exc.message}"
            )
        else:
            err_console.print(f"[red]Failed to create admin:[/red] {exc.message}")
        raise typer.Exit(1) from exc

    creds = result.credentials
    console.print(f"[green]Admin created via {result.endpoint}[/green]")
    console.print(f"Email: {creds.email}, Password: {creds.password}")
    if result.session_started:
        console.print("Session started.")


@app.command("check-admin")
def check_admin(ctx: typer.Context) -> None:
    """Show how many administrators exist."""
    with _reporting_errors("checking admins"):
        status = ctx.obj.sessions.check_admin()
    console.print(f"Total admins: {status.count}")
    if status.admins:
        console.print_json(json.dumps(status.admins))


# ---------------------------------------------------------------------------
# Blog commands
# ---------------------------------------------------------------------------


@app.command("list")
def list_cmd(
    ctx: typer.Context,
    as_json: Annotated[bool, typer.Option("--json", help="Print raw JSON.")] = False,
) -> None:
    """List all blog posts."""
    with _reporting_errors("fetching blogs"):
        blogs = ctx.obj.blogs.list()
    if as_json:
        console.print_json(json.dumps([b.model_dump(mode="json") for b in blogs]))
    else:
        _render_blogs(blogs)


@app.command()
def show(
    ctx: typer.Context,
    blog_id: Annotated[str, typer.Argument(help="Blog ID.")],
) -> None:
    """Show one blog post."""
    with _reporting_errors("loading blog"):
        blog = ctx.obj.blogs.get(blog_id)
    console.print_json(json.dumps(blog.model_dump(mode="json")))


@app.command()
def create(
    ctx: typer.Context,
    title: Annotated[str, typer.Option("--title", "-t", prompt=True)],
    slug: Annotated[str, typer.Option("--slug", "-s", prompt=True)],
    content: Annotated[Optional[str], typer.Option("--content", help="Post body markup.")] = None,
    content_file: Annotated[
        Optional[Path],
        typer.Option("--content-file", exists=True, dir_okay=False, help="Read the body from a file."),
    ] = None,
    thumbnail: Annotated[str, typer.Option("--thumbnail", help="Thumbnail URL.")] = "",
    tags: Annotated[str, typer.Option("--tags", help="Comma-separated tags.")] = "",
) -> None:
    """Create a blog post."""
    app_ctx: AppContext = ctx.obj
    draft = _build_draft(
        title=title,
        slug=slug,
        content=_read_content(content, content_file) or "",
        thumbnail=thumbnail,
        tags=tags,
    )
    with _reporting_errors("creating blog"):
        app_ctx.blogs.create(draft)
    console.print(f"[green]Created {draft.slug}[/green]")
    _refresh(app_ctx)


@app.command()
def edit(
    ctx: typer.Context,
    blog_id: Annotated[str, typer.Argument(help="Blog ID.")],
    title: Annotated[Optional[str], typer.Option("--title", "-t")] = None,
    slug: Annotated[Optional[str], typer.Option("--slug", "-s")] = None,
    content: Annotated[Optional[str], typer.Option("--content")] = None,
    content_file: Annotated[
        Optional[Path],
        typer.Option("--content-file", exists=True, dir_okay=False),
    ] = None,
    thumbnail: Annotated[Optional[str], typer.Option("--thumbnail")] = None,
    tags: Annotated[Optional[str], typer.Option("--tags")] = None,
) -> None:
    """Edit a blog post. Options not given keep their current value."""
    app_ctx: AppContext = ctx.obj
    with _reporting_errors("loading blog"):
        current = app_ctx.blogs.get(blog_id)

    fields = BlogDraft.from_blog(current).model_dump()
    overrides = {
        "title": title,
        "slug": slug,
        "content": _read_content(content, content_file),
        "thumbnail": thumbnail,
        "tags": tags,
    }
    fields.update({k: v for k, v in overrides.items() if v is not None})
    draft = _build_draft(**fields)

    with _reporting_errors("updating blog"):
        app_ctx.blogs.update(blog_id, draft)
    console.print(f"[green]Updated {blog_id}[/green]")
    _refresh(app_ctx)


@app.command()
def delete(
    ctx: typer.Context,
    blog_id: Annotated[str, typer.Argument(help="Blog ID.")],
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip the confirmation.")] = False,
) -> None:
    """Delete a blog post."""
    app_ctx: AppContext = ctx.obj
    if not yes and not typer.confirm("Are you sure you want to delete this blog?"):
        console.print("Cancelled.")
        raise typer.Exit()

    with _reporting_errors("deleting blog"):
        app_ctx.blogs.delete(blog_id)
    console.print(f"[green]Deleted {blog_id}[/green]")
    _refresh(app_ctx)


@app.command()
def publish(
    ctx: typer.Context,
    blog_id: Annotated[str, typer.Argument(help="Blog ID.")],
) -> None:
    """Publish a draft, or unpublish a published post."""
    app_ctx: AppContext = ctx.obj
    with _reporting_errors("updating publish status"):
        current = app_ctx.blogs.get(blog_id)
        app_ctx.blogs.toggle_publish(blog_id, current.published)
    state = "Unpublished" if current.published else "Published"
    console.print(f"[green]{state} {blog_id}[/green]")
    _refresh(app_ctx)
