"""Issue Tracker CLI — run the server, set up the database, and drive the API.

Usage:
    issuetracker serve                              # Run the API with uvicorn
    issuetracker init-db                            # Create tables (dev shortcut)
    issuetracker register me@example.com            # Create an account, print token
    issuetracker login me@example.com               # Print a fresh token
    issuetracker create "Login broken" -d "..." -p High
    issuetracker issues --status Open --page 2      # List issues
    issuetracker show <id>                          # One issue
    issuetracker resolve <id> / close <id>          # Status transitions
    issuetracker delete <id>
    issuetracker counts                             # Issues per status

API commands read ISSUETRACKER_API_URL (default http://localhost:8000)
and ISSUETRACKER_TOKEN (or --token).
"""

from __future__ import annotations

import asyncio
import json
import os
import sys
from typing import Optional

import click
import httpx

from issuetracker import __version__

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:8000"


def _api_url() -> str:
    return os.environ.get("ISSUETRACKER_API_URL", DEFAULT_API_URL).rstrip("/")


def _client(token: Optional[str] = None) -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the Issue Tracker API."""
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    return httpx.AsyncClient(base_url=_api_url(), headers=headers, timeout=30.0)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _require_token(token: Optional[str]) -> str:
    tok = token or os.environ.get("ISSUETRACKER_TOKEN")
    if not tok:
        click.secho(
            "Error: --token required (or set ISSUETRACKER_TOKEN env var)",
            fg="red",
            err=True,
        )
        sys.exit(1)
    return tok


def _unwrap(resp: httpx.Response) -> dict:
    """Return the JSON envelope, or print its message and exit on failure."""
    try:
        body = resp.json()
    except ValueError:
        body = {"success": False, "message": resp.text}
    if resp.is_error or not body.get("success", False):
        click.secho(f"Error ({resp.status_code}): {body.get('message')}", fg="red", err=True)
        sys.exit(1)
    return body


def _call(method: str, path: str, token: Optional[str] = None, **kwargs) -> dict:
    async def _go():
        async with _client(token) as c:
            return await c.request(method, path, **kwargs)

    return _unwrap(asyncio.run(_go()))


def _status_color(status: str) -> str:
    colors = {
        "Open": "white",
        "In Progress": "yellow",
        "Resolved": "green",
        "Closed": "blue",
    }
    return colors.get(status, "white")


def _print_issue(issue: dict) -> None:
    click.secho(f"{issue['title']}", bold=True)
    click.echo(f"  id:        {issue['id']}")
    click.echo("  status:    " + click.style(issue["status"], fg=_status_color(issue["status"])))
    click.echo(f"  priority:  {issue['priority']}")
    click.echo(f"  severity:  {issue.get('severity', '—')}")
    click.echo(f"  created:   {issue['created_at']}")
    click.echo(f"  {issue['description']}")


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="issuetracker")
def main():
    """Issue Tracker — REST API server and command-line client."""


# ---------------------------------------------------------------------------
# Server / database
# ---------------------------------------------------------------------------


@main.command()
@click.option("--host", default=None, help="Bind address (default from settings)")
@click.option("--port", default=None, type=int, help="Port (default from settings)")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the API server."""
    import uvicorn

    from issuetracker.config import settings

    uvicorn.run(
        "issuetracker.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


@main.command("init-db")
def init_db_cmd():
    """Create all tables that don't exist yet."""
    from issuetracker.db.engine import close_db, create_tables, init_db

    async def _go():
        init_db()
        try:
            await create_tables()
        finally:
            await close_db()

    asyncio.run(_go())
    click.secho("Tables created.", fg="green")


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


@main.command()
@click.argument("email")
@click.password_option()
def register(email: str, password: str):
    """Create an account and print its token."""
    body = _call("POST", "/api/users/register", json={"email": email, "password": password})
    click.secho(f"Registered {body['data']['user']['email']}", fg="green")
    click.echo(body["data"]["token"])


@main.command()
@click.argument("email")
@click.option("--password", prompt=True, hide_input=True)
def login(email: str, password: str):
    """Log in and print a token (export it as ISSUETRACKER_TOKEN)."""
    body = _call("POST", "/api/users/login", json={"email": email, "password": password})
    click.echo(body["data"]["token"])


# ---------------------------------------------------------------------------
# Issues
# ---------------------------------------------------------------------------


@main.command()
@click.argument("title")
@click.option("--description", "-d", required=True)
@click.option("--priority", "-p", required=True, type=click.Choice(["Low", "Medium", "High", "Critical"]))
@click.option("--severity", "-s", type=click.Choice(["Minor", "Major", "Critical"]))
@click.option("--token", help="Bearer token (or set ISSUETRACKER_TOKEN)")
def create(title: str, description: str, priority: str, severity: Optional[str],
           token: Optional[str]):
    """Create an issue."""
    payload = {"title": title, "description": description, "priority": priority}
    if severity:
        payload["severity"] = severity
    body = _call("POST", "/api/issues", _require_token(token), json=payload)
    _print_issue(body["data"])


@main.command()
@click.option("--search", "-q", help="Free text over title and description")
@click.option("--status")
@click.option("--priority")
@click.option("--severity")
@click.option("--page", type=int, default=1, show_default=True)
@click.option("--limit", type=int, default=10, show_default=True)
@click.option("--sort-by", default="createdAt", show_default=True)
@click.option("--order", type=click.Choice(["asc", "desc"]), default="desc", show_default=True)
@click.option("--json", "as_json", is_flag=True, help="Print raw JSON")
@click.option("--token", help="Bearer token (or set ISSUETRACKER_TOKEN)")
def issues(search, status, priority, severity, page, limit, sort_by, order, as_json, token):
    """List issues."""
    params = {"page": page, "limit": limit, "sortBy": sort_by, "order": order}
    for key, value in (("search", search), ("status", status),
                       ("priority", priority), ("severity", severity)):
        if value:
            params[key] = value

    body = _call("GET", "/api/issues", _require_token(token), params=params)
    if as_json:
        click.echo(json.dumps(body, indent=2, default=str))
        return

    meta = body["pagination"]
    for issue in body["data"]:
        status_txt = click.style(issue["status"].ljust(12), fg=_status_color(issue["status"]))
        click.echo(f"{issue['id']}  {status_txt}  {issue['priority'].ljust(8)}  {issue['title'][:60]}")
    click.echo(
        f"page {meta['current_page']}/{meta['total_pages']} "
        f"({meta['total_items']} issues)"
    )


@main.command()
@click.argument("issue_id")
@click.option("--token", help="Bearer token (or set ISSUETRACKER_TOKEN)")
def show(issue_id: str, token: Optional[str]):
    """Show one issue."""
    body = _call("GET", f"/api/issues/{issue_id}", _require_token(token))
    _print_issue(body["data"])


@main.command()
@click.argument("issue_id")
@click.option("--token", help="Bearer token (or set ISSUETRACKER_TOKEN)")
def resolve(issue_id: str, token: Optional[str]):
    """Mark an issue Resolved."""
    body = _call("PATCH", f"/api/issues/{issue_id}/resolve", _require_token(token))
    click.secho(body["message"], fg="green")


@main.command()
@click.argument("issue_id")
@click.option("--token", help="Bearer token (or set ISSUETRACKER_TOKEN)")
def close(issue_id: str, token: Optional[str]):
    """Mark an issue Closed."""
    body = _call("PATCH", f"/api/issues/{issue_id}/close", _require_token(token))
    click.secho(body["message"], fg="green")


@main.command()
@click.argument("issue_id")
@click.option("--token", help="Bearer token (or set ISSUETRACKER_TOKEN)")
@click.confirmation_option(prompt="Delete this issue permanently?")
def delete(issue_id: str, token: Optional[str]):
    """Delete an issue."""
    body = _call("DELETE", f"/api/issues/{issue_id}", _require_token(token))
    click.secho(body["message"], fg="green")


@main.command()
@click.option("--token", help="Bearer token (or set ISSUETRACKER_TOKEN)")
def counts(token: Optional[str]):
    """Show how many of your issues are in each status."""
    body = _call("GET", "/api/issues/counts", _require_token(token))
    data = body["data"]
    for status, count in data.items():
        if status == "total":
            continue
        click.echo(click.style(status.ljust(12), fg=_status_color(status)) + f" {count}")
    click.secho(f"{'Total'.ljust(12)} {data['total']}", bold=True)


if __name__ == "__main__":
    main()
