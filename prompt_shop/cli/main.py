"""PromptShop CLI: shop command."""

from __future__ import annotations

import json
from typing import Any

import click

from prompt_shop.cli.client import ShopClient

LIBRARY_KINDS = ["characters", "wardrobes", "lenses", "looks", "micro_textures", "micro_details"]


def _format_table(rows: list[dict], columns: list[str]) -> str:
    """Simple table formatter."""
    if not rows:
        return "No results."
    widths = {c: len(c) for c in columns}
    for row in rows:
        for c in columns:
            widths[c] = max(widths[c], len(str(row.get(c, ""))))

    header = "  ".join(c.upper().ljust(widths[c]) for c in columns)
    separator = "  ".join("-" * widths[c] for c in columns)
    lines = [header, separator]
    for row in rows:
        lines.append("  ".join(str(row.get(c, "")).ljust(widths[c]) for c in columns))
    return "\n".join(lines)


@click.group()
@click.option("--api", default="http://localhost:8500", envvar="SHOP_API", help="API base URL")
@click.option("--format", "output_format", type=click.Choice(["table", "json"]), default="table")
@click.pass_context
def cli(ctx: click.Context, api: str, output_format: str) -> None:
    """PromptShop CLI: manage projects, prompts and compiled output."""
    ctx.obj = ShopClient(base_url=api)
    ctx.meta["output_format"] = output_format


def _output(ctx: click.Context, data: Any, columns: list[str] | None = None) -> None:
    fmt = ctx.meta.get("output_format", "table")
    if fmt == "table" and isinstance(data, list) and columns:
        click.echo(_format_table(data, columns))
    else:
        click.echo(json.dumps(data, indent=2, default=str))


def _call(fn, *args: Any, **kwargs: Any) -> Any:
    try:
        return fn(*args, **kwargs)
    except RuntimeError as e:
        raise click.ClickException(str(e))


# --- Project commands ---


@cli.group()
def project() -> None:
    """Manage projects."""


@project.command("list")
@click.pass_context
def project_list(ctx: click.Context) -> None:
    """List projects, most recently updated first."""
    client: ShopClient = ctx.obj
    data = _call(client.list_projects)
    _output(ctx, data, ["id", "name", "prompt_count", "character_count", "updated_at"])


@project.command("create")
@click.argument("name")
@click.pass_context
def project_create(ctx: click.Context, name: str) -> None:
    """Create a project with the default library."""
    client: ShopClient = ctx.obj
    result = _call(client.create_project, name)
    click.echo(f"Created project '{result['name']}' ({result['id']})")


@project.command("show")
@click.argument("project_id")
@click.pass_context
def project_show(ctx: click.Context, project_id: str) -> None:
    """Show a full project document."""
    client: ShopClient = ctx.obj
    _output(ctx, _call(client.get_project, project_id))


@project.command("delete")
@click.argument("project_id")
@click.confirmation_option(prompt="Delete this project and all its prompts?")
@click.pass_context
def project_delete(ctx: click.Context, project_id: str) -> None:
    """Delete a project."""
    client: ShopClient = ctx.obj
    _call(client.delete_project, project_id)
    click.echo(f"Deleted project '{project_id}'")


# --- Library ---


@cli.group()
def library() -> None:
    """Browse a project's entity library."""


@library.command("list")
@click.argument("project_id")
@click.argument("kind", type=click.Choice(LIBRARY_KINDS))
@click.pass_context
def library_list(ctx: click.Context, project_id: str, kind: str) -> None:
    """List one library collection."""
    client: ShopClient = ctx.obj
    data = _call(client.list_entities, project_id, kind)
    columns = ["id", "ui_name"]
    if kind == "lenses":
        columns += ["focal_length_mm", "category"]
    _output(ctx, data, columns)


# --- Prompt commands ---


@cli.group()
def prompt() -> None:
    """Manage prompts within a project."""


@prompt.command("list")
@click.argument("project_id")
@click.pass_context
def prompt_list(ctx: click.Context, project_id: str) -> None:
    """List a project's prompts."""
    client: ShopClient = ctx.obj
    data = _call(client.list_prompts, project_id)
    _output(ctx, data, ["id", "title", "updated_at"])


@prompt.command("create")
@click.argument("project_id")
@click.option("--title", required=True)
@click.option("--file", "-f", "file_path", default=None, help="JSON file holding the draft")
@click.pass_context
def prompt_create(ctx: click.Context, project_id: str, title: str, file_path: str | None) -> None:
    """Create a prompt, optionally from a JSON draft."""
    client: ShopClient = ctx.obj
    draft = None
    if file_path:
        with open(file_path) as f:
            draft = json.load(f)
    result = _call(client.create_prompt, project_id, title, draft)
    click.echo(f"Created prompt '{result['title']}' ({result['id']})")


@prompt.command("show")
@click.argument("project_id")
@click.argument("prompt_id")
@click.pass_context
def prompt_show(ctx: click.Context, project_id: str, prompt_id: str) -> None:
    """Show a prompt and its draft."""
    client: ShopClient = ctx.obj
    _output(ctx, _call(client.get_prompt, project_id, prompt_id))


# --- Validate / compile ---


@cli.command()
@click.argument("project_id")
@click.argument("prompt_id")
@click.pass_context
def validate(ctx: click.Context, project_id: str, prompt_id: str) -> None:
    """Validate a prompt. Exits non-zero when hard errors block compilation."""
    client: ShopClient = ctx.obj
    result = _call(client.validate, project_id, prompt_id)
    if ctx.meta.get("output_format") == "json":
        _output(ctx, result)
    elif not result["errors"]:
        click.echo("OK: no issues found.")
    else:
        for err in result["errors"]:
            click.echo(f"[{err['severity']}] {err['field']}: {err['message']}")
    if not result["can_compile"]:
        ctx.exit(1)


@cli.command("compile")
@click.argument("project_id")
@click.argument("prompt_id")
@click.option("--mode", type=click.Choice(["compact", "expanded"]), default=None)
@click.option("--seed", is_flag=True, help="Also print the seed summary")
@click.pass_context
def compile_cmd(ctx: click.Context, project_id: str, prompt_id: str, mode: str | None, seed: bool) -> None:
    """Compile a prompt to its final text."""
    client: ShopClient = ctx.obj
    result = _call(client.compile, project_id, prompt_id, mode)
    if ctx.meta.get("output_format") == "json":
        _output(ctx, result)
        return
    click.echo(result["text"])
    if seed:
        click.echo(f"\n{result['seed_summary']}")
    warning = result["resolved_lens"].get("warning")
    if warning:
        click.echo(f"\nLens: {warning}", err=True)
    if result.get("warnings"):
        click.echo("\nWarnings:", err=True)
        for w in result["warnings"]:
            click.echo(f"  - {w['field']}: {w['message']}", err=True)


# --- History ---


@cli.group()
def history() -> None:
    """Snapshot and restore prompt drafts."""


@history.command("save")
@click.argument("project_id")
@click.argument("prompt_id")
@click.option("--note", "-m", default=None)
@click.pass_context
def history_save(ctx: click.Context, project_id: str, prompt_id: str, note: str | None) -> None:
    """Save the current draft to history."""
    client: ShopClient = ctx.obj
    entry = _call(client.save_history, project_id, prompt_id, note)
    click.echo(f"Saved history entry {entry['id']}")


@history.command("list")
@click.argument("project_id")
@click.argument("prompt_id")
@click.pass_context
def history_list(ctx: click.Context, project_id: str, prompt_id: str) -> None:
    """List saved snapshots, newest first."""
    client: ShopClient = ctx.obj
    data = _call(client.get_prompt, project_id, prompt_id)
    _output(ctx, data.get("history", []), ["id", "saved_at", "note"])


@history.command("restore")
@click.argument("project_id")
@click.argument("prompt_id")
@click.argument("history_id")
@click.pass_context
def history_restore(ctx: click.Context, project_id: str, prompt_id: str, history_id: str) -> None:
    """Replace the draft with a saved snapshot."""
    client: ShopClient = ctx.obj
    _call(client.restore_history, project_id, prompt_id, history_id)
    click.echo(f"Restored '{prompt_id}' from {history_id}")


if __name__ == "__main__":
    cli()
