"""Command line interface for git-cleaner."""

import json
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich import print
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from git_cleaner import __version__
from git_cleaner.cleaner import DeletionOutcome, delete_local_branches, delete_remote_branches
from git_cleaner.config import ConfigError, ConfigManager, split_list
from git_cleaner.git import GitError, GitRepo, is_git_repository
from git_cleaner.logging_config import setup_logging
from git_cleaner.selector import PreviewResult, preview_deletion

app = typer.Typer(help="Git branch cleanup tool with glob patterns and whitelist", pretty_exceptions_enable=False)
console = Console()

PathOption = Annotated[Path, typer.Option(help="Path to git repository")]
PatternsOption = Annotated[
    Optional[list[str]],
    typer.Option("--patterns", "-p", help='Glob pattern of branches to delete, e.g. "feature/*" (repeatable, comma-separated)'),
]
WhitelistOption = Annotated[
    Optional[list[str]],
    typer.Option("--whitelist", "-w", help="Glob pattern of branches to keep (repeatable, comma-separated)"),
]
LocalOption = Annotated[bool, typer.Option("--local", "-l", help="Include local branches")]
RemoteOption = Annotated[bool, typer.Option("--remote", "-r", help="Include remote branches")]
RemoteNameOption = Annotated[Optional[str], typer.Option("--remote-name", help="Remote to operate on [default: from config, origin]")]


def confirm(prompt: str) -> bool:
    """Ask the user a yes/no question, defaulting to no."""
    return typer.confirm(prompt, default=False)


def version_callback(value: bool) -> None:
    if value:
        print(f"git-cleaner {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
    version: bool = typer.Option(False, "--version", callback=version_callback, is_eager=True, help="Show version and exit"),
) -> None:
    """Delete git branches matching glob patterns, sparing whitelisted ones."""
    setup_logging(verbose)


def get_repo(path: Path) -> GitRepo:
    """Get git repository instance."""
    if not is_git_repository(path):
        print(f"[red]❌ Not a git repository:[/red] {escape(str(path))}")
        raise typer.Exit(code=1)
    try:
        return GitRepo(path)
    except GitError as err:
        print(f"[red]Error:[/red] {escape(str(err))}")
        raise typer.Exit(code=1) from err


def get_config_manager(path: Path) -> ConfigManager:
    return ConfigManager.for_path(path)


def split_values(values: Optional[list[str]]) -> list[str]:
    """Flatten repeated and comma-separated option values."""
    result: list[str] = []
    for value in values or []:
        result.extend(split_list(value))
    return result


def validate_selection(patterns: list[str], local: bool, remote: bool, command: str) -> None:
    if not patterns:
        print("[yellow]⚠️  Please provide at least one glob pattern (-p) or set defaultPatterns in the config[/yellow]")
        print(f'[dim]Example: git-cleaner {command} -p "feature/*" -l[/dim]')
        raise typer.Exit(code=1)
    if not local and not remote:
        print("[yellow]⚠️  Please choose local (-l) and/or remote (-r) branches[/yellow]")
        raise typer.Exit(code=1)


def display_preview(preview: PreviewResult, remote_name: str) -> None:
    """Show the branches a clean run would delete."""
    if preview.is_empty:
        console.print(Panel("[green]No matching branches to delete ✨[/green]", style="green", padding=(0, 2), expand=False))
        return

    table = Table(
        title="Branches to Delete",
        show_header=True,
        header_style="bold",
        title_style="bold blue",
        show_edge=True,
    )
    table.add_column("Branch", style="cyan", no_wrap=True)
    table.add_column("Location", style="magenta", justify="center", no_wrap=True)
    for branch in preview.local:
        table.add_row(escape(branch), "local")
    for branch in preview.remote:
        table.add_row(escape(branch), escape(remote_name))

    console.print()
    console.print(table)
    console.print(f"[bold]📊 Total: {preview.total} branch(es)[/bold]")


def display_outcomes(title: str, outcomes: list[DeletionOutcome]) -> int:
    """Print one line per attempted deletion and return the failure count."""
    console.print(f"\n[bold blue]{title}[/bold blue]")
    failures = 0
    for outcome in outcomes:
        if outcome.success:
            console.print(f"  [green]✅ {escape(outcome.branch)}[/green]")
        else:
            failures += 1
            console.print(f"  [red]❌ {escape(outcome.branch)}:[/red] {escape(outcome.error or 'unknown error')}")
    return failures


def execute_deletion(repo: GitRepo, preview: PreviewResult, remote_name: str, force: bool) -> int:
    """Delete the previewed branches and return the number of failures."""
    console.print("\n[blue]🗑️  Deleting branches...[/blue]")
    failures = 0

    if preview.local:
        failures += display_outcomes("Local branches:", delete_local_branches(repo, preview.local, force))

    if preview.remote:
        outcomes = delete_remote_branches(repo, preview.remote, remote_name)
        failures += display_outcomes(f"Remote branches ({escape(remote_name)}):", outcomes)

    deleted = preview.total - failures
    if failures:
        console.print(f"\n[yellow]Deleted {deleted} branch(es), {failures} failed[/yellow]")
    else:
        console.print(f"\n[green]✅ Successfully deleted {deleted} branch(es) 🧹[/green]")
    return failures


@app.command()
def clean(
    patterns: PatternsOption = None,
    whitelist: WhitelistOption = None,
    local: LocalOption = False,
    remote: RemoteOption = False,
    remote_name: RemoteNameOption = None,
    force: bool = typer.Option(False, "--force", "-f", help="Force deletion of unmerged local branches"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would be deleted without deleting"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt"),
    path: PathOption = Path("."),
) -> None:
    """Delete branches matching the given glob patterns."""
    repo = get_repo(path)

    try:
        settings = get_config_manager(path).resolve(
            patterns=split_values(patterns),
            whitelist=split_values(whitelist),
            remote=remote_name,
            auto_confirm=True if yes else None,
            force_delete=True if force else None,
        )
        validate_selection(settings.default_patterns, local, remote, "clean")

        preview = preview_deletion(
            repo,
            settings.default_patterns,
            settings.default_whitelist,
            include_local=local,
            include_remote=remote,
            remote=settings.default_remote,
        )
        display_preview(preview, settings.default_remote)
        if preview.is_empty:
            return

        if dry_run:
            console.print("\n[blue]🔍 Dry run, no branches were deleted[/blue]")
            return

        if not settings.auto_confirm:
            console.print()
            if not confirm("Delete these branches?"):
                console.print("\n[yellow]Operation cancelled[/yellow] 🛑")
                return

        execute_deletion(repo, preview, settings.default_remote, settings.force_delete)

    except (GitError, ConfigError) as err:
        print(f"[red]❌ Error:[/red] {escape(str(err))}")
        raise typer.Exit(code=1) from err


@app.command()
def preview(
    patterns: PatternsOption = None,
    whitelist: WhitelistOption = None,
    local: LocalOption = False,
    remote: RemoteOption = False,
    remote_name: RemoteNameOption = None,
    path: PathOption = Path("."),
) -> None:
    """Show branches that clean would delete."""
    repo = get_repo(path)

    try:
        settings = get_config_manager(path).resolve(
            patterns=split_values(patterns),
            whitelist=split_values(whitelist),
            remote=remote_name,
        )
        validate_selection(settings.default_patterns, local, remote, "preview")
        result = preview_deletion(
            repo,
            settings.default_patterns,
            settings.default_whitelist,
            include_local=local,
            include_remote=remote,
            remote=settings.default_remote,
        )
        display_preview(result, settings.default_remote)

    except (GitError, ConfigError) as err:
        print(f"[red]❌ Error:[/red] {escape(str(err))}")
        raise typer.Exit(code=1) from err


@app.command()
def config(
    init: bool = typer.Option(False, "--init", help="Create the global config file with defaults"),
    set_item: tuple[str, str] = typer.Option((None, None), "--set", metavar="KEY VALUE", help="Set a config value"),
    extra: Annotated[Optional[list[str]], typer.Argument(hidden=True)] = None,
    get: Optional[str] = typer.Option(None, "--get", metavar="KEY", help="Show one config value"),
    list_all: bool = typer.Option(False, "--list", help="Show all config values"),
    path: PathOption = Path("."),
) -> None:
    """Manage the global configuration."""
    manager = get_config_manager(path)
    key, value = set_item
    if extra and key is None:
        # Only --set takes extra words
        raise typer.BadParameter(f"Unexpected arguments: {' '.join(extra)}")

    try:
        if init:
            config_path = escape(str(manager.global_store))
            if manager.init_config():
                print(f"[green]✅ Configuration file created:[/green] {config_path}")
            else:
                print(f"[yellow]Configuration file already exists:[/yellow] {config_path}")
            return

        if key is not None:
            # Words after the value belong to it: --set defaultRemote my remote
            raw = " ".join([value, *(extra or [])])
            stored = manager.set_config(key, raw)
            print(f"[green]✅ Configuration updated:[/green] {escape(key)} = {escape(json.dumps(stored))}")
            return

        if get:
            print(f"[blue]{escape(get)}:[/blue] {escape(json.dumps(manager.get_config(get)))}")
            return

        if list_all:
            console.print("[bold]📋 Current configuration:[/bold]")
            for name, current in manager.list_config().items():
                console.print(f"  [blue]{escape(name)}:[/blue] {escape(json.dumps(current))}")
            return

    except ConfigError as err:
        print(f"[red]❌ Configuration error:[/red] {escape(str(err))}")
        raise typer.Exit(code=1) from err

    print("[yellow]Please specify a config operation:[/yellow]")
    print("[dim]  --init               Create the config file[/dim]")
    print("[dim]  --set <key> <value>  Set a config value[/dim]")
    print("[dim]  --get <key>          Show a config value[/dim]")
    print("[dim]  --list               Show all config values[/dim]")


def run() -> None:
    """Console entry point; reports unexpected errors without a traceback."""
    try:
        app()
    except Exception as err:
        print(f"[red]❌ Error:[/red] {escape(str(err))}")
        raise SystemExit(1) from err


if __name__ == "__main__":
    run()
