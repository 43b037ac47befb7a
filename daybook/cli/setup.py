"""Setup command for DayBook CLI."""

import click
from rich.console import Console
from rich.panel import Panel

from daybook.config import CONFIG_PATH, create_template_config

console = Console()


@click.command()
@click.option("--force", is_flag=True, default=False, help="Overwrite an existing config file.")
@click.pass_context
def init(ctx: click.Context, force: bool) -> None:
    """Create a template configuration file.

    \b
    Examples:
      daybook init
      daybook --config ./daybook.toml init
    """
    obj = ctx.find_root().obj or {}
    config_path = obj.get("config_path") or CONFIG_PATH

    if config_path.exists() and not force:
        console.print(Panel(
            f"[yellow]Config already exists:[/yellow] {config_path}\n\n"
            "Use [cyan]--force[/cyan] to overwrite it.",
            title="[bold yellow]Init[/bold yellow]",
            border_style="yellow",
        ))
        return

    path = create_template_config(config_path)
    console.print(Panel(
        f"Config written to [cyan]{path}[/cyan]",
        title="[bold green]Init[/bold green]",
        border_style="green",
    ))
