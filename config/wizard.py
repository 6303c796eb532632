"""Interaktiver Setup-Wizard für die Ersteinrichtung eines Projekts.

Nutzt rich für die Konsolenausgabe.
"""

from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, IntPrompt, Prompt
from rich.table import Table
from rich import box

from config.schema import ProjectConfig, TagOption
from config.defaults import default_project_config

console = Console()

_STYLE_COLORS = {
    "danger": "red",
    "warning": "yellow",
    "success": "green",
    "neutral": "white",
}


def _header(title: str) -> None:
    console.print()
    console.print(Panel(f"[bold cyan]{title}[/bold cyan]", expand=False))


def _success(text: str) -> None:
    console.print(f"[green]✓[/green] {text}")


def _show_catalog_table(title: str, options: list[TagOption]) -> None:
    """Zeigt einen Tag-Katalog als rich-Tabelle an."""
    table = Table(title=title, box=box.ROUNDED)
    table.add_column("ID", style="bold")
    table.add_column("Label")
    table.add_column("Score", justify="right")
    for opt in options:
        color = _STYLE_COLORS.get(opt.style.value, "white")
        table.add_row(opt.id, f"[{color}]{opt.label}[/{color}]", f"{opt.score:+d}")
    console.print(table)


def _wizard_project(config: Optional[ProjectConfig] = None) -> dict:
    """Fragt Projektname und Klassenanzahlen ab."""
    base = config or default_project_config()
    _header("Projekt")
    name = Prompt.ask("Projektname", default=base.project_name)
    while True:
        current = IntPrompt.ask("Anzahl bisheriger Klassen", default=base.current_classes)
        target = IntPrompt.ask("Anzahl Zielklassen", default=base.target_classes)
        if 1 <= current <= 20 and 1 <= target <= 20:
            break
        console.print("[yellow]Klassenanzahl muss zwischen 1 und 20 liegen.[/yellow]")
    return {"project_name": name, "current_classes": current, "target_classes": target}


def run_wizard() -> Optional[ProjectConfig]:
    """Führt durch die Ersteinrichtung. Gibt None zurück bei Abbruch."""
    console.print(Panel(
        "[bold]Klassenzuteilung – Ersteinrichtung[/bold]\n"
        "Die Kataloge werden mit Standardwerten angelegt und können\n"
        "später über [bold]python main.py config edit[/bold] angepasst werden.",
        border_style="cyan",
    ))

    config = default_project_config()
    config = config.model_copy(update=_wizard_project(config))

    _show_catalog_table("Verhalten", config.behavior_options)
    _show_catalog_table("Besonderheiten", config.special_note_options)

    if not Confirm.ask("Konfiguration übernehmen?", default=True):
        console.print("[yellow]Abgebrochen.[/yellow]")
        return None

    _success(
        f"{config.project_name}: {config.current_classes} → "
        f"{config.target_classes} Klassen"
    )
    return config
