"""Konfigurationsmanager: Laden, Speichern, Validieren und interaktives Bearbeiten.

Nutzt ruamel.yaml für YAML-Serialisierung mit Kommentaren.
"""

import json
from datetime import date
from pathlib import Path
from typing import Optional

from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.prompt import IntPrompt, Prompt
from rich.table import Table
from rich import box
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

from config.schema import AdvisorConfig, ProjectConfig, TagOption

console = Console()
yaml = YAML()
yaml.default_flow_style = False
yaml.width = 120


# ─── YAML-KOMMENTAR-AUFBAU ───

_YAML_HEADER = f"""\
# ============================================
# Klassenzuteilung (반편성) — Projektkonfiguration
# Version: 1.0
# Erstellt: {date.today().isoformat()}
# ============================================
"""

_SECTION_COMMENTS = {
    "project_name": (
        "Projekt",
        "Anzahl bisheriger Klassen und neuer Zielklassen.",
    ),
    "behavior_options": (
        "Verhaltens-Katalog",
        "score > 0 = schwieriger zu betreuen, score < 0 = entlastend.",
    ),
    "special_note_options": (
        "Besonderheiten-Katalog",
        None,
    ),
    "advisor": (
        "KI-Beratung",
        "Limits gelten pro Projekt und Nutzer.",
    ),
}


class ConfigManager:
    CONFIG_DIR = Path("config")
    DEFAULT_CONFIG = CONFIG_DIR / "project_config.yaml"

    def __init__(self, path: Optional[Path] = None) -> None:
        if path is not None:
            self.DEFAULT_CONFIG = Path(path)

    def first_run_check(self) -> bool:
        """Gibt True zurück wenn noch keine Config existiert (Erstaufruf)."""
        return not self.DEFAULT_CONFIG.exists()

    # ─── Laden ───

    def load(self, path: Optional[Path] = None) -> ProjectConfig:
        """Lade Config aus YAML. Validiert automatisch via Pydantic."""
        target = path or self.DEFAULT_CONFIG
        if not target.exists():
            raise FileNotFoundError(
                f"Konfigurationsdatei nicht gefunden: {target}\n"
                f"Führen Sie 'python main.py setup' aus, um das Projekt einzurichten."
            )
        with open(target, "r", encoding="utf-8") as f:
            raw = yaml.load(f)
        try:
            return ProjectConfig.model_validate(dict(raw or {}))
        except Exception as e:
            raise ValueError(
                f"Konfigurationsdatei ungültig: {target}\n"
                f"Pydantic-Fehler: {e}"
            ) from e

    # ─── Speichern ───

    def save(self, config: ProjectConfig, path: Optional[Path] = None) -> None:
        """Speichere Config als YAML mit Abschnitts-Kommentaren."""
        target = path or self.DEFAULT_CONFIG
        target.parent.mkdir(parents=True, exist_ok=True)

        data = self._build_commented_yaml(config)

        with open(target, "w", encoding="utf-8") as f:
            f.write(_YAML_HEADER + "\n")
            yaml.dump(data, f)

        console.print(f"[green]✓[/green] Konfiguration gespeichert: {target}")

    def _build_commented_yaml(self, config: ProjectConfig) -> CommentedMap:
        """Baut die YAML-Struktur mit Kommentaren auf."""
        raw = json.loads(config.model_dump_json())
        cm = CommentedMap(raw)

        for field, (label, comment) in _SECTION_COMMENTS.items():
            cm.yaml_set_comment_before_after_key(
                field,
                before=f"\n─── {label} ───" + (f"\n{comment}" if comment else ""),
            )

        if "advisor" in cm:
            advisor_map = CommentedMap(cm["advisor"])
            advisor_map.yaml_add_eol_comment("Name der Umgebungsvariable", "api_key_env")
            cm["advisor"] = advisor_map

        return cm

    # ─── Interaktives Bearbeiten ───

    def edit_interactive(self, config: ProjectConfig) -> ProjectConfig:
        """Interaktives Bearbeitungsmenü für die Konfiguration."""
        while True:
            console.print()
            console.print(Panel(
                "[bold]Konfiguration bearbeiten[/bold]",
                border_style="cyan",
            ))
            console.print("  [bold]1.[/bold] Projekt (Name, Klassenanzahl)")
            console.print("  [bold]2.[/bold] Katalog-Scores")
            console.print("  [bold]3.[/bold] KI-Beratung")
            console.print("  [bold]0.[/bold] Speichern & Zurück")

            choice = Prompt.ask("\nAuswahl", default="0")

            if choice == "1":
                from config.wizard import _wizard_project
                config = config.model_copy(update=_wizard_project(config))
            elif choice == "2":
                config = self._edit_scores(config)
            elif choice == "3":
                config = config.model_copy(
                    update={"advisor": self._edit_advisor(config.advisor)}
                )
            elif choice == "0":
                self.save(config)
                break
            else:
                console.print("[yellow]Ungültige Auswahl.[/yellow]")

        return config

    def _edit_scores(self, config: ProjectConfig) -> ProjectConfig:
        """Scores einzelner Katalog-Einträge anpassen."""
        from config.wizard import _show_catalog_table
        _show_catalog_table("Verhalten", config.behavior_options)
        _show_catalog_table("Besonderheiten", config.special_note_options)

        behaviors = list(config.behavior_options)
        notes = list(config.special_note_options)
        while True:
            tag_id = Prompt.ask("Katalog-ID (leer = fertig)", default="")
            if not tag_id:
                break
            found = False
            for options in (behaviors, notes):
                for i, opt in enumerate(options):
                    if opt.id == tag_id:
                        options[i] = self._ask_score(opt)
                        found = True
                        break
            if not found:
                console.print(f"[yellow]Unbekannte Katalog-ID: {tag_id}[/yellow]")

        return ProjectConfig.model_validate({
            **config.model_dump(),
            "behavior_options": [o.model_dump() for o in behaviors],
            "special_note_options": [o.model_dump() for o in notes],
        })

    @staticmethod
    def _ask_score(opt: TagOption) -> TagOption:
        """Fragt so lange nach, bis der Score im erlaubten Bereich liegt."""
        while True:
            score = IntPrompt.ask(f"Neuer Score für {opt.label}", default=opt.score)
            try:
                return TagOption.model_validate({**opt.model_dump(), "score": score})
            except ValidationError as e:
                console.print(f"[red]Ungültiger Score {score}: {e.errors()[0]['msg']}[/red]")

    def _edit_advisor(self, ac: AdvisorConfig) -> AdvisorConfig:
        """KI-Einstellungen interaktiv anpassen."""
        table = Table(box=box.SIMPLE)
        table.add_column("Parameter", style="bold")
        table.add_column("Aktuell")
        for k, v in ac.model_dump().items():
            table.add_row(k, str(v))
        console.print(table)

        while True:
            try:
                return AdvisorConfig(
                    model=Prompt.ask("Modell", default=ac.model),
                    api_key_env=Prompt.ask("API-Key Umgebungsvariable", default=ac.api_key_env),
                    analyze_limit=IntPrompt.ask("Limit Analysen", default=ac.analyze_limit),
                    assign_limit=IntPrompt.ask("Limit Zuteilungen", default=ac.assign_limit),
                    usage_file=ac.usage_file,
                )
            except ValidationError as e:
                console.print(f"[red]Ungültige Eingabe: {e.errors()[0]['msg']}[/red]")
