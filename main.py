"""Klassenzuteilung (반편성) — Haupt-CLI.

Verwendung:
  python main.py setup                     Ersteinrichtung (Wizard)
  python main.py config edit               Konfiguration bearbeiten
  python main.py config show               Konfiguration anzeigen
  python main.py generate                  Fake-Daten erzeugen und speichern
  python main.py template                  Excel-Import-Vorlage erzeugen
  python main.py import <datei.xlsx>       Schülerliste importieren
  python main.py validate                  Konsistenz-Check
  python main.py stats [--class N]         Klassen-Statistik / Balance-Bericht
  python main.py board                     Klassenbrett anzeigen
  python main.py move <id> <klasse|none>   Kind umsetzen
  python main.py student add|edit|remove   Kinder manuell pflegen
  python main.py relation add|remove|list Konflikte / Freundschaften erfassen
  python main.py analyze --user <id>       KI-Analyse der Zuteilung
  python main.py assign --user <id>        KI-Zuteilungsvorschlag
  python main.py usage --user <id>         Verbleibende KI-Aufrufe
  python main.py export                    Ergebnis als Excel exportieren
  python main.py diff <a.json> <b.json>    Zwei Zuteilungen vergleichen
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich import box

console = Console()
logger = logging.getLogger(__name__)

# Standard-Pfad für den gespeicherten Projektdatensatz
DEFAULT_DATA_JSON = Path("output/project_data.json")


def _load_config_or_abort():
    """Lädt die Konfiguration oder bricht mit Fehlermeldung ab."""
    from config.manager import ConfigManager
    mgr = ConfigManager()
    if mgr.first_run_check():
        console.print(
            "[red]Keine Konfiguration gefunden.[/red]\n"
            "Führen Sie zunächst [bold]python main.py setup[/bold] aus."
        )
        sys.exit(1)
    try:
        return mgr, mgr.load()
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)


def _load_data_or_abort(json_path: str):
    """Lädt den Projektdatensatz oder bricht mit Fehlermeldung ab.

    Existiert eine Projektkonfiguration, ersetzt sie die im Datensatz
    gespeicherte Kopie, damit Änderungen aus 'config edit' sofort gelten.
    """
    from config.manager import ConfigManager
    from models.project_data import ProjectData

    p = Path(json_path)
    if not p.exists():
        console.print(
            f"[red]Keine Datendatei gefunden: {p}[/red]\n"
            "Verwenden Sie [bold]python main.py generate[/bold] "
            "oder [bold]python main.py import <datei.xlsx>[/bold]."
        )
        sys.exit(1)
    data = ProjectData.load_json(p)
    if ConfigManager().first_run_check():
        logger.debug(f"Keine Konfigurationsdatei, nutze gespeicherte Kopie aus {p}")
        return data
    _, config = _load_config_or_abort()
    return data.with_config(config)


def _parse_class(value: str) -> Optional[int]:
    """'3' → 3, 'none' / '-' → None."""
    if value.lower() in ("none", "-", "0"):
        return None
    try:
        return int(value)
    except ValueError:
        raise click.BadParameter(f"Klasse muss eine Zahl oder 'none' sein: {value}")


def _fail(title: str, error: Exception) -> None:
    logger.debug(f"{title}: {error!r}")
    console.print(f"[red bold]{title}:[/red bold]\n{error}")
    sys.exit(1)


json_path_option = click.option(
    "--json-path", default=str(DEFAULT_DATA_JSON),
    help="Pfad zur Projekt-JSON-Datei.",
)


# ─── SETUP ────────────────────────────────────────────────────────────────────

@click.command("setup")
def cmd_setup():
    """Ersteinrichtung: Projektkonfiguration mit dem Setup-Wizard anlegen."""
    from config.wizard import run_wizard
    from config.manager import ConfigManager

    mgr = ConfigManager()
    if not mgr.first_run_check():
        console.print(
            "[yellow]Eine Konfiguration existiert bereits.[/yellow]\n"
            "Verwenden Sie [bold]python main.py config edit[/bold] zum Bearbeiten."
        )
        if not click.confirm("Trotzdem neu einrichten?", default=False):
            return

    config = run_wizard()
    if config is not None:
        mgr.save(config)
        console.print("[bold green]Einrichtung abgeschlossen![/bold green]")
        console.print(
            "Führen Sie jetzt [bold]python main.py template[/bold] oder "
            "[bold]python main.py generate[/bold] aus."
        )


# ─── CONFIG ───────────────────────────────────────────────────────────────────

@click.group("config")
def cmd_config():
    """Konfiguration anzeigen oder bearbeiten."""


@cmd_config.command("show")
def config_show():
    """Zeigt die aktuelle Konfiguration an."""
    from config.wizard import _show_catalog_table

    mgr, config = _load_config_or_abort()
    console.print(Panel(
        f"[bold]{config.project_name}[/bold]  |  "
        f"{config.current_classes} bisherige Klassen → "
        f"{config.target_classes} Zielklassen",
        title="Projektkonfiguration",
        border_style="cyan",
    ))
    _show_catalog_table("Verhalten", config.behavior_options)
    _show_catalog_table("Besonderheiten", config.special_note_options)

    ac = config.advisor
    console.print(
        f"\n[bold]KI-Beratung:[/bold] {ac.model} | "
        f"Schlüssel aus ${ac.api_key_env} | "
        f"Analysen: {ac.analyze_limit} | Zuteilungen: {ac.assign_limit}"
    )


@cmd_config.command("edit")
def config_edit():
    """Bearbeitet die Konfiguration interaktiv."""
    mgr, config = _load_config_or_abort()
    mgr.edit_interactive(config)


# ─── GENERATE ─────────────────────────────────────────────────────────────────

@click.command("generate")
@click.option("--seed", default=42, help="Zufalls-Seed für reproduzierbare Daten.")
@click.option("--students", "num_students", default=100, show_default=True,
              help="Anzahl Kinder.")
@click.option("--assign", is_flag=True, default=False,
              help="Kinder zufällig auf die Zielklassen verteilen.")
@json_path_option
def cmd_generate(seed: int, num_students: int, assign: bool, json_path: str):
    """Erzeugt Testdaten (Kinder, Tags, Ränge, Beziehungen) und speichert sie."""
    mgr, config = _load_config_or_abort()
    from data.fake_data import FakeDataGenerator

    console.print("[bold]Testdaten werden generiert...[/bold]")
    gen = FakeDataGenerator(config, seed=seed)
    data = gen.generate(num_students=num_students, assign=assign)
    gen.print_summary(data)

    console.print(f"\n[dim]{data.summary()}[/dim]")
    data.validate_data().print_rich()

    out_path = Path(json_path)
    data.save_json(out_path)
    console.print(f"[green]✓[/green] JSON gespeichert: {out_path}")


# ─── TEMPLATE ─────────────────────────────────────────────────────────────────

@click.command("template")
@click.option("--output", "-o", default="output/학생명단_양식.xlsx",
              help="Ausgabepfad für die Excel-Vorlage.")
def cmd_template(output: str):
    """Erzeugt eine leere Excel-Import-Vorlage."""
    mgr, config = _load_config_or_abort()
    from data.excel_import import generate_template

    out_path = Path(output)
    console.print("[bold]Excel-Vorlage wird erzeugt...[/bold]")
    generate_template(config, out_path)
    console.print(f"[green]✓[/green] Vorlage gespeichert: {out_path}")
    console.print(
        "\nBlätter in der Vorlage:\n"
        "  [cyan]학생명단[/cyan]  – Eingabe: 번호, 이름, 학급, 성별, 석차, Tags, 메모\n"
        "  [cyan]작성안내[/cyan]  – Anleitung mit allen gültigen Katalog-Labels"
    )


# ─── IMPORT ───────────────────────────────────────────────────────────────────

@click.command("import")
@click.argument("datei", type=click.Path(exists=True, path_type=Path))
@click.option("--append", is_flag=True, default=False,
              help="An bestehenden Datensatz anhängen statt ersetzen.")
@json_path_option
def cmd_import(datei: Path, append: bool, json_path: str):
    """Importiert eine Schülerliste aus einer Excel-Datei."""
    mgr, config = _load_config_or_abort()
    from data.excel_import import import_students, ExcelImportError
    from models.project_data import ProjectData

    out_path = Path(json_path)
    if append and out_path.exists():
        data = ProjectData.load_json(out_path).with_config(config)
    else:
        data = ProjectData(config=config)

    console.print(f"[bold]Importiere:[/bold] {datei}")
    try:
        students, report = import_students(datei, config, project_id=data.project_id)
    except ExcelImportError as e:
        _fail("Import fehlgeschlagen", e)

    data = data.model_copy(update={"students": data.students + students})
    console.print("[green]✓[/green] Import erfolgreich!")
    console.print(f"\n{data.summary()}")
    report.print_rich()

    data.save_json(out_path)
    console.print(f"[green]✓[/green] Daten gespeichert: {out_path}")


# ─── VALIDATE ─────────────────────────────────────────────────────────────────

@click.command("validate")
@json_path_option
def cmd_validate(json_path: str):
    """Führt einen Konsistenz-Check auf dem aktuellen Datensatz durch."""
    data = _load_data_or_abort(json_path)
    console.print(f"\n{data.summary()}\n")
    report = data.validate_data()
    report.print_rich()

    sys.exit(0 if report.is_valid else 1)


# ─── STATS ────────────────────────────────────────────────────────────────────

@click.command("stats")
@click.option("--class", "class_number", type=int, default=None,
              help="Nur diese Zielklasse anzeigen.")
@click.option("--json", "as_json", is_flag=True, default=False,
              help="Ausgabe als JSON (camelCase).")
@json_path_option
def cmd_stats(class_number: Optional[int], as_json: bool, json_path: str):
    """Zeigt Klassen-Statistik bzw. den Balance-Bericht."""
    import json

    from analysis.balance_report import BalanceAnalyzer
    from analysis.class_stats import aggregate_class
    from models.catalog import behavior_catalog, special_note_catalog

    data = _load_data_or_abort(json_path)
    behaviors = behavior_catalog(data.config)
    notes = special_note_catalog(data.config)

    if class_number is None:
        analyzer = BalanceAnalyzer()
        report = analyzer.analyze(data)
        if as_json:
            click.echo(json.dumps(
                [s.to_prompt_dict() for s in report.class_stats],
                ensure_ascii=False, indent=2,
            ))
        else:
            analyzer.print_rich(report)
        return

    if not data.config.is_valid_target(class_number):
        console.print(
            f"[red]Zielklasse {class_number} außerhalb "
            f"1..{data.config.target_classes}.[/red]"
        )
        sys.exit(1)

    stats = aggregate_class(
        class_number, data.students, data.relationships, behaviors, notes,
    )
    if as_json:
        click.echo(json.dumps(stats.to_prompt_dict(), ensure_ascii=False, indent=2))
        return

    table = Table(title=f"{class_number}반", box=box.ROUNDED, show_header=False)
    table.add_column("Kennzahl", style="bold")
    table.add_column("Wert")
    table.add_row("Gesamt", f"{stats.total} (남 {stats.male} / 여 {stats.female})")
    table.add_row("Konflikte", str(stats.conflict_count))
    table.add_row("Befreundet", str(stats.friendly_count))
    table.add_row("Aufwand", str(stats.difficulty_score))
    if stats.rank_stats:
        rs = stats.rank_stats
        table.add_row("Rang", f"Ø {rs.avg:.1f} ({rs.min}–{rs.max}, n={rs.count})")
    for tag_id, n in sorted(stats.behavior_counts.items(), key=lambda kv: -kv[1]):
        table.add_row("  " + (behaviors.label_of(tag_id) or tag_id), str(n))
    for tag_id, n in sorted(stats.special_note_counts.items(), key=lambda kv: -kv[1]):
        table.add_row("  " + (notes.label_of(tag_id) or tag_id), str(n))
    console.print(table)


# ─── BOARD ────────────────────────────────────────────────────────────────────

@click.command("board")
@json_path_option
def cmd_board(json_path: str):
    """Zeigt das Klassenbrett (Zielklassen nebeneinander)."""
    from export.board_renderer import print_board

    data = _load_data_or_abort(json_path)
    print_board(data, console=console)


# ─── MOVE ─────────────────────────────────────────────────────────────────────

@click.command("move")
@click.argument("student_id")
@click.argument("target")
@json_path_option
def cmd_move(student_id: str, target: str, json_path: str):
    """Setzt ein Kind in eine Zielklasse ('none' = Zuteilung aufheben)."""
    data = _load_data_or_abort(json_path)
    target_class = _parse_class(target)
    try:
        data = data.move_student(student_id, target_class)
    except KeyError:
        console.print(f"[red]Unbekannte Schüler-ID: {student_id}[/red]")
        sys.exit(1)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    data.save_json(Path(json_path))
    student = data.students_by_id()[student_id]
    dest = f"{target_class}반" if target_class is not None else "미배정"
    console.print(f"[green]✓[/green] {student.name} → {dest}")


# ─── STUDENT ──────────────────────────────────────────────────────────────────

_GENDER_CHOICES = click.Choice(["남", "여", "male", "female"], case_sensitive=False)


def _tag_changes(config, behaviors: Optional[str], notes: Optional[str]) -> dict:
    """Übersetzt Label-Listen ('리더십, 기타:Text') in Student-Felder."""
    from data.excel_import import parse_tag_cell
    from models.catalog import behavior_catalog, special_note_catalog

    changes: dict = {}
    if behaviors is not None:
        ids, custom = parse_tag_cell(behaviors, behavior_catalog(config))
        changes.update(behaviors=ids, custom_behavior=custom)
    if notes is not None:
        ids, custom = parse_tag_cell(notes, special_note_catalog(config))
        changes.update(special_notes=ids, custom_special_note=custom)
    return changes


def _check_current_class(config, current_class: int) -> None:
    if not 1 <= current_class <= config.current_classes:
        console.print(
            f"[red]Bisherige Klasse {current_class} außerhalb "
            f"1..{config.current_classes}.[/red]"
        )
        sys.exit(1)


@click.group("student")
def cmd_student():
    """Kinder manuell anlegen, bearbeiten oder entfernen."""


@cmd_student.command("add")
@click.argument("name")
@click.option("--class", "current_class", type=int, required=True,
              help="Bisherige Klasse.")
@click.option("--gender", type=_GENDER_CHOICES, required=True, help="남/여.")
@click.option("--rank", type=int, default=None, help="Rang in der bisherigen Klasse.")
@click.option("--behaviors", default=None, help="Labels, kommagetrennt ('기타:Text' für Freitext).")
@click.option("--notes", default=None, help="Besonderheiten, kommagetrennt.")
@click.option("--memo", default=None)
@json_path_option
def student_add(name: str, current_class: int, gender: str, rank: Optional[int],
                behaviors: Optional[str], notes: Optional[str], memo: Optional[str],
                json_path: str):
    """Legt ein Kind an (ohne Datendatei wird ein neuer Datensatz begonnen)."""
    import uuid

    from data.excel_import import parse_gender
    from models.project_data import ProjectData
    from models.student import Student

    if Path(json_path).exists():
        data = _load_data_or_abort(json_path)
    else:
        _, config = _load_config_or_abort()
        data = ProjectData(config=config)
    _check_current_class(data.config, current_class)

    student = Student(
        id=uuid.uuid4().hex[:12],
        project_id=data.project_id,
        name=name,
        current_class=current_class,
        original_class=current_class,
        gender=parse_gender(gender),
        student_rank=rank,
        memo=memo,
        **_tag_changes(data.config, behaviors, notes),
    )
    data = data.add_student(student)
    data.save_json(Path(json_path))
    console.print(f"[green]✓[/green] {student.name} angelegt (ID {student.id})")


@cmd_student.command("edit")
@click.argument("student_id")
@click.option("--name", default=None)
@click.option("--class", "current_class", type=int, default=None,
              help="Bisherige Klasse.")
@click.option("--gender", type=_GENDER_CHOICES, default=None)
@click.option("--rank", type=int, default=None, help="Rang (0 = entfernen).")
@click.option("--behaviors", default=None,
              help="Ersetzt die Verhaltens-Tags ('' = alle entfernen).")
@click.option("--notes", default=None,
              help="Ersetzt die Besonderheiten ('' = alle entfernen).")
@click.option("--memo", default=None, help="Memo ('' = entfernen).")
@json_path_option
def student_edit(student_id: str, name: Optional[str], current_class: Optional[int],
                 gender: Optional[str], rank: Optional[int], behaviors: Optional[str],
                 notes: Optional[str], memo: Optional[str], json_path: str):
    """Ändert Name, Klasse, Rang, Tags oder Memo eines Kindes."""
    from data.excel_import import parse_gender

    data = _load_data_or_abort(json_path)
    changes = _tag_changes(data.config, behaviors, notes)
    if name is not None:
        changes["name"] = name
    if current_class is not None:
        _check_current_class(data.config, current_class)
        changes["current_class"] = current_class
    if gender is not None:
        changes["gender"] = parse_gender(gender)
    if rank is not None:
        changes["student_rank"] = rank
    if memo is not None:
        changes["memo"] = memo
    if not changes:
        console.print("[yellow]Keine Änderungen angegeben.[/yellow]")
        return

    try:
        data = data.update_student(student_id, **changes)
    except KeyError:
        console.print(f"[red]Unbekannte Schüler-ID: {student_id}[/red]")
        sys.exit(1)
    except ValueError as e:
        _fail("Ungültige Eingabe", e)

    data.save_json(Path(json_path))
    console.print(
        f"[green]✓[/green] {data.students_by_id()[student_id].name} aktualisiert "
        f"({', '.join(sorted(changes))})"
    )


@cmd_student.command("remove")
@click.argument("student_id")
@json_path_option
def student_remove(student_id: str, json_path: str):
    """Entfernt ein Kind samt seiner Beziehungen."""
    data = _load_data_or_abort(json_path)
    student = data.students_by_id().get(student_id)
    if student is None:
        console.print(f"[red]Unbekannte Schüler-ID: {student_id}[/red]")
        sys.exit(1)

    dropped = len(data.relationships_of(student_id))
    data = data.remove_student(student_id)
    data.save_json(Path(json_path))
    console.print(
        f"[green]✓[/green] {student.name} entfernt"
        + (f" ({dropped} Beziehungen gelöscht)" if dropped else "")
    )


# ─── RELATION ─────────────────────────────────────────────────────────────────

_RELATION_ALIASES = {
    "conflict": "conflict", "갈등": "conflict",
    "friendly": "friendly", "우호": "friendly",
}


@click.group("relation")
def cmd_relation():
    """Konflikt- und Freundschaftsbeziehungen verwalten."""


@cmd_relation.command("add")
@click.argument("student_a")
@click.argument("student_b")
@click.argument("kind", type=click.Choice(list(_RELATION_ALIASES), case_sensitive=False))
@json_path_option
def relation_add(student_a: str, student_b: str, kind: str, json_path: str):
    """Erfasst eine Beziehung zwischen zwei Kindern (conflict/갈등, friendly/우호)."""
    from models.relationship import RelationType

    data = _load_data_or_abort(json_path)
    rtype = RelationType(_RELATION_ALIASES[kind.lower()])
    try:
        data = data.add_relationship(student_a, student_b, rtype)
    except KeyError as e:
        console.print(f"[red]Unbekannte Schüler-ID: {e.args[0]}[/red]")
        sys.exit(1)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    new = data.relationships[-1]
    duplicates = [
        r for r in data.relationships[:-1] if r.pair == new.pair and r.type == new.type
    ]
    if duplicates:
        console.print(
            f"[yellow]Hinweis: Paar bereits erfasst ({duplicates[0].id}), "
            f"wird doppelt gezählt.[/yellow]"
        )
    data.save_json(Path(json_path))
    by_id = data.students_by_id()
    console.print(
        f"[green]✓[/green] {new.id}: {by_id[student_a].name} – "
        f"{by_id[student_b].name} ({'갈등' if rtype == RelationType.CONFLICT else '우호'})"
    )


@cmd_relation.command("remove")
@click.argument("relationship_id")
@json_path_option
def relation_remove(relationship_id: str, json_path: str):
    """Entfernt eine Beziehung per ID (siehe 'relation list')."""
    data = _load_data_or_abort(json_path)
    try:
        data = data.remove_relationship(relationship_id)
    except KeyError:
        console.print(f"[red]Unbekannte Beziehungs-ID: {relationship_id}[/red]")
        sys.exit(1)
    data.save_json(Path(json_path))
    console.print(f"[green]✓[/green] Beziehung {relationship_id} entfernt")


@cmd_relation.command("list")
@click.option("--student", "student_id", default=None, help="Nur Beziehungen dieses Kindes.")
@json_path_option
def relation_list(student_id: Optional[str], json_path: str):
    """Listet erfasste Beziehungen."""
    from export.helpers import class_label
    from models.relationship import RelationType

    data = _load_data_or_abort(json_path)
    relationships = (
        data.relationships_of(student_id) if student_id else data.relationships
    )
    if not relationships:
        console.print("[dim]Keine Beziehungen erfasst.[/dim]")
        return

    by_id = data.students_by_id()

    def who(sid: str) -> str:
        s = by_id.get(sid)
        return f"{s.name} ({class_label(s.target_class)})" if s else f"[red]{sid}?[/red]"

    table = Table(title="Beziehungen", box=box.ROUNDED)
    table.add_column("ID", style="dim")
    table.add_column("Kind")
    table.add_column("Art")
    table.add_column("Mit")
    for r in relationships:
        kind = "[red]갈등[/red]" if r.type == RelationType.CONFLICT else "[green]우호[/green]"
        table.add_row(r.id or "-", who(r.student_id), kind, who(r.target_student_id))
    console.print(table)


# ─── ANALYZE ──────────────────────────────────────────────────────────────────

@click.command("analyze")
@click.option("--user", "user_id", required=True, help="Nutzer-ID für das Kontingent.")
@json_path_option
def cmd_analyze(user_id: str, json_path: str):
    """Lässt die aktuelle Zuteilung durch die KI bewerten."""
    from advisor import Advisor, AdvisorError

    data = _load_data_or_abort(json_path)
    console.print("[bold]KI-Analyse läuft...[/bold]")
    try:
        outcome = Advisor().analyze(data, user_id)
    except AdvisorError as e:
        _fail("KI-Analyse fehlgeschlagen", e)

    for ca in outcome.analysis.class_analyses:
        console.print(Panel(
            f"[bold]성비:[/bold] {ca.gender_balance}\n"
            f"[bold]행동특성:[/bold] {ca.behavior_analysis}\n"
            f"[bold]특이사항:[/bold] {ca.special_note_analysis}\n"
            f"[bold]관계:[/bold] {ca.relationship_analysis}\n"
            f"[bold]석차:[/bold] {ca.rank_analysis}\n"
            f"[bold]난이도:[/bold] {ca.difficulty_level}\n\n{ca.summary}",
            title=f"{ca.class_number}반",
            border_style="cyan",
        ))

    overall = outcome.analysis.overall_analysis
    if overall is not None:
        table = Table(title="종합 평가", box=box.ROUNDED)
        table.add_column("항목", style="bold")
        table.add_column("점수", justify="right")
        table.add_row("성비 균형", str(overall.gender_balance_score or "-"))
        table.add_row("난이도 균형", str(overall.difficulty_balance_score or "-"))
        table.add_row("관계", str(overall.relationship_score or "-"))
        table.add_row("석차 균형", str(overall.rank_balance_score or "-"))
        table.add_row("[bold]종합[/bold]", f"[bold]{overall.overall_score or '-'}[/bold]")
        console.print(table)
        for s in overall.strengths:
            console.print(f"  [green]+[/green] {s}")
        for s in overall.improvements:
            console.print(f"  [yellow]–[/yellow] {s}")
        if overall.recommendations:
            console.print(f"\n{overall.recommendations}")

    console.print(f"\n[dim]Verbleibende Analysen: {outcome.remaining}[/dim]")


# ─── ASSIGN ───────────────────────────────────────────────────────────────────

@click.command("assign")
@click.option("--user", "user_id", required=True, help="Nutzer-ID für das Kontingent.")
@click.option("--apply", "apply_", is_flag=True, default=False,
              help="Vorschlag direkt in den Datensatz übernehmen.")
@json_path_option
def cmd_assign(user_id: str, apply_: bool, json_path: str):
    """Fragt einen KI-Zuteilungsvorschlag für alle Kinder an."""
    from advisor import Advisor, AdvisorError

    data = _load_data_or_abort(json_path)
    console.print("[bold]KI-Zuteilung läuft...[/bold]")
    try:
        outcome = Advisor().suggest_assignment(data, user_id)
    except AdvisorError as e:
        _fail("KI-Zuteilung fehlgeschlagen", e)

    mapping = outcome.suggestion.as_mapping()
    by_id = data.students_by_id()
    table = Table(title="Zuteilungsvorschlag", box=box.ROUNDED)
    table.add_column("Kind")
    table.add_column("Bisher", justify="right")
    table.add_column("Vorschlag", justify="right")
    for sid, cls in sorted(mapping.items(), key=lambda kv: (kv[1], by_id[kv[0]].name)):
        s = by_id[sid]
        table.add_row(s.name, f"{s.current_class}반", f"{cls}반")
    console.print(table)
    if outcome.suggestion.reasoning:
        console.print(Panel(outcome.suggestion.reasoning, title="Begründung",
                            border_style="cyan"))

    if apply_:
        data = data.apply_assignments(mapping)
        data.save_json(Path(json_path))
        console.print(f"[green]✓[/green] {len(mapping)} Zuteilungen übernommen.")
    console.print(f"\n[dim]Verbleibende Zuteilungen: {outcome.remaining}[/dim]")


# ─── USAGE ────────────────────────────────────────────────────────────────────

@click.command("usage")
@click.option("--user", "user_id", required=True, help="Nutzer-ID.")
@json_path_option
def cmd_usage(user_id: str, json_path: str):
    """Zeigt genutzte und verbleibende KI-Aufrufe."""
    from advisor import UsageTracker

    data = _load_data_or_abort(json_path)
    tracker = UsageTracker.from_config(data.config.advisor)
    table = Table(title=f"KI-Kontingent – {user_id}", box=box.ROUNDED)
    table.add_column("Zweck", style="bold")
    table.add_column("Genutzt", justify="right")
    table.add_column("Limit", justify="right")
    table.add_column("Verbleibend", justify="right")
    for purpose, row in tracker.summary(data.project_id, user_id).items():
        color = "green" if row["remaining"] else "red"
        table.add_row(purpose, str(row["used"]), str(row["limit"]),
                      f"[{color}]{row['remaining']}[/{color}]")
    console.print(table)


# ─── EXPORT ───────────────────────────────────────────────────────────────────

@click.command("export")
@click.option("--output", "-o", default="output/반편성_결과.xlsx",
              help="Ausgabepfad für die Excel-Datei.")
@json_path_option
def cmd_export(output: str, json_path: str):
    """Exportiert das Zuteilungsergebnis als Excel."""
    from export.excel_export import ResultExporter

    data = _load_data_or_abort(json_path)
    unassigned = len(data.unassigned_students())
    if unassigned:
        console.print(f"[yellow]Hinweis: {unassigned} Kinder noch nicht zugeteilt.[/yellow]")

    out_path = Path(output)
    ResultExporter(data).export(out_path)
    console.print(f"[green]✓[/green] Excel gespeichert: {out_path}")


# ─── DIFF ─────────────────────────────────────────────────────────────────────

@click.command("diff")
@click.argument("file_a", type=click.Path(exists=True, path_type=Path))
@click.argument("file_b", type=click.Path(exists=True, path_type=Path))
@click.option("--json", "as_json", is_flag=True, default=False,
              help="Ausgabe als JSON.")
def cmd_diff(file_a: Path, file_b: Path, as_json: bool):
    """Vergleicht die Zuteilungen zweier Projekt-JSON-Dateien."""
    from analysis.diff import diff_assignments
    from models.project_data import ProjectData

    diff = diff_assignments(ProjectData.load_json(file_a), ProjectData.load_json(file_b))
    if as_json:
        click.echo(diff.to_json())
        return
    if diff.is_empty():
        console.print("[green]Keine Unterschiede.[/green]")
        return

    table = Table(title=f"{file_a.name} → {file_b.name}", box=box.ROUNDED)
    table.add_column("Kind")
    table.add_column("Vorher", justify="right")
    table.add_column("Nachher", justify="right")
    for c in diff.changes:
        old = f"{c.old_class}반" if c.old_class is not None else "미배정"
        new = f"{c.new_class}반" if c.new_class is not None else "미배정"
        table.add_row(c.name, old, new)
    console.print(table)
    if diff.students_added:
        console.print(f"[green]Neu:[/green] {', '.join(diff.students_added)}")
    if diff.students_removed:
        console.print(f"[red]Entfernt:[/red] {', '.join(diff.students_removed)}")


# ─── HAUPT-CLI ────────────────────────────────────────────────────────────────

@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False,
              help="Ausführliche Log-Ausgabe.")
def cli(verbose: bool):
    """Klassenzuteilung (반편성) mit Aufwands-Score und KI-Beratung.

    Starten Sie mit: python main.py setup
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def main():
    """Einstiegspunkt. Startet automatisch den Wizard beim ersten Aufruf."""
    from config.manager import ConfigManager
    mgr = ConfigManager()

    if len(sys.argv) == 1 and mgr.first_run_check():
        console.print(Panel(
            "[bold]Willkommen bei der Klassenzuteilung![/bold]\n\n"
            "Keine Konfiguration gefunden.\n"
            "Der Setup-Wizard wird jetzt gestartet...",
            border_style="cyan",
        ))
        sys.argv.append("setup")

    cli()


# Befehle registrieren
cli.add_command(cmd_setup)
cli.add_command(cmd_config)
cli.add_command(cmd_generate)
cli.add_command(cmd_template)
cli.add_command(cmd_import)
cli.add_command(cmd_validate)
cli.add_command(cmd_stats)
cli.add_command(cmd_board)
cli.add_command(cmd_move)
cli.add_command(cmd_student)
cli.add_command(cmd_relation)
cli.add_command(cmd_analyze)
cli.add_command(cmd_assign)
cli.add_command(cmd_usage)
cli.add_command(cmd_export)
cli.add_command(cmd_diff)


if __name__ == "__main__":
    main()
