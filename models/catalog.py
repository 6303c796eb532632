"""Nachschlage-Tabelle für einen Tag-Katalog (Verhalten oder Besonderheiten)."""

from typing import Iterable, Optional

from config.schema import TagOption


class TagCatalog:
    """Unveränderliche Sicht auf eine Liste von TagOptions.

    Wird einmal pro Projekt aufgebaut und an Scoring und Aggregation
    übergeben (keine globalen Kataloge).
    """

    def __init__(self, options: Iterable[TagOption], other_id: Optional[str] = None) -> None:
        self._options: tuple[TagOption, ...] = tuple(options)
        self._by_id: dict[str, TagOption] = {o.id: o for o in self._options}
        self._by_label: dict[str, TagOption] = {}
        for o in self._options:
            # Erster Eintrag gewinnt bei doppelten Labels
            self._by_label.setdefault(o.label, o)
        self.other_id = other_id

    def __len__(self) -> int:
        return len(self._options)

    def __iter__(self):
        return iter(self._options)

    def __contains__(self, tag_id: str) -> bool:
        return tag_id in self._by_id

    @property
    def options(self) -> tuple[TagOption, ...]:
        return self._options

    def get(self, tag_id: str) -> Optional[TagOption]:
        return self._by_id.get(tag_id)

    def score_of(self, tag_id: str) -> int:
        """Score eines Tags; unbekannte IDs zählen 0."""
        opt = self._by_id.get(tag_id)
        return opt.score if opt is not None else 0

    def by_label(self, label: str) -> Optional[TagOption]:
        return self._by_label.get(label.strip())

    def label_of(self, tag_id: str) -> Optional[str]:
        opt = self._by_id.get(tag_id)
        return opt.label if opt is not None else None

    def labels(self, tag_ids: Iterable[str]) -> list[str]:
        """Labels der bekannten IDs in Eingabereihenfolge."""
        return [self._by_id[t].label for t in tag_ids if t in self._by_id]

    def summary(self) -> list[dict]:
        """JSON-taugliche Kurzform (id, label, score) für KI-Prompts."""
        return [{"id": o.id, "label": o.label, "score": o.score} for o in self._options]


def behavior_catalog(config) -> TagCatalog:
    """Verhaltens-Katalog aus einer ProjectConfig."""
    return TagCatalog(config.behavior_options, other_id=config.behavior_other_id)


def special_note_catalog(config) -> TagCatalog:
    """Besonderheiten-Katalog aus einer ProjectConfig."""
    return TagCatalog(config.special_note_options, other_id=config.special_note_other_id)
