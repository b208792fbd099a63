"""Event log for era changes, collectivizations, displacements and view actions.

Entries carry the simulated day, a category, a readable message, the ids of
the farms/persons involved, and structured fields (``era_id``, ``farm_id``,
``famine_risk`` ...) so exports can be filtered without parsing text.
"""

from __future__ import annotations

import json
import os
from collections import Counter
from dataclasses import asdict, dataclass, field
from typing import Iterable, Optional, TextIO


@dataclass
class LogEntry:
    day: int
    category: str
    message: str
    entity_ids: list[str] = field(default_factory=list)
    data: dict = field(default_factory=dict)

    def format_line(self) -> str:
        line = f"[Day {self.day:>5}] {self.category:<10} {self.message}"
        if self.data:
            line += "  " + " ".join(f"{k}={_fmt(v)}" for k, v in self.data.items())
        return line


def _fmt(value) -> str:
    if isinstance(value, float):
        return f"{value:.3f}"
    if isinstance(value, (list, tuple)):
        return ",".join(str(v) for v in value)
    return str(value)


class SimLogger:
    """Categorised event log with a verbosity gate on what gets printed.

    Every entry is kept for export; verbosity only decides which entries are
    echoed to stdout and the log file when pending entries are flushed.
    """

    ERA = "ERA"
    LIFECYCLE = "LIFECYCLE"
    COLLECTIVIZATION = "COLLECTIVE"
    DISPLACEMENT = "DISPLACED"
    VIEW = "VIEW"
    POLICY = "POLICY"

    # Minimum verbosity at which a category is echoed
    ECHO_LEVEL: dict[str, int] = {
        ERA: 0,
        LIFECYCLE: 0,
        COLLECTIVIZATION: 1,
        DISPLACEMENT: 1,
        VIEW: 2,
        POLICY: 3,
    }

    def __init__(self, verbosity: int = 1, log_file: Optional[str] = None, stdout: bool = True) -> None:
        self.verbosity = verbosity
        self._stdout = stdout
        self._written: list[LogEntry] = []
        self._pending: list[LogEntry] = []
        self._file: Optional[TextIO] = None
        if log_file:
            directory = os.path.dirname(log_file)
            if directory:
                os.makedirs(directory, exist_ok=True)
            self._file = open(log_file, "w", encoding="utf-8")

    @property
    def entries(self) -> list[LogEntry]:
        return self._written + self._pending

    def log(
        self,
        category: str,
        message: str,
        entity_ids: Optional[Iterable[str]] = None,
        day: int = 0,
        **data,
    ) -> LogEntry:
        entry = LogEntry(day, category, message, list(entity_ids or ()), data)
        self._pending.append(entry)
        return entry

    def flush(self) -> int:
        """Echo and commit pending entries. Returns how many were echoed."""
        echoed = 0
        for entry in self._pending:
            if self.ECHO_LEVEL.get(entry.category, 1) > self.verbosity:
                continue
            line = entry.format_line()
            if self._stdout:
                print(line)
            if self._file:
                self._file.write(line + "\n")
            echoed += 1
        self._written.extend(self._pending)
        self._pending.clear()
        if self._file:
            self._file.flush()
        return echoed

    def select(
        self,
        categories: Optional[Iterable[str]] = None,
        first_day: Optional[int] = None,
        last_day: Optional[int] = None,
    ) -> list[LogEntry]:
        wanted = set(categories) if categories is not None else None
        return [
            e for e in self.entries
            if (wanted is None or e.category in wanted)
            and (first_day is None or e.day >= first_day)
            and (last_day is None or e.day <= last_day)
        ]

    def counts(self) -> dict[str, int]:
        return dict(Counter(e.category for e in self.entries))

    def chronicle(self, categories: Iterable[str] = (ERA, COLLECTIVIZATION), limit: Optional[int] = None) -> str:
        """Notable events as text, oldest first; the last ``limit`` when given."""
        picked = self.select(categories)
        if limit is not None:
            picked = picked[-limit:] if limit > 0 else []
        if not picked:
            return "No notable events."
        return "\n".join(e.format_line() for e in picked)

    def export_json(self, filepath: str) -> None:
        directory = os.path.dirname(filepath)
        if directory:
            os.makedirs(directory, exist_ok=True)
        payload = {
            "counts": self.counts(),
            "entries": [asdict(e) for e in self.entries],
        }
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)

    def close(self) -> None:
        self.flush()
        if self._file:
            self._file.close()
            self._file = None
