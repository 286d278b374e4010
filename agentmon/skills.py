"""Skill lookup backed by a JSON export of the public skills database.

The file is a single object with a ``skills`` list; each entry carries the
slug, display name, author, description, category, primary card type and a
complexity rating. Entries that fail validation are skipped with a warning so
that one malformed record does not hide the rest of the database.
"""
from __future__ import annotations

import json
import pathlib
from typing import Dict, Iterable, List, Optional

from pydantic import ValidationError

from .models import SkillRecord
from .utils import get_logger

LOGGER = get_logger(__name__)


class SkillLibrary:
    """Case-insensitive slug → :class:`SkillRecord` mapping."""

    def __init__(self, records: Iterable[SkillRecord] = ()) -> None:
        self._by_slug: Dict[str, SkillRecord] = {}
        for record in records:
            self._by_slug.setdefault(record.slug, record)

    @classmethod
    def from_file(cls, path: str | pathlib.Path) -> "SkillLibrary":
        file_path = pathlib.Path(path)
        with file_path.open("r", encoding="utf8") as handle:
            data = json.load(handle)

        entries = data.get("skills", []) if isinstance(data, dict) else data
        if not isinstance(entries, list):
            raise ValueError(f"{file_path} does not contain a skills list")

        records: List[SkillRecord] = []
        for entry in entries:
            try:
                records.append(SkillRecord.model_validate(entry))
            except ValidationError as error:
                LOGGER.warning("Skipping invalid skill entry in %s: %s", file_path.name, error)
        LOGGER.info("Loaded %d skills from %s", len(records), file_path)
        return cls(records)

    def __len__(self) -> int:
        return len(self._by_slug)

    def lookup(self, slug: str) -> Optional[SkillRecord]:
        return self._by_slug.get(slug.strip().lower())

    def lookup_many(self, slugs: Iterable[str]) -> List[SkillRecord]:
        """Return the records for ``slugs`` that exist, in input order."""
        results: List[SkillRecord] = []
        for slug in slugs:
            record = self.lookup(slug)
            if record is not None:
                results.append(record)
        return results

    def search(self, query: str, limit: int = 10) -> List[SkillRecord]:
        lowered = query.lower()
        results: List[SkillRecord] = []
        for record in self._by_slug.values():
            if lowered in record.slug or lowered in record.description.lower():
                results.append(record)
                if len(results) >= limit:
                    break
        return results
