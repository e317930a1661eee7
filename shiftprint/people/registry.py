"""Per-import snapshot of the people named in a calendar."""

import logging
from collections.abc import Iterable, Iterator, Mapping
from typing import Optional, Sequence

from ..ics.models import RawOccurrence
from .extractor import extract_people_and_title, generate_person_id
from .models import Person

logger = logging.getLogger(__name__)

DEFAULT_PALETTE: tuple[str, ...] = (
    "#3b82f6",  # blue
    "#ef4444",  # red
    "#10b981",  # green
    "#f59e0b",  # amber
    "#8b5cf6",  # violet
    "#ec4899",  # pink
    "#14b8a6",  # teal
    "#f97316",  # orange
    "#06b6d4",  # cyan
    "#84cc16",  # lime
    "#f43f5e",  # rose
    "#0d9488",  # dark teal
)


class PersonRegistry(Mapping[str, Person]):
    """Immutable mapping of normalized person id to :class:`Person`.

    Built once per calendar import and passed explicitly through the
    pipeline. Lookups accept any spelling of a name: ``registry.get("John
    Doe ")`` and ``registry["john doe"]`` resolve to the same person.
    """

    def __init__(self, people: Iterable[Person] = ()) -> None:
        self._people: dict[str, Person] = {}
        for person in people:
            self._people.setdefault(person.id, person)

    @classmethod
    def from_names(
        cls, names: Iterable[str], palette: Sequence[str] = DEFAULT_PALETTE
    ) -> "PersonRegistry":
        """Register names in order, giving each new person the next palette color."""
        people: dict[str, Person] = {}
        for name in names:
            person_id = generate_person_id(name)
            if not person_id or person_id in people:
                continue
            color = palette[len(people) % len(palette)]
            people[person_id] = Person(id=person_id, name=name.strip(), color=color)
        return cls(people.values())

    @classmethod
    def from_occurrences(
        cls, occurrences: Iterable[RawOccurrence], palette: Sequence[str] = DEFAULT_PALETTE
    ) -> "PersonRegistry":
        """Extract every name from the occurrences' summaries and register them."""
        registry = cls.from_names(
            (
                name
                for occurrence in occurrences
                for name in extract_people_and_title(occurrence.summary).names
            ),
            palette,
        )
        logger.debug(f"Registered {len(registry)} people")
        return registry

    def __getitem__(self, name: str) -> Person:
        return self._people[generate_person_id(name)]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and generate_person_id(name) in self._people

    def __iter__(self) -> Iterator[str]:
        return iter(self._people)

    def __len__(self) -> int:
        return len(self._people)

    def __repr__(self) -> str:
        return f"PersonRegistry({list(self._people.values())!r})"

    def people(self) -> list[Person]:
        """People in registration order."""
        return list(self._people.values())

    def resolve(self, names: Iterable[str]) -> list[Person]:
        """Resolve names to people, dropping unknown names and duplicates."""
        resolved: list[Person] = []
        seen: set[str] = set()
        for name in names:
            person = self.get(name)
            if person is not None and person.id not in seen:
                seen.add(person.id)
                resolved.append(person)
        return resolved

    def with_color_override(self, name: str, color: Optional[str]) -> "PersonRegistry":
        """Return a new registry with ``name``'s color override replaced.

        Raises:
            KeyError: If ``name`` is not registered
        """
        person = self[name]
        updated = person.model_copy(update={"color_override": color})
        return PersonRegistry(updated if p.id == person.id else p for p in self._people.values())
