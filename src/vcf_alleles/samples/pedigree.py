"""PED pedigree files and relatedness-aware sample selection."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

UNKNOWN_PARENT = "0"
AFFECTED = "2"


class PedigreeError(ValueError):
    """Raised when a PED line cannot be parsed."""

    pass


@dataclass
class Individual:
    """One PED row."""

    id: str
    family: str
    father: str | None = None
    mother: str | None = None
    sex: str = "0"
    phenotype: str = "0"

    @property
    def affected(self) -> bool:
        return self.phenotype == AFFECTED

    @property
    def parents(self) -> list[str]:
        return [p for p in (self.father, self.mother) if p is not None]


@dataclass
class Pedigree:
    """A family: individuals linked by parent/child relationships."""

    id: str
    individuals: list[Individual] = field(default_factory=list)

    @property
    def samples(self) -> list[str]:
        return [i.id for i in self.individuals]

    @property
    def affected(self) -> list[str]:
        return [i.id for i in self.individuals if i.affected]

    @property
    def founders(self) -> list[str]:
        members = set(self.samples)
        return [i.id for i in self.individuals if not any(p in members for p in i.parents)]

    def _by_id(self) -> dict[str, Individual]:
        return {i.id: i for i in self.individuals}

    def ancestors(self, individual_id: str) -> set[str]:
        """All ancestors of an individual recorded in this family."""
        by_id = self._by_id()
        seen: set[str] = set()
        stack = list(by_id[individual_id].parents) if individual_id in by_id else []
        while stack:
            parent = stack.pop()
            if parent in seen or parent not in by_id:
                continue
            seen.add(parent)
            stack.extend(by_id[parent].parents)
        return seen

    def related(self, a: str, b: str) -> bool:
        """True when one is an ancestor of the other or they share an ancestor."""
        if a == b:
            return True
        lineage_a = self.ancestors(a) | {a}
        lineage_b = self.ancestors(b) | {b}
        return bool(lineage_a & lineage_b)

    def relatives(self, individual_id: str) -> list[str]:
        return [s for s in self.samples if s != individual_id and self.related(individual_id, s)]

    def find_maximal_unrelated_set(self, include: str | None = None) -> list[str]:
        """Greedily choose individuals with no blood relationship to each other.

        ``include`` (when given) is chosen first, then affected individuals,
        then everyone else in file order.
        """
        ordered = sorted(self.individuals, key=lambda i: not i.affected)
        candidates = [i.id for i in ordered]
        if include is not None:
            if include not in self.samples:
                raise KeyError(f"{include} is not a member of family {self.id}")
            candidates.remove(include)
            candidates.insert(0, include)

        chosen: list[str] = []
        for candidate in candidates:
            if not any(self.related(candidate, c) for c in chosen):
                chosen.append(candidate)
        return chosen


@dataclass
class Pedigrees:
    """All families from a PED file, keyed by family id."""

    families: dict[str, Pedigree] = field(default_factory=dict)

    @property
    def subjects(self) -> dict[str, Pedigree]:
        return {s: f for f in self.families.values() for s in f.samples}

    def find_maximal_unrelated_set(self, include: str | None = None) -> list[str]:
        """Union of each family's unrelated set; families are unrelated to each other."""
        home = self.subjects.get(include) if include is not None else None
        if include is not None and home is None:
            raise KeyError(f"{include} is not in any family")

        chosen = []
        for family in self.families.values():
            chosen.extend(
                family.find_maximal_unrelated_set(include if family is home else None)
            )
        return chosen

    @classmethod
    def parse_lines(cls, lines) -> "Pedigrees":
        pedigrees = cls()
        for line_number, line in enumerate(lines, start=1):
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            fields = stripped.split()
            if len(fields) < 6:
                raise PedigreeError(
                    f"Line {line_number}: expected 6 columns, found {len(fields)}"
                )
            family_id, individual_id, father, mother, sex, phenotype = fields[:6]
            individual = Individual(
                id=individual_id,
                family=family_id,
                father=None if father == UNKNOWN_PARENT else father,
                mother=None if mother == UNKNOWN_PARENT else mother,
                sex=sex,
                phenotype=phenotype,
            )
            family = pedigrees.families.setdefault(family_id, Pedigree(id=family_id))
            family.individuals.append(individual)
        return pedigrees

    @classmethod
    def parse(cls, ped_path: Path | str) -> "Pedigrees":
        ped_path = Path(ped_path)
        if not ped_path.exists():
            raise FileNotFoundError(f"PED file not found: {ped_path}")
        with open(ped_path, encoding="utf-8") as f:
            pedigrees = cls.parse_lines(f)
        logger.info("Loaded %d families from %s", len(pedigrees.families), ped_path)
        return pedigrees
