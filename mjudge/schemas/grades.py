"""Grade scale and aggregate count schemas.

A GradeScale is the fixed, best-first ordering of judgment grades used for
one computation. An Aggregate is the per-option snapshot of how many ballots
landed on each grade of that scale. Aggregates carry their scale so that
mixing scales inside one ranking can be detected instead of silently
producing nonsense.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator, model_validator

from mjudge.errors import MalformedAggregateError

_MIN_GRADES = 3


class GradeScale(BaseModel):
    """Ordered, fixed-length set of judgment grades, best first.

    Grades are plain string identifiers. Position in ``grades`` is the only
    thing that carries meaning: index 0 is the best grade, the last index
    the worst.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(default="custom", description="Preset name of the scale")
    grades: tuple[str, ...] = Field(description="Grade identifiers, best first")

    @field_validator("grades")
    @classmethod
    def _check_grades(cls, grades: tuple[str, ...]) -> tuple[str, ...]:
        if len(grades) < _MIN_GRADES:
            raise ValueError(
                f"A grade scale needs at least {_MIN_GRADES} grades, got {len(grades)}"
            )
        if any(not g.strip() for g in grades):
            raise ValueError("Grade identifiers must be non-empty")
        if len(set(grades)) != len(grades):
            raise ValueError(f"Grade identifiers must be unique: {list(grades)}")
        return grades

    def __len__(self) -> int:
        return len(self.grades)

    def __contains__(self, grade: object) -> bool:
        return grade in self.grades

    @property
    def best(self) -> str:
        return self.grades[0]

    @property
    def worst(self) -> str:
        return self.grades[-1]

    def index(self, grade: str) -> int:
        """Position of a grade, 0 being the best.

        Raises:
            ValueError: If the grade is not on this scale.
        """
        try:
            return self.grades.index(grade)
        except ValueError:
            raise ValueError(
                f"Unknown grade '{grade}' for scale '{self.name}'"
            ) from None

    def compare(self, a: str, b: str) -> int:
        """Positive when ``a`` is better than ``b``, negative when worse, 0 if equal."""
        return self.index(b) - self.index(a)

    def better_than(self, grade: str) -> tuple[str, ...]:
        """Grades strictly better than ``grade``."""
        return self.grades[: self.index(grade)]

    def worse_than(self, grade: str) -> tuple[str, ...]:
        """Grades strictly worse than ``grade``."""
        return self.grades[self.index(grade) + 1:]


def _count_problem(scale: GradeScale, counts: Sequence[object]) -> str | None:
    """Describe why ``counts`` does not fit ``scale``, or None if it does."""
    if len(counts) != len(scale):
        return (
            f"Expected {len(scale)} counts for scale '{scale.name}', "
            f"got {len(counts)}"
        )
    for grade, count in zip(scale.grades, counts):
        if isinstance(count, bool) or not isinstance(count, int):
            return f"Count for '{grade}' must be an integer, got {count!r}"
        if count < 0:
            return f"Count for '{grade}' must be non-negative, got {count}"
    return None


class Aggregate(BaseModel):
    """Per-option ballot counts aligned to a grade scale.

    Treated as an immutable snapshot for the duration of one analysis call.
    Use ``from_counts`` or ``from_mapping`` at the boundary: both raise
    MalformedAggregateError on bad input.
    """

    model_config = ConfigDict(frozen=True)

    scale: GradeScale = Field(description="Scale the counts are aligned to")
    counts: tuple[StrictInt, ...] = Field(
        description="Ballot count per grade, aligned to scale.grades (best first)"
    )

    @model_validator(mode="after")
    def _check_counts(self) -> Aggregate:
        problem = _count_problem(self.scale, self.counts)
        if problem:
            raise ValueError(problem)
        return self

    @classmethod
    def from_counts(cls, scale: GradeScale, counts: Sequence[int]) -> Aggregate:
        """Build from a best-first vector of counts."""
        counts = tuple(counts)
        problem = _count_problem(scale, counts)
        if problem:
            raise MalformedAggregateError(problem)
        return cls(scale=scale, counts=counts)

    @classmethod
    def from_mapping(cls, scale: GradeScale, counts: Mapping[str, int]) -> Aggregate:
        """Build from a grade → count mapping. Missing grades count as 0."""
        unknown = [g for g in counts if g not in scale]
        if unknown:
            raise MalformedAggregateError(
                f"Unknown grades for scale '{scale.name}': {sorted(unknown)}"
            )
        return cls.from_counts(scale, [counts.get(g, 0) for g in scale.grades])

    @classmethod
    def empty(cls, scale: GradeScale) -> Aggregate:
        return cls(scale=scale, counts=(0,) * len(scale))

    @property
    def total(self) -> int:
        return sum(self.counts)

    def count(self, grade: str) -> int:
        return self.counts[self.scale.index(grade)]

    def as_mapping(self) -> dict[str, int]:
        return dict(zip(self.scale.grades, self.counts))

    def decremented(self, grade: str) -> Aggregate:
        """Copy with one ballot removed from ``grade`` (no-op at zero)."""
        idx = self.scale.index(grade)
        if self.counts[idx] == 0:
            return self
        counts = list(self.counts)
        counts[idx] -= 1
        return Aggregate(scale=self.scale, counts=tuple(counts))
