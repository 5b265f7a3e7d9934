"""Loading option aggregates from JSON files.

The file format is the in-process boundary shape written to disk::

    {
      "scale": "standard",
      "options": [
        {"id": "pizza", "label": "Pizza", "counts": {"Good": 2, "VeryGood": 3}},
        {"id": "salad", "counts": [0, 1, 3, 1, 0, 0, 0]}
      ]
    }

``counts`` is either a grade → count mapping or a best-first vector. Every
option is validated here, before it reaches the engine.
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import BaseModel, Field

from mjudge.errors import MalformedAggregateError
from mjudge.judgment.registry import get_scale
from mjudge.schemas.grades import Aggregate, GradeScale


class OptionEntry(BaseModel):
    """One option read from a file, with its validated aggregate."""

    option_id: str = Field(description="Option identifier")
    label: str = Field(default="", description="Display label (defaults to the id)")
    aggregate: Aggregate = Field(description="Validated grade counts")


class OptionSet(BaseModel):
    """All options of one vote, on a single grade scale."""

    scale: GradeScale = Field(description="Scale shared by every option")
    options: list[OptionEntry] = Field(default_factory=list)

    def entries(self) -> list[tuple[str, Aggregate]]:
        """``(option_id, aggregate)`` pairs in file order, ready for ranking."""
        return [(o.option_id, o.aggregate) for o in self.options]

    def get(self, option_id: str) -> OptionEntry:
        for option in self.options:
            if option.option_id == option_id:
                return option
        raise KeyError(option_id)

    def labels(self) -> dict[str, str]:
        return {o.option_id: o.label or o.option_id for o in self.options}


def parse_options(
    data: dict,
    scales: dict[str, GradeScale] | None = None,
    scale_name: str | None = None,
) -> OptionSet:
    """Build an OptionSet from decoded JSON.

    Args:
        data: Decoded file content.
        scales: Available scale presets (loaded from scales.toml if omitted).
        scale_name: Override the scale named in the data.

    Raises:
        MalformedAggregateError: If an option or its counts are malformed.
        UnknownScaleError: If the scale preset does not exist.
    """
    if not isinstance(data, dict):
        raise MalformedAggregateError("Options file must contain a JSON object")

    scale = get_scale(scale_name or data.get("scale", "standard"), scales)
    raw_options = data.get("options")
    if not isinstance(raw_options, list):
        raise MalformedAggregateError("Options file needs an 'options' list")

    seen: set[str] = set()
    options: list[OptionEntry] = []
    for i, raw in enumerate(raw_options):
        if not isinstance(raw, dict) or "id" not in raw:
            raise MalformedAggregateError(f"Option #{i} has no 'id'")
        counts = raw.get("counts", {})
        if isinstance(counts, dict):
            aggregate = Aggregate.from_mapping(scale, counts)
        elif isinstance(counts, list):
            aggregate = Aggregate.from_counts(scale, counts)
        else:
            raise MalformedAggregateError(
                f"Option '{raw['id']}': counts must be a mapping or a list"
            )
        option_id = str(raw["id"])
        if option_id in seen:
            raise MalformedAggregateError(f"Duplicate option id: '{option_id}'")
        seen.add(option_id)
        options.append(
            OptionEntry(
                option_id=option_id,
                label=str(raw.get("label", "")),
                aggregate=aggregate,
            )
        )

    return OptionSet(scale=scale, options=options)


def load_options(
    path: Path,
    scales: dict[str, GradeScale] | None = None,
    scale_name: str | None = None,
) -> OptionSet:
    """Read and validate an options JSON file.

    Raises:
        FileNotFoundError: If the file does not exist.
        MalformedAggregateError: If the JSON is invalid or malformed.
    """
    if not path.exists():
        raise FileNotFoundError(f"Options file not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise MalformedAggregateError(f"Invalid JSON in {path}: {e}") from e
    return parse_options(data, scales, scale_name)
