"""Strategy registry and TOML configuration loader.

Maps tie-break keys to strategy instances, loads engine defaults from
defaults.toml and grade scale presets from scales.toml. This is the only
place where string keys are resolved; the ranking core receives concrete
strategy and scale objects.
"""

from __future__ import annotations

import tomllib
from pathlib import Path

from mjudge.errors import UnknownScaleError, UnknownStrategyError
from mjudge.judgment.ranker import RankingEngine
from mjudge.judgment.strategies import (
    BallotRemovalStrategy,
    CentralStrategy,
    LexicographicStrategy,
    MajorityGaugeStrategy,
    MedianRemovalStrategy,
    TieBreakStrategy,
    TypicalStrategy,
    UsualStrategy,
)
from mjudge.schemas.engine import EngineConfig, GroupResolution, TieBreakKey
from mjudge.schemas.grades import GradeScale

# Default config directory relative to the mjudge package
_CONFIG_DIR = Path(__file__).parent.parent / "config"

STRATEGIES: dict[TieBreakKey, TieBreakStrategy] = {
    strategy.key: strategy
    for strategy in (
        LexicographicStrategy(),
        MajorityGaugeStrategy(),
        TypicalStrategy(),
        UsualStrategy(),
        CentralStrategy(),
        BallotRemovalStrategy(),
        MedianRemovalStrategy(),
    )
}


def available_strategies() -> list[TieBreakStrategy]:
    """All registered strategies, in registration order."""
    return list(STRATEGIES.values())


def get_strategy(key: str | TieBreakKey) -> TieBreakStrategy:
    """Resolve a strategy key.

    Raises:
        UnknownStrategyError: If the key is not registered.
    """
    try:
        return STRATEGIES[TieBreakKey(key)]
    except ValueError:
        valid = ", ".join(k.value for k in STRATEGIES)
        raise UnknownStrategyError(
            f"Unknown tie-break strategy: '{key}'. Choose from: {valid}"
        ) from None


def load_engine_config(config_path: Path | None = None) -> EngineConfig:
    """Load engine defaults from a TOML file.

    Args:
        config_path: Path to defaults.toml. Defaults to mjudge/config/defaults.toml.

    Returns:
        EngineConfig with values from the TOML file.

    Raises:
        FileNotFoundError: If the config file does not exist.
        ValueError: If a value is invalid.
    """
    path = config_path or _CONFIG_DIR / "defaults.toml"
    if not path.exists():
        raise FileNotFoundError(f"Engine config not found: {path}")

    with open(path, "rb") as f:
        raw = tomllib.load(f)

    section = raw.get("engine", {})
    if not isinstance(section, dict):
        raise ValueError(f"[engine] must be a table in {path}")
    return EngineConfig(**section)


def load_scales(config_path: Path | None = None) -> dict[str, GradeScale]:
    """Load grade scale presets from a TOML file.

    Args:
        config_path: Path to scales.toml. Defaults to mjudge/config/scales.toml.

    Returns:
        Dictionary mapping preset names to GradeScale instances.

    Raises:
        FileNotFoundError: If the config file does not exist.
        ValueError: If the TOML structure is invalid.
    """
    path = config_path or _CONFIG_DIR / "scales.toml"
    if not path.exists():
        raise FileNotFoundError(f"Scale presets not found: {path}")

    with open(path, "rb") as f:
        raw = tomllib.load(f)

    scales_section = raw.get("scales")
    if not scales_section or not isinstance(scales_section, dict):
        raise ValueError(f"No [scales] section found in {path}")

    scales: dict[str, GradeScale] = {}
    for name, entry in scales_section.items():
        if not isinstance(entry, dict) or "grades" not in entry:
            raise ValueError(f"Scale '{name}' in {path} has no grades list")
        scales[name] = GradeScale(name=name, grades=tuple(entry["grades"]))

    return scales


def get_scale(name: str, scales: dict[str, GradeScale] | None = None) -> GradeScale:
    """Resolve a scale preset by name.

    Raises:
        UnknownScaleError: If no preset has that name.
    """
    presets = scales if scales is not None else load_scales()
    if name not in presets:
        valid = ", ".join(presets)
        raise UnknownScaleError(f"Unknown grade scale: '{name}'. Choose from: {valid}")
    return presets[name]


def build_engine(
    config: EngineConfig | None = None,
    strategy: str | TieBreakKey | None = None,
    group_resolution: str | GroupResolution | None = None,
) -> RankingEngine:
    """Build a RankingEngine from config, with optional per-call overrides.

    Args:
        config: Engine defaults (loaded from defaults.toml when omitted).
        strategy: Override the configured default strategy.
        group_resolution: Override the configured group resolution.
    """
    cfg = config or load_engine_config()
    return RankingEngine(
        get_strategy(strategy or cfg.default_strategy),
        tolerance=cfg.tolerance,
        group_resolution=GroupResolution(group_resolution or cfg.group_resolution),
        max_pass_factor=cfg.max_pass_factor,
    )
