"""Project-level configuration and scaffolding."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml


CONFIG_FILENAME = "modelhost.yaml"

DEFAULT_CONFIG = {
    "decimal_separator": ",",
    "grouping_separator": " ",
    "fraction_digits": 2,
    "axis_name": "LATA",
    "horizon_name": "LL",
    "data_dir": "data",
    "scripts_dir": "scripts",
    "logging_enabled": True,
    "logging_fsync": False,
}


DEMO_CONFIG = """\
# modelhost project config
decimal_separator: ","
grouping_separator: " "
fraction_digits: 2
data_dir: data
scripts_dir: scripts
"""

DEMO_DATA = """\
LATA 2015 2016 2017 2018 2019 2020 2021 2022 2023 2024 2025 2026 2027 2028 2029
growthRatesProduction 1 1.03 1.05 1.05 1.06
growthRatesConsumption 1 1.07 1.05 1.04 1.04 1.03
growthRatesSavings 1 1.02 1.03 1.05
production 900.5
consumption 700
savings 220.25
"""

DEMO_SCRIPT = """\
# Share of production that is saved, per year
savingsRatio = ZEROS(LL)
for t in RANGE(LL) {
    savingsRatio[t] = savings[t] / production[t] * 100
}
averageNetWealth = AVERAGE(netWealth)
"""


def load_project_config(project_dir: Path | None) -> dict[str, Any]:
    """Load project configuration from ``modelhost.yaml``, with defaults.

    Args:
        project_dir: Root of the modelhost project, or ``None`` for defaults.

    Returns:
        Merged configuration dict.
    """
    config = dict(DEFAULT_CONFIG)
    if project_dir is None:
        return config
    config_path = Path(project_dir) / CONFIG_FILENAME
    if config_path.exists():
        user_config = yaml.safe_load(config_path.read_text()) or {}
        if not isinstance(user_config, dict):
            raise ValueError(f"{config_path} must contain a mapping")
        config.update(user_config)
    config["fraction_digits"] = int(config["fraction_digits"])
    return config


def resolve_input(project_dir: Path | None, path: str | Path, subdir_key: str) -> Path:
    """Resolve a data or script path against the project.

    A path that exists as given is used unchanged.  Otherwise it is looked
    up under the project's configured data or scripts directory.

    Args:
        project_dir: Project root, or ``None``.
        path: Path as given by the user.
        subdir_key: ``"data_dir"`` or ``"scripts_dir"``.

    Returns:
        The resolved path (which may not exist).
    """
    candidate = Path(path)
    if candidate.exists() or project_dir is None or candidate.is_absolute():
        return candidate
    config = load_project_config(project_dir)
    return Path(project_dir) / str(config[subdir_key]) / candidate


def list_inputs(project_dir: Path, subdir_key: str, suffix: str = ".txt") -> list[str]:
    """List file names in the project's data or scripts directory, sorted."""
    config = load_project_config(project_dir)
    folder = Path(project_dir) / str(config[subdir_key])
    if not folder.is_dir():
        return []
    return sorted(p.name for p in folder.iterdir() if p.is_file() and p.suffix == suffix)


def scaffold_project(target_dir: Path) -> Path:
    """Create a new project with a demo data file and script.

    Args:
        target_dir: Directory to create.

    Returns:
        Path to the created project directory.

    Raises:
        FileExistsError: If *target_dir* already contains a project config.
    """
    target_dir = Path(target_dir)
    if (target_dir / CONFIG_FILENAME).exists():
        raise FileExistsError(f"Project already exists at {target_dir}")

    (target_dir / "data").mkdir(parents=True, exist_ok=True)
    (target_dir / "scripts").mkdir(parents=True, exist_ok=True)

    (target_dir / CONFIG_FILENAME).write_text(DEMO_CONFIG)
    (target_dir / "data" / "data1.txt").write_text(DEMO_DATA)
    (target_dir / "scripts" / "script1.txt").write_text(DEMO_SCRIPT)

    return target_dir
