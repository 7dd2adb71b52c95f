"""
YAML plan files → SessionPlan.

Plan files are looked up in this order:
1. An explicit path given by the user
2. A bundled plan name (e.g. "quick" → src/hiit_timer/plans/quick.yaml)
3. A user plan in <data dir>/plans/<name>.yaml
"""

from __future__ import annotations

import importlib.resources
from pathlib import Path
from typing import Any

import yaml

from ..core.config_loader import get_data_dir
from ..core.models import SessionPlan
from .serializers import DurationPreferences, ValidationError, build_plan

DEFAULT_PLAN = "quick"


def bundled_plan_names() -> list[str]:
    """Names of the plans shipped with the package."""
    root = importlib.resources.files("hiit_timer").joinpath("plans")
    return sorted(p.name[: -len(".yaml")] for p in root.iterdir() if p.name.endswith(".yaml"))


def read_plan_document(source: str | Path) -> dict[str, Any]:
    """
    Read a plan document from a file path or a plan name.

    Raises:
        ValidationError: If the plan cannot be found or parsed
    """
    path = Path(source)
    if path.suffix in (".yaml", ".yml") or path.exists():
        if not path.exists():
            raise ValidationError(f"Plan file not found: {path}")
        text = path.read_text(encoding="utf-8")
        where = str(path)
    else:
        name = str(source)
        user_path = get_data_dir() / "plans" / f"{name}.yaml"
        bundled = importlib.resources.files("hiit_timer").joinpath("plans").joinpath(f"{name}.yaml")
        if user_path.exists():
            text = user_path.read_text(encoding="utf-8")
            where = str(user_path)
        elif bundled.is_file():
            text = bundled.read_text(encoding="utf-8")
            where = f"bundled plan '{name}'"
        else:
            available = ", ".join(bundled_plan_names())
            raise ValidationError(f"Unknown plan '{name}'. Bundled plans: {available}")

    try:
        doc = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ValidationError(f"Cannot parse {where}: {e}") from e
    if not isinstance(doc, dict):
        raise ValidationError(f"{where}: top level must be a mapping")
    return doc


def load_plan(
    source: str | Path = DEFAULT_PLAN,
    preferences: DurationPreferences | None = None,
    include_warmup: bool = True,
    include_cooldown: bool = True,
) -> SessionPlan:
    """
    Load and build a SessionPlan.

    Raises:
        ValidationError: If the plan is missing or malformed
    """
    doc = read_plan_document(source)
    try:
        return build_plan(doc, preferences, include_warmup, include_cooldown)
    except ValidationError as e:
        raise ValidationError(f"Invalid plan {source}: {e}") from e
