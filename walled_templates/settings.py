"""
Scene-level settings read by the shape computation.

Settings are owned and persisted by the host; this module only validates a
read-only snapshot of them.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Any, Literal

from walled_templates.sweep import DEFAULT_DENSITY
from walled_templates.templates import Template, ValidationError

ConeStyle = Literal["round", "flat"]
TargetMethod = Literal["center", "overlap"]

CONE_STYLES = ("round", "flat")
TARGET_METHODS = ("center", "overlap")

# Host setting keys mapped onto SceneSettings fields
SETTING_KEYS = {
    "default-to-walled": "default_walled",
    "coneTemplateType": "cone_template_type",
    "autotarget-method": "autotarget_method",
    "autotarget-area": "autotarget_area",
    "density": "density",
    "boundary-margin": "boundary_margin",
    "debug": "debug",
}


def _validate_scene_settings(settings: SceneSettings) -> None:
    """Validate all SceneSettings fields.

    Raises:
        ValidationError: If any field is out of range or of the wrong type
    """
    if not isinstance(settings.default_walled, bool):
        raise ValidationError(
            f"default_walled must be a bool, got {type(settings.default_walled).__name__}"
        )

    if settings.cone_template_type not in CONE_STYLES:
        raise ValidationError(
            f"cone_template_type must be one of {CONE_STYLES}, got {settings.cone_template_type!r}"
        )

    if isinstance(settings.density, bool) or not isinstance(settings.density, int):
        raise ValidationError(f"density must be an int, got {type(settings.density).__name__}")
    if settings.density < 3:
        raise ValidationError(f"density must be at least 3, got {settings.density}")

    margin = settings.boundary_margin
    if isinstance(margin, bool) or not isinstance(margin, (int, float)) or not math.isfinite(margin) or margin < 0:
        raise ValidationError(f"boundary_margin must be a non-negative finite number, got {margin!r}")

    if settings.autotarget_method not in TARGET_METHODS:
        raise ValidationError(
            f"autotarget_method must be one of {TARGET_METHODS}, got {settings.autotarget_method!r}"
        )

    area = settings.autotarget_area
    if isinstance(area, bool) or not isinstance(area, (int, float)) or not 0.0 <= area <= 1.0:
        raise ValidationError(f"autotarget_area must be in [0, 1], got {area!r}")


@dataclass(frozen=True)
class SceneSettings:
    """World configuration for template footprints.

    Attributes:
        default_walled: Whether templates without their own flag are
            constrained by walls
        cone_template_type: "round" keeps the cone's far edge as an arc,
            "flat" closes it with a straight chord
        density: Sweep samples per full circle
        boundary_margin: Overshoot, in scene units, of the synthetic
            boundaries past the nominal shape and of the sweep radius past
            them, so rays reliably meet the boundaries
        autotarget_method: How tokens are matched against a footprint,
            "center" or "overlap"
        autotarget_area: Minimum fraction of a token's area that must be
            covered under the "overlap" method
        debug: Log every sweep at DEBUG level

    Raises:
        ValidationError: If any field is invalid
    """

    default_walled: bool = True
    cone_template_type: ConeStyle = "round"
    density: int = DEFAULT_DENSITY
    boundary_margin: float = 1e-6
    autotarget_method: TargetMethod = "center"
    autotarget_area: float = 0.0
    debug: bool = False

    def __post_init__(self) -> None:
        _validate_scene_settings(self)

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> SceneSettings:
        """Build settings from host keys or field names; unknown keys are ignored."""
        known = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in values.items():
            name = SETTING_KEYS.get(key, key)
            if name in known:
                kwargs[name] = value
        return cls(**kwargs)

    def cone_rendering_style(self) -> ConeStyle:
        """Cone flank style, "round" or "flat"."""
        return self.cone_template_type


def is_wall_constrained(template: Template, settings: SceneSettings) -> bool:
    """Template flag, falling back to the world default when unset."""
    if template.walled is None:
        return settings.default_walled
    return bool(template.walled)
