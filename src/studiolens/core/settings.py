"""
Generation settings: the structured record every prompt is built from.

Per-cut choices (camera angle, pose and their free-text overrides) live in one
ordered sequence of CutSettings, one entry per panel. ``resize`` is the only
way the sequence changes length, and it always yields exactly ``grid_count``
entries.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field, replace

from studiolens.core.catalog import (
    CAMERA_ANGLES,
    DEFAULT_CONCEPT,
    DEFAULT_LENS_ID,
    FASHION_POSES,
    GRID_COUNTS,
    AspectRatio,
    GridSizing,
    Resolution,
)
from studiolens.utils.exceptions import ValidationError


@dataclass(frozen=True)
class CutSettings:
    """Angle and pose for one panel. A non-blank custom value wins over the preset."""

    camera_angle: str = CAMERA_ANGLES[0]
    custom_camera_angle: str = ""
    pose: str = FASHION_POSES[0]
    custom_pose: str = ""

    @property
    def effective_camera_angle(self) -> str:
        return self.custom_camera_angle.strip() or self.camera_angle

    @property
    def effective_pose(self) -> str:
        return self.custom_pose.strip() or self.pose


def _default_cuts() -> list[CutSettings]:
    return [CutSettings()]


@dataclass
class GenerationSettings:
    """User-chosen generation parameters.

    Instances are treated as snapshots: ``resize`` and ``with_cut`` return new
    objects instead of mutating in place.
    """

    lens_id: str = DEFAULT_LENS_ID
    aspect_ratio: AspectRatio = AspectRatio.PORTRAIT
    resolution: Resolution = Resolution.HIGH
    grid_count: int = 1
    grid_sizing: GridSizing = GridSizing.UNIFORM
    cuts: list[CutSettings] = field(default_factory=_default_cuts)
    additional_prompt: str = ""
    clothing_prompt: str = ""
    concept: str = DEFAULT_CONCEPT
    custom_location: str = ""

    def __post_init__(self) -> None:
        try:
            self.aspect_ratio = AspectRatio(self.aspect_ratio)
        except ValueError as e:
            raise ValidationError(
                f"Unsupported aspect ratio: {self.aspect_ratio!r}. "
                f"Choose one of: {', '.join(a.value for a in AspectRatio)}.",
                field="aspect_ratio",
            ) from e
        try:
            self.resolution = Resolution(self.resolution)
        except ValueError as e:
            raise ValidationError(
                f"Unsupported resolution: {self.resolution!r}. "
                f"Choose one of: {', '.join(r.value for r in Resolution)}.",
                field="resolution",
            ) from e
        try:
            self.grid_sizing = GridSizing(self.grid_sizing)
        except ValueError as e:
            raise ValidationError(
                f"Unsupported grid sizing: {self.grid_sizing!r}. Choose 'uniform' or 'random'.",
                field="grid_sizing",
            ) from e

    @classmethod
    def from_arrays(
        cls,
        grid_count: int = 1,
        camera_angles: Sequence[str] = (),
        custom_camera_angles: Sequence[str] = (),
        poses: Sequence[str] = (),
        custom_poses: Sequence[str] = (),
        **kwargs: object,
    ) -> "GenerationSettings":
        """
        Build settings from four parallel per-cut arrays.

        Arrays may be shorter than ``grid_count``: a missing custom value is
        empty, and a missing preset falls back to the first catalog entry.
        """
        cuts = [
            CutSettings(
                camera_angle=camera_angles[i] if i < len(camera_angles) else CAMERA_ANGLES[0],
                custom_camera_angle=(
                    custom_camera_angles[i] if i < len(custom_camera_angles) else ""
                ),
                pose=poses[i] if i < len(poses) else FASHION_POSES[0],
                custom_pose=custom_poses[i] if i < len(custom_poses) else "",
            )
            for i in range(grid_count)
        ]
        return cls(grid_count=grid_count, cuts=cuts, **kwargs)  # type: ignore[arg-type]

    @property
    def camera_angles(self) -> list[str]:
        return [cut.camera_angle for cut in self.cuts]

    @property
    def custom_camera_angles(self) -> list[str]:
        return [cut.custom_camera_angle for cut in self.cuts]

    @property
    def poses(self) -> list[str]:
        return [cut.pose for cut in self.cuts]

    @property
    def custom_poses(self) -> list[str]:
        return [cut.custom_pose for cut in self.cuts]

    @property
    def effective_concept(self) -> str:
        """The custom location when it is non-blank, otherwise the preset concept."""
        if self.custom_location and self.custom_location.strip():
            return self.custom_location
        return self.concept

    def cut(self, index: int) -> CutSettings:
        """Return the cut at ``index``, or a default cut past the end of the sequence."""
        if 0 <= index < len(self.cuts):
            return self.cuts[index]
        return CutSettings()

    def effective_camera_angle(self, index: int) -> str:
        return self.cut(index).effective_camera_angle

    def effective_pose(self, index: int) -> str:
        return self.cut(index).effective_pose

    def resize(self, grid_count: int) -> "GenerationSettings":
        """
        Return a copy with ``grid_count`` panels.

        Existing cuts keep their index; added cuts use the first preset angle
        and pose with empty custom fields.

        Raises:
            ValidationError: If grid_count is not one of GRID_COUNTS
        """
        _check_grid_count(grid_count)
        cuts = list(self.cuts[:grid_count])
        cuts.extend(CutSettings() for _ in range(grid_count - len(cuts)))
        return replace(self, grid_count=grid_count, cuts=cuts)

    def with_cut(self, index: int, **changes: str) -> "GenerationSettings":
        """Return a copy with the cut at ``index`` updated (e.g. pose=..., custom_pose=...)."""
        if not 0 <= index < self.grid_count:
            raise ValidationError(
                f"Cut index {index} is out of range for {self.grid_count} cut(s).",
                field="cuts",
            )
        cuts = self.resize(self.grid_count).cuts
        cuts[index] = replace(cuts[index], **changes)
        return replace(self, cuts=cuts)

    def validate(self) -> None:
        """
        Check structural constraints.

        A cut sequence shorter than grid_count is accepted (missing cuts use
        defaults at prompt-build time); a longer one is not.

        Raises:
            ValidationError: If a constraint is violated
        """
        _check_grid_count(self.grid_count)
        if len(self.cuts) > self.grid_count:
            raise ValidationError(
                f"{len(self.cuts)} cut settings given for a {self.grid_count}-cut layout.",
                field="cuts",
            )


def _check_grid_count(grid_count: int) -> None:
    if grid_count not in GRID_COUNTS:
        raise ValidationError(
            f"Unsupported grid count: {grid_count}. "
            f"Choose one of: {', '.join(str(n) for n in GRID_COUNTS)}.",
            field="grid_count",
        )


@dataclass(frozen=True)
class GeneratedImage:
    """A history entry: the generated data URI and a short label."""

    url: str
    prompt: str


def history_label(kind: str, settings: GenerationSettings, detail: str = "") -> str:
    """
    Render the label shown next to a generated image.

    Args:
        kind: 'standard', 'reference', 'edit' or 'next_cut'
        settings: Settings the image was generated from
        detail: The edit instruction or new-scene text for 'edit' / 'next_cut'
    """
    if kind == "edit":
        return f"Edit: {detail}"
    if kind == "next_cut":
        return f"Next cut: {detail}"
    grid = f"{settings.grid_count} cuts" if settings.grid_count > 1 else "single"
    concept = settings.effective_concept
    if kind == "reference":
        return f"[{grid}] Ref Mix: {concept}"
    return f"[{grid}] {concept}"
