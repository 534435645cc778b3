"""
Static catalogs: lenses and the preset options offered for each setting.

Everything here is read-only reference data. Preset strings are inserted into
prompts verbatim, so changing one changes the generated instructions.
"""

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class LensConfig:
    """A lens the style block can describe."""

    id: str
    name: str
    focal_length: str
    aperture: str
    description: str


LENSES: tuple[LensConfig, ...] = (
    LensConfig(
        id="rf85",
        name="Canon RF 85mm f/1.2L USM",
        focal_length="85mm",
        aperture="f/1.2",
        description=(
            "The ultimate portrait lens. Creamy background blur (bokeh), striking sharpness "
            "in the eyes, flattering compression of the subject"
        ),
    ),
    LensConfig(
        id="rf50",
        name="Canon RF 50mm f/1.2L USM",
        focal_length="50mm",
        aperture="f/1.2",
        description=(
            "Standard field of view with a magical sense of depth. Suited to half-body shots "
            "with a natural perspective"
        ),
    ),
    LensConfig(
        id="rf35",
        name="Canon RF 35mm f/1.4L VCM",
        focal_length="35mm",
        aperture="f/1.4",
        description=(
            "Wide-angle environmental portrait. Dynamic composition that shows off the "
            "background and the outfit"
        ),
    ),
    LensConfig(
        id="rf135",
        name="Canon RF 135mm f/1.8L IS USM",
        focal_length="135mm",
        aperture="f/1.8",
        description=(
            "Strong telephoto compression. Separates subject from background completely "
            "for a dreamy atmosphere"
        ),
    ),
)

DEFAULT_LENS_ID = "rf85"


def get_lens(lens_id: str) -> LensConfig:
    """Return the lens with ``lens_id``; unknown ids resolve to the first lens."""
    for lens in LENSES:
        if lens.id == lens_id:
            return lens
    return LENSES[0]


class AspectRatio(str, Enum):
    SQUARE = "1:1"
    PORTRAIT = "3:4"
    LANDSCAPE = "4:3"
    TALL = "9:16"
    WIDE = "16:9"


class Resolution(str, Enum):
    STANDARD = "1K"
    HIGH = "2K"
    ULTRA = "4K"


class GridSizing(str, Enum):
    UNIFORM = "uniform"
    RANDOM = "random"


GRID_COUNTS: tuple[int, ...] = (1, 2, 3, 4, 6, 9)

ASPECT_RATIO_LABELS: dict[AspectRatio, str] = {
    AspectRatio.PORTRAIT: "Portrait (3:4)",
    AspectRatio.TALL: "Social story (9:16)",
    AspectRatio.SQUARE: "Square (1:1)",
    AspectRatio.LANDSCAPE: "Landscape (4:3)",
    AspectRatio.WIDE: "Cinematic (16:9)",
}

RESOLUTION_LABELS: dict[Resolution, str] = {
    Resolution.STANDARD: "Standard (1K)",
    Resolution.HIGH: "High (2K)",
    Resolution.ULTRA: "Ultra (4K)",
}

GRID_SIZING_LABELS: dict[GridSizing, str] = {
    GridSizing.UNIFORM: "Uniform panels",
    GridSizing.RANDOM: "Random-sized panels",
}

CAMERA_ANGLES: tuple[str, ...] = (
    "Random (AI pick)",
    "Standard Eye-Level - the most natural gaze",
    "Low Angle - longer-looking legs and a grand feel",
    "High Angle - emphasizes the face, cute mood",
    "Dutch Angle - dynamic and hip atmosphere",
    "Extreme Close-up - facial detail",
    "Bust Shot - upper-body portrait",
    "Knee Shot - above the knees, fashion and proportions",
    "Full Shot - whole body in harmony with the background",
    "Overhead - looking down from above the head",
)

FASHION_POSES: tuple[str, ...] = (
    "Random (AI pick)",
    "Front View",
    "Side Profile",
    "Looking Back",
    "Walking Full Body",
    "Sitting on Chair",
    "Sitting on Floor",
    "Crossed Legs",
    "Hand on Chin",
    "Hand in Hair",
    "Face Close-up",
    "Eyes Closed",
    "Dynamic Jump",
    "Hands in Pocket",
    "Arms Crossed",
    "Holding Prop",
)

CONCEPT_GROUPS: dict[str, tuple[str, ...]] = {
    "indoor": (
        "Studio Clean",
        "Luxury Hotel",
        "Cozy Cafe",
        "Modern Living Room",
        "Fancy Party Room",
        "Classic Library",
        "Sunlit Window",
    ),
    "outdoor": (
        "Neon City Night",
        "Sunlit Garden",
        "Blue Beach",
        "Cherry Blossom Street",
        "City Rooftop",
        "Forest Path",
        "Luxury Resort Pool",
    ),
}

DEFAULT_CONCEPT = CONCEPT_GROUPS["indoor"][0]

# Upper bound on images kept in one reference list
MAX_REFERENCE_IMAGES = 10
