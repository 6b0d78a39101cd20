# -*- coding: utf-8 -*-
"""
src/fontselect/registry.py

The shared font registry. It holds the raw and (optionally) size-optimized
views of the six default font families, and the `sans_default` /
`serif_default` aliases that say which concrete family currently represents
each font class.
"""

import enum
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, Optional, Tuple

logger = logging.getLogger(__name__)


class FontFamily(str, enum.Enum):
    CARLITO = "Carlito"
    NIMBUS_SANS = "NimbusSans"
    CENTURY = "Century"
    PALATINO = "Palatino"
    GARAMOND = "Garamond"
    NIMBUS_ROM_NO9L = "NimbusRomNo9L"


class FontClass(enum.Enum):
    SANS = "sans"
    SERIF = "serif"


class FontVariant(enum.Enum):
    RAW = "raw"
    OPTIMIZED = "opt"


class FontStyle(enum.Enum):
    NORMAL = "normal"
    ITALIC = "italic"
    SMALL_CAPS = "small_caps"


# Evaluation order decides which candidate wins a tie between non-baseline
# families, so these are tuples and must stay in this order.
SANS_CANDIDATES: Tuple[FontFamily, ...] = (
    FontFamily.CARLITO,
    FontFamily.NIMBUS_SANS,
)
SERIF_CANDIDATES: Tuple[FontFamily, ...] = (
    FontFamily.CENTURY,
    FontFamily.PALATINO,
    FontFamily.GARAMOND,
    FontFamily.NIMBUS_ROM_NO9L,
)

CANDIDATES: Dict[FontClass, Tuple[FontFamily, ...]] = {
    FontClass.SANS: SANS_CANDIDATES,
    FontClass.SERIF: SERIF_CANDIDATES,
}

BASELINES: Dict[FontClass, FontFamily] = {
    FontClass.SANS: FontFamily.NIMBUS_SANS,
    FontClass.SERIF: FontFamily.NIMBUS_ROM_NO9L,
}

# File name suffix used on disk for each style slot, e.g. "Carlito-SmallCaps.woff".
STYLE_FILE_SUFFIXES: Dict[FontStyle, str] = {
    FontStyle.NORMAL: "Regular",
    FontStyle.ITALIC: "Italic",
    FontStyle.SMALL_CAPS: "SmallCaps",
}
FONT_FILE_EXTENSIONS = (".woff2", ".woff", ".otf", ".ttf")


@dataclass(frozen=True)
class FontStyleDescriptor:
    """One style of one family: the font binary plus the name a renderer knows it by."""

    src: bytes
    family_name: str
    variant: FontVariant


@dataclass(frozen=True)
class FontFaces:
    """The normal, italic and small-caps descriptors of a single family."""

    family: FontFamily
    normal: FontStyleDescriptor
    italic: FontStyleDescriptor
    small_caps: FontStyleDescriptor

    def style(self, style: FontStyle) -> FontStyleDescriptor:
        if style is FontStyle.ITALIC:
            return self.italic
        if style is FontStyle.SMALL_CAPS:
            return self.small_caps
        return self.normal


class FontSet:
    """
    A complete view of the six families in one variant, together with the
    two default aliases.

    The aliases hold `FontFaces` objects, not family names, so an optimized
    set may point its alias at a raw family's faces.
    """

    def __init__(self, variant: FontVariant, families: Dict[FontFamily, FontFaces]):
        missing = [family.value for family in FontFamily if family not in families]
        if missing:
            raise ValueError(f"Font set is missing families: {', '.join(missing)}")

        self.variant = variant
        self.families: Dict[FontFamily, FontFaces] = dict(families)
        self._defaults: Dict[FontClass, FontFaces] = {
            font_class: self.families[baseline] for font_class, baseline in BASELINES.items()
        }

    def __getitem__(self, family: FontFamily) -> FontFaces:
        return self.families[family]

    def __iter__(self) -> Iterator[FontFaces]:
        for family in FontFamily:
            yield self.families[family]

    def default(self, font_class: FontClass) -> FontFaces:
        return self._defaults[font_class]

    def set_default(self, font_class: FontClass, faces: FontFaces):
        if faces.family not in CANDIDATES[font_class]:
            raise ValueError(
                f"{faces.family.value} cannot be the {font_class.value} default"
            )
        self._defaults[font_class] = faces

    @property
    def sans_default(self) -> FontFaces:
        return self._defaults[FontClass.SANS]

    @sans_default.setter
    def sans_default(self, faces: FontFaces):
        self.set_default(FontClass.SANS, faces)

    @property
    def serif_default(self) -> FontFaces:
        return self._defaults[FontClass.SERIF]

    @serif_default.setter
    def serif_default(self, faces: FontFaces):
        self.set_default(FontClass.SERIF, faces)


class FontRegistry:
    """
    Process-wide holder of the raw, optimized and active font sets.

    `active` is None until `activate` is called. Installing a set bumps the
    revision of its variant, which tells worker sync that binaries changed.
    """

    def __init__(self, raw: FontSet, opt: Optional[FontSet] = None):
        if raw.variant is not FontVariant.RAW:
            raise ValueError("The raw font set must hold raw descriptors")
        if opt is not None and opt.variant is not FontVariant.OPTIMIZED:
            raise ValueError("The optimized font set must hold optimized descriptors")

        self.raw = raw
        self.opt = opt
        self.active: Optional[FontSet] = None
        self._revisions: Dict[FontVariant, int] = {variant: 0 for variant in FontVariant}

    def install(self, font_set: FontSet):
        """
        Replace the raw or optimized set, keeping `active` pointed at the same variant.

        The default aliases chosen on the replaced set carry over to the new one.
        Aliases that point at raw faces (an abandoned optimized slot) keep pointing
        at the raw set's faces for that family.
        """
        previous = self.raw if font_set.variant is FontVariant.RAW else self.opt
        if previous is not None:
            for font_class in FontClass:
                chosen = previous.default(font_class)
                if chosen.normal.variant is font_set.variant:
                    chosen = font_set[chosen.family]
                font_set.set_default(font_class, chosen)
        if font_set.variant is FontVariant.RAW and self.opt is not None:
            for font_class in FontClass:
                chosen = self.opt.default(font_class)
                if chosen.normal.variant is FontVariant.RAW:
                    self.opt.set_default(font_class, font_set[chosen.family])

        was_active = self.active is not None and self.active.variant is font_set.variant
        if font_set.variant is FontVariant.RAW:
            self.raw = font_set
        else:
            self.opt = font_set
        self._revisions[font_set.variant] += 1
        if was_active:
            self.active = font_set
        logger.debug(
            f"Installed {font_set.variant.value} font set (revision {self._revisions[font_set.variant]})."
        )

    def revision(self, variant: FontVariant) -> int:
        return self._revisions[variant]

    def activate(self, optimized: bool) -> FontSet:
        """Point `active` at the optimized set if asked for and present, else at the raw set."""
        if optimized and self.opt is not None:
            self.active = self.opt
        else:
            self.active = self.raw
        return self.active

    @property
    def optimized_active(self) -> bool:
        return self.active is not None and self.active is self.opt

    def require_active(self) -> FontSet:
        if self.active is None:
            raise RuntimeError("No font set has been activated in the registry.")
        return self.active

    def find_faces(self, family_name: str) -> Optional[FontFaces]:
        """Resolve a renderer family name, searching the active set first."""
        for font_set in (self.active, self.raw, self.opt):
            if font_set is None:
                continue
            for faces in font_set:
                if faces.normal.family_name == family_name:
                    return faces
        return None


def renderer_family_name(family: FontFamily, variant: FontVariant) -> str:
    if variant is FontVariant.OPTIMIZED:
        return f"{family.value} Opt"
    return family.value


def _find_font_file(directory: Path, family: FontFamily, style: FontStyle) -> Path:
    stem = f"{family.value}-{STYLE_FILE_SUFFIXES[style]}"
    for extension in FONT_FILE_EXTENSIONS:
        candidate = directory / f"{stem}{extension}"
        if candidate.exists():
            return candidate
    raise FileNotFoundError(f"No font file for '{stem}' in '{directory}'.")


def load_font_set(directory: Path, variant: FontVariant) -> FontSet:
    """
    Reads the 18 font binaries (six families, three styles) from a directory.

    Files are expected to be named `<Family>-<Regular|Italic|SmallCaps>.<ext>`.
    The binaries are kept as opaque bytes; nothing here parses them.
    """
    directory = Path(directory)
    families: Dict[FontFamily, FontFaces] = {}
    for family in FontFamily:
        name = renderer_family_name(family, variant)
        descriptors = {
            style: FontStyleDescriptor(
                src=_find_font_file(directory, family, style).read_bytes(),
                family_name=name,
                variant=variant,
            )
            for style in FontStyle
        }
        families[family] = FontFaces(
            family=family,
            normal=descriptors[FontStyle.NORMAL],
            italic=descriptors[FontStyle.ITALIC],
            small_caps=descriptors[FontStyle.SMALL_CAPS],
        )
    logger.info(f"Loaded {variant.value} font set from '{directory}'.")
    return FontSet(variant, families)
