"""Encoder registry and command line parameter builders."""

import shutil
import subprocess
from dataclasses import dataclass
from typing import Callable, Dict, List, NamedTuple, Optional, Sequence

from loguru import logger

from ..core.video.color import (
    ColorPrimaries,
    MatrixCoefficients,
    TransferCharacteristics,
    is_full_range,
    parse_matrix,
    parse_primaries,
    parse_transfer,
)
from ..core.video.errors import EncoderRunError, UnsupportedEncoderError
from ..core.video.types import ColorTags

# svt-av1-psy tuning shared by every svt-av1 parameter list
SVT_TUNING = [
    "--tune", "3",
    "--sharpness", "2",
    "--variance-boost-strength", "4",
    "--variance-octile", "4",
    "--frame-luma-bias", "100",
    "--keyint", "0",
    "--enable-dlf", "2",
    "--enable-cdef", "0",
    "--enable-restoration", "0",
    "--enable-tf", "0",
]


class EncoderColor(NamedTuple):
    """Color arguments in the form a specific encoder expects."""
    color_range: str
    matrix: str
    transfer: str
    primaries: str


def _svt_color(tags: ColorTags) -> EncoderColor:
    matrix = parse_matrix(tags.matrix)
    transfer = parse_transfer(tags.transfer)
    primaries = parse_primaries(tags.primaries)
    if matrix == MatrixCoefficients.UNSPECIFIED:
        matrix = MatrixCoefficients.BT709
    if transfer == TransferCharacteristics.UNSPECIFIED:
        transfer = TransferCharacteristics.BT1886
    if primaries == ColorPrimaries.UNSPECIFIED:
        primaries = ColorPrimaries.BT709
    return EncoderColor(
        color_range="1" if is_full_range(tags.color_range) else "0",
        matrix=str(int(matrix)),
        transfer=str(int(transfer)),
        primaries=str(int(primaries)),
    )


def _rav1e_color(tags: ColorTags) -> EncoderColor:
    return EncoderColor(
        color_range="full" if is_full_range(tags.color_range) else "limited",
        matrix=tags.matrix or "bt709",
        transfer=tags.transfer or "bt709",
        primaries=tags.primaries or "bt709",
    )


def _svt_params(quantizer: str, speed: int, tiles: int, color: EncoderColor) -> List[str]:
    return [
        "--crf", quantizer,
        "--preset", str(speed),
        *SVT_TUNING,
        "--color-range", color.color_range,
        "--matrix-coefficients", color.matrix,
        "--transfer-characteristics", color.transfer,
        "--color-primaries", color.primaries,
    ]


def _rav1e_params(quantizer: str, speed: int, tiles: int, color: EncoderColor) -> List[str]:
    return [
        "--quantizer", quantizer,
        "-s", str(speed),
        "--tiles", str(tiles),
        "--keyint", "0",
        "--no-scene-detection",
        "--range", color.color_range,
        "--matrix", color.matrix,
        "--transfer", color.transfer,
        "--primaries", color.primaries,
    ]


def _version_field(output: str, prefix: str) -> str:
    fields = output.split()
    if len(fields) < 2:
        raise EncoderRunError(f"Unexpected version output: {output.strip()!r}")
    return f"{prefix}{fields[1]}"


@dataclass(frozen=True)
class EncoderProfile:
    """Static description of a supported encoder.

    Attributes:
        name: Encoder identity as given on the command line
        zone_name: Encoder identity inside av1an zone overrides
        binary: Executable queried for the version string
        version_args: Arguments that print the version
        version_prefix: Prefix of the reported version string
        integer_quantizer: Whether final quantizers are whole numbers
        build_params: Builds the parameter list
        color: Converts probed color tags to encoder arguments
    """
    name: str
    zone_name: str
    binary: str
    version_args: Sequence[str]
    version_prefix: str
    integer_quantizer: bool
    build_params: Callable[[str, int, int, EncoderColor], List[str]]
    color: Callable[[ColorTags], EncoderColor]

    def round_quantizer(self, quantizer: float) -> float:
        """Snap a solved quantizer onto the encoder's quantizer grid."""
        if self.integer_quantizer:
            return float(int(quantizer))
        # halves round away from zero, quantizers are never negative
        return int(quantizer * 4 + 0.5) / 4

    def format_quantizer(self, quantizer: float) -> str:
        if self.integer_quantizer or float(quantizer).is_integer():
            return str(int(quantizer))
        return f"{quantizer:g}"


class EncoderRegistry:
    """Registry of encoders known to the parameter builders."""

    def __init__(self):
        self._encoders: Dict[str, EncoderProfile] = {}

    def register(self, profile: EncoderProfile) -> None:
        self._encoders[profile.name] = profile
        logger.debug(f"Registered encoder: {profile.name}")

    def get(self, name: str) -> EncoderProfile:
        """Look up an encoder.

        Raises:
            UnsupportedEncoderError: If the encoder is not registered
        """
        profile = self._encoders.get(name)
        if profile is None:
            raise UnsupportedEncoderError(name)
        return profile

    @property
    def names(self) -> List[str]:
        return sorted(self._encoders)


registry = EncoderRegistry()
registry.register(EncoderProfile(
    name="svt-av1",
    zone_name="svt_av1",
    binary="SvtAv1EncApp",
    version_args=("--version",),
    version_prefix="svt-av1-psy ",
    integer_quantizer=False,
    build_params=_svt_params,
    color=_svt_color,
))
registry.register(EncoderProfile(
    name="rav1e",
    zone_name="rav1e",
    binary="rav1e",
    version_args=("-V",),
    version_prefix="rav1e v",
    integer_quantizer=True,
    build_params=_rav1e_params,
    color=_rav1e_color,
))


def get_encoder(name: str) -> EncoderProfile:
    return registry.get(name)


def build_encoder_params(
    encoder: str,
    quantizer: float,
    speed: int,
    tiles: int,
    color: ColorTags,
    extra: Optional[Sequence[str]] = None
) -> List[str]:
    """Build the encoder parameter list handed to av1an.

    Args:
        encoder: Encoder identity
        quantizer: Quantizer (crf for svt-av1, quantizer for rav1e)
        speed: Speed preset
        tiles: Tile count, only used by rav1e
        color: Probed color tags
        extra: Additional raw parameters inserted after the quantizer

    Returns:
        Parameter list

    Raises:
        UnsupportedEncoderError: If the encoder is not registered
    """
    profile = get_encoder(encoder)
    params = profile.build_params(profile.format_quantizer(quantizer), speed, tiles, profile.color(color))
    if extra:
        params[2:2] = list(extra)
    return params


def format_encoder_options(
    encoder: str,
    quantizer_range: Sequence[float],
    speed: int,
    tiles: int,
    color: ColorTags,
    extra: Optional[Sequence[str]] = None
) -> str:
    """Human readable encoder options with the quantizer shown as a range.

    Used to tag final encodes whose quantizer varies per scene.
    """
    profile = get_encoder(encoder)
    shown = f"{quantizer_range[0]:.1f}-{quantizer_range[1]:.1f}"
    params = profile.build_params(shown, speed, tiles, profile.color(color))
    if extra:
        params[2:2] = list(extra)
    return " ".join(params)


def get_encoder_version(encoder: str) -> str:
    """Query the installed encoder for its version string.

    Raises:
        UnsupportedEncoderError: If the encoder is not registered
        EncoderRunError: If the encoder binary cannot be run
    """
    profile = get_encoder(encoder)
    binary = shutil.which(profile.binary)
    if not binary:
        raise EncoderRunError(f"Encoder binary not found: {profile.binary}")
    cmd = [binary, *profile.version_args]
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, check=True)
    except (OSError, subprocess.CalledProcessError) as e:
        raise EncoderRunError(
            "Failed to get encoder version",
            cmd=" ".join(cmd),
            returncode=getattr(e, "returncode", None)
        ) from e
    return _version_field(result.stdout, profile.version_prefix)
