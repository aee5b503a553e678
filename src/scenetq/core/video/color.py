"""Color metadata parsing and size-based inference.

Tags come from upstream probing in ffprobe naming. Each property is
resolved on its own: an explicit, known tag wins, otherwise the value is
inferred from the frame dimensions with the usual broadcast heuristics.
Enum values follow ITU-T H.273, which is also what VapourSynth frame
properties use.
"""

from enum import IntEnum
from typing import Optional


class MatrixCoefficients(IntEnum):
    IDENTITY = 0
    BT709 = 1
    UNSPECIFIED = 2
    BT470M = 4
    BT470BG = 5
    ST170M = 6
    ST240M = 7
    YCGCO = 8
    BT2020_NCL = 9
    BT2020_CL = 10
    ST2085 = 11
    CHROMA_DERIVED_NCL = 12
    CHROMA_DERIVED_CL = 13
    ICTCP = 14


class TransferCharacteristics(IntEnum):
    BT1886 = 1
    UNSPECIFIED = 2
    BT470M = 4
    BT470BG = 5
    ST170M = 6
    ST240M = 7
    LINEAR = 8
    LOG100 = 9
    LOG316 = 10
    XVYCC = 11
    BT1361E = 12
    SRGB = 13
    BT2020_10 = 14
    BT2020_12 = 15
    PQ = 16
    ST428 = 17
    HLG = 18


class ColorPrimaries(IntEnum):
    BT709 = 1
    UNSPECIFIED = 2
    BT470M = 4
    BT470BG = 5
    ST170M = 6
    ST240M = 7
    FILM = 8
    BT2020 = 9
    ST428 = 10
    P3DCI = 11
    P3DISPLAY = 12
    TECH3213 = 22


FULL_RANGE_TAGS = {'pc', 'jpeg', 'full'}

MATRIX_TAGS = {
    'rgb': MatrixCoefficients.IDENTITY,
    'bt709': MatrixCoefficients.BT709,
    'fcc': MatrixCoefficients.BT470M,
    'bt470bg': MatrixCoefficients.BT470BG,
    'smpte170m': MatrixCoefficients.ST170M,
    'smpte240m': MatrixCoefficients.ST240M,
    'ycgco': MatrixCoefficients.YCGCO,
    'ycocg': MatrixCoefficients.YCGCO,
    'ycgco-re': MatrixCoefficients.YCGCO,
    'ycgco-ro': MatrixCoefficients.YCGCO,
    'bt2020nc': MatrixCoefficients.BT2020_NCL,
    'bt2020ncl': MatrixCoefficients.BT2020_NCL,
    'bt2020c': MatrixCoefficients.BT2020_CL,
    'bt2020_cl': MatrixCoefficients.BT2020_CL,
    'smpte2085': MatrixCoefficients.ST2085,
    'chroma-derived-nc': MatrixCoefficients.CHROMA_DERIVED_NCL,
    'chroma-derived-c': MatrixCoefficients.CHROMA_DERIVED_CL,
    'ictcp': MatrixCoefficients.ICTCP,
}

TRANSFER_TAGS = {
    'bt709': TransferCharacteristics.BT1886,
    'gamma22': TransferCharacteristics.BT470M,
    'gamma28': TransferCharacteristics.BT470BG,
    'smpte170m': TransferCharacteristics.ST170M,
    'smpte240m': TransferCharacteristics.ST240M,
    'linear': TransferCharacteristics.LINEAR,
    'log100': TransferCharacteristics.LOG100,
    'log': TransferCharacteristics.LOG100,
    'log316': TransferCharacteristics.LOG316,
    'log_sqrt': TransferCharacteristics.LOG316,
    'iec61966-2-4': TransferCharacteristics.XVYCC,
    'iec61966_2_4': TransferCharacteristics.XVYCC,
    'bt1361e': TransferCharacteristics.BT1361E,
    'bt1361': TransferCharacteristics.BT1361E,
    'iec61966-2-1': TransferCharacteristics.SRGB,
    'iec61966_2_1': TransferCharacteristics.SRGB,
    'bt2020-10': TransferCharacteristics.BT2020_10,
    'bt2020_10bit': TransferCharacteristics.BT2020_10,
    'bt2020-12': TransferCharacteristics.BT2020_12,
    'bt2020_12bit': TransferCharacteristics.BT2020_12,
    'smpte2084': TransferCharacteristics.PQ,
    'smpte428': TransferCharacteristics.ST428,
    'smpte428_1': TransferCharacteristics.ST428,
    'arib-std-b67': TransferCharacteristics.HLG,
}

PRIMARIES_TAGS = {
    'bt709': ColorPrimaries.BT709,
    'bt470m': ColorPrimaries.BT470M,
    'bt470bg': ColorPrimaries.BT470BG,
    'smpte170m': ColorPrimaries.ST170M,
    'smpte240m': ColorPrimaries.ST240M,
    'film': ColorPrimaries.FILM,
    'bt2020': ColorPrimaries.BT2020,
    'smpte428': ColorPrimaries.ST428,
    'smpte428_1': ColorPrimaries.ST428,
    'smpte431': ColorPrimaries.P3DCI,
    'smpte432': ColorPrimaries.P3DISPLAY,
    'ebu3213': ColorPrimaries.TECH3213,
}


def _is_hd(width: int, height: int) -> bool:
    return width >= 1280 or height > 576


def parse_matrix(tag: Optional[str]) -> MatrixCoefficients:
    """Map an ffprobe matrix tag, unknown tags map to UNSPECIFIED."""
    return MATRIX_TAGS.get((tag or '').lower(), MatrixCoefficients.UNSPECIFIED)


def parse_transfer(tag: Optional[str]) -> TransferCharacteristics:
    """Map an ffprobe transfer tag, unknown tags map to UNSPECIFIED."""
    return TRANSFER_TAGS.get((tag or '').lower(), TransferCharacteristics.UNSPECIFIED)


def parse_primaries(tag: Optional[str]) -> ColorPrimaries:
    """Map an ffprobe primaries tag, unknown tags map to UNSPECIFIED."""
    return PRIMARIES_TAGS.get((tag or '').lower(), ColorPrimaries.UNSPECIFIED)


def is_full_range(tag: Optional[str]) -> bool:
    return (tag or '').lower() in FULL_RANGE_TAGS


def matrix_from_size(width: int, height: int) -> MatrixCoefficients:
    if _is_hd(width, height):
        return MatrixCoefficients.BT709
    if height == 576:
        return MatrixCoefficients.BT470BG
    return MatrixCoefficients.ST170M


def transfer_from_size(width: int, height: int) -> TransferCharacteristics:
    if _is_hd(width, height):
        return TransferCharacteristics.BT1886
    if height == 576:
        return TransferCharacteristics.BT470BG
    return TransferCharacteristics.ST170M


def primaries_from_size(
    width: int,
    height: int,
    matrix: Optional[MatrixCoefficients] = None
) -> ColorPrimaries:
    """Infer primaries, letting an already resolved matrix take precedence.

    Args:
        width: Frame width
        height: Frame height
        matrix: Resolved matrix coefficients, if any

    Returns:
        Inferred color primaries
    """
    if matrix in (MatrixCoefficients.BT2020_NCL, MatrixCoefficients.BT2020_CL):
        return ColorPrimaries.BT2020
    if matrix == MatrixCoefficients.BT709 or _is_hd(width, height):
        return ColorPrimaries.BT709
    if height == 576:
        return ColorPrimaries.BT470BG
    if height in (480, 488):
        return ColorPrimaries.ST170M
    return ColorPrimaries.BT709


def resolve_matrix(tag: Optional[str], width: int, height: int) -> MatrixCoefficients:
    matrix = parse_matrix(tag)
    if matrix == MatrixCoefficients.UNSPECIFIED:
        return matrix_from_size(width, height)
    return matrix


def resolve_transfer(tag: Optional[str], width: int, height: int) -> TransferCharacteristics:
    transfer = parse_transfer(tag)
    if transfer == TransferCharacteristics.UNSPECIFIED:
        return transfer_from_size(width, height)
    return transfer


def resolve_primaries(
    tag: Optional[str],
    width: int,
    height: int,
    matrix: Optional[MatrixCoefficients] = None
) -> ColorPrimaries:
    primaries = parse_primaries(tag)
    if primaries == ColorPrimaries.UNSPECIFIED:
        return primaries_from_size(width, height, matrix)
    return primaries
