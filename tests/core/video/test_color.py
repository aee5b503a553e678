"""Tests for color metadata resolution."""

import pytest

from scenetq.core.video.color import (
    ColorPrimaries,
    MatrixCoefficients,
    TransferCharacteristics,
    is_full_range,
    parse_matrix,
    resolve_matrix,
    resolve_primaries,
    resolve_transfer,
)


@pytest.mark.parametrize("width,height,expected", [
    (1920, 1080, MatrixCoefficients.BT709),
    (1280, 536, MatrixCoefficients.BT709),
    (1024, 578, MatrixCoefficients.BT709),
    (720, 576, MatrixCoefficients.BT470BG),
    (720, 480, MatrixCoefficients.ST170M),
])
def test_matrix_inferred_from_size(width, height, expected):
    """Test broadcast heuristics when no matrix tag is given."""
    assert resolve_matrix(None, width, height) == expected


def test_explicit_tag_wins_over_size():
    """Test known tags are used regardless of dimensions."""
    assert resolve_matrix("bt2020nc", 720, 480) == MatrixCoefficients.BT2020_NCL
    assert resolve_transfer("smpte2084", 720, 480) == TransferCharacteristics.PQ
    assert resolve_primaries("bt2020", 720, 480) == ColorPrimaries.BT2020


def test_unknown_tag_falls_back_to_inference():
    """Test unknown or 'unknown' tags behave like missing tags."""
    assert parse_matrix("unknown") == MatrixCoefficients.UNSPECIFIED
    assert resolve_transfer("unknown", 3840, 2160) == TransferCharacteristics.BT1886
    assert resolve_transfer(None, 720, 576) == TransferCharacteristics.BT470BG


def test_primaries_follow_resolved_matrix():
    """Test a BT.2020 matrix implies BT.2020 primaries."""
    matrix = resolve_matrix("bt2020nc", 1920, 1080)
    assert resolve_primaries(None, 1920, 1080, matrix) == ColorPrimaries.BT2020
    assert resolve_primaries(None, 720, 576, MatrixCoefficients.BT470BG) == ColorPrimaries.BT470BG


def test_full_range_tags():
    """Test range tag parsing."""
    for tag in ("pc", "jpeg", "full", "PC"):
        assert is_full_range(tag)
    for tag in ("tv", "mpeg", "limited", None):
        assert not is_full_range(tag)
