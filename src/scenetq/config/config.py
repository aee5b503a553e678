"""Configuration module for quality targeting settings."""

import json
import shlex
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..core.video.types import ColorTags, QuantizerRange
from ..encoding.params import get_encoder
from . import default_config as defaults


class SearchConfig(BaseModel):
    """Configuration for the per-scene quantizer search.

    Encoder dependent settings left unset are filled from
    ``default_config.ENCODER_DEFAULTS`` for the chosen encoder.
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        validate_default=True,
        str_strip_whitespace=True,
        validate_assignment=True
    )

    # Encoder
    # frozen: the encoder dependent defaults below are derived from it once
    encoder: str = Field(
        default=defaults.ENCODER,
        frozen=True,
        description="Encoder used for trials and final encode (svt-av1, rav1e)"
    )
    quantizer: float = Field(
        default=None,
        description="Base quantizer the search trials are centred on"
    )
    speed: int = Field(
        default=None,
        ge=0,
        description="Speed/preset of the final encode"
    )
    search_speed: int = Field(
        default=None,
        ge=0,
        description="Faster speed/preset reserved for search trials"
    )
    tiles: int = Field(
        default=defaults.TILES,
        ge=1,
        description="Tile count (rav1e only)"
    )
    pixel_format: str = Field(
        default=defaults.PIXEL_FORMAT,
        description="Pixel format handed to av1an"
    )
    workers: int = Field(
        default=defaults.WORKERS,
        ge=1,
        description="Number of av1an workers"
    )
    encoder_params: Optional[str] = Field(
        default=None,
        description="Extra encoder parameters inserted after the quantizer"
    )
    source_filter: str = Field(
        default=defaults.SOURCE_FILTER,
        pattern=r"^(bestsource|lsmash|dgdecnv)$",
        description="VapourSynth source plugin for decoding"
    )

    # Search
    target_quality: float = Field(
        default=defaults.TARGET_QUALITY,
        description="Target mean SSIMULACRA2 score per scene"
    )
    quantizer_step: float = Field(
        default=None,
        gt=0,
        description="Quantizer distance between search trials"
    )
    quantizer_range: Tuple[float, float] = Field(
        default=None,
        description="Closed [min, max] quantizer range for trials and final pass"
    )
    quality_compensation: float = Field(
        default=None,
        description="Added to trial mean scores before curve fitting"
    )
    cycle: int = Field(
        default=defaults.CYCLE,
        ge=1,
        description="Frame stride of the trial encodes"
    )
    threads: Optional[int] = Field(
        default=None,
        ge=1,
        description="Scoring threads (default: half the logical CPUs)"
    )

    # Color tags from probing
    color_range: Optional[str] = None
    matrix: Optional[str] = None
    transfer: Optional[str] = None
    primaries: Optional[str] = None

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )
    log_file: Optional[Path] = Field(
        default=None,
        description="Log file path"
    )

    @model_validator(mode="before")
    @classmethod
    def _fill_encoder_defaults(cls, data: Any) -> Any:
        """Fill unset encoder dependent settings."""
        if not isinstance(data, dict):
            return data
        encoder = data.get("encoder") or defaults.ENCODER
        encoder_defaults = defaults.ENCODER_DEFAULTS.get(get_encoder(encoder).name, {})
        filled: Dict[str, Any] = dict(data)
        for key, value in encoder_defaults.items():
            if filled.get(key) is None:
                filled[key] = value
        return filled

    @field_validator("encoder")
    @classmethod
    def _check_encoder(cls, value: str) -> str:
        return get_encoder(value).name

    @field_validator("encoder_params")
    @classmethod
    def _check_params(cls, value: Optional[str]) -> Optional[str]:
        if value is not None:
            try:
                shlex.split(value)
            except ValueError as e:
                raise ValueError(f"Failed to parse encoder parameters: {value}") from e
        return value

    @field_validator("quantizer_range", mode="before")
    @classmethod
    def _parse_range(cls, value: Any) -> Any:
        if isinstance(value, str):
            try:
                value = json.loads(value)
            except json.JSONDecodeError as e:
                raise ValueError(f"Failed to parse quantizer range: {value}") from e
        return value

    @field_validator("quantizer_range")
    @classmethod
    def _check_range(cls, value: Tuple[float, float]) -> Tuple[float, float]:
        if value[0] > value[1]:
            raise ValueError(f"Quantizer range minimum exceeds maximum: {value}")
        return value

    @property
    def range(self) -> QuantizerRange:
        return QuantizerRange(*self.quantizer_range)

    @property
    def extra_params(self) -> List[str]:
        return shlex.split(self.encoder_params or "")

    def color_tags(self) -> ColorTags:
        """Get color tags as a ColorTags value."""
        return ColorTags(
            color_range=self.color_range,
            matrix=self.matrix,
            transfer=self.transfer,
            primaries=self.primaries
        )
