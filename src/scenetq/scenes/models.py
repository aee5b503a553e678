"""Scene description schema.

The scenes file is av1an's ``scenes.json`` extended with per-quantizer
score statistics and the solved quantizer. Unknown keys are preserved.
"""

import json
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from ..core.video.errors import SceneFileError
from ..utils.json_helper import read_json, write_json_safely

SceneId = Tuple[int, int]


class QualityStats(BaseModel):
    """Score statistics of one scene at one trial quantizer."""

    model_config = ConfigDict(frozen=True)

    mean: float
    median: float
    std_dev: float
    percentile_5th: float
    percentile_95th: float


class ZoneOverrides(BaseModel):
    """Per-scene av1an encoder settings."""

    encoder: str
    passes: int = Field(ge=1)
    video_params: List[str]
    photon_noise: Optional[int] = None
    extra_split_sec: int
    min_scene_len: int


class Scene(BaseModel):
    """Inclusive frame range searched as one unit."""

    model_config = ConfigDict(extra="allow", validate_assignment=True)

    start_frame: int = Field(ge=0)
    end_frame: int = Field(ge=0)
    quantizer_scores: Optional[Dict[float, QualityStats]] = None
    final_quantizer: Optional[float] = None
    zone_overrides: Optional[ZoneOverrides] = None

    @model_validator(mode="after")
    def _check_bounds(self) -> "Scene":
        if self.start_frame > self.end_frame:
            raise ValueError(
                f"Scene start {self.start_frame} is after its end {self.end_frame}"
            )
        return self

    @property
    def scene_id(self) -> SceneId:
        return (self.start_frame, self.end_frame)

    def contains(self, frame_index: int) -> bool:
        return self.start_frame <= frame_index <= self.end_frame


class ScenesInfo(BaseModel):
    """Ordered scene list plus total frame count."""

    model_config = ConfigDict(extra="allow")

    scenes: List[Scene]
    frames: int = Field(ge=0)

    def find(self, scene_id: SceneId) -> Optional[Scene]:
        """Scene with exactly these bounds, if any."""
        for scene in self.scenes:
            if scene.scene_id == tuple(scene_id):
                return scene
        return None

    @classmethod
    def load(cls, path: Union[str, Path]) -> "ScenesInfo":
        """Read a scenes file.

        Raises:
            SceneFileError: If the file is missing or invalid
        """
        try:
            return cls.model_validate(read_json(path))
        except FileNotFoundError as e:
            raise SceneFileError(f"Scenes file not found: {path}", path) from e
        except json.JSONDecodeError as e:
            raise SceneFileError(f"Scenes file is not valid JSON: {path}", path, str(e)) from e
        except ValidationError as e:
            raise SceneFileError(f"Scenes file has an invalid layout: {path}", path, str(e)) from e

    def save(self, path: Union[str, Path]) -> None:
        """Atomically write the scenes file."""
        write_json_safely(path, self.model_dump(mode="json"))
