"""Writes solved quantizers as av1an zone overrides."""

from pathlib import Path
from typing import Union

from loguru import logger

from ..config import SearchConfig
from ..config import default_config as defaults
from ..core.video.errors import SceneFileError
from ..encoding.params import build_encoder_params, get_encoder
from ..scenes.models import ScenesInfo, ZoneOverrides


class OverrideEmitter:
    """Attaches per-scene encoder settings to a pristine scenes file."""

    def __init__(self, config: SearchConfig):
        self.config = config

    def zone_overrides(self, quantizer: float) -> ZoneOverrides:
        config = self.config
        return ZoneOverrides(
            encoder=get_encoder(config.encoder).zone_name,
            passes=defaults.ZONE_PASSES,
            video_params=build_encoder_params(
                config.encoder,
                quantizer,
                config.speed,
                config.tiles,
                config.color_tags(),
                extra=config.extra_params
            ),
            photon_noise=None,
            extra_split_sec=defaults.ZONE_EXTRA_SPLIT_SEC,
            min_scene_len=defaults.ZONE_MIN_SCENE_LEN,
        )

    def emit(
        self,
        solved: ScenesInfo,
        scenes_path: Union[str, Path],
        output_path: Union[str, Path]
    ) -> ScenesInfo:
        """Write the scenes file at ``scenes_path`` with overrides to ``output_path``.

        Scenes are matched on identical start and end frames; boundaries are
        never changed. Scenes without a solved match keep no override.

        Raises:
            SceneFileError: If the paths coincide or the scenes file is invalid
        """
        scenes_path, output_path = Path(scenes_path), Path(output_path)
        if scenes_path.resolve() == output_path.resolve():
            raise SceneFileError(
                "Override output would replace the scenes file", output_path
            )

        pristine = ScenesInfo.load(scenes_path)
        matched = 0
        for scene in pristine.scenes:
            solved_scene = solved.find(scene.scene_id)
            if solved_scene is None or solved_scene.final_quantizer is None:
                logger.warning(
                    f"No solved quantizer for scene {scene.start_frame}-{scene.end_frame}"
                )
                continue
            scene.zone_overrides = self.zone_overrides(solved_scene.final_quantizer)
            matched += 1

        pristine.save(output_path)
        logger.info(f"Wrote zone overrides for {matched} scenes to {output_path}")
        return pristine
