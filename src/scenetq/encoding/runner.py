"""Trial encode runners."""

import shutil
import subprocess
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Protocol

from loguru import logger

from ..core.video.errors import EncoderRunError
from ..core.video.types import TrialRequest
from .params import build_encoder_params

if TYPE_CHECKING:
    from ..config import SearchConfig


class EncoderRunner(Protocol):
    """Produces trial encodes for the quantizer search."""

    def run_trial(self, source: Path, scene_file: Path, request: TrialRequest) -> Path:
        """Encode ``source`` split by ``scene_file`` and return the output path.

        Must be a no-op when ``request.output_path`` already exists.
        """
        ...


class Av1anRunner:
    """Runs trial and final encodes through av1an.

    Each call blocks until av1an exits.
    """

    def __init__(self, config: "SearchConfig", binary: Optional[str] = None):
        self.config = config
        self.binary = binary or shutil.which("av1an") or "av1an"

    def build_command(
        self,
        source: Path,
        output: Path,
        scene_file: Path,
        encoder: str,
        params: List[str],
        temp_dir: Optional[Path] = None,
        keep: bool = False
    ) -> List[str]:
        """Build an av1an command line.

        Args:
            source: Source file or VapourSynth script
            output: Encoded output file
            scene_file: Scenes file av1an splits on
            encoder: Encoder identity
            params: Encoder parameter list
            temp_dir: Work directory (default: output stem beside output)
            keep: Keep av1an's temporary files

        Returns:
            Command as a list of arguments
        """
        if temp_dir is None:
            temp_dir = output.parent / output.stem
        cmd = [
            self.binary,
            "-i", str(source),
            "-o", str(output),
            "--temp", str(temp_dir),
            "--verbose", "--resume",
            "-w", str(self.config.workers),
            "--scenes", str(scene_file),
            "--sc-pix-format", self.config.pixel_format,
            "--sc-downscale-height", "360",
            "-e", encoder,
            "-v", " ".join(params),
            "-m", self.config.source_filter,
            "-c", "mkvmerge",
            "--pix-format", self.config.pixel_format,
        ]
        if keep:
            cmd.append("--keep")
        return cmd

    def run(self, cmd: List[str]) -> None:
        """Run a command, blocking until it exits.

        Raises:
            EncoderRunError: If the command cannot start or exits non-zero
        """
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            result = subprocess.run(cmd)
        except OSError as e:
            raise EncoderRunError(
                f"Failed to start {cmd[0]}: {e}", cmd=" ".join(cmd)
            ) from e
        if result.returncode != 0:
            raise EncoderRunError(
                f"{Path(cmd[0]).name} exited with code {result.returncode}",
                cmd=" ".join(cmd),
                returncode=result.returncode
            )

    def run_trial(self, source: Path, scene_file: Path, request: TrialRequest) -> Path:
        output = Path(request.output_path)
        if output.exists():
            logger.info(f"Trial encode exists, skipping: {output.name}")
            return output
        params = build_encoder_params(
            request.encoder,
            request.quantizer,
            request.speed,
            self.config.tiles,
            self.config.color_tags(),
            extra=self.config.extra_params
        )
        logger.info(
            f"Encoding trial at quantizer {request.quantizer} "
            f"(speed {request.speed}): {output.name}"
        )
        self.run(self.build_command(source, output, scene_file, request.encoder, params))
        if not output.exists():
            raise EncoderRunError(f"Trial encode produced no output: {output}")
        return output
