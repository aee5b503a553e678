"""Unit tests for cli.py."""
import json

import pytest
from click.testing import CliRunner

from scenetq.cli import build_config, main, prompt_recovery
from scenetq.core.video.errors import DecodeOpenError, ScoringAborted
from scenetq.scenes.models import ScenesInfo


@pytest.fixture(autouse=True)
def quiet_logging(mocker):
    """Keep CLI runs from reconfiguring loguru."""
    return mocker.patch("scenetq.cli.setup_logging")


@pytest.fixture
def source(temp_dir):
    path = temp_dir / "clip_skip.vpy"
    path.write_text("# script")
    return path


def test_cli_missing_scenes(source):
    """Test search requires an existing scenes file."""
    runner = CliRunner()
    result = runner.invoke(main, ["search", str(source), "--scenes", "missing.json"])
    assert result.exit_code == 2
    assert "does not exist" in result.output


def test_search_runs_and_emits(source, scenes_file, temp_dir, mocker):
    """Test search wires the configuration into the search and emitter."""
    solved = ScenesInfo.load(scenes_file)
    mock_search = mocker.patch("scenetq.cli.QuantizerSearch")
    mock_search.return_value.run.return_value = solved
    mock_emitter = mocker.patch("scenetq.cli.OverrideEmitter")
    mocker.patch("scenetq.cli.load_metric")

    runner = CliRunner()
    result = runner.invoke(main, [
        "search", str(source), "--scenes", str(scenes_file),
        "-e", "rav1e", "--range", "[40, 120]", "-t", "85", "--on-stall", "abort",
    ])

    assert result.exit_code == 0, result.output
    config = mock_search.call_args[0][0]
    assert config.encoder == "rav1e"
    assert config.quantizer_range == (40, 120)
    assert config.target_quality == 85
    assert mock_search.call_args[1]["recovery"](1, 2) is False
    mock_emitter.return_value.emit.assert_called_once_with(
        solved, scenes_file, temp_dir / "clip_skip_override.json"
    )
    assert str(temp_dir / "clip_skip_override.json") in result.output


def test_search_bad_range(source, scenes_file):
    """Test invalid settings are usage errors."""
    runner = CliRunner()
    result = runner.invoke(main, ["search", str(source), "--scenes", str(scenes_file),
                                  "--range", "[60, 20]"])
    assert result.exit_code == 2


def test_search_error_exit(source, scenes_file, mocker):
    """Test scenetq errors print a message and exit 1."""
    mock_search = mocker.patch("scenetq.cli.QuantizerSearch")
    mock_search.return_value.run.side_effect = DecodeOpenError("Failed to open clip_skip.vpy")
    mocker.patch("scenetq.cli.load_metric")

    result = CliRunner().invoke(main, ["search", str(source), "--scenes", str(scenes_file)])

    assert result.exit_code == 1
    assert "Error: Failed to open clip_skip.vpy" in result.output


def test_search_aborted(source, scenes_file, mocker):
    """Test an aborted scoring round exits cleanly."""
    mock_search = mocker.patch("scenetq.cli.QuantizerSearch")
    mock_search.return_value.run.side_effect = ScoringAborted(3, 10)
    mocker.patch("scenetq.cli.load_metric")

    result = CliRunner().invoke(main, ["search", str(source), "--scenes", str(scenes_file)])

    assert result.exit_code == 0
    assert "Aborted." in result.output


def test_score_prints_summary(temp_dir, mocker):
    """Test score prints statistics and caches the frame scores."""
    reference = temp_dir / "ref.vpy"
    distorted = temp_dir / "enc.mkv"
    reference.write_text("# script")
    distorted.write_bytes(b"mkv")
    mocker.patch("scenetq.cli.open_decoder")
    mocker.patch("scenetq.cli.load_metric")
    mock_score = mocker.patch("scenetq.cli.score_pair",
                              return_value={0: 70.0, 10: 80.0, 20: -1.0})

    result = CliRunner().invoke(main, ["score", str(reference), str(distorted), "--cycle", "10"])

    assert result.exit_code == 0, result.output
    assert mock_score.call_args[1]["cycle"] == 10
    assert "Frames:          2" in result.output
    assert "mean:" in result.output and "75.0000" in result.output
    assert json.loads((temp_dir / "enc.ssimu2").read_text()) == {"0": 70.0, "10": 80.0, "20": -1.0}

    # second run uses the cache
    mock_score.reset_mock()
    result = CliRunner().invoke(main, ["score", str(reference), str(distorted)])
    assert result.exit_code == 0
    mock_score.assert_not_called()


def test_encoder_command(mocker):
    """Test encoder prints the version and display options."""
    mocker.patch("scenetq.cli.get_encoder_version", return_value="svt-av1-psy v2.3.0")
    result = CliRunner().invoke(main, ["encoder", "svt-av1"])
    assert result.exit_code == 0
    lines = result.output.splitlines()
    assert lines[0] == "svt-av1-psy v2.3.0"
    assert lines[1].startswith("--crf 25.0-55.0 --preset 4")


def test_encoder_command_parameters(mocker):
    """Test --parameters is shown in the display options."""
    mocker.patch("scenetq.cli.get_encoder_version", return_value="svt-av1-psy v2.3.0")
    result = CliRunner().invoke(main, ["encoder", "svt-av1", "--parameters", "--film-grain 8"])
    assert result.exit_code == 0, result.output
    assert result.output.splitlines()[1].startswith("--crf 25.0-55.0 --film-grain 8 --preset 4")


def test_prompt_recovery(mocker):
    """Test the interactive policy defaults to abort."""
    confirm = mocker.patch("scenetq.cli.click.confirm", return_value=True)
    assert prompt_recovery(3, 10) is True
    assert confirm.call_args[1]["default"] is False


def test_build_config_skips_unset():
    config = build_config({"encoder": "rav1e", "quantizer": None})
    assert config.quantizer == 100
