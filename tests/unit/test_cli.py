"""Unit tests for the studiolens CLI."""

import io
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner, Result
from PIL import Image

from studiolens.cli import cli
from studiolens.core.catalog import CAMERA_ANGLES
from studiolens.core.reference import ReferenceSet
from studiolens.utils.exceptions import APIError, ContentBlockedError, ValidationError


def _run_cli(*args: str) -> Result:
    runner = CliRunner()
    return runner.invoke(cli, list(args))


def _result_obj() -> MagicMock:
    result_obj = MagicMock()
    result_obj.format = "png"
    result_obj.generation_time = 1.0
    result_obj.model_used = "gemini-test"
    result_obj.prompt_used = "prompt text"
    return result_obj


def _png(path: Path) -> Path:
    buf = io.BytesIO()
    Image.new("RGB", (2, 2)).save(buf, format="PNG")
    path.write_bytes(buf.getvalue())
    return path


@pytest.mark.unit
class TestGenerateCommand:
    """Test generate command behavior and exit codes."""

    @patch("studiolens.cli.commands.generate_image")
    def test_standard_mode_builds_settings(self, mock_generate: MagicMock, tmp_path: Path):
        result_obj = _result_obj()
        mock_generate.return_value = result_obj
        out_file = tmp_path / "shots" / "out.png"

        result = _run_cli(
            "generate",
            "--grid", "4",
            "--angle", "2",
            "--pose", "Side Profile",
            "--custom-pose", "",
            "--custom-pose", "leaning on a rail",
            "--aspect-ratio", "9:16",
            "--location", "Han river bridge",
            "--out", str(out_file),
            "--quiet",
        )

        assert result.exit_code == 0, result.output
        settings = mock_generate.call_args.args[0]
        assert settings.grid_count == 4
        assert len(settings.cuts) == 4
        assert settings.camera_angles[0] == CAMERA_ANGLES[2]
        assert settings.poses[0] == "Side Profile"
        assert settings.effective_pose(1) == "leaning on a rail"
        assert settings.aspect_ratio.value == "9:16"
        assert settings.effective_concept == "Han river bridge"
        result_obj.save.assert_called_once_with(str(out_file))
        assert out_file.parent.is_dir()
        assert str(out_file) in result.output

    @patch("studiolens.cli.commands.generate_image")
    def test_default_output_path(self, mock_generate: MagicMock):
        mock_generate.return_value = _result_obj()
        runner = CliRunner()
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["generate", "--quiet"])
        assert result.exit_code == 0, result.output
        saved_to = mock_generate.return_value.save.call_args.args[0]
        assert saved_to.startswith("studiolens_")
        assert saved_to.endswith(".png")

    @patch("studiolens.cli.commands.generate_image")
    def test_unknown_angle_is_validation_error(self, mock_generate: MagicMock):
        result = _run_cli("generate", "--angle", "sideways", "--quiet")
        assert result.exit_code == 2
        assert "camera angle" in result.output
        mock_generate.assert_not_called()

    @patch("studiolens.cli.commands.generate_image")
    def test_more_angles_than_cuts(self, mock_generate: MagicMock):
        result = _run_cli("generate", "--grid", "2", "--angle", "1", "--angle", "2", "--angle", "3")
        assert result.exit_code == 2
        mock_generate.assert_not_called()

    @patch("studiolens.cli.commands.generate_image")
    def test_unsupported_grid(self, mock_generate: MagicMock):
        result = _run_cli("generate", "--grid", "5", "--quiet")
        assert result.exit_code == 2
        assert "grid_count" in result.output
        mock_generate.assert_not_called()

    def test_missing_credential_exit_2(self):
        result = _run_cli("generate", "--quiet")
        assert result.exit_code == 2
        assert "studiolens key set" in result.output

    @patch("studiolens.cli.commands.generate_image")
    def test_api_error_exit_1(self, mock_generate: MagicMock):
        mock_generate.side_effect = APIError("Rate limit exceeded.", status_code=429)
        result = _run_cli("generate", "--quiet")
        assert result.exit_code == 1
        assert "Rate limit exceeded." in result.output

    @patch("studiolens.cli.commands.generate_image")
    def test_blocked_exit_1(self, mock_generate: MagicMock):
        mock_generate.side_effect = ContentBlockedError("Generation blocked: SAFETY.", "SAFETY")
        result = _run_cli("generate", "--quiet")
        assert result.exit_code == 1

    @patch("studiolens.cli.commands.generate_image")
    def test_model_option_applied(self, mock_generate: MagicMock, tmp_path: Path):
        mock_generate.return_value = _result_obj()
        result = _run_cli("generate", "-m", "other-model", "-o", str(tmp_path / "o.png"), "-q")
        assert result.exit_code == 0, result.output
        assert mock_generate.call_args.kwargs["config"].image_model == "other-model"


@pytest.mark.unit
class TestReferenceMode:
    @patch("studiolens.cli.commands.generate_from_references")
    @patch("studiolens.cli.commands.generate_image")
    def test_refs_loaded_in_order(
        self,
        mock_generate: MagicMock,
        mock_from_refs: MagicMock,
        tmp_path: Path,
    ):
        mock_from_refs.return_value = _result_obj()
        m1 = _png(tmp_path / "m1.png")
        m2 = _png(tmp_path / "m2.png")
        c1 = _png(tmp_path / "c1.png")

        result = _run_cli(
            "generate",
            "--model-ref", str(m1),
            "--model-ref", str(m2),
            "--clothing-ref", str(c1),
            "--clothing-prompt", "sleeves rolled up",
            "-o", str(tmp_path / "out.png"),
            "-q",
        )

        assert result.exit_code == 0, result.output
        mock_generate.assert_not_called()
        models, clothing, settings = mock_from_refs.call_args.args
        assert isinstance(models, ReferenceSet)
        assert len(models) == 2
        assert len(clothing) == 1
        assert all(ref.url.startswith("data:image/png;base64,") for ref in models)
        assert settings.clothing_prompt == "sleeves rolled up"

    def test_clothing_prompt_without_model_ref(self):
        result = _run_cli("generate", "--clothing-prompt", "a trench coat", "-q")
        assert result.exit_code == 2
        assert "model reference" in result.output

    def test_missing_ref_file_is_usage_error(self, tmp_path: Path):
        result = _run_cli("generate", "--model-ref", str(tmp_path / "missing.png"))
        assert result.exit_code == 2


@pytest.mark.unit
class TestEditCommands:
    @patch("studiolens.cli.commands.edit_image")
    def test_edit(self, mock_edit: MagicMock, tmp_path: Path):
        mock_edit.return_value = _result_obj()
        src = _png(tmp_path / "src.png")
        result = _run_cli(
            "edit", str(src), "--instruction", "remove the hat", "-o", str(tmp_path / "e.png"), "-q"
        )
        assert result.exit_code == 0, result.output
        source, instruction, settings = mock_edit.call_args.args
        assert source.startswith("data:image/png;base64,")
        assert instruction == "remove the hat"
        assert settings.grid_count == 1

    def test_edit_requires_instruction(self, tmp_path: Path):
        result = _run_cli("edit", str(_png(tmp_path / "src.png")))
        assert result.exit_code == 2
        assert "instruction" in result.output.lower()

    @patch("studiolens.cli.commands.generate_consistent_image")
    def test_next_cut(self, mock_next: MagicMock, tmp_path: Path):
        mock_next.return_value = _result_obj()
        src = _png(tmp_path / "src.png")
        result = _run_cli(
            "next-cut", str(src), "--context", "on a rooftop at dusk", "--grid", "2",
            "-o", str(tmp_path / "n.png"), "-q",
        )
        assert result.exit_code == 0, result.output
        _source, context, settings = mock_next.call_args.args
        assert context == "on a rooftop at dusk"
        assert settings.grid_count == 2

    @patch("studiolens.cli.commands.extract_outfit")
    def test_extract_outfit_single_photo(self, mock_extract: MagicMock, tmp_path: Path):
        mock_extract.return_value = _result_obj()
        src = _png(tmp_path / "model.png")
        result = _run_cli("extract-outfit", str(src), "-o", str(tmp_path / "x.png"), "-q")
        assert result.exit_code == 0, result.output
        assert mock_extract.call_args.args[0].startswith("data:image/png;base64,")

    @patch("studiolens.cli.commands.extract_outfit")
    def test_extract_outfit_needs_exactly_one(self, mock_extract: MagicMock, tmp_path: Path):
        a = _png(tmp_path / "a.png")
        b = _png(tmp_path / "b.png")
        result = _run_cli("extract-outfit", str(a), str(b), "-q")
        assert result.exit_code == 2
        mock_extract.assert_not_called()

    @patch("studiolens.cli.commands.edit_outfit")
    def test_edit_outfit(self, mock_edit_outfit: MagicMock, tmp_path: Path):
        mock_edit_outfit.return_value = _result_obj()
        src = _png(tmp_path / "outfit.png")
        result = _run_cli(
            "edit-outfit", str(src), "-i", "make the shoes white", "-o", str(tmp_path / "y.png"), "-q"
        )
        assert result.exit_code == 0, result.output
        assert mock_edit_outfit.call_args.args[1] == "make the shoes white"

    @patch("studiolens.cli.commands.edit_outfit")
    def test_edit_outfit_validation_error(self, mock_edit_outfit: MagicMock, tmp_path: Path):
        mock_edit_outfit.side_effect = ValidationError("Instruction cannot be empty.", "instruction")
        src = _png(tmp_path / "outfit.png")
        result = _run_cli("edit-outfit", str(src), "-i", " ", "-q")
        assert result.exit_code == 2
        assert "(field: instruction)" in result.output


@pytest.mark.unit
class TestCatalogCommands:
    def test_lenses(self):
        result = _run_cli("lenses")
        assert result.exit_code == 0
        for lens_id in ("rf85", "rf50", "rf35", "rf135"):
            assert lens_id in result.output

    def test_presets(self):
        result = _run_cli("presets")
        assert result.exit_code == 0
        assert "Studio Clean" in result.output


@pytest.mark.unit
class TestKeyCommands:
    def test_set_show_clear(self, tmp_path: Path):
        result = _run_cli("key", "set", "AIzaSyExampleKey9876")
        assert result.exit_code == 0, result.output
        assert (tmp_path / "credentials.json").exists()

        result = _run_cli("key", "show")
        assert result.exit_code == 0
        assert "9876" in result.output
        assert "AIzaSyExampleKey9876" not in result.output
        assert "stored" in result.output

        result = _run_cli("key", "clear")
        assert result.exit_code == 0
        assert not (tmp_path / "credentials.json").exists()

    def test_show_env_key(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("GEMINI_API_KEY", "AIzaSyFromEnvironment1234")
        result = _run_cli("key", "show")
        assert result.exit_code == 0
        assert "1234 (environment)" in result.output

    def test_set_prompts_when_value_missing(self, tmp_path: Path):
        runner = CliRunner()
        result = runner.invoke(cli, ["key", "set"], input="AIzaSyPromptedKey5555\n")
        assert result.exit_code == 0, result.output
        assert "AIzaSyPromptedKey5555" not in result.output
        assert (tmp_path / "credentials.json").exists()

    @patch("studiolens.cli.commands.validate_connection", return_value=True)
    def test_test_ok(self, mock_validate: MagicMock):
        result = _run_cli("key", "test", "--api-key", "AIzaSyTestKey0000")
        assert result.exit_code == 0
        assert mock_validate.call_args.args[0] == "AIzaSyTestKey0000"

    @patch("studiolens.cli.commands.validate_connection", return_value=False)
    def test_test_failure_exit_1(self, _mock_validate: MagicMock):
        result = _run_cli("key", "test", "--api-key", "AIzaSyTestKey0000")
        assert result.exit_code == 1

    @patch("studiolens.cli.commands.validate_connection")
    def test_test_without_key_exit_2(self, mock_validate: MagicMock):
        result = _run_cli("key", "test")
        assert result.exit_code == 2
        mock_validate.assert_not_called()


@pytest.mark.unit
class TestVersionOption:
    def test_version(self):
        result = _run_cli("--version")
        assert result.exit_code == 0
        assert "studiolens" in result.output
