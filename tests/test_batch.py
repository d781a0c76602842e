"""Tests for directory batch processing."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pygltflib
import pytest

from glb_strip.batch import BatchSummary, clean_file, process_directory
from glb_strip.errors import InvariantViolation, ResourceCollectionError
from glb_strip.pipeline import CleanResult


@pytest.fixture
def input_tree(tmp_path: Path, sample_glb) -> Path:
    """in/a.glb, in/sub/b.GLB, in/broken.glb, in/notes.txt"""
    root = tmp_path / "in"
    sample_glb(root / "a.glb")
    sample_glb(root / "sub" / "b.GLB")
    (root / "broken.glb").write_bytes(b"nope")
    (root / "notes.txt").write_text("not a model")
    return root


def _fake_gltfpack(input_path, output_path, **kwargs):
    """Stand-in for run_gltfpack that copies the staged file."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(Path(input_path).read_bytes())
    return True, output_path, "Success"


class TestBatchSummary:
    """Tests for BatchSummary."""

    def test_success_requires_no_failures(self) -> None:
        assert BatchSummary(total=2, ok=2).success
        assert not BatchSummary(total=2, ok=1, failed=1).success
        assert not BatchSummary(total=1, ok=1, pack_failed=1).success


class TestCleanFile:
    """Tests for clean_file function."""

    def test_writes_cleaned_file(self, tmp_path: Path, sample_glb) -> None:
        source = sample_glb(tmp_path / "model.glb")
        target = tmp_path / "out" / "model.glb"

        result = clean_file(source, target)

        assert result.ok
        assert result.stats.cameras_removed == 1
        assert result.stats.lights_removed == 1
        assert target.is_file()

    def test_pipeline_failure_raises_and_writes_nothing(
        self, tmp_path: Path, sample_glb
    ) -> None:
        """A failed clean is never encoded."""
        source = sample_glb(tmp_path / "model.glb")
        target = tmp_path / "out.glb"

        with patch(
            "glb_strip.pipeline.strip_capabilities",
            side_effect=InvariantViolation("broken"),
        ):
            with pytest.raises(InvariantViolation):
                clean_file(source, target)

        assert not target.exists()

    def test_failed_result_error_is_raised(self, tmp_path: Path, sample_glb) -> None:
        """The error carried by a failed CleanResult is what clean_file raises."""
        source = sample_glb(tmp_path / "model.glb")
        target = tmp_path / "out.glb"
        error = ResourceCollectionError("unresolvable", stage="collect")

        with patch(
            "glb_strip.batch.clean",
            side_effect=lambda document: CleanResult(ok=False, document=document, error=error),
        ):
            with pytest.raises(ResourceCollectionError) as excinfo:
                clean_file(source, target)

        assert excinfo.value is error
        assert not target.exists()


class TestProcessDirectory:
    """Tests for process_directory function."""

    def test_no_pack_mirrors_tree(self, tmp_path: Path, input_tree: Path) -> None:
        """Without gltfpack, cleaned files land directly in the output tree."""
        out = tmp_path / "out"

        summary = process_directory(input_tree, out, pack=False)

        assert summary == BatchSummary(total=3, ok=2, failed=1, pack_failed=0)
        assert (out / "a.glb").is_file()
        assert (out / "sub" / "b.GLB").is_file()
        assert not (out / "broken.glb").exists()
        assert not (out / "notes.txt").exists()

        cleaned = pygltflib.GLTF2.load(str(out / "a.glb"))
        assert [n.name for n in cleaned.nodes] == ["Root", "Triangle"]

    @patch("glb_strip.batch.run_gltfpack", side_effect=_fake_gltfpack)
    def test_pack_stages_and_cleans_up(
        self, mock_pack: MagicMock, tmp_path: Path, input_tree: Path
    ) -> None:
        """Staged files feed gltfpack and are removed afterwards."""
        out = tmp_path / "out"
        stage = tmp_path / "stage"

        summary = process_directory(input_tree, out, temp_root=stage)

        assert summary.ok == 2
        assert summary.failed == 1
        assert mock_pack.call_count == 2
        first_call = mock_pack.call_args_list[0]
        assert first_call.args == (stage.resolve() / "a.glb", out.resolve() / "a.glb")
        assert first_call.kwargs == {"texture_compress": True, "mesh_compress": True}
        assert (out / "sub" / "b.GLB").is_file()
        assert not (stage / "a.glb").exists()
        assert not (stage / "sub").exists()

    @patch("glb_strip.batch.run_gltfpack", side_effect=_fake_gltfpack)
    def test_keep_temp(self, mock_pack: MagicMock, tmp_path: Path, input_tree: Path) -> None:
        """--keep-temp leaves the staged files in place."""
        stage = tmp_path / "stage"

        process_directory(input_tree, tmp_path / "out", temp_root=stage, keep_temp=True)

        assert (stage / "a.glb").is_file()
        assert (stage / "sub" / "b.GLB").is_file()

    @patch("glb_strip.batch.run_gltfpack")
    def test_owned_temp_dir_is_removed(
        self, mock_pack: MagicMock, tmp_path: Path, input_tree: Path
    ) -> None:
        """The default staging directory is deleted wholesale."""
        staged: list[Path] = []

        def record(input_path, output_path, **kwargs):
            staged.append(Path(input_path))
            return _fake_gltfpack(input_path, output_path)

        mock_pack.side_effect = record

        process_directory(input_tree, tmp_path / "out")

        assert staged
        assert not staged[0].parent.exists()

    @patch("glb_strip.batch.run_gltfpack")
    def test_pack_failure_is_counted(
        self, mock_pack: MagicMock, tmp_path: Path, input_tree: Path
    ) -> None:
        """gltfpack failures are reported but do not stop the batch."""
        mock_pack.return_value = (False, tmp_path / "x.glb", "gltfpack failed: boom")

        summary = process_directory(input_tree, tmp_path / "out", temp_root=tmp_path / "stage")

        assert summary.ok == 2
        assert summary.pack_failed == 2
        assert not summary.success

    def test_reports_progress(
        self, tmp_path: Path, input_tree: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Per-file status lines and a final tally are printed."""
        process_directory(input_tree, tmp_path / "out", pack=False)

        output = capsys.readouterr().out
        assert "a.glb" in output
        assert "broken.glb" in output
        assert "Done. total=3 ok=2 failed=1" in output

    def test_empty_directory(self, tmp_path: Path) -> None:
        """No input files is a successful, empty run."""
        (tmp_path / "in").mkdir()

        summary = process_directory(tmp_path / "in", tmp_path / "out", pack=False)

        assert summary == BatchSummary()
        assert summary.success
