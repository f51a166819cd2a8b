"""
Unit tests for detail_drawing.batch module.

Tests:
- File discovery
- Single file processing
- Batch processing results
- Progress tracking
"""

import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from detail_drawing.batch import (
    BatchResult,
    ProcessingResult,
    batch_convert_cli,
    batch_process,
    find_drawing_files,
    process_single_file,
)
from detail_drawing.io.document import load_document, save_document
from detail_drawing.project_config import CONFIG_FILENAME, ProjectConfig


@pytest.fixture
def isolated(tmp_path, monkeypatch):
    """Keep config discovery away from the real cwd and home."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.setenv("USERPROFILE", str(tmp_path / "home"))
    return tmp_path


@pytest.fixture
def drawings_dir(tmp_path, plate_state, title_block):
    """Directory with three plate drawings."""
    folder = tmp_path / "drawings"
    for name in ("a", "b", "c"):
        save_document(folder / f"{name}.json", plate_state, title_block)
    return folder


class TestProcessingResult:
    """Tests for ProcessingResult dataclass."""

    def test_success_status(self):
        """Test success status."""
        result = ProcessingResult(input_path=Path("plate.json"), success=True)
        assert result.status == "OK"

    def test_failed_status(self):
        """Test failed status."""
        result = ProcessingResult(input_path=Path("plate.json"), error="Bad document")
        assert result.status == "FAILED"


class TestBatchResult:
    """Tests for BatchResult dataclass."""

    def test_empty_result(self):
        """Test empty result."""
        result = BatchResult()
        assert result.total == 0
        assert result.success_rate == 0.0

    def test_counting(self):
        """Test counting."""
        result = BatchResult(results=[
            ProcessingResult(Path("a.json"), new_dimensions=4, success=True),
            ProcessingResult(Path("b.json"), new_dimensions=6, success=True),
            ProcessingResult(Path("c.json"), success=False, error="Bad document"),
        ])
        assert (result.total, result.successful, result.failed) == (3, 2, 1)
        assert result.success_rate == pytest.approx(66.666, rel=1e-3)

    def test_summary(self):
        """Test summary."""
        result = BatchResult(results=[
            ProcessingResult(Path("a.json"), new_dimensions=4, success=True),
            ProcessingResult(Path("c.json"), success=False, error="Bad document"),
        ])
        summary = result.summary()
        assert "Batch Processing Summary" in summary
        assert "Dimensions: 4 added" in summary
        assert "Bad document" in summary
        assert "+4 dims" in summary

    def test_to_dict(self):
        """Test to dict."""
        result = BatchResult(results=[
            ProcessingResult(Path("a.json"), outputs={"json": Path("a_dim.json")}, success=True),
        ])
        data = result.to_dict()
        json.dumps(data)
        assert data["successful"] == 1
        assert data["results"][0]["outputs"] == {"json": "a_dim.json"}


class TestFindDrawingFiles:
    """Tests for find_drawing_files."""

    def test_finds_json(self, drawings_dir):
        """Test finds json."""
        files = find_drawing_files(drawings_dir)
        assert [f.name for f in files] == ["a.json", "b.json", "c.json"]

    def test_skips_config_and_outputs(self, drawings_dir):
        """Test skips config and outputs."""
        (drawings_dir / CONFIG_FILENAME).write_text("{}", encoding="utf-8")
        (drawings_dir / "a_dim.json").write_text("{}", encoding="utf-8")
        files = find_drawing_files(drawings_dir, exclude_suffix="_dim")
        assert [f.name for f in files] == ["a.json", "b.json", "c.json"]

    def test_recursive(self, drawings_dir, plate_state):
        """Test recursive."""
        save_document(drawings_dir / "sub" / "d.json", plate_state)
        assert len(find_drawing_files(drawings_dir)) == 3
        assert len(find_drawing_files(drawings_dir, recursive=True)) == 4

    def test_missing_directory(self, tmp_path):
        """Test missing directory."""
        with pytest.raises(FileNotFoundError):
            find_drawing_files(tmp_path / "nope")

    def test_not_a_directory(self, plate_document):
        """Test not a directory."""
        with pytest.raises(NotADirectoryError):
            find_drawing_files(plate_document)


class TestProcessSingleFile:
    """Tests for process_single_file."""

    def test_success(self, plate_document):
        """Test success."""
        result = process_single_file(plate_document, ProjectConfig())

        assert result.success
        assert result.new_dimensions == 10
        assert result.outputs["json"] == plate_document.with_name("plate_dim.json")
        state, _ = load_document(result.outputs["json"])
        assert len(state.dimensions) == 10

    def test_error_captured(self, broken_document):
        """Test error captured."""
        result = process_single_file(broken_document, ProjectConfig())
        assert not result.success
        assert result.error
        assert result.duration_seconds >= 0


class TestBatchProcess:
    """Tests for batch_process."""

    def test_sequential(self, drawings_dir):
        """Test sequential."""
        result = batch_process(drawings_dir, config=ProjectConfig())
        assert result.total == 3
        assert result.failed == 0
        assert (drawings_dir / "b_dim.json").exists()

    def test_outputs_not_reprocessed(self, drawings_dir):
        """Test outputs not reprocessed."""
        batch_process(drawings_dir, config=ProjectConfig())
        again = batch_process(drawings_dir, config=ProjectConfig())
        assert again.total == 3

    def test_output_dir_and_names(self, drawings_dir, tmp_path):
        """Test output dir and names."""
        out = tmp_path / "out"
        result = batch_process(
            drawings_dir, output_dir=out, config=ProjectConfig(),
            output_prefix="dim_", output_suffix="",
        )
        assert result.successful == 3
        assert (out / "dim_a.json").exists()

    def test_config_not_modified(self, drawings_dir, tmp_path):
        """Test config not modified."""
        config = ProjectConfig()
        batch_process(drawings_dir, output_dir=tmp_path / "out", config=config)
        assert config.output.output_dir == ""

    def test_parallel(self, drawings_dir):
        """Test parallel."""
        result = batch_process(drawings_dir, config=ProjectConfig(), parallel=True, max_workers=2)
        assert result.successful == 3
        assert [r.input_path.name for r in result.results] == ["a.json", "b.json", "c.json"]

    def test_failure_isolated(self, drawings_dir):
        """Test failure isolated."""
        (drawings_dir / "broken.json").write_text("{not json", encoding="utf-8")
        result = batch_process(drawings_dir, config=ProjectConfig())
        assert result.successful == 3
        assert result.failed == 1

    def test_progress_callback(self, drawings_dir):
        """Test progress callback."""
        callback = MagicMock()
        batch_process(drawings_dir, config=ProjectConfig(), progress_callback=callback)
        assert callback.call_count == 3
        assert callback.call_args_list[-1][0][:2] == (3, 3)

    def test_empty_directory(self, tmp_path):
        """Test empty directory."""
        empty = tmp_path / "empty"
        empty.mkdir()
        assert batch_process(empty, config=ProjectConfig()).total == 0

    def test_config_file_in_directory(self, isolated, drawings_dir):
        """Test config file in directory."""
        (drawings_dir / CONFIG_FILENAME).write_text(
            json.dumps({"output": {"formats": ["json", "svg"]}}), encoding="utf-8",
        )
        result = batch_process(drawings_dir)
        assert set(result.results[0].outputs) == {"json", "svg"}


class TestBatchCli:
    """Tests for batch_convert_cli."""

    def test_success(self, isolated, drawings_dir, capsys):
        """Test success."""
        assert batch_convert_cli([str(drawings_dir), "--suffix", "_out"]) == 0
        assert "Batch Processing Summary" in capsys.readouterr().out
        assert (drawings_dir / "a_out.json").exists()

    def test_failure_exit_code(self, isolated, drawings_dir):
        """Test failure exit code."""
        (drawings_dir / "broken.json").write_text("[]", encoding="utf-8")
        assert batch_convert_cli([str(drawings_dir)]) == 1

    def test_missing_directory(self, isolated):
        """Test missing directory."""
        assert batch_convert_cli([str(isolated / "nope")]) == 1

    def test_style_and_formats(self, isolated, drawings_dir, tmp_path):
        """Test style and formats."""
        out = tmp_path / "out"
        code = batch_convert_cli([
            str(drawings_dir), "-o", str(out), "--style", "shapes-only",
            "--formats", "json", "dxf",
        ])
        assert code == 0
        assert (out / "a_dim.dxf").exists()
        state, _ = load_document(out / "a_dim.json")
        assert len(state.dimensions) == 6
