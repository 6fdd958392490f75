"""Tests for the command line interface."""
import pytest
import typer
from typer.testing import CliRunner

from mediaqueue.cli.main import app, parse_fields

runner = CliRunner()


class TestParseFields:
    """Test suite for parse_fields."""

    def test_empty(self):
        assert parse_fields(None) == {}

    def test_pairs(self):
        assert parse_fields(["title=My clip", "folder=", "note=a=b"]) == {
            'title': 'My clip',
            'folder': '',
            'note': 'a=b',
        }

    @pytest.mark.parametrize("value", ["title", "=value"])
    def test_invalid(self, value):
        with pytest.raises(typer.BadParameter):
            parse_fields([value])


class TestCheckCommand:
    """Test suite for the check command."""

    def test_all_accepted(self, tmp_path):
        clip = tmp_path / "clip.mp4"
        clip.write_bytes(b'x' * 2048)

        result = runner.invoke(app, ["check", str(clip)])

        assert result.exit_code == 0
        assert "clip.mp4" in result.output
        assert "2.0 KB" in result.output

    def test_rejected_file_fails(self, tmp_path):
        clip = tmp_path / "clip.mov"
        notes = tmp_path / "notes.txt"
        clip.write_bytes(b'x')
        notes.write_text("hello")

        result = runner.invoke(app, ["check", str(clip), str(notes)])

        assert result.exit_code == 1
        assert "notes.txt" in result.output

    def test_custom_extensions(self, tmp_path):
        track = tmp_path / "track.mp3"
        track.write_bytes(b'x')

        result = runner.invoke(app, ["check", "--ext", ".mp3", str(track)])

        assert result.exit_code == 0


class TestUploadCommand:
    """Test suite for the upload command."""

    def test_no_acceptable_files(self, tmp_path):
        notes = tmp_path / "notes.txt"
        notes.write_text("hello")

        result = runner.invoke(app, ["upload", "--url", "http://127.0.0.1:9/upload", str(notes)])

        assert result.exit_code == 1
        assert "No files to upload" in result.output

    def test_missing_url(self, tmp_path):
        clip = tmp_path / "clip.mp4"
        clip.write_bytes(b'x')

        result = runner.invoke(app, ["upload", str(clip)])

        assert result.exit_code != 0

    def test_relative_url_rejected(self, tmp_path):
        clip = tmp_path / "clip.mp4"
        clip.write_bytes(b'x')

        result = runner.invoke(app, ["upload", "--url", "/api/videos/upload", str(clip)])

        assert result.exit_code == 1
        assert "relative" in result.output
