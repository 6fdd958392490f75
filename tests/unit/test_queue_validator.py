"""Tests for candidate file validation."""
import pytest

from mediaqueue.core.queue import QueueConfig, UploadQueue
from mediaqueue.core.queue.models import CandidateFile
from mediaqueue.core.queue.services import FileValidator


class TestFileValidator:
    """Test suite for FileValidator."""
    
    @pytest.fixture
    def validator(self):
        config = QueueConfig()
        return FileValidator(config.allowed_extensions, config.allowed_mime_types)
    
    @pytest.mark.parametrize("name,mime_type", [
        ("a.mp4", "video/mp4"),
        ("a.MOV", ""),
        ("b.avi", "application/octet-stream"),
        ("no_extension", "video/quicktime"),
        ("wrong.txt", "video/mp4"),
    ])
    def test_accepts_extension_or_mime(self, validator, name, mime_type):
        assert validator.is_valid(CandidateFile(name=name, size=1, mime_type=mime_type))
    
    @pytest.mark.parametrize("name,mime_type", [
        ("c.txt", "text/plain"),
        ("doc.pdf", "application/pdf"),
        ("image.jpg", ""),
        ("mp4", ""),
        ("video.mp4.exe", "application/x-msdownload"),
    ])
    def test_rejects_when_neither_matches(self, validator, name, mime_type):
        assert not validator.is_valid(CandidateFile(name=name, size=1, mime_type=mime_type))
    
    def test_mime_case_insensitive(self, validator):
        assert validator.is_valid(CandidateFile(name="x.bin", size=1, mime_type="Video/MP4"))
    
    def test_filter_preserves_order(self, validator):
        files = [
            CandidateFile(name="1.mp4", size=1),
            CandidateFile(name="2.txt", size=1),
            CandidateFile(name="3.avi", size=1),
            CandidateFile(name="4.pdf", size=1),
        ]
        
        valid, invalid = validator.filter_files(files)
        
        assert [f.name for f in valid] == ["1.mp4", "3.avi"]
        assert [f.name for f in invalid] == ["2.txt", "4.pdf"]
    
    def test_filter_empty(self, validator):
        assert validator.filter_files([]) == ([], [])


class TestAddFiles:
    """Test suite for UploadQueue.add_files."""
    
    def test_scenario_mixed_batch(self, transport, video):
        queue = UploadQueue(concurrent_uploads=2, transport=transport)
        
        result = queue.add_files([
            video("a.mp4"),
            video("b.avi", mime_type="video/avi"),
            video("c.txt", mime_type="text/plain"),
        ])
        
        assert result.added == 2
        assert result.rejected == 1
        assert result.rejected_files == ["c.txt"]
        assert [item.name for item in queue.get_files()] == ["a.mp4", "b.avi"]
    
    def test_rejected_do_not_change_queue(self, transport, video):
        queue = UploadQueue(transport=transport)
        queue.add_files([video("a.mp4")])
        
        result = queue.add_files([video("notes.txt", mime_type="text/plain")])
        
        assert result.added == 0
        assert len(queue) == 1
    
    def test_items_are_pending(self, transport, video):
        queue = UploadQueue(transport=transport)
        queue.add_files([video("test.mp4", size=1024000)])
        
        item = queue.get_files()[0]
        assert item.status.value == 'pending'
        assert item.progress == 0
        assert item.error is None
        assert item.size == 1024000
        assert item.size_display == '1000.0 KB'
    
    def test_paths_accepted(self, transport, tmp_path):
        path = tmp_path / "clip.mp4"
        path.write_bytes(b"data")
        queue = UploadQueue(transport=transport)
        
        result = queue.add_files([path, str(path)])
        
        assert result.added == 2
        assert queue.get_files()[0].payload == path
    
    def test_missing_path_queues_nothing(self, transport, tmp_path, video):
        queue = UploadQueue(transport=transport)
        
        with pytest.raises(FileNotFoundError):
            queue.add_files([video("a.mp4"), tmp_path / "missing.mp4"])
        
        assert len(queue) == 0
    
    def test_queue_update_emitted(self, transport, video):
        updates = []
        queue = UploadQueue(transport=transport, on_queue_update=updates.append)
        
        queue.add_files([video("a.mp4")])
        
        assert len(updates) == 1
        assert [item.name for item in updates[0]] == ["a.mp4"]
    
    def test_custom_audio_policy(self, transport, video):
        queue = UploadQueue(
            transport=transport,
            uploadUrl='/api/audios/upload',
            fileFieldName='audio',
            allowedExtensions=['.mp3', '.wav'],
            allowedMimeTypes=['audio/mpeg'],
        )
        
        result = queue.add_files([
            video("song.mp3", mime_type=""),
            video("voice.ogg", mime_type="audio/mpeg"),
            video("clip.mp4"),
        ])
        
        assert result.added == 2
        assert result.rejected_files == ["clip.mp4"]
