import pytest

from sysfstats.collector.file_source import FileNotAvailable, FileSource, WriteFailed
from sysfstats.sink.memory_sink import MemorySink


class DictFileSource(FileSource):
    """File source backed by a dict. Records every write attempt."""

    def __init__(self, files=None, read_only=()):
        self.files = dict(files or {})
        self.read_only = set(read_only)
        self.writes = []

    def read(self, path):
        if path not in self.files:
            raise FileNotAvailable(path, "No such file or directory")
        return self.files[path]

    def write(self, path, content):
        self.writes.append((path, content))
        if path in self.read_only:
            raise WriteFailed(path, "Permission denied")
        self.files[path] = content


@pytest.fixture
def make_files():
    return DictFileSource


@pytest.fixture
def sink():
    return MemorySink()
