import mimetypes
from dataclasses import dataclass
from pathlib import Path


@dataclass
class PendingFile:
    """A file picked for upload but not yet sent."""
    filename: str
    content_type: str
    content: bytes

    @classmethod
    def from_path(cls, path) -> "PendingFile":
        path = Path(path)
        content_type, _ = mimetypes.guess_type(path.name)
        return cls(path.name, content_type or "application/octet-stream", path.read_bytes())
