"""Port: Mimetype detector — identify the type of a file before checking."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional


class MimetypeDetectorPort(ABC):
    """Contract for sniffing a file's mimetype."""

    @abstractmethod
    def detect(self, file_path: Path) -> Optional[str]:
        """Return the mimetype of *file_path*, or ``None`` if unknown."""
        ...
