"""Icon storage on the local filesystem under MEDIA_ROOT."""

import logging
import re
from pathlib import Path

from nita.core.errors import NotFound, ValidationFailed

logger = logging.getLogger(__name__)

ALLOWED_ICON_EXTENSIONS = frozenset({".png", ".jpg", ".jpeg", ".svg"})
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def safe_filename(filename: str) -> str:
    """Base name only, unsafe characters replaced; never escapes the icon directory."""
    name = Path(filename.replace("\\", "/")).name
    name = _UNSAFE_CHARS.sub("_", name).lstrip(".")
    if not name:
        raise ValidationFailed.for_field("file", "The file name is invalid.")
    return name


class IconStore:
    """Stores, lists and deletes uploaded icon files."""

    def __init__(self, root: str | Path, max_bytes: int) -> None:
        self.root = Path(root)
        self.max_bytes = max_bytes

    def save(self, filename: str, content: bytes) -> str:
        name = safe_filename(filename)
        if Path(name).suffix.lower() not in ALLOWED_ICON_EXTENSIONS:
            raise ValidationFailed.for_field(
                "file", "The file must be a file of type: png, jpg, jpeg, svg."
            )
        if not content:
            raise ValidationFailed.for_field("file", "The file is empty.")
        if len(content) > self.max_bytes:
            raise ValidationFailed.for_field(
                "file",
                f"The file must not be greater than {self.max_bytes // 1024} kilobytes.",
            )
        self.root.mkdir(parents=True, exist_ok=True)
        (self.root / name).write_bytes(content)
        logger.info("Icon stored: %s (%s bytes)", name, len(content))
        return name

    def names(self) -> list[str]:
        if not self.root.is_dir():
            return []
        return sorted(
            p.name
            for p in self.root.iterdir()
            if p.is_file() and p.suffix.lower() in ALLOWED_ICON_EXTENSIONS
        )

    def delete(self, filename: str) -> str:
        name = safe_filename(filename)
        path = self.root / name
        if not path.is_file():
            raise NotFound("File not found")
        path.unlink()
        logger.info("Icon deleted: %s", name)
        return name
