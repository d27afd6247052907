"""Message-related data models."""

import secrets
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import PurePath
from typing import Literal


def new_message_id() -> str:
    """Generation time in milliseconds plus a random suffix."""
    return f"{int(time.time() * 1000)}-{secrets.token_hex(4)}"


def extension_of(filename: str) -> str:
    """Lowercase extension of a file name, without the dot."""
    name = PurePath(filename).name.lower()
    if name == "dockerfile":
        return "dockerfile"
    if name.startswith(".") and name.count(".") == 1:
        # dotfiles such as .gitignore
        return name[1:]
    suffix = PurePath(name).suffix
    return suffix[1:] if suffix else ""


@dataclass(frozen=True)
class Attachment:
    """A text attachment already extracted by the ingestor."""

    name: str
    content: str
    size: int = 0
    ext: str = ""

    def __post_init__(self) -> None:
        if not self.ext:
            object.__setattr__(self, "ext", extension_of(self.name))
        if not self.size:
            object.__setattr__(self, "size", len(self.content.encode("utf-8")))


@dataclass(frozen=True)
class Message:
    """A single message in the session transcript."""

    role: Literal["user", "assistant"]
    content: str
    id: str = field(default_factory=new_message_id)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
