from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class StatusLine:
    """
    Value Object for one rendered line of the status message.
    The id is the project's stable id and is passed through to the
    channel as the attachment id.
    """
    color: str
    text: str
    id: int

    def to_attachment(self) -> dict:
        return {"color": self.color, "text": self.text, "id": self.id}


@dataclass(frozen=True)
class StatusReport:
    """
    Immutable snapshot of the deployment, ready to be published.
    """
    text: str = ""
    lines: tuple[StatusLine, ...] = ()
    project_count: int = 0
    failed_count: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def attachments(self) -> list[dict]:
        return [line.to_attachment() for line in self.lines]
