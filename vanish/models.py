"""Typed containers for the Vanish API payloads."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from .utils import format_timestamp, parse_timestamp


def require_object(raw: Any, what: str) -> dict[str, Any]:
    if not isinstance(raw, dict):
        raise TypeError(f"{what}: expected object, got {type(raw).__name__}")
    return raw


def read_field(raw: dict[str, Any], key: str, kind: type, default: Any = None) -> Any:
    """Value of ``key`` checked against ``kind``; missing or null gives ``default``.

    Raises TypeError on a mismatch. JSON booleans never pass as numbers.
    """
    value = raw.get(key)
    if value is None:
        return default
    if not isinstance(value, kind) or (kind is not bool and isinstance(value, bool)):
        raise TypeError(f"{key}: expected {kind.__name__}, got {type(value).__name__}")
    return value


def read_list(raw: dict[str, Any], key: str, kind: type) -> Optional[list[Any]]:
    """List under ``key`` whose items are all ``kind``; None when missing or null."""
    items = read_field(raw, key, list)
    if items is None:
        return None
    for item in items:
        if not isinstance(item, kind) or isinstance(item, bool):
            raise TypeError(f"{key}: expected list of {kind.__name__}")
    return list(items)


@dataclass(frozen=True)
class AttachmentMeta:
    """Metadata for an email attachment."""

    id: str
    name: str
    type: str
    size: int

    @classmethod
    def from_dict(cls, raw: Any) -> AttachmentMeta:
        raw = require_object(raw, "attachment")
        return cls(
            id=read_field(raw, "id", str, ""),
            name=read_field(raw, "name", str, ""),
            type=read_field(raw, "type", str, ""),
            size=read_field(raw, "size", int, 0),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "type": self.type, "size": self.size}


@dataclass(frozen=True)
class EmailSummary:
    """Brief summary of an email as it appears in a mailbox listing."""

    id: str
    sender: str
    subject: str
    text_preview: str
    received_at: Optional[datetime]
    has_attachments: bool

    @classmethod
    def from_dict(cls, raw: Any) -> EmailSummary:
        raw = require_object(raw, "email summary")
        return cls(
            id=read_field(raw, "id", str, ""),
            sender=read_field(raw, "from", str, ""),
            subject=read_field(raw, "subject", str, ""),
            text_preview=read_field(raw, "textPreview", str, ""),
            received_at=parse_timestamp(read_field(raw, "receivedAt", str)),
            has_attachments=read_field(raw, "hasAttachments", bool, False),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "from": self.sender,
            "subject": self.subject,
            "textPreview": self.text_preview,
            "receivedAt": format_timestamp(self.received_at),
            "hasAttachments": self.has_attachments,
        }


@dataclass(frozen=True)
class EmailDetail:
    """Full email, including bodies and attachment metadata."""

    id: str
    sender: str
    to: list[str]
    subject: str
    html: str
    text: str
    received_at: Optional[datetime]
    has_attachments: bool
    attachments: Optional[list[AttachmentMeta]] = None

    @classmethod
    def from_dict(cls, raw: Any) -> EmailDetail:
        raw = require_object(raw, "email")
        attachments = read_list(raw, "attachments", dict)
        return cls(
            id=read_field(raw, "id", str, ""),
            sender=read_field(raw, "from", str, ""),
            to=read_list(raw, "to", str) or [],
            subject=read_field(raw, "subject", str, ""),
            html=read_field(raw, "html", str, ""),
            text=read_field(raw, "text", str, ""),
            received_at=parse_timestamp(read_field(raw, "receivedAt", str)),
            has_attachments=read_field(raw, "hasAttachments", bool, False),
            attachments=(
                [AttachmentMeta.from_dict(item) for item in attachments]
                if attachments is not None
                else None
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "from": self.sender,
            "to": list(self.to),
            "subject": self.subject,
            "html": self.html,
            "text": self.text,
            "receivedAt": format_timestamp(self.received_at),
            "hasAttachments": self.has_attachments,
            "attachments": (
                [item.to_dict() for item in self.attachments]
                if self.attachments is not None
                else None
            ),
        }


@dataclass(frozen=True)
class PaginatedEmailList:
    """One page of a mailbox listing."""

    data: list[EmailSummary]
    next_cursor: Optional[str]
    total: int

    @classmethod
    def from_dict(cls, raw: Any) -> PaginatedEmailList:
        raw = require_object(raw, "email list")
        return cls(
            data=[EmailSummary.from_dict(item) for item in read_list(raw, "data", dict) or []],
            next_cursor=read_field(raw, "nextCursor", str),
            total=read_field(raw, "total", int, 0),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "data": [item.to_dict() for item in self.data],
            "nextCursor": self.next_cursor,
            "total": self.total,
        }


@dataclass(frozen=True)
class GenerateEmailOptions:
    """Optional inputs for creating a mailbox; unset or empty fields are not sent."""

    domain: Optional[str] = None
    prefix: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {}
        if self.domain:
            body["domain"] = self.domain
        if self.prefix:
            body["prefix"] = self.prefix
        return body


@dataclass(frozen=True)
class ListEmailsOptions:
    """Paging inputs for a mailbox listing."""

    limit: Optional[int] = None
    cursor: Optional[str] = None

    def to_params(self) -> dict[str, str]:
        params: dict[str, str] = {}
        if self.limit is not None and self.limit > 0:
            params["limit"] = str(self.limit)
        if self.cursor:
            params["cursor"] = self.cursor
        return params

