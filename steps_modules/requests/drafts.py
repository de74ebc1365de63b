"""
Request drafts (``steps_modules.requests.drafts``).

An in-progress request form can be saved and resumed after a reload.  A
draft is a plain JSON document on disk, keyed by form identity (the form
kind plus the user filling it in).  Drafts never touch the request tables;
``RequestService.submit_draft`` turns one into a real request.
"""

from __future__ import annotations

import hashlib
import json
import os
import re
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from steps_config.schema import DraftsConfig
from steps_kernel.logging_config import get_logger
from steps_modules.requests.models import LineItem, RequestKind

logger = get_logger("modules.requests.drafts")

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


@dataclass(frozen=True)
class RequestDraft:
    """A saved, not yet submitted, request form."""
    kind: RequestKind
    owner: str
    fields: dict[str, Any] = field(default_factory=dict)
    line_items: tuple[LineItem, ...] = field(default_factory=tuple)
    message: str = ""
    filter_status: str = "all"

    @property
    def key(self) -> str:
        """Form identity: one draft per kind per user."""
        return f"{self.kind.value}:{self.owner}"

    def to_json(self) -> str:
        return json.dumps(
            {
                "kind": self.kind.value,
                "owner": self.owner,
                "fields": self.fields,
                "line_items": [
                    {k: (None if v is None else str(v)) for k, v in asdict(line).items()}
                    for line in self.line_items
                ],
                "message": self.message,
                "filter_status": self.filter_status,
            },
            sort_keys=True,
        )

    @classmethod
    def from_json(cls, text: str) -> RequestDraft:
        """Parse a draft. Raises ValueError, KeyError or TypeError on malformed input."""
        data = json.loads(text)
        return cls(
            kind=RequestKind(data["kind"]),
            owner=data["owner"],
            fields=dict(data.get("fields") or {}),
            line_items=tuple(LineItem(**line) for line in data.get("line_items") or ()),
            message=data.get("message", ""),
            filter_status=data.get("filter_status", "all"),
        )


class DraftStore:
    """JSON-file draft storage under a single directory."""

    def __init__(self, directory: Path | str):
        self._directory = Path(directory)

    @classmethod
    def from_config(cls, config: DraftsConfig) -> DraftStore:
        return cls(config.directory)

    def _path(self, key: str) -> Path:
        # Distinct keys map to distinct files
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()[:16]
        return self._directory / f"{_UNSAFE_KEY_CHARS.sub('_', key)}-{digest}.json"

    def save(self, draft: RequestDraft) -> Path:
        self._directory.mkdir(parents=True, exist_ok=True)
        path = self._path(draft.key)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(draft.to_json(), encoding="utf-8")
        os.replace(tmp, path)
        logger.debug("request_draft_saved", extra={"draft_key": draft.key})
        return path

    def load(self, kind: RequestKind, owner: str) -> RequestDraft | None:
        """The saved draft for this form, or None if absent or unreadable."""
        key = f"{kind.value}:{owner}"
        path = self._path(key)
        if not path.exists():
            return None
        try:
            draft = RequestDraft.from_json(path.read_text(encoding="utf-8"))
        except (ValueError, KeyError, TypeError) as exc:
            logger.warning(
                "request_draft_corrupt",
                extra={"draft_key": key, "path": str(path), "error": str(exc)},
            )
            return None
        if draft.key != key:
            logger.warning(
                "request_draft_identity_mismatch",
                extra={"draft_key": key, "stored_key": draft.key, "path": str(path)},
            )
            return None
        return draft

    def discard(self, kind: RequestKind, owner: str) -> None:
        path = self._path(f"{kind.value}:{owner}")
        path.unlink(missing_ok=True)
        logger.debug("request_draft_discarded", extra={"draft_key": f"{kind.value}:{owner}"})
