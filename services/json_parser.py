"""Parser for JSON user and session snapshots."""

from __future__ import annotations

import json
from typing import Any

from app.schemas import FailureDetail, JsonMetrics
from services.parsing import FileParseError, ParsedFile

USERS_FIELD = "usuarios"
SESSIONS_FIELD = "sesiones"
ACTIVE_FIELD = "activo"

MALFORMED_REASON = "Malformed JSON"
STRUCTURE_REASON = "Unexpected JSON structure"


def _array_field(document: dict[str, Any], name: str) -> list[Any]:
    value = document.get(name, [])
    if not isinstance(value, list):
        raise FileParseError(
            STRUCTURE_REASON,
            FailureDetail(
                error_type="StructureError",
                message=f"Field {name!r} must be an array, got {type(value).__name__}",
            ),
        )
    return value


def _is_active(user: Any) -> bool:
    return isinstance(user, dict) and user.get(ACTIVE_FIELD) is True


class JsonParser:
    """Counts users, active users and sessions in a JSON document.

    JSON has no line-level recovery: a document either decodes and yields
    metrics, or the whole file fails with the decoder's position and message.
    """

    def parse(self, raw: bytes) -> ParsedFile:
        try:
            text = raw.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise FileParseError(
                MALFORMED_REASON,
                FailureDetail(
                    error_type="UnicodeDecodeError",
                    message=exc.reason,
                    position=exc.start,
                ),
            ) from exc

        try:
            document = json.loads(text)
        except json.JSONDecodeError as exc:
            raise FileParseError(
                MALFORMED_REASON,
                FailureDetail(
                    error_type="JSONDecodeError",
                    message=exc.msg,
                    position=exc.pos,
                    line=exc.lineno,
                    column=exc.colno,
                ),
            ) from exc

        if not isinstance(document, dict):
            raise FileParseError(
                STRUCTURE_REASON,
                FailureDetail(
                    error_type="StructureError",
                    message=f"Top-level value must be an object, got {type(document).__name__}",
                ),
            )

        users = _array_field(document, USERS_FIELD)
        sessions = _array_field(document, SESSIONS_FIELD)
        metrics = JsonMetrics(
            total_users=len(users),
            active_users=sum(1 for user in users if _is_active(user)),
            total_sessions=len(sessions),
        )
        return ParsedFile(metrics=metrics, valid_count=1)
