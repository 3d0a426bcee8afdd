from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from sqlalchemy import Text
from sqlalchemy.types import TypeDecorator

from .errors import InvalidLabelError

LABEL_DELIMITER = ","


def validate_label(label: str) -> str:
    cleaned = label.strip()
    if LABEL_DELIMITER in cleaned:
        raise InvalidLabelError(
            f"Label {label!r} must not contain {LABEL_DELIMITER!r}"
        )
    return cleaned


def clean_labels(labels: Iterable[str] | None) -> list[str]:
    """Validate labels and drop blanks, keeping the caller's order."""
    if not labels:
        return []
    cleaned = (validate_label(label) for label in labels)
    return [label for label in cleaned if label]


def encode_labels(labels: Iterable[str] | None) -> str | None:
    cleaned = clean_labels(labels)
    if not cleaned:
        return None
    return LABEL_DELIMITER.join(cleaned)


def decode_labels(value: str | None) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(LABEL_DELIMITER) if item.strip()]


class LabelList(TypeDecorator):
    """Ordered label list stored as a single delimited text column."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: Any, dialect: Any) -> str | None:
        if isinstance(value, str):
            value = [value]
        return encode_labels(value)

    def process_result_value(self, value: Any, dialect: Any) -> list[str]:
        return decode_labels(value)
