"""Custom column types used by the marketplace models."""

import json
import uuid
import logging
from typing import Any, Iterable, Optional

from sqlalchemy import Text
from sqlalchemy.types import TypeDecorator

logger = logging.getLogger(__name__)


def decode_specialties(raw: Optional[str]) -> frozenset[str]:
    """
    Decode a stored specialty list into a set of tags.

    Anything that is not a JSON list of strings decodes to the empty set so
    one bad row never aborts a query over many candidates.
    """
    if not raw:
        return frozenset()
    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        logger.warning("Discarding undecodable specialty data")
        return frozenset()
    if not isinstance(value, list):
        return frozenset()
    return frozenset(tag for tag in value if isinstance(tag, str))


def encode_specialties(tags: Optional[Iterable[str]]) -> str:
    """Encode specialty tags as a sorted JSON array."""
    return json.dumps(sorted(set(tags or ())))


class SpecialtySet(TypeDecorator):
    """Set of specialty tags stored as a JSON array in a text column."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: Any, dialect) -> Optional[str]:
        if value is None:
            return None
        return encode_specialties(value)

    def process_result_value(self, value: Optional[str], dialect) -> frozenset[str]:
        return decode_specialties(value)


def new_id() -> str:
    """Primary key generator for all marketplace tables."""
    return str(uuid.uuid4())
