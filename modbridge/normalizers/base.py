"""
Base normalizer classes and protocol definitions.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Iterable, List, Mapping, Optional, Protocol, Tuple

from ..models.schema import BuildCandidate, NormalizedRecord


class Normalizer(Protocol):
    """
    Protocol defining the interface for provider normalizers.
    """
    def normalize_record(self, native: Mapping[str, Any], **options: Any) -> NormalizedRecord:
        ...

    def normalize_build(self, native: Mapping[str, Any]) -> BuildCandidate:
        ...


class BaseNormalizer:
    """
    Base class for normalizers with tolerant coercion helpers.

    Provider payloads are treated as untrusted: every helper returns a
    documented default instead of raising.
    """

    @staticmethod
    def _as_mapping(value: Any) -> Mapping[str, Any]:
        return value if isinstance(value, Mapping) else {}

    @staticmethod
    def _mappings(value: Any) -> List[Mapping[str, Any]]:
        """Mapping items of a list payload; anything else yields nothing."""
        if not isinstance(value, (list, tuple)):
            return []
        return [item for item in value if isinstance(item, Mapping)]

    @staticmethod
    def _coerce_int(value: Any, default: int = 0) -> int:
        """
        Best-effort coercion to int.

        - None / "" / bool / junk -> default
        - int/float -> int
        - numeric strings -> int
        """
        if value is None or isinstance(value, bool):
            return default
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            return int(value)
        if isinstance(value, str):
            s = value.strip()
            if not s:
                return default
            try:
                return int(float(s))
            except ValueError:
                return default
        return default

    @staticmethod
    def _coerce_str(value: Any, default: str = "") -> str:
        if value is None or isinstance(value, bool):
            return default
        if isinstance(value, str):
            return value.strip()
        if isinstance(value, (int, float)):
            return str(value)
        return default

    @staticmethod
    def _optional_str(value: Any) -> Optional[str]:
        if isinstance(value, str) and value.strip():
            return value.strip()
        return None

    @classmethod
    def _coerce_str_list(cls, value: Any) -> List[str]:
        """Strings from a list payload, skipping blanks and non-strings, order kept."""
        if not isinstance(value, (list, tuple)):
            return []
        out: List[str] = []
        for item in value:
            s = cls._optional_str(item)
            if s is not None:
                out.append(s)
        return out

    @staticmethod
    def _dedupe(values: Iterable[str]) -> Tuple[str, ...]:
        seen = set()
        out = []
        for v in values:
            if v not in seen:
                seen.add(v)
                out.append(v)
        return tuple(out)

    @staticmethod
    def _parse_datetime(raw: Any) -> Optional[datetime]:
        """
        Parse an RFC 3339 timestamp into an aware UTC datetime.

        Returns None for missing or unparseable values.
        """
        if not isinstance(raw, str) or not raw.strip():
            return None
        value = raw.strip().replace("Z", "+00:00")
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            logging.getLogger(__name__).debug("Unparseable timestamp %r", raw)
            return None
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)
