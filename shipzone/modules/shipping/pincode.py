"""
Pincode matching

Decides whether a destination postal code falls inside a shipping zone.

Rules:
- An exact hit in the zone's excluded pincodes never matches.
- Otherwise the code matches if it is listed explicitly, fully matches any
  pattern, or lies inside any inclusive numeric range.
- Bad zone configuration (a pattern that does not compile, a range that does
  not parse) disables only the offending entry.

Matching never raises, whatever string it is given.
"""
import logging
import re
from dataclasses import dataclass
from typing import FrozenSet, List, Optional, Pattern, Tuple

from shipzone.core.exceptions import InvalidPincodeFormat
from shipzone.modules.shipping.entities import ShippingZone

logger = logging.getLogger(__name__)

_RANGE_RE = re.compile(r"^\s*(\d+)\s*-\s*(\d+)\s*$", re.ASCII)
_NUMERIC_RE = re.compile(r"^\d+$", re.ASCII)


def parse_range(value: str) -> Optional[Tuple[int, int]]:
    """
    Parse a "<low>-<high>" range string.

    Returns None for anything malformed, including low > high.
    """
    if not isinstance(value, str):
        return None
    match = _RANGE_RE.match(value)
    if not match:
        return None
    low, high = int(match.group(1)), int(match.group(2))
    if low > high:
        return None
    return low, high


def normalize_pincode(pincode, pincode_format: str) -> str:
    """Strip surrounding whitespace and validate against the configured format."""
    if not isinstance(pincode, str):
        raise InvalidPincodeFormat(pincode)
    cleaned = pincode.strip()
    if not cleaned or not re.fullmatch(pincode_format, cleaned):
        raise InvalidPincodeFormat(pincode)
    return cleaned


@dataclass(frozen=True)
class CompiledZone:
    """A zone with its patterns compiled and ranges parsed, built once per resolution batch."""
    zone: ShippingZone
    patterns: Tuple[Pattern, ...]
    ranges: Tuple[Tuple[int, int], ...]
    included: FrozenSet[str]
    excluded: FrozenSet[str]

    @property
    def is_reachable(self) -> bool:
        return bool(self.patterns or self.ranges or self.included)

    def matches(self, pincode: str) -> bool:
        if not isinstance(pincode, str):
            return False
        if pincode in self.excluded:
            return False
        if pincode in self.included:
            return True
        for pattern in self.patterns:
            if pattern.fullmatch(pincode):
                return True
        if self.ranges and _NUMERIC_RE.match(pincode):
            code = int(pincode)
            for low, high in self.ranges:
                if low <= code <= high:
                    return True
        return False


class PincodeMatcher:
    """Pure pincode/zone predicate."""

    @staticmethod
    def compile(zone: ShippingZone) -> CompiledZone:
        patterns: List[Pattern] = []
        for raw in zone.pincode_patterns or ():
            try:
                patterns.append(re.compile(raw))
            except (re.error, TypeError) as e:
                logger.warning(f"Zone {zone.id}: ignoring invalid pincode pattern {raw!r}: {e}")

        ranges: List[Tuple[int, int]] = []
        for raw in zone.pincode_ranges or ():
            parsed = parse_range(raw)
            if parsed is None:
                logger.warning(f"Zone {zone.id}: ignoring malformed pincode range {raw!r}")
                continue
            ranges.append(parsed)

        return CompiledZone(
            zone=zone,
            patterns=tuple(patterns),
            ranges=tuple(ranges),
            included=frozenset(zone.included_pincodes or ()),
            excluded=frozenset(zone.excluded_pincodes or ()),
        )

    @classmethod
    def matches(cls, pincode: str, zone: ShippingZone) -> bool:
        """Single-shot check. Batch callers should compile() once and reuse."""
        return cls.compile(zone).matches(pincode)
