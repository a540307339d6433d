"""
Proposal identifiers.

WHAT: Generates the public base id of a proposal and its yearly sequential
number (NNNN/YYYY).

Two base id schemes coexist:
- Generic ids, PROP-<base36 timestamp>-<random>, used when the caller sends none
- Typed ids, Prop_<Type>_<NNN>_v<version> (e.g. Prop_Inter_Double_001_v1),
  numbered per calculator and bumped when a proposal gets a new version
"""

import re
import secrets
import string
import time
from typing import Iterable, Optional

from pricing_api.core.exceptions import ValidationError
from pricing_api.models.proposal import ProposalType

_BASE36 = string.digits + string.ascii_uppercase

TYPED_ID_PREFIXES = {
    ProposalType.PABX: "Prop_Pabx_Sip",
    ProposalType.VM: "Prop_MV",
    ProposalType.FIBER: "Prop_Inter_Fibra",
    ProposalType.RADIO: "Prop_Inter_Radio",
    ProposalType.DOUBLE: "Prop_Inter_Double",
    ProposalType.MAN: "Prop_Inter_Man",
}

_TYPED_ID = re.compile(r"^Prop_(.+?)_(\d+)_v(\d+)$")
_VERSION_SUFFIX = re.compile(r"_v\d+$")


def to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))


def random_token(length: int) -> str:
    return "".join(secrets.choice(_BASE36) for _ in range(length))


def generate_base_id(timestamp_ms: Optional[int] = None) -> str:
    """
    Example:
        >>> generate_base_id(0).startswith("PROP-0-")
        True
    """
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"PROP-{to_base36(timestamp_ms)}-{random_token(6)}"


def deduplicate_base_id(base_id: str, timestamp_ms: Optional[int] = None) -> str:
    """Suffix a base id that already exists."""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"{base_id}_{timestamp_ms}{random_token(4)}"


def format_proposal_number(existing_this_year: int, year: int) -> str:
    """
    Example:
        >>> format_proposal_number(41, 2024)
        '0042/2024'
    """
    return f"{existing_this_year + 1:04d}/{year}"


def typed_id_prefix(proposal_type: ProposalType) -> str:
    """
    Raises:
        ValidationError: For types without a typed id scheme (GENERAL)
    """
    prefix = TYPED_ID_PREFIXES.get(proposal_type)
    if prefix is None:
        raise ValidationError(
            message=f"Proposal type {proposal_type.value} has no typed identifier",
            proposal_type=proposal_type.value,
        )
    return prefix


def format_typed_id(proposal_type: ProposalType, number: int, version: int = 1) -> str:
    """
    Example:
        >>> format_typed_id(ProposalType.PABX, 1)
        'Prop_Pabx_Sip_001_v1'
    """
    return f"{typed_id_prefix(proposal_type)}_{number:03d}_v{version}"


def parse_typed_id(base_id: str) -> Optional[tuple[str, int, int]]:
    """
    Split a typed id into (type part, number, version); None for other ids.

    Example:
        >>> parse_typed_id("Prop_Inter_Double_012_v3")
        ('Inter_Double', 12, 3)
    """
    match = _TYPED_ID.match(base_id)
    if not match:
        return None
    return match.group(1), int(match.group(2)), int(match.group(3))


def next_typed_number(existing_ids: Iterable[str], proposal_type: ProposalType) -> int:
    """Highest number already used by the type's ids, plus one."""
    prefix = typed_id_prefix(proposal_type) + "_"
    numbers = [
        parsed[1]
        for parsed in (parse_typed_id(base_id) for base_id in existing_ids if base_id.startswith(prefix))
        if parsed is not None
    ]
    return max(numbers, default=0) + 1


def next_typed_id(existing_ids: Iterable[str], proposal_type: ProposalType, version: int = 1) -> str:
    return format_typed_id(proposal_type, next_typed_number(existing_ids, proposal_type), version)


def new_version_id(current_id: str, existing_ids: Iterable[str]) -> str:
    """
    Id of the next version of a typed proposal.

    The version is one past the highest version stored for the same
    type and number, so branching from an old version never collides.

    Raises:
        ValidationError: If current_id is not a typed id
    """
    parsed = parse_typed_id(current_id)
    if parsed is None:
        raise ValidationError(message="Invalid proposal identifier", base_id=current_id)

    stem = _VERSION_SUFFIX.sub("", current_id)
    versions = [
        found[2]
        for base_id, found in ((base_id, parse_typed_id(base_id)) for base_id in existing_ids)
        if found is not None and _VERSION_SUFFIX.sub("", base_id) == stem
    ]
    return f"{stem}_v{max(versions, default=parsed[2]) + 1}"
