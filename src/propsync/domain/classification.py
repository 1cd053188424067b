"""Business rules deciding which transactions describe a flipping entity.

The rules are an explicit, versioned value. Older revisions stay registered as
deprecated rulesets instead of separate code paths.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from propsync.domain.ingest_pipeline.outcomes import SkipReason
from propsync.domain.model import CounterpartyRole, PropertyStatus

if TYPE_CHECKING:
    from collections.abc import Mapping

    from propsync.domain.model import TransactionRecord

log = logging.getLogger(__name__)

TRUST_OWNERSHIP_CODES: Final[frozenset[str]] = frozenset({"TR", "FL"})

_TRUST_PATTERNS: Final[tuple[re.Pattern[str], ...]] = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"\bTRUST\b",
        r"\bLIVING TRUST\b",
        r"\bFAMILY TRUST\b",
        r"\bREVOCABLE TRUST\b",
        r"\bIRREVOCABLE TRUST\b",
        r"\bSPOUSAL TRUST\b",
    )
)

_CORPORATE_PATTERNS: Final[tuple[re.Pattern[str], ...]] = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"\bLLC\b",
        r"\bINC\b",
        r"\bCORP\b",
        r"\bLTD\b",
        r"\bLP\b",
        r"\bPROPERTIES\b",
        r"\bINVESTMENTS?\b",
        r"\bCAPITAL\b",
        r"\bVENTURES?\b",
        r"\bHOLDINGS?\b",
        r"\bREALTY\b",
    )
)

# brands that trade without a corporate suffix in recorded names
NAMED_CORPORATE_BRANDS: Final[tuple[str, ...]] = ("opendoor",)

NEW_CONSTRUCTION_TRANSACTION_TYPE: Final[str] = "new construction"


def is_trust(name: str | None, ownership_code: str | None = None) -> bool:
    if not name or not name.strip():
        return False
    if ownership_code and ownership_code.strip().upper() in TRUST_OWNERSHIP_CODES:
        return True
    return any(pattern.search(name) for pattern in _TRUST_PATTERNS)


def is_named_brand(name: str | None) -> bool:
    if not name:
        return False
    lowered = name.lower()
    return any(brand in lowered for brand in NAMED_CORPORATE_BRANDS)


def is_corporate_entity(name: str | None, ownership_code: str | None = None) -> bool:
    """Corporate test; a trust is never corporate, whatever tokens its name carries."""
    if not name or not name.strip():
        return False
    if is_trust(name, ownership_code):
        return False
    if is_named_brand(name):
        return True
    return any(pattern.search(name) for pattern in _CORPORATE_PATTERNS)


def is_new_construction(record: TransactionRecord) -> bool:
    if record.new_construction:
        return True
    transaction_type = (record.transaction_type or "").strip().lower()
    return transaction_type == NEW_CONSTRUCTION_TRANSACTION_TYPE


@dataclass(frozen=True, slots=True)
class Classification:
    """Result of running the rules over one record.

    ``party_name`` is the entity the property is credited to; ``seller_name``
    is set when the seller side passed as well.
    """

    skip_reason: SkipReason | None = None
    party_name: str | None = None
    seller_name: str | None = None
    status: PropertyStatus | None = None

    @property
    def accepted(self) -> bool:
        return self.skip_reason is None


@dataclass(frozen=True, slots=True)
class PartyRule:
    """One side of a transaction that can carry the flipping entity.

    ``role`` names the side whose corporate flag gates the import;
    ``party_field``/``ownership_code_field`` name the record attributes holding
    the flipping entity and its ownership code.
    """

    role: CounterpartyRole
    party_field: str
    ownership_code_field: str | None
    status: PropertyStatus

    def counterparty_flagged(self, record: TransactionRecord) -> bool:
        if self.role is CounterpartyRole.BUYER:
            return record.buyer_corporate
        return record.seller_corporate

    def party_name(self, record: TransactionRecord) -> str | None:
        value = getattr(record, self.party_field)
        if not isinstance(value, str) or not value.strip():
            return None
        return value.strip()

    def ownership_code(self, record: TransactionRecord) -> str | None:
        if self.ownership_code_field is None:
            return None
        value = getattr(record, self.ownership_code_field)
        return value if isinstance(value, str) else None

    def check(self, record: TransactionRecord) -> Classification:
        if not self.counterparty_flagged(record):
            return Classification(skip_reason=SkipReason.NOT_FLAGGED)
        name = self.party_name(record)
        if name is None:
            return Classification(skip_reason=SkipReason.MISSING_PARTY)
        ownership_code = self.ownership_code(record)
        # trust precedes the corporate test: "Smith Family Trust LLC" is a trust
        if is_trust(name, ownership_code):
            return Classification(skip_reason=SkipReason.TRUST, party_name=name)
        if not is_corporate_entity(name, ownership_code):
            return Classification(skip_reason=SkipReason.NOT_CORPORATE, party_name=name)
        return Classification(party_name=name, status=self.status)


BUYER_ACQUISITION = PartyRule(
    role=CounterpartyRole.BUYER,
    party_field="buyer_name",
    ownership_code_field="buyer_ownership_code",
    status=PropertyStatus.IN_RENOVATION,
)

SELLER_EXIT = PartyRule(
    role=CounterpartyRole.SELLER,
    party_field="seller_name",
    ownership_code_field="seller_ownership_code",
    status=PropertyStatus.SOLD,
)


@dataclass(frozen=True, slots=True)
class ClassificationRules:
    """One revision of the import rules: the sides checked, in order of precedence."""

    version: str
    description: str
    sides: tuple[PartyRule, ...]
    deprecated: bool = False

    def __post_init__(self) -> None:
        if not self.sides:
            raise ValueError(f"Ruleset {self.version} checks no side of the transaction")


FLIP_RULES = ClassificationRules(
    version="2026.2",
    description="corporate buyer acquisitions and corporate seller exits",
    sides=(BUYER_ACQUISITION, SELLER_EXIT),
)

ACQUISITION_RULES = ClassificationRules(
    version="2026.1",
    description="corporate buyer acquisitions only; property enters renovation",
    sides=(BUYER_ACQUISITION,),
)

FLIP_EXIT_RULES = ClassificationRules(
    version="2025.2",
    description="corporate seller exits attributed to the previous buyer; property sold",
    sides=(
        PartyRule(
            role=CounterpartyRole.SELLER,
            party_field="prev_buyer_name",
            ownership_code_field="seller_ownership_code",
            status=PropertyStatus.SOLD,
        ),
    ),
    deprecated=True,
)

RULESETS: Final[Mapping[str, ClassificationRules]] = {
    rules.version: rules for rules in (FLIP_RULES, ACQUISITION_RULES, FLIP_EXIT_RULES)
}
DEFAULT_RULESET: Final[str] = FLIP_RULES.version


def get_ruleset(version: str | None = None) -> ClassificationRules:
    """Look up a registered ruleset, warning when a deprecated revision is selected."""
    key = version or DEFAULT_RULESET
    try:
        rules = RULESETS[key]
    except KeyError:
        known = ", ".join(sorted(RULESETS))
        raise ValueError(f"Unknown classification ruleset {key!r} (known: {known})") from None
    if rules.deprecated:
        log.warning(
            "Classification ruleset %s is deprecated; %s is the current revision",
            rules.version,
            DEFAULT_RULESET,
        )
    return rules


class TransactionClassifier:
    """Apply one ruleset's ordered, short-circuiting rules to each side.

    The first side that passes decides the credited entity and the status. A
    record no side accepts is rejected with the first side's reason.
    """

    def __init__(self, rules: ClassificationRules | None = None) -> None:
        self.rules = rules or RULESETS[DEFAULT_RULESET]

    def classify(self, record: TransactionRecord) -> Classification:
        if is_new_construction(record):
            return Classification(skip_reason=SkipReason.NEW_CONSTRUCTION)

        results = [(side, side.check(record)) for side in self.rules.sides]
        passed = [(side, result) for side, result in results if result.accepted]
        if not passed:
            return results[0][1]

        _, primary = passed[0]
        seller_name = next(
            (result.party_name for side, result in passed if side.role is CounterpartyRole.SELLER),
            None,
        )
        return Classification(
            party_name=primary.party_name,
            seller_name=seller_name,
            status=primary.status,
        )


def should_import_transaction(
    record: TransactionRecord,
    rules: ClassificationRules | None = None,
) -> bool:
    return TransactionClassifier(rules).classify(record).accepted


__all__ = [
    "ACQUISITION_RULES",
    "BUYER_ACQUISITION",
    "DEFAULT_RULESET",
    "FLIP_EXIT_RULES",
    "FLIP_RULES",
    "RULESETS",
    "SELLER_EXIT",
    "Classification",
    "ClassificationRules",
    "PartyRule",
    "TransactionClassifier",
    "get_ruleset",
    "is_corporate_entity",
    "is_named_brand",
    "is_new_construction",
    "is_trust",
    "should_import_transaction",
]
