"""Open-ended trade taxonomies.

Behavior patterns, psychology factors and asset classes ship with a
closed set of well-known codes but traders may tag trades with their own
codes.  Each value is represented as a :class:`Category`: a tagged value
that is either one of the well-known variants or an explicit custom
``(code, description)`` variant.

Values are resolved through a :class:`TaxonomyRegistry` that the caller
constructs and passes in; there is no module-level mutable state.  The
registry is seeded with the well-known variants at construction time and
offers lookup-or-create semantics for custom codes.

Serialization is explicit: :class:`CategoryCodec` encodes/decodes one
taxonomy's values to plain dicts / strings via a registry.

Usage::

    registry = TaxonomyRegistry()
    fomo = registry.resolve(Taxonomy.ENTRY_PSYCHOLOGY, "FEAR_OF_MISSING_OUT")
    fomo.matches(EntryPsychology.FEAR_OF_MISSING_OUT)  # True
    custom = registry.resolve(Taxonomy.BEHAVIOR_PATTERN, "NEWS_FADE", "Fading news spikes")
    custom.custom  # True
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping

from .errors import TaxonomyError

logger = logging.getLogger(__name__)

UNKNOWN_CODE = "UNKNOWN"


class Taxonomy(str, Enum):
    BEHAVIOR_PATTERN = "behavior_pattern"
    ENTRY_PSYCHOLOGY = "entry_psychology"
    EXIT_PSYCHOLOGY = "exit_psychology"
    ASSET_CLASS = "asset_class"


# ---------------------------------------------------------------------------
# Well-known variants
# ---------------------------------------------------------------------------

class TradeBehaviorPattern(str, Enum):
    OVERTRADING = "OVERTRADING"
    HESITATION = "HESITATION"
    AVERAGING_DOWN = "AVERAGING_DOWN"
    CUTTING_WINNERS_SHORT = "CUTTING_WINNERS_SHORT"
    HOLDING_LOSERS = "HOLDING_LOSERS"
    CHASING_MOMENTUM = "CHASING_MOMENTUM"
    POSITION_SIZING_ISSUES = "POSITION_SIZING_ISSUES"
    REVENGE_TRADING = "REVENGE_TRADING"
    DISCIPLINED_EXECUTION = "DISCIPLINED_EXECUTION"


class EntryPsychology(str, Enum):
    FEAR_OF_MISSING_OUT = "FEAR_OF_MISSING_OUT"
    OVERCONFIDENCE = "OVERCONFIDENCE"
    REVENGE_TRADING = "REVENGE_TRADING"
    ANALYSIS_PARALYSIS = "ANALYSIS_PARALYSIS"
    FOLLOWING_THE_PLAN = "FOLLOWING_THE_PLAN"
    INTUITION = "INTUITION"
    PEER_PRESSURE = "PEER_PRESSURE"
    DISCIPLINED = "DISCIPLINED"


class ExitPsychology(str, Enum):
    FEAR = "FEAR"
    GREED = "GREED"
    DISCIPLINE = "DISCIPLINE"
    PANIC = "PANIC"
    REGRET_AVOIDANCE = "REGRET_AVOIDANCE"
    SUNK_COST_FALLACY = "SUNK_COST_FALLACY"
    TAKING_PROFITS = "TAKING_PROFITS"
    CUTTING_LOSSES = "CUTTING_LOSSES"


class AssetClass(str, Enum):
    STOCK = "STOCK"
    ETF = "ETF"
    MUTUAL_FUND = "MUTUAL_FUND"
    BOND = "BOND"
    OPTION = "OPTION"
    FUTURES = "FUTURES"
    FOREX = "FOREX"
    CRYPTO = "CRYPTO"
    COMMODITY = "COMMODITY"
    REIT = "REIT"
    CASH = "CASH"
    OTHER = "OTHER"


_ENUM_TAXONOMY: dict[type[Enum], Taxonomy] = {
    TradeBehaviorPattern: Taxonomy.BEHAVIOR_PATTERN,
    EntryPsychology: Taxonomy.ENTRY_PSYCHOLOGY,
    ExitPsychology: Taxonomy.EXIT_PSYCHOLOGY,
    AssetClass: Taxonomy.ASSET_CLASS,
}

_DESCRIPTIONS: dict[Enum, str] = {
    TradeBehaviorPattern.OVERTRADING: "Trading too frequently",
    TradeBehaviorPattern.HESITATION: "Delayed decision making",
    TradeBehaviorPattern.AVERAGING_DOWN: "Adding to losing positions",
    TradeBehaviorPattern.CUTTING_WINNERS_SHORT: "Exiting profitable trades too early",
    TradeBehaviorPattern.HOLDING_LOSERS: "Keeping losing positions too long",
    TradeBehaviorPattern.CHASING_MOMENTUM: "Entering after significant price movement",
    TradeBehaviorPattern.POSITION_SIZING_ISSUES: "Inconsistent or improper position sizing",
    TradeBehaviorPattern.REVENGE_TRADING: "Trading to recover losses",
    TradeBehaviorPattern.DISCIPLINED_EXECUTION: "Following trading plan consistently",
    EntryPsychology.FEAR_OF_MISSING_OUT: "Fear of missing out on potential gains",
    EntryPsychology.OVERCONFIDENCE: "Excessive confidence in analysis or prediction",
    EntryPsychology.REVENGE_TRADING: "Entering a trade to recover previous losses",
    EntryPsychology.ANALYSIS_PARALYSIS: "Overthinking leading to delayed entry",
    EntryPsychology.FOLLOWING_THE_PLAN: "Disciplined entry according to trading plan",
    EntryPsychology.INTUITION: "Gut feeling or market intuition",
    EntryPsychology.PEER_PRESSURE: "Influenced by others' opinions or actions",
    EntryPsychology.DISCIPLINED: "Disciplined entry according to trading plan",
    ExitPsychology.FEAR: "Exiting due to fear of losing gains",
    ExitPsychology.GREED: "Holding too long hoping for more gains",
    ExitPsychology.DISCIPLINE: "Exiting according to predefined plan",
    ExitPsychology.PANIC: "Exiting hastily due to market volatility",
    ExitPsychology.REGRET_AVOIDANCE: "Exiting to avoid feeling regret later",
    ExitPsychology.SUNK_COST_FALLACY: "Holding losing position too long",
    ExitPsychology.TAKING_PROFITS: "Disciplined profit-taking at target",
    ExitPsychology.CUTTING_LOSSES: "Disciplined exit at stop-loss",
    AssetClass.STOCK: "Individual Stock",
    AssetClass.ETF: "Exchange Traded Fund",
    AssetClass.MUTUAL_FUND: "Mutual Fund",
    AssetClass.BOND: "Bond",
    AssetClass.OPTION: "Option Contract",
    AssetClass.FUTURES: "Futures Contract",
    AssetClass.FOREX: "Foreign Exchange",
    AssetClass.CRYPTO: "Cryptocurrency",
    AssetClass.COMMODITY: "Physical Commodity",
    AssetClass.REIT: "Real Estate Investment Trust",
    AssetClass.CASH: "Cash or Cash Equivalent",
    AssetClass.OTHER: "Other Asset Type",
}


# ---------------------------------------------------------------------------
# Tagged value
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Category:
    """One taxonomy value: well-known, custom, or the unknown bucket.

    Equality and hashing use ``(taxonomy, code)`` only.
    """

    taxonomy: Taxonomy
    code: str
    description: str = field(default="", compare=False)
    custom: bool = field(default=False, compare=False)

    @classmethod
    def known(cls, member: Enum) -> Category:
        """Category for a well-known enum member."""
        taxonomy = _ENUM_TAXONOMY[type(member)]
        return cls(taxonomy, member.value, _DESCRIPTIONS.get(member, member.value))

    @classmethod
    def unknown(cls, taxonomy: Taxonomy) -> Category:
        """The recoverable bucket for unclassifiable codes."""
        return cls(taxonomy, UNKNOWN_CODE, "Unclassified")

    @property
    def is_unknown(self) -> bool:
        return self.code == UNKNOWN_CODE

    def matches(self, member: Enum) -> bool:
        """True if this category is the given well-known variant."""
        return (
            _ENUM_TAXONOMY.get(type(member)) == self.taxonomy
            and self.code == member.value
        )

    def __str__(self) -> str:
        return self.code


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

class TaxonomyRegistry:
    """Lookup-or-create registry for taxonomy values.

    Parameters
    ----------
    allow_custom : bool
        When False, unrecognised codes resolve to the ``UNKNOWN`` bucket
        instead of being registered as custom values.  Default True.
    """

    def __init__(self, *, allow_custom: bool = True) -> None:
        self._allow_custom = allow_custom
        self._values: dict[Taxonomy, dict[str, Category]] = {
            taxonomy: {} for taxonomy in Taxonomy
        }
        # Seed well-known values in enum declaration order
        for enum_cls, taxonomy in _ENUM_TAXONOMY.items():
            for member in enum_cls:
                self._values[taxonomy][member.value] = Category.known(member)

    @property
    def allow_custom(self) -> bool:
        return self._allow_custom

    def lookup(self, taxonomy: Taxonomy, code: str) -> Category | None:
        """Return the registered category for *code*, or None."""
        normalized = code.strip().upper()
        if normalized == UNKNOWN_CODE:
            return Category.unknown(taxonomy)
        return self._values[taxonomy].get(normalized)

    def resolve(
        self,
        taxonomy: Taxonomy,
        code: str | None,
        description: str | None = None,
    ) -> Category:
        """Lookup-or-create.  Never raises for bad codes.

        Blank codes, and unrecognised codes when custom values are
        disabled, land in the ``UNKNOWN`` bucket.
        """
        if code is None or not code.strip():
            return Category.unknown(taxonomy)
        existing = self.lookup(taxonomy, code)
        if existing is not None:
            return existing
        if not self._allow_custom:
            logger.warning(
                "Unrecognised %s code %r mapped to %s",
                taxonomy.value, code, UNKNOWN_CODE,
            )
            return Category.unknown(taxonomy)
        return self.register_custom(taxonomy, code, description)

    def register_custom(
        self,
        taxonomy: Taxonomy,
        code: str,
        description: str | None = None,
    ) -> Category:
        """Register a custom value; returns the existing one if present.

        Codes are stored upper-cased, like the well-known variants, so
        ``news_fade`` and ``NEWS_FADE`` name the same value.

        Raises
        ------
        TaxonomyError
            If *code* is blank or collides with a well-known variant.
        """
        spelled = code.strip()
        if not spelled:
            raise TaxonomyError(f"{taxonomy.value} code cannot be empty")
        normalized = spelled.upper()
        existing = self._values[taxonomy].get(normalized)
        if existing is not None:
            if not existing.custom:
                raise TaxonomyError(
                    f"Cannot register custom {taxonomy.value} with predefined code {normalized!r}"
                )
            return existing
        category = Category(
            taxonomy, normalized, description or spelled, custom=True
        )
        self._values[taxonomy][normalized] = category
        logger.debug("Registered custom %s %r", taxonomy.value, normalized)
        return category

    def values(self, taxonomy: Taxonomy) -> list[Category]:
        """All registered values, well-known first, in registration order."""
        return list(self._values[taxonomy].values())


# ---------------------------------------------------------------------------
# Codec
# ---------------------------------------------------------------------------

class CategoryCodec:
    """Explicit encoder/decoder for one taxonomy.

    Accepts either a bare code string or a mapping with ``code`` and
    optional ``description`` keys on decode; always encodes to a mapping.
    """

    def __init__(self, taxonomy: Taxonomy, registry: TaxonomyRegistry) -> None:
        self._taxonomy = taxonomy
        self._registry = registry

    @property
    def taxonomy(self) -> Taxonomy:
        return self._taxonomy

    def encode(self, category: Category) -> dict[str, Any]:
        if category.taxonomy != self._taxonomy:
            raise TaxonomyError(
                f"Cannot encode {category.taxonomy.value} value with {self._taxonomy.value} codec"
            )
        return {
            "code": category.code,
            "description": category.description,
            "custom": category.custom,
        }

    def decode(self, raw: str | Mapping[str, Any] | None) -> Category:
        if raw is None:
            return Category.unknown(self._taxonomy)
        if isinstance(raw, Mapping):
            return self._registry.resolve(
                self._taxonomy, raw.get("code"), raw.get("description")
            )
        return self._registry.resolve(self._taxonomy, str(raw))

    def decode_many(
        self, raws: Iterable[str | Mapping[str, Any] | None] | None
    ) -> tuple[Category, ...]:
        if not raws:
            return ()
        return tuple(self.decode(r) for r in raws)


def codec_for(taxonomy: Taxonomy, registry: TaxonomyRegistry) -> CategoryCodec:
    """Build the codec for *taxonomy* bound to *registry*."""
    return CategoryCodec(taxonomy, registry)
