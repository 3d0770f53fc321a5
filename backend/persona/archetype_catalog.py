"""
Archetype Catalog

The travel-persona catalog as an explicit, loadable configuration structure:

- TraitScore: the five personality dimensions supplied by the caller
- ArchetypeDefinition: required trait levels, description, recommendations
  and a tagged table of behavioral bonus rules
- ArchetypeCatalog: ordered, immutable collection; declaration order is the
  tie-break order used by the classifier

The packaged default lives in data/archetype_catalog.json and can be replaced
through PERSONA_ARCHETYPE_CATALOG_PATH.
"""

import json
import logging
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from backend.core.config import get_settings
from backend.core.exceptions import CatalogConfigurationError
from backend.persona.models import BehavioralProfile

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).parent / "data" / "archetype_catalog.json"

TRAIT_HIGH_THRESHOLD = 70.0       # score > 70 -> high
TRAIT_MODERATE_THRESHOLD = 40.0   # score > 40 -> moderate

DEFAULT_BONUS_POINTS = 20


class Trait(str, Enum):
    """The five personality dimensions"""
    OPENNESS = "openness"
    CONSCIENTIOUSNESS = "conscientiousness"
    EXTRAVERSION = "extraversion"
    AGREEABLENESS = "agreeableness"
    NEUROTICISM = "neuroticism"


class TraitLevel(str, Enum):
    """Categorical bucket of a 0-100 trait score"""
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _LEVEL_RANKS[self]


_LEVEL_RANKS = {TraitLevel.LOW: 0, TraitLevel.MODERATE: 1, TraitLevel.HIGH: 2}


def trait_level(score: float) -> TraitLevel:
    if score > TRAIT_HIGH_THRESHOLD:
        return TraitLevel.HIGH
    if score > TRAIT_MODERATE_THRESHOLD:
        return TraitLevel.MODERATE
    return TraitLevel.LOW


class TraitScore(BaseModel):
    """Five-dimension personality scores, each 0-100"""
    model_config = ConfigDict(frozen=True)

    openness: float = Field(ge=0, le=100)
    conscientiousness: float = Field(ge=0, le=100)
    extraversion: float = Field(ge=0, le=100)
    agreeableness: float = Field(ge=0, le=100)
    neuroticism: float = Field(ge=0, le=100)

    @classmethod
    def neutral(cls, score: float = 50.0) -> "TraitScore":
        return cls(**{trait.value: score for trait in Trait})

    def levels(self) -> Dict[Trait, TraitLevel]:
        return {trait: trait_level(getattr(self, trait.value)) for trait in Trait}


# ==================== Behavioral Signals ====================

class BehavioralSignal(str, Enum):
    """Categorical outputs of the extractors that bonus rules can test"""
    IMPULSIVITY_CATEGORY = "impulsivity_category"
    PRICE_QUALITY_PREFERENCE = "price_quality_preference"
    UNIQUENESS_CATEGORY = "uniqueness_category"
    RISK_TOLERANCE_CATEGORY = "risk_tolerance_category"
    PLANNING_STYLE = "planning_style"
    SCROLL_BEHAVIOR = "scroll_behavior"
    PRICE_SENSITIVITY = "price_sensitivity"
    VISUAL_ENGAGEMENT = "visual_engagement_level"


SIGNAL_READERS: Dict[BehavioralSignal, Callable[[BehavioralProfile], Optional[str]]] = {
    BehavioralSignal.IMPULSIVITY_CATEGORY: lambda p: p.decision_patterns.impulsivity.category,
    BehavioralSignal.PRICE_QUALITY_PREFERENCE: lambda p: p.decision_patterns.price_vs_quality.preference,
    BehavioralSignal.UNIQUENESS_CATEGORY: lambda p: p.decision_patterns.uniqueness.category,
    BehavioralSignal.RISK_TOLERANCE_CATEGORY: lambda p: p.decision_patterns.risk_tolerance.category,
    BehavioralSignal.PLANNING_STYLE: lambda p: p.time_patterns.planning_horizon.planning_style,
    BehavioralSignal.SCROLL_BEHAVIOR: lambda p: p.micro_interactions.scroll.scroll_behavior,
    BehavioralSignal.PRICE_SENSITIVITY: lambda p: p.micro_interactions.price_sensitivity.price_sensitivity,
    BehavioralSignal.VISUAL_ENGAGEMENT: lambda p: p.micro_interactions.image_engagement.visual_engagement_level,
}


def read_signal(profile: BehavioralProfile, signal: BehavioralSignal) -> Optional[str]:
    return SIGNAL_READERS[signal](profile)


class BehavioralBonusRule(BaseModel):
    """Award `points` when a behavioral signal equals a given category"""
    model_config = ConfigDict(frozen=True)

    signal: BehavioralSignal
    equals: str
    points: int = Field(default=DEFAULT_BONUS_POINTS, ge=0)
    factor: str

    def applies(self, profile: BehavioralProfile) -> bool:
        return read_signal(profile, self.signal) == self.equals


# ==================== Archetypes ====================

class ArchetypeDefinition(BaseModel):
    """One travel persona"""
    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    required_traits: Dict[Trait, TraitLevel]
    description: str
    recommended_properties: List[str] = Field(default_factory=list)
    behavioral_bonuses: List[BehavioralBonusRule] = Field(default_factory=list)

    @field_validator("required_traits")
    @classmethod
    def _one_to_three_traits(cls, value: Dict[Trait, TraitLevel]) -> Dict[Trait, TraitLevel]:
        if not 1 <= len(value) <= 3:
            raise ValueError("an archetype must require between 1 and 3 trait levels")
        return value


class ArchetypeCatalog:
    """
    Ordered, read-only set of archetypes.

    Iteration follows declaration order; names are unique.
    """

    def __init__(self, archetypes: Sequence[ArchetypeDefinition]):
        archetypes = tuple(archetypes)
        if not archetypes:
            raise CatalogConfigurationError("Archetype catalog is empty")

        names = [archetype.name for archetype in archetypes]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise CatalogConfigurationError(
                "Duplicate archetype names in catalog",
                details={"duplicates": duplicates},
            )

        self._archetypes: Tuple[ArchetypeDefinition, ...] = archetypes
        self._by_name = {archetype.name: archetype for archetype in archetypes}

    @classmethod
    def from_records(cls, records: Sequence[Mapping[str, Any]]) -> "ArchetypeCatalog":
        """Validate plain records (e.g. parsed JSON) into a catalog."""
        try:
            return cls([ArchetypeDefinition.model_validate(record) for record in records])
        except ValidationError as e:
            raise CatalogConfigurationError(
                "Invalid archetype definition",
                details={"errors": e.errors(include_url=False)},
            ) from e

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "ArchetypeCatalog":
        """
        Load a catalog file.

        The file holds either a list of archetype records or an object with
        an "archetypes" list.
        """
        path = Path(path)
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise CatalogConfigurationError(
                f"Cannot read archetype catalog: {path}",
                details={"path": str(path), "error": str(e)},
            ) from e

        records = payload.get("archetypes") if isinstance(payload, dict) else payload
        if not isinstance(records, list):
            raise CatalogConfigurationError(
                f"Archetype catalog must contain a list of archetypes: {path}",
                details={"path": str(path)},
            )

        catalog = cls.from_records(records)
        logger.info(f"Loaded {len(catalog)} archetypes from {path}")
        return catalog

    def __iter__(self) -> Iterator[ArchetypeDefinition]:
        return iter(self._archetypes)

    def __len__(self) -> int:
        return len(self._archetypes)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def get(self, name: str) -> Optional[ArchetypeDefinition]:
        return self._by_name.get(name)

    @property
    def names(self) -> List[str]:
        return [archetype.name for archetype in self._archetypes]


@lru_cache(maxsize=None)
def _load_cached(path: str) -> ArchetypeCatalog:
    return ArchetypeCatalog.from_json(path)


def get_default_catalog() -> ArchetypeCatalog:
    """
    The process-wide catalog: PERSONA_ARCHETYPE_CATALOG_PATH if set,
    otherwise the packaged default. Loaded once per path.
    """
    path = get_settings().archetype_catalog_path or str(DEFAULT_CATALOG_PATH)
    return _load_cached(path)
