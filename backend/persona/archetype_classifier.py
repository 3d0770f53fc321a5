"""
Travel Archetype Classifier

Scores every archetype in the catalog against a user's personality trait
levels and (optionally) their behavioral profile.

Scoring per archetype:
1. Exact trait-level match: +25, factor "<trait> (<level>)"
2. Adjacent match where one side is moderate: +15, factor "<trait> (partial match)"
3. low vs high: nothing
4. Each behavioral bonus rule that fires: +rule.points, factor rule.factor

Scores are plain sums. Catalog files may award more than 100 points, and the
highest total still ranks first.

Ranking is a stable sort on (score desc, catalog index asc). The primary
archetype is the first ranked entry, so when nothing matches at all the
first declared archetype wins.
"""

import logging
from typing import List, Optional, Tuple

from backend.persona.archetype_catalog import (
    ArchetypeCatalog,
    ArchetypeDefinition,
    TraitLevel,
    TraitScore,
    get_default_catalog,
)
from backend.persona.models import ArchetypeMatch, BehavioralProfile, ClassificationResult

logger = logging.getLogger(__name__)


EXACT_MATCH_POINTS = 25
PARTIAL_MATCH_POINTS = 15
TOP_ARCHETYPE_COUNT = 3


def trait_match_points(actual: TraitLevel, required: TraitLevel) -> int:
    """Points for one trait: exact, adjacent through moderate, or none."""
    if actual == required:
        return EXACT_MATCH_POINTS
    if abs(actual.rank - required.rank) == 1:
        return PARTIAL_MATCH_POINTS
    return 0


def score_archetype(
    archetype: ArchetypeDefinition,
    trait_scores: TraitScore,
    behavioral_profile: Optional[BehavioralProfile] = None,
) -> ArchetypeMatch:
    """Score a single archetype and record the factors that contributed."""
    levels = trait_scores.levels()
    score = 0
    factors: List[str] = []

    for trait, required in archetype.required_traits.items():
        points = trait_match_points(levels[trait], required)
        if points == EXACT_MATCH_POINTS:
            factors.append(f"{trait.value} ({required.value})")
        elif points:
            factors.append(f"{trait.value} (partial match)")
        score += points

    if behavioral_profile is not None:
        for rule in archetype.behavioral_bonuses:
            if rule.applies(behavioral_profile):
                score += rule.points
                factors.append(rule.factor)

    return ArchetypeMatch(
        archetype=archetype.name,
        score=score,
        description=archetype.description,
        factors=factors,
        recommended_properties=list(archetype.recommended_properties),
    )


def rank_archetypes(
    trait_scores: TraitScore,
    behavioral_profile: Optional[BehavioralProfile] = None,
    catalog: Optional[ArchetypeCatalog] = None,
) -> List[ArchetypeMatch]:
    """All archetypes, best first; ties keep catalog order."""
    catalog = catalog or get_default_catalog()

    scored: List[Tuple[int, ArchetypeMatch]] = [
        (index, score_archetype(archetype, trait_scores, behavioral_profile))
        for index, archetype in enumerate(catalog)
    ]
    scored.sort(key=lambda item: (-item[1].score, item[0]))

    return [match for _, match in scored]


def classify_archetype(
    trait_scores: TraitScore,
    behavioral_profile: Optional[BehavioralProfile] = None,
    catalog: Optional[ArchetypeCatalog] = None,
) -> ClassificationResult:
    """
    Classify a user into a travel archetype.

    Args:
        trait_scores: Five-dimension personality scores (0-100)
        behavioral_profile: Extracted behavior; bonuses apply only when given
        catalog: Archetype catalog; defaults to the configured catalog

    Returns:
        ClassificationResult with the primary archetype and the top 3 matches
    """
    ranked = rank_archetypes(trait_scores, behavioral_profile, catalog)
    primary = ranked[0]

    if primary.score == 0:
        logger.debug("No archetype matched any trait; using first declared archetype")

    return ClassificationResult(
        primary_archetype=primary.archetype,
        match_score=primary.score,
        primary_description=primary.description,
        recommended_properties=list(primary.recommended_properties),
        top_archetypes=ranked[:TOP_ARCHETYPE_COUNT],
        trait_levels={trait.value: level.value for trait, level in trait_scores.levels().items()},
    )
