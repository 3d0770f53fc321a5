"""
Travel Persona Engine

Behavioral profiling and travel-archetype classification for a
travel-booking platform.

Main components:
- Extractors: time patterns, micro-interactions, decision patterns
- Archetype catalog: loadable catalog of travel personas and bonus rules
- Archetype classifier: trait-level matching plus behavioral bonuses
- ProfileOrchestrator: async end-to-end run over pluggable collaborators

Usage:
    from backend.persona import EventLog, TraitScore, ProfileOrchestrator
    from backend.persona import classify_archetype

    orchestrator = ProfileOrchestrator(log_source, trait_provider, repository)

    # Build a profile from a raw event log
    profile = await orchestrator.build_behavioral_profile(EventLog.from_dict(payload))

    # Classify with externally supplied trait scores
    result = classify_archetype(TraitScore(openness=80, conscientiousness=30,
                                           extraversion=30, agreeableness=30,
                                           neuroticism=20), profile)
"""

from backend.persona.archetype_catalog import (
    ArchetypeCatalog,
    ArchetypeDefinition,
    BehavioralBonusRule,
    BehavioralSignal,
    Trait,
    TraitLevel,
    TraitScore,
    get_default_catalog,
    trait_level,
)

from backend.persona.archetype_classifier import classify_archetype

from backend.persona.decision_pattern_extraction import extract_decision_patterns
from backend.persona.micro_interaction_extraction import extract_micro_interactions
from backend.persona.time_pattern_extraction import (
    detect_personal_events,
    extract_time_patterns,
    get_seasonal_factors,
)

from backend.persona.models import (
    ArchetypeMatch,
    BehavioralProfile,
    ClassificationResult,
    DecisionPatternReport,
    EventLog,
    MicroInteractionReport,
    PersonalEventAnalysis,
    SeasonalFactors,
    TimePatternReport,
)

from backend.persona.profile_orchestrator import (
    BehavioralLogSource,
    PersonaRepository,
    PersonaSnapshot,
    PersonalityTraitProvider,
    ProfileOrchestrator,
)

__all__ = [
    'ArchetypeCatalog',
    'ArchetypeDefinition',
    'BehavioralBonusRule',
    'BehavioralSignal',
    'Trait',
    'TraitLevel',
    'TraitScore',
    'get_default_catalog',
    'trait_level',
    'classify_archetype',
    'extract_decision_patterns',
    'extract_micro_interactions',
    'detect_personal_events',
    'extract_time_patterns',
    'get_seasonal_factors',
    'ArchetypeMatch',
    'BehavioralProfile',
    'ClassificationResult',
    'DecisionPatternReport',
    'EventLog',
    'MicroInteractionReport',
    'PersonalEventAnalysis',
    'SeasonalFactors',
    'TimePatternReport',
    'BehavioralLogSource',
    'PersonaRepository',
    'PersonaSnapshot',
    'PersonalityTraitProvider',
    'ProfileOrchestrator',
]

__version__ = '1.0.0'
