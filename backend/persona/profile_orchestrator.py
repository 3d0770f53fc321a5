"""
Profile Orchestrator

Coordinates one classification run for a user:

1. Fetch the event log from the behavioral log source
2. Run the three extractors (concurrently in worker threads, or sequentially)
3. Ask the personality trait provider for trait scores
   (neutral fallback when inference fails)
4. Classify against the archetype catalog
5. Hand the resulting PersonaSnapshot to the persona repository

Collaborators are structural interfaces (typing.Protocol); any object with the
right async method can be plugged in.
"""

import asyncio
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from functools import partial
from typing import Any, Dict, Mapping, Optional, Protocol, Tuple, Union

from backend.core.config import Settings, get_settings
from backend.core.exceptions import (
    BehavioralLogUnavailableError,
    PersonalityInferenceError,
    ProfilePersistenceError,
)
from backend.middleware.logging_config import (
    classification_context,
    configure_logging,
    get_logger,
    log_business_event,
    log_integration_call,
)
from backend.persona.archetype_catalog import ArchetypeCatalog, TraitScore, get_default_catalog
from backend.persona.archetype_classifier import classify_archetype
from backend.persona.decision_pattern_extraction import extract_decision_patterns
from backend.persona.micro_interaction_extraction import extract_micro_interactions
from backend.persona.models import BehavioralProfile, ClassificationResult, EventLog
from backend.persona.time_pattern_extraction import extract_time_patterns

logger = get_logger(__name__)


# ==================== Collaborators ====================

class BehavioralLogSource(Protocol):
    """Supplies the raw event history for a user."""

    async def fetch_event_log(self, user_id: str) -> Union[EventLog, Mapping[str, Any]]:
        ...


class PersonalityTraitProvider(Protocol):
    """
    Infers five-dimension trait scores for a user.

    Raises PersonalityInferenceError when scores cannot be produced.
    """

    async def infer_traits(self, user_id: str, profile: BehavioralProfile) -> TraitScore:
        ...


class PersonaRepository(Protocol):
    """Stores classification snapshots."""

    async def save_snapshot(self, snapshot: "PersonaSnapshot") -> None:
        ...


# ==================== Result ====================

@dataclass
class PersonaSnapshot:
    """Everything produced by one classification run"""
    user_id: str
    recorded_at: datetime
    trait_scores: TraitScore
    behavioral_profile: BehavioralProfile
    classification: ClassificationResult
    traits_inferred: bool = True
    correlation_id: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "recorded_at": self.recorded_at.isoformat(),
            "trait_scores": self.trait_scores.model_dump(),
            "behavioral_profile": self.behavioral_profile.to_dict(),
            "classification": self.classification.to_dict(),
            "traits_inferred": self.traits_inferred,
            "correlation_id": self.correlation_id,
            "metadata": dict(self.metadata),
        }


# ==================== Orchestrator ====================

class ProfileOrchestrator:
    """
    Builds behavioral profiles and classifies users into travel archetypes.

    The extractors and the classifier are pure; all I/O happens through the
    three collaborators, each of which is awaited.

    Construction applies the logging level and renderer from settings.
    """

    def __init__(
        self,
        log_source: BehavioralLogSource,
        trait_provider: PersonalityTraitProvider,
        repository: PersonaRepository,
        catalog: Optional[ArchetypeCatalog] = None,
        settings: Optional[Settings] = None,
    ):
        self.log_source = log_source
        self.trait_provider = trait_provider
        self.repository = repository
        self.catalog = catalog or get_default_catalog()
        self.settings = settings or get_settings()

        configure_logging(log_level=self.settings.log_level, json_logs=self.settings.json_logs)

    async def build_behavioral_profile(self, event_log: Union[EventLog, Mapping[str, Any], None]) -> BehavioralProfile:
        """
        Run the three extractors over one event log.

        With parallel_extractors enabled each extractor runs in a worker
        thread; otherwise they run in order on the event loop thread.
        """
        if not isinstance(event_log, EventLog):
            event_log = EventLog.from_dict(event_log)

        if self.settings.parallel_extractors:
            loop = asyncio.get_running_loop()
            time_patterns, micro_interactions, decision_patterns = await asyncio.gather(
                loop.run_in_executor(None, partial(extract_time_patterns, event_log.activity())),
                loop.run_in_executor(None, partial(extract_micro_interactions, event_log.interactions())),
                loop.run_in_executor(None, partial(extract_decision_patterns, event_log.choices())),
            )
        else:
            time_patterns = extract_time_patterns(event_log.activity())
            micro_interactions = extract_micro_interactions(event_log.interactions())
            decision_patterns = extract_decision_patterns(event_log.choices())

        return BehavioralProfile(
            time_patterns=time_patterns,
            micro_interactions=micro_interactions,
            decision_patterns=decision_patterns,
        )

    async def classify_user(self, user_id: str, correlation_id: Optional[str] = None) -> PersonaSnapshot:
        """
        Full classification run for one user.

        Raises:
            BehavioralLogUnavailableError: the log source failed
            ProfilePersistenceError: the repository failed to store the snapshot
        """
        with classification_context(user_id, correlation_id) as run_id:
            event_log = await self._fetch_event_log(user_id)

            profile = await self.build_behavioral_profile(event_log)
            logger.info(
                "behavioral_profile_built",
                bookings=len(event_log.bookings),
                sessions=len(event_log.sessions),
                searches=len(event_log.searches),
            )

            trait_scores, traits_inferred = await self._infer_traits(user_id, profile)

            classification = classify_archetype(trait_scores, profile, self.catalog)

            snapshot = PersonaSnapshot(
                user_id=user_id,
                recorded_at=datetime.now(timezone.utc),
                trait_scores=trait_scores,
                behavioral_profile=profile,
                classification=classification,
                traits_inferred=traits_inferred,
                correlation_id=run_id,
            )

            await self._save_snapshot(snapshot)

            log_business_event(
                "travel_archetype_classified",
                archetype=classification.primary_archetype,
                match_score=classification.match_score,
                traits_inferred=traits_inferred,
            )

            return snapshot

    async def _fetch_event_log(self, user_id: str) -> EventLog:
        start_time = time.time()
        try:
            payload = await self.log_source.fetch_event_log(user_id)
        except BehavioralLogUnavailableError as e:
            log_integration_call("log_source", "fetch_event_log", time.time() - start_time, False, e.message)
            raise
        except Exception as e:
            log_integration_call("log_source", "fetch_event_log", time.time() - start_time, False, str(e))
            raise BehavioralLogUnavailableError(
                f"Event log unavailable for user {user_id}",
                details={"user_id": user_id, "error": str(e)},
            ) from e

        log_integration_call("log_source", "fetch_event_log", time.time() - start_time)
        return payload if isinstance(payload, EventLog) else EventLog.from_dict(payload)

    async def _infer_traits(self, user_id: str, profile: BehavioralProfile) -> Tuple[TraitScore, bool]:
        start_time = time.time()
        try:
            trait_scores = await self.trait_provider.infer_traits(user_id, profile)
        except PersonalityInferenceError as e:
            log_integration_call("trait_provider", "infer_traits", time.time() - start_time, False, e.message)
            logger.warning(
                "trait_inference_fallback",
                fallback_score=self.settings.fallback_trait_score,
                error=e.message,
            )
            return TraitScore.neutral(self.settings.fallback_trait_score), False

        log_integration_call("trait_provider", "infer_traits", time.time() - start_time)
        return trait_scores, True

    async def _save_snapshot(self, snapshot: PersonaSnapshot) -> None:
        start_time = time.time()
        try:
            await self.repository.save_snapshot(snapshot)
        except ProfilePersistenceError as e:
            log_integration_call("repository", "save_snapshot", time.time() - start_time, False, e.message)
            raise
        except Exception as e:
            log_integration_call("repository", "save_snapshot", time.time() - start_time, False, str(e))
            raise ProfilePersistenceError(
                f"Failed to store persona snapshot for user {snapshot.user_id}",
                details={"user_id": snapshot.user_id, "error": str(e)},
            ) from e

        log_integration_call("repository", "save_snapshot", time.time() - start_time)
