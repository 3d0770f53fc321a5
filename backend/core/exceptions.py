"""
Exception hierarchy for the Travel Persona Engine

Structured error handling with specific error types. The extractors and the
classifier never raise for sparse or malformed behavioral data; these types
cover the configuration and collaborator boundaries.
"""

from typing import Dict, Any, Optional


class PersonaEngineError(Exception):
    """Base exception for all persona engine errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class CatalogConfigurationError(PersonaEngineError):
    """Raised when an archetype catalog cannot be read or is invalid."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class BehavioralLogUnavailableError(PersonaEngineError):
    """Raised when the event log for a user cannot be retrieved."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class PersonalityInferenceError(PersonaEngineError):
    """Raised by a trait provider when personality scores cannot be inferred."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class ProfilePersistenceError(PersonaEngineError):
    """Raised when a persona snapshot cannot be stored."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
