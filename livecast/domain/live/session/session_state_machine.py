"""Session state machine for managing status transitions."""

from enum import Enum

from livecast.schemas import SessionStatus


class IngestEvent(str, Enum):
    """Signals emitted by the ingest collaborator for an access key."""

    FEED_DETECTED = "feed-detected"
    FIRST_SEGMENT_READY = "first-segment-ready"
    CONVERSION_FAILED = "conversion-failed"
    FEED_DROPPED = "feed-dropped"

    def __str__(self) -> str:
        return self.value


class SessionStateMachine:
    """State machine for managing session status transitions.

    State flow with triggers:
    - PENDING -> PROCESSING (ingest: feed detected for the access key)
    - PROCESSING -> ACTIVE (ingest: first playable output segment produced)
    - PROCESSING -> ERROR (ingest: conversion failed, or no output within the grace window)
    - ACTIVE -> ERROR (ingest: feed dropped unexpectedly)
    - ACTIVE -> STOPPED (owner: explicit stop)
    - ERROR/STOPPED are terminal states

    Expiry is not a transition: the sweeper deletes sessions in any state.
    """

    # State transition map defining valid state flows
    TRANSITIONS: dict[SessionStatus, set[SessionStatus]] = {
        SessionStatus.PENDING: {SessionStatus.PROCESSING},
        SessionStatus.PROCESSING: {SessionStatus.ACTIVE, SessionStatus.ERROR},
        SessionStatus.ACTIVE: {SessionStatus.ERROR, SessionStatus.STOPPED},
        SessionStatus.ERROR: set(),
        SessionStatus.STOPPED: set(),
    }

    # Terminal states that cannot transition further
    TERMINAL_STATES: set[SessionStatus] = {SessionStatus.ERROR, SessionStatus.STOPPED}

    # Status each ingest signal drives a session towards
    INGEST_TARGETS: dict[IngestEvent, SessionStatus] = {
        IngestEvent.FEED_DETECTED: SessionStatus.PROCESSING,
        IngestEvent.FIRST_SEGMENT_READY: SessionStatus.ACTIVE,
        IngestEvent.CONVERSION_FAILED: SessionStatus.ERROR,
        IngestEvent.FEED_DROPPED: SessionStatus.ERROR,
    }

    # Source state each ingest signal is valid from
    INGEST_SOURCES: dict[IngestEvent, SessionStatus] = {
        IngestEvent.FEED_DETECTED: SessionStatus.PENDING,
        IngestEvent.FIRST_SEGMENT_READY: SessionStatus.PROCESSING,
        IngestEvent.CONVERSION_FAILED: SessionStatus.PROCESSING,
        IngestEvent.FEED_DROPPED: SessionStatus.ACTIVE,
    }

    @classmethod
    def can_transition(cls, current: SessionStatus, new: SessionStatus) -> bool:
        """Check if status transition is valid.

        Args:
            current: Current session status
            new: Target status to transition to

        Returns:
            True if transition is valid, False otherwise
        """
        return new in cls.TRANSITIONS.get(current, set())

    @classmethod
    def is_terminal(cls, state: SessionStatus) -> bool:
        """Check if a status is terminal (no further transitions allowed)."""
        return state in cls.TERMINAL_STATES

    @classmethod
    def get_valid_transitions(cls, state: SessionStatus) -> set[SessionStatus]:
        """Get all valid transitions from a given status."""
        return cls.TRANSITIONS.get(state, set())

    @classmethod
    def get_valid_sources(cls, target: SessionStatus) -> set[SessionStatus]:
        """Get all statuses that can transition to the target status."""
        return {state for state, targets in cls.TRANSITIONS.items() if target in targets}

    @classmethod
    def target_for_event(cls, event: IngestEvent) -> SessionStatus:
        return cls.INGEST_TARGETS[event]

    @classmethod
    def source_for_event(cls, event: IngestEvent) -> SessionStatus:
        return cls.INGEST_SOURCES[event]
