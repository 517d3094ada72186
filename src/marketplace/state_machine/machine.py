"""StatusMachine class with trigger, is_terminal, and valid_events."""

from __future__ import annotations

from enum import StrEnum
from typing import Generic, TypeVar

from marketplace.domain.errors import InvalidTransitionError
from marketplace.domain.types import ApplicationStatus, CampaignStatus, InvitationStatus
from marketplace.state_machine.transitions import (
    APPLICATION_TERMINAL_STATES,
    APPLICATION_TRANSITIONS,
    CAMPAIGN_TERMINAL_STATES,
    CAMPAIGN_TRANSITIONS,
    INVITATION_TERMINAL_STATES,
    INVITATION_TRANSITIONS,
)

S = TypeVar("S", bound=StrEnum)


class StatusMachine(Generic[S]):
    """Finite state machine over one record's status field.

    The machine is positioned at a record's current status, validates a
    single event against the transition table, and reports the new status.
    Callers write the returned status back onto the record.

    Usage::

        sm = application_machine(ApplicationStatus.PENDING)
        sm.trigger("accept")   # -> ACCEPTED (terminal)
    """

    def __init__(
        self,
        entity: str,
        state: S,
        transitions: dict[tuple[S, str], S],
        terminal_states: frozenset[S],
    ) -> None:
        self._entity = entity
        self._state = state
        self._transitions = transitions
        self._terminal_states = terminal_states
        self._history: list[tuple[S, str, S]] = []

    @property
    def state(self) -> S:
        return self._state

    @property
    def is_terminal(self) -> bool:
        return self._state in self._terminal_states

    @property
    def history(self) -> list[tuple[S, str, S]]:
        """Return a copy of the ``(from_state, event, to_state)`` history."""
        return list(self._history)

    def can_trigger(self, event: str) -> bool:
        return not self.is_terminal and (self._state, event) in self._transitions

    def trigger(self, event: str) -> S:
        """Apply an event to the current state and transition.

        Args:
            event: The event string (e.g. ``"accept"``).

        Returns:
            The new state after the transition.

        Raises:
            InvalidTransitionError: If the transition is not allowed from
                the current state, or if the machine is in a terminal state.
        """
        if not self.can_trigger(event):
            raise InvalidTransitionError(self._entity, str(self._state), event)

        old_state = self._state
        new_state = self._transitions[(old_state, event)]
        self._history.append((old_state, event, new_state))
        self._state = new_state
        return new_state

    def get_valid_events(self) -> list[str]:
        """Return a sorted list of events valid from the current state."""
        if self.is_terminal:
            return []
        return sorted(event for state, event in self._transitions if state == self._state)


def campaign_machine(state: CampaignStatus) -> StatusMachine[CampaignStatus]:
    return StatusMachine("campaign", state, CAMPAIGN_TRANSITIONS, CAMPAIGN_TERMINAL_STATES)


def application_machine(state: ApplicationStatus) -> StatusMachine[ApplicationStatus]:
    return StatusMachine(
        "application", state, APPLICATION_TRANSITIONS, APPLICATION_TERMINAL_STATES
    )


def invitation_machine(state: InvitationStatus) -> StatusMachine[InvitationStatus]:
    return StatusMachine("invitation", state, INVITATION_TRANSITIONS, INVITATION_TERMINAL_STATES)
