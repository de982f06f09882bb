from __future__ import annotations

from menucal.core.logging import get_logger
from menucal.schemas.calendar import AccessState
from menucal.services.event_store import EventStore
from menucal.services.observable import Observable

logger = get_logger(__name__)


class AccessController(Observable[AccessState]):
    """
    Tracks whether calendar access has been granted.

    State machine
    -------------
    UNKNOWN --(request resolves: granted)--------> GRANTED
    UNKNOWN --(request resolves: denied/error)---> DENIED

    GRANTED and DENIED are only left through a new explicit
    `request_access()` call, which re-enters UNKNOWN until it resolves.
    """

    def __init__(self, store: EventStore) -> None:
        super().__init__()
        self._store = store
        self._state = AccessState.UNKNOWN

    @property
    def state(self) -> AccessState:
        return self._state

    @property
    def is_granted(self) -> bool:
        return self._state is AccessState.GRANTED

    def snapshot(self) -> AccessState:
        return self._state

    async def request_access(self) -> AccessState:
        """
        Ask the event store for access and record the outcome.

        Any failure while asking counts as a denial.
        """
        self._set(AccessState.UNKNOWN)

        try:
            granted = await self._store.request_access()
        except Exception as exc:
            logger.warning("calendar_access_error", error=str(exc))
            granted = False

        self._set(AccessState.GRANTED if granted else AccessState.DENIED)
        logger.info("calendar_access_resolved", state=self._state.value)
        return self._state

    def _set(self, state: AccessState) -> None:
        if state is self._state:
            return
        self._state = state
        self._notify()
