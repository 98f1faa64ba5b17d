"""Permission negotiation for the reminders store."""

import asyncio
import logging
from typing import Optional

from ..core.exceptions import StoreOperationError
from ..core.models import AuthorizationStatus, OperationClass
from .store import (
    BackingStore,
    RAW_AUTHORIZED,
    RAW_DENIED,
    RAW_FULL_ACCESS,
    RAW_NOT_DETERMINED,
    RAW_RESTRICTED,
    RAW_WRITE_ONLY,
)


_COMMON_STATUSES = {
    RAW_NOT_DETERMINED: AuthorizationStatus.NOT_DETERMINED,
    RAW_RESTRICTED: AuthorizationStatus.RESTRICTED,
    RAW_DENIED: AuthorizationStatus.DENIED,
}

_BINARY_STATUSES = {
    **_COMMON_STATUSES,
    RAW_AUTHORIZED: AuthorizationStatus.AUTHORIZED,
}

_TIERED_STATUSES = {
    **_COMMON_STATUSES,
    RAW_FULL_ACCESS: AuthorizationStatus.FULL_ACCESS,
    RAW_WRITE_ONLY: AuthorizationStatus.WRITE_ONLY,
}


def normalize_status(raw: int, tiered: bool) -> AuthorizationStatus:
    """Map a raw EventKit authorization code onto AuthorizationStatus.

    Codes that only exist in the tiered model (write only) are ``UNKNOWN``
    when the store reports the binary model.
    """
    table = _TIERED_STATUSES if tiered else _BINARY_STATUSES
    return table.get(raw, AuthorizationStatus.UNKNOWN)


class PermissionNegotiator:
    """Reads and negotiates reminders authorization.

    At most one native prompt is shown per ``request_access`` call, and only
    while the status is still not determined. Concurrent callers wait for
    the prompt already in flight instead of opening another one.
    """

    def __init__(self, store: BackingStore, logger: Optional[logging.Logger] = None):
        self.store = store
        self.logger = logger or logging.getLogger(__name__)
        self._negotiating = asyncio.Lock()

    def current_status(self) -> AuthorizationStatus:
        """Current normalized status; never prompts."""
        try:
            return normalize_status(self.store.current_authorization(), self.store.tiered_access)
        except StoreOperationError as e:
            self.logger.error(f"Could not read reminders authorization: {e}")
            return AuthorizationStatus.UNKNOWN

    def allows(self, operation: OperationClass) -> bool:
        return self.current_status().allows(operation)

    def has_access(self) -> bool:
        return self.allows(OperationClass.READ)

    async def request_access(self) -> AuthorizationStatus:
        """Request access if it has not been decided yet.

        Prompt failures resolve to ``DENIED``: to the caller a failed prompt
        and a refusal are the same outcome.
        """
        async with self._negotiating:
            status = self.current_status()
            if status.is_sufficient:
                return status
            if status is not AuthorizationStatus.NOT_DETERMINED:
                self.logger.info(f"Not prompting for reminders access; status is {status.value}")
                return status

            try:
                granted = await self.store.request_authorization()
            except Exception as e:
                self.logger.warning(f"Reminders permission prompt failed: {e}")
                return AuthorizationStatus.DENIED

            if not granted:
                self.logger.info("Reminders access denied by user")
                return AuthorizationStatus.DENIED

            status = self.current_status()
            if status is AuthorizationStatus.NOT_DETERMINED:
                # store has not caught up with the answer yet
                status = (
                    AuthorizationStatus.FULL_ACCESS if self.store.tiered_access
                    else AuthorizationStatus.AUTHORIZED
                )
            self.logger.info(f"Reminders access granted: {status.value}")
            return status
