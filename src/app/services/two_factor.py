"""
Two-Factor Controller

Enable/disable state machine for second-factor login. Disabling is gated
by password re-confirmation.
"""

from uuid import UUID

from libs.result import Error, Result, Return
from src.app.errors import ErrorCode
from src.app.services.credential_store import PasswordHasher
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import TwoFactorState, User

_TRANSITIONS = {
    TwoFactorState.disabled: {TwoFactorState.enabling},
    TwoFactorState.enabling: {TwoFactorState.enabled, TwoFactorState.disabled},
    TwoFactorState.enabled: {TwoFactorState.disabling},
    TwoFactorState.disabling: {TwoFactorState.disabled, TwoFactorState.enabled},
}


class InvalidTwoFactorTransition(Exception):
    def __init__(self, current: TwoFactorState, target: TwoFactorState):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move two-factor state from {current.value} to {target.value}")


def transition(current: TwoFactorState, target: TwoFactorState) -> TwoFactorState:
    if target not in _TRANSITIONS[current]:
        raise InvalidTwoFactorTransition(current, target)
    return target


class TwoFactorController:
    """
    Two-factor state transitions.

    Business Rules:
    - Disabled -> Enabling -> Enabled happens in one step (no verification
      code is required to activate); later logins require the second factor
    - Enabled -> Disabling -> Disabled only after the current password
      verifies; a wrong password leaves the state untouched
    - Changes are flushed, not committed: the caller commits them together
      with whatever the transition triggers
    """

    def __init__(self, uow: UnitOfWork, hasher: PasswordHasher):
        self.uow = uow
        self.hasher = hasher

    async def enable(self, user_id: UUID) -> Result[User]:
        user = await self.uow.users.get_by_id(user_id)
        if user is None:
            return Return.err(Error(ErrorCode.ACCOUNT_NOT_FOUND, "Account not found"))

        if user.two_factor_state != TwoFactorState.disabled:
            return Return.err(
                Error(ErrorCode.TWO_FACTOR_ALREADY_ENABLED, "Two-factor authentication is already enabled")
            )

        state = transition(user.two_factor_state, TwoFactorState.enabling)
        state = transition(state, TwoFactorState.enabled)

        user.two_factor_enabled = state == TwoFactorState.enabled
        user = await self.uow.users.update(user)
        return Return.ok(user)

    async def disable(self, user_id: UUID, current_password: str) -> Result[User]:
        user = await self.uow.users.get_by_id(user_id)
        if user is None:
            return Return.err(Error(ErrorCode.ACCOUNT_NOT_FOUND, "Account not found"))

        if user.two_factor_state != TwoFactorState.enabled:
            return Return.err(
                Error(ErrorCode.TWO_FACTOR_NOT_ENABLED, "Two-factor authentication is not enabled")
            )

        state = transition(user.two_factor_state, TwoFactorState.disabling)

        password_valid = await self.hasher.verify_async(user.password_hash, current_password)
        state = transition(
            state, TwoFactorState.disabled if password_valid else TwoFactorState.enabled
        )
        if state == TwoFactorState.enabled:
            return Return.err(
                Error(ErrorCode.INVALID_CREDENTIAL, "Current password is incorrect")
            )

        user.two_factor_enabled = state == TwoFactorState.enabled
        user = await self.uow.users.update(user)
        return Return.ok(user)
