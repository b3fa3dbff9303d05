"""
Get Profile Use Case

Loads the signed-in account.
"""

from uuid import UUID

from libs.result import Error, Result, Return
from src.app.errors import ErrorCode
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth.dtos import UserInfo


class GetProfileUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, user_id: UUID) -> Result[UserInfo]:
        async with self.uow:
            user = await self.uow.users.get_by_id(user_id)
            if user is None:
                return Return.err(Error(ErrorCode.ACCOUNT_NOT_FOUND, "Account not found"))

            return Return.ok(UserInfo.from_user(user))
