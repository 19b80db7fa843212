from sqlalchemy.ext.asyncio import AsyncSession

from ...crud.account import UserRepository
from ...domain.ports.hasher import PasswordHasher
from ...models.user import User
from .base import AccountService


class UserService(AccountService[User]):
    label = "user"
    nullable_fields = frozenset({"phone_no"})

    def __init__(self, session: AsyncSession, hasher: PasswordHasher):
        super().__init__(UserRepository(session), hasher)
