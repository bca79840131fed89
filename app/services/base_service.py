"""
Base service class.

Provides common functionality for all service classes including session
management, logging, ownership checks and the atomic call decorator.
"""

import functools
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.settings import Settings, settings as default_settings
from app.utils.datetime_utils import Clock, unix_now
from app.utils.exceptions import NotOwnerError, is_caller_error
from app.utils.validation import normalize_address

# Type variable for generic decorator return types
T = TypeVar("T")


class BaseService:
    """
    Base service class.

    Provides common functionality for all service classes:
    - Session management
    - Logging with bound service context
    - Protocol clock and settings
    """

    def __init__(
        self,
        session: AsyncSession,
        settings: Settings | None = None,
        clock: Clock | None = None,
    ) -> None:
        """
        Initialize base service.

        Args:
            session: Async database session
            settings: Protocol settings (global settings by default)
            clock: Unix-seconds clock (wall clock by default)
        """
        self.session = session
        self.settings = settings or default_settings
        self.clock = clock or unix_now
        self.logger = logger.bind(service=self.__class__.__name__)

    def now(self) -> int:
        """Current protocol time."""
        return self.clock()

    def require_owner(self, caller: str) -> None:
        """
        Gate an admin operation on the configured owner.

        Raises:
            NotOwnerError: If caller is not the owner
        """
        if normalize_address(caller) != self.settings.owner_address:
            self.logger.warning(
                "Rejected admin call from non-owner",
                extra={"caller": caller},
            )
            raise NotOwnerError()


def atomic(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
    """
    Run a protocol call as one all-or-nothing state transition.

    Acquires the protocol lock, opens a session and a transaction, and
    passes the session to the wrapped method. Commits on success, rolls
    back on exception.

    Usage:
        @atomic
        async def buy(self, session, caller, amount):
            ...
    """
    @functools.wraps(func)
    async def wrapper(self: Any, *args: Any, **kwargs: Any) -> T:
        async with self.lock:
            async with self.session_maker() as session:
                try:
                    async with session.begin():
                        return await func(self, session, *args, **kwargs)
                except Exception as e:
                    log = self.logger.warning if is_caller_error(e) else self.logger.error
                    log(
                        f"Call {func.__name__} rolled back",
                        extra={
                            "function": func.__name__,
                            "error": str(e),
                            "error_code": getattr(e, "code", None),
                        },
                    )
                    raise

    return wrapper
