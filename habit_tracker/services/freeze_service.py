"""
Streak freeze service.
Spends freeze tokens to protect missed days and awards new tokens.
"""
import logging
from datetime import date
from sqlalchemy.orm import Session

from habit_tracker.repositories.habit_repository import HabitRepository, CompletionRepository
from habit_tracker.repositories.freeze_repository import FreezeRepository
from habit_tracker.repositories.user_repository import UserRepository
from habit_tracker.services.leaderboard_service import leaderboard_cache
from habit_tracker.schemas import (
    FreezeApplyResponse, FreezeAwardResponse, FreezeBalanceResponse, FreezeRecordResponse
)
from habit_tracker.constants import REFERRAL_FREEZE_TOKENS
from habit_tracker.exceptions import (
    AlreadyProtectedException,
    BeforeHabitStartException,
    FutureDateException,
    HabitNotFoundException,
    InsufficientFreezeTokensException,
    InvalidTokenCountException,
    UserNotFoundException,
)

logger = logging.getLogger("habit_tracker.freeze")


class FreezeService:
    """Service for the per-owner freeze ledger"""

    def __init__(self, db: Session):
        self.db = db
        self.habit_repo = HabitRepository()
        self.completion_repo = CompletionRepository()
        self.freeze_repo = FreezeRepository()
        self.user_repo = UserRepository()

    def apply_freeze(
        self,
        owner_id: int,
        habit_id: int,
        target_date: date,
        today: date
    ) -> FreezeApplyResponse:
        """
        Protect a day of a habit with one freeze token.

        Preconditions are checked first; the token spend and the freeze
        record are then written together, so a failure leaves the balance
        and the records untouched.

        Args:
            owner_id: Owner spending the token
            habit_id: Habit to protect
            target_date: Day to mark as satisfied
            today: Current effective date

        Returns:
            FreezeApplyResponse with the remaining balance

        Raises:
            HabitNotFoundException: Habit missing or owned by someone else
            FutureDateException: target_date is after today
            BeforeHabitStartException: target_date is before the habit's start
            AlreadyProtectedException: Day already completed or frozen
            InsufficientFreezeTokensException: No tokens left
        """
        habit = self.habit_repo.get_for_owner(self.db, owner_id, habit_id)
        if not habit:
            raise HabitNotFoundException(habit_id)

        if target_date > today:
            raise FutureDateException(target_date, today)

        if target_date < habit.start_date:
            raise BeforeHabitStartException(target_date, habit.start_date)

        if (self.completion_repo.exists(self.db, habit_id, target_date)
                or self.freeze_repo.exists(self.db, habit_id, target_date)):
            raise AlreadyProtectedException(habit_id, target_date)

        try:
            self.freeze_repo.decrement_and_insert(self.db, owner_id, habit_id, target_date)
        except (InsufficientFreezeTokensException, AlreadyProtectedException) as e:
            logger.info(f"Freeze rejected for owner {owner_id}, habit {habit_id}: {e}")
            raise

        # Satisfied days changed, cached rankings are stale
        leaderboard_cache.clear()

        remaining = self.freeze_repo.get_balance(self.db, owner_id) or 0
        logger.info(
            f"Freeze applied: owner={owner_id} habit={habit_id} "
            f"date={target_date.isoformat()} remaining={remaining}"
        )

        return FreezeApplyResponse(
            habit_id=habit_id,
            date=target_date,
            freezes_remaining=remaining
        )

    def award_freeze_tokens(self, owner_id: int, count: int) -> FreezeAwardResponse:
        """
        Add freeze tokens to an owner's balance.

        Raises:
            InvalidTokenCountException: count is not positive
            UserNotFoundException: Owner does not exist
        """
        if count <= 0:
            raise InvalidTokenCountException(count)

        self.freeze_repo.increment_balance(self.db, owner_id, count)
        balance = self.freeze_repo.get_balance(self.db, owner_id) or 0
        logger.info(f"Awarded {count} freeze token(s) to owner {owner_id}, balance={balance}")

        return FreezeAwardResponse(
            owner_id=owner_id,
            tokens_awarded=count,
            freezes_available=balance
        )

    def award_referral_tokens(self, owner_id: int) -> FreezeAwardResponse:
        """Credit the referrer's freeze tokens for a successful referral"""
        return self.award_freeze_tokens(owner_id, REFERRAL_FREEZE_TOKENS)

    def get_balance(self, owner_id: int) -> FreezeBalanceResponse:
        """Get an owner's freeze balance and freeze history"""
        balance = self.freeze_repo.get_balance(self.db, owner_id)
        if balance is None:
            raise UserNotFoundException(owner_id)

        records = self.freeze_repo.get_by_owner(self.db, owner_id)
        return FreezeBalanceResponse(
            owner_id=owner_id,
            freezes_available=balance,
            freezes=[FreezeRecordResponse.model_validate(r) for r in records]
        )
