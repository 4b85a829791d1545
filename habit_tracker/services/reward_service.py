"""
Daily sign-in reward service.

Seven-day cycle per owner: every claim is worth REWARD_POINTS_PER_CLAIM,
consecutive days advance the cycle (7 wraps to 1), a missed day restarts it
at day 1, and entering day 7 earns a streak freeze token.
"""
import logging
from datetime import date
from typing import Optional
from sqlalchemy.orm import Session

from habit_tracker.repositories.reward_repository import RewardStateRepository
from habit_tracker.repositories.user_repository import UserRepository
from habit_tracker.services.date_service import DateService
from habit_tracker.schemas import RewardStatusResponse, RewardClaimResponse
from habit_tracker.constants import (
    REWARD_POINTS_PER_CLAIM,
    REWARD_CYCLE_LENGTH,
    REWARD_FREEZE_DAY,
    REWARD_FREEZE_TOKENS_PER_CYCLE,
    REWARD_CLAIM_MAX_ATTEMPTS,
)
from habit_tracker.exceptions import AlreadyClaimedTodayException, UserNotFoundException

logger = logging.getLogger("habit_tracker.rewards")


class RewardService:
    """Service for the daily sign-in reward cycle"""

    def __init__(self, db: Session):
        self.db = db
        self.reward_repo = RewardStateRepository()
        self.user_repo = UserRepository()

    def _require_owner(self, owner_id: int) -> None:
        if self.user_repo.get_by_id(self.db, owner_id) is None:
            raise UserNotFoundException(owner_id)

    @staticmethod
    def next_cycle_day(
        current_day: int,
        last_claimed_date: Optional[date],
        today: date
    ) -> Optional[int]:
        """
        Day a claim made today would record.

        - never claimed: day 1
        - gap of 1 day: next day of the cycle (7 wraps to 1)
        - gap of more than 1 day: cycle restarts at day 1
        - same day (or a date before the last claim): None, nothing to claim

        Args:
            current_day: Day recorded by the last claim
            last_claimed_date: Date of the last claim
            today: Current effective date

        Returns:
            Day number 1..7, or None if today cannot be claimed
        """
        if last_claimed_date is None:
            return 1

        gap = DateService.days_between(last_claimed_date, today)

        if gap <= 0:
            return None
        if gap == 1:
            return (current_day % REWARD_CYCLE_LENGTH) + 1
        return 1

    def get_status(self, owner_id: int, today: date) -> RewardStatusResponse:
        """
        Read-only projection of the reward state for today.

        Owners without a state are reported as day 1 and claimable.

        Raises:
            UserNotFoundException: Owner does not exist
        """
        self._require_owner(owner_id)

        state = self.reward_repo.get(self.db, owner_id)
        if not state:
            return RewardStatusResponse()

        next_day = self.next_cycle_day(state.current_day, state.last_claimed_date, today)

        return RewardStatusResponse(
            current_day=next_day if next_day is not None else state.current_day,
            last_claimed_date=state.last_claimed_date,
            total_points=state.total_points or 0,
            freeze_tokens=state.freeze_tokens_earned or 0,
            can_claim_today=next_day is not None
        )

    def claim(self, owner_id: int, today: date) -> RewardClaimResponse:
        """
        Claim today's sign-in reward.

        The new state is written with a version check; if another claim
        for the same owner committed in between, the state is re-read and
        the gap logic evaluated again (which then reports the day as claimed).

        Args:
            owner_id: Owner claiming
            today: Current effective date

        Returns:
            RewardClaimResponse with the updated state

        Raises:
            UserNotFoundException: Owner does not exist
            AlreadyClaimedTodayException: Today was already claimed
        """
        self._require_owner(owner_id)

        for attempt in range(REWARD_CLAIM_MAX_ATTEMPTS):
            state = self.reward_repo.get(self.db, owner_id)

            if state is None:
                new_day = 1
                previous_points = 0
                previous_tokens = 0
                expected_version = None
            else:
                new_day = self.next_cycle_day(state.current_day, state.last_claimed_date, today)
                if new_day is None:
                    logger.info(f"Owner {owner_id} already claimed the reward for {today.isoformat()}")
                    raise AlreadyClaimedTodayException(owner_id)
                previous_points = state.total_points or 0
                previous_tokens = state.freeze_tokens_earned or 0
                expected_version = state.version

            token_earned = REWARD_FREEZE_TOKENS_PER_CYCLE if new_day == REWARD_FREEZE_DAY else 0
            new_state = {
                "current_day": new_day,
                "last_claimed_date": today,
                "total_points": previous_points + REWARD_POINTS_PER_CLAIM,
                "freeze_tokens_earned": previous_tokens + token_earned,
            }

            if self.reward_repo.upsert(
                self.db, owner_id, new_state, expected_version,
                freeze_tokens_awarded=token_earned
            ):
                logger.info(
                    f"Reward claimed: owner={owner_id} day={new_day} "
                    f"points={new_state['total_points']} token_earned={token_earned}"
                )
                return RewardClaimResponse(
                    current_day=new_day,
                    last_claimed_date=today,
                    points_earned=REWARD_POINTS_PER_CLAIM,
                    freeze_token_earned=token_earned,
                    total_points=new_state["total_points"],
                    total_freeze_tokens=new_state["freeze_tokens_earned"]
                )

            logger.info(f"Concurrent reward claim for owner {owner_id}, re-reading (attempt {attempt + 1})")

        raise AlreadyClaimedTodayException(owner_id)
