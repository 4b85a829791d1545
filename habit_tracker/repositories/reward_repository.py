"""
Reward repository - Data access layer for the daily sign-in reward state.
"""
from typing import Optional
from sqlalchemy.orm import Session
from sqlalchemy import and_, update
from sqlalchemy.exc import IntegrityError, OperationalError

from habit_tracker.models import RewardState
from habit_tracker.exceptions import StorageUnavailableException, UserNotFoundException
from habit_tracker.repositories.freeze_repository import FreezeRepository


class RewardStateRepository:
    """Repository for RewardState data access"""

    @staticmethod
    def get(db: Session, owner_id: int) -> Optional[RewardState]:
        """Get reward state for an owner"""
        return db.query(RewardState).filter(RewardState.owner_id == owner_id).first()

    @staticmethod
    def upsert(
        db: Session,
        owner_id: int,
        new_state: dict,
        expected_version: Optional[int],
        freeze_tokens_awarded: int = 0
    ) -> bool:
        """
        Write a claimed reward state with an optimistic-concurrency check.

        Inserts when expected_version is None, otherwise updates only if the
        stored version still matches. Freeze tokens earned by the claim are
        credited to the owner's balance in the same transaction.

        Args:
            db: Database session
            owner_id: Owner whose state is written
            new_state: current_day, last_claimed_date, total_points, freeze_tokens_earned
            expected_version: Version read before computing new_state (None = no state yet)
            freeze_tokens_awarded: Tokens to add to the freeze balance

        Returns:
            True if written, False if another claim got there first

        Raises:
            UserNotFoundException: Constraint failure not caused by a concurrent claim
            StorageUnavailableException: Database failure
        """
        try:
            if expected_version is None:
                db.add(RewardState(owner_id=owner_id, version=1, **new_state))
                db.flush()
            else:
                result = db.execute(
                    update(RewardState)
                    .where(and_(
                        RewardState.owner_id == owner_id,
                        RewardState.version == expected_version
                    ))
                    .values(version=expected_version + 1, **new_state)
                )
                if result.rowcount == 0:
                    db.rollback()
                    return False

            if freeze_tokens_awarded:
                FreezeRepository.increment_balance(db, owner_id, freeze_tokens_awarded, commit=False)

            db.commit()
            return True
        except IntegrityError:
            db.rollback()
            # Only a state inserted by a concurrent claim counts as a lost race
            if expected_version is None and RewardStateRepository.get(db, owner_id) is not None:
                return False
            raise UserNotFoundException(owner_id)
        except OperationalError as e:
            db.rollback()
            raise StorageUnavailableException("reward claim", str(e))
