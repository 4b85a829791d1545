"""
Freeze repository - Data access layer for the freeze balance and freeze records.

The write primitives never read the balance first: the balance check is the
WHERE clause of the UPDATE itself, so two requests that both saw a balance of 1
cannot both spend it.
"""
from collections import defaultdict
from datetime import date
from typing import Dict, List, Optional, Set
from sqlalchemy.orm import Session
from sqlalchemy import and_, update
from sqlalchemy.exc import IntegrityError, OperationalError

from habit_tracker.models import User, FreezeRecord
from habit_tracker.exceptions import (
    AlreadyProtectedException,
    InsufficientFreezeTokensException,
    StorageUnavailableException,
    UserNotFoundException,
)


class FreezeRepository:
    """Repository for freeze balance and FreezeRecord data access"""

    @staticmethod
    def get_balance(db: Session, owner_id: int) -> Optional[int]:
        """Get the owner's freeze balance (None if the user does not exist)"""
        row = db.query(User.freeze_balance).filter(User.id == owner_id).first()
        return row[0] if row else None

    @staticmethod
    def get_by_owner(db: Session, owner_id: int) -> List[FreezeRecord]:
        """Get all freeze records of an owner, newest first"""
        return db.query(FreezeRecord).filter(
            FreezeRecord.owner_id == owner_id
        ).order_by(FreezeRecord.date.desc()).all()

    @staticmethod
    def get_dates_by_habit(
        db: Session,
        owner_id: Optional[int] = None,
        habit_id: Optional[int] = None,
        start: Optional[date] = None,
        end: Optional[date] = None
    ) -> Dict[int, Set[date]]:
        """Get frozen dates grouped by habit"""
        query = db.query(FreezeRecord.habit_id, FreezeRecord.date)
        if owner_id is not None:
            query = query.filter(FreezeRecord.owner_id == owner_id)
        if habit_id is not None:
            query = query.filter(FreezeRecord.habit_id == habit_id)
        if start is not None:
            query = query.filter(FreezeRecord.date >= start)
        if end is not None:
            query = query.filter(FreezeRecord.date <= end)

        dates = defaultdict(set)
        for row_habit_id, row_date in query.all():
            dates[row_habit_id].add(row_date)
        return dict(dates)

    @staticmethod
    def exists(db: Session, habit_id: int, target_date: date) -> bool:
        """Check whether a habit is frozen on a date"""
        return db.query(FreezeRecord.id).filter(
            and_(
                FreezeRecord.habit_id == habit_id,
                FreezeRecord.date == target_date
            )
        ).first() is not None

    @staticmethod
    def decrement_and_insert(db: Session, owner_id: int, habit_id: int, target_date: date) -> None:
        """
        Spend one freeze token and record the freeze in a single transaction.

        Raises:
            InsufficientFreezeTokensException: Balance was below 1 at update time
            AlreadyProtectedException: A freeze for (habit, date) already exists
            StorageUnavailableException: Database failure
        """
        try:
            result = db.execute(
                update(User)
                .where(and_(User.id == owner_id, User.freeze_balance >= 1))
                .values(freeze_balance=User.freeze_balance - 1)
            )
            if result.rowcount == 0:
                db.rollback()
                raise InsufficientFreezeTokensException(owner_id)

            db.add(FreezeRecord(habit_id=habit_id, owner_id=owner_id, date=target_date))
            db.flush()
            db.commit()
        except IntegrityError:
            db.rollback()
            raise AlreadyProtectedException(habit_id, target_date)
        except OperationalError as e:
            db.rollback()
            raise StorageUnavailableException("freeze", str(e))

    @staticmethod
    def increment_balance(db: Session, owner_id: int, count: int, commit: bool = True) -> None:
        """
        Atomically add freeze tokens to the owner's balance.

        Args:
            db: Database session
            owner_id: Owner to credit
            count: Number of tokens to add
            commit: False when the caller owns the surrounding transaction

        Raises:
            UserNotFoundException: Owner does not exist
            StorageUnavailableException: Database failure
        """
        try:
            result = db.execute(
                update(User)
                .where(User.id == owner_id)
                .values(freeze_balance=User.freeze_balance + count)
            )
            if result.rowcount == 0:
                db.rollback()
                raise UserNotFoundException(owner_id)
            if commit:
                db.commit()
        except OperationalError as e:
            db.rollback()
            raise StorageUnavailableException("freeze award", str(e))
