"""Keyed lookup, insert and update of account records."""

from typing import Protocol

from sqlalchemy.orm import Session

from app.models import Account


class AccountStore(Protocol):
    def get_by_email(self, email: str) -> Account | None: ...

    def get_by_id(self, account_id: int) -> Account | None: ...

    def insert(self, account: Account) -> Account: ...

    def save(self, account: Account) -> Account: ...


class SqlAccountStore:
    """AccountStore over a SQLAlchemy session. Each write commits."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def get_by_email(self, email: str) -> Account | None:
        return self.db.query(Account).filter(Account.email == email).first()

    def get_by_id(self, account_id: int) -> Account | None:
        return self.db.query(Account).filter(Account.id == account_id).first()

    def insert(self, account: Account) -> Account:
        self.db.add(account)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(account)
        return account

    def save(self, account: Account) -> Account:
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(account)
        return account
