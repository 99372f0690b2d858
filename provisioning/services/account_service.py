"""
Data access for client records and user credentials, backed by SQLAlchemy.

Every value reaches the database as a bound parameter. Storage failures are
raised as ``QueryFailed``; a missing row is a normal ``None``/``False`` result.
"""
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from werkzeug.security import check_password_hash, generate_password_hash

from provisioning.database import SessionLocal, db_session
from provisioning.errors import Conflict, QueryFailed
from provisioning.models import Client, UserCredential

logger = logging.getLogger(__name__)


def _username_matches(username):
    return func.lower(UserCredential.username) == func.lower(username)


class AccountService:
    """
    Queries over the ``clients`` and ``user`` tables.
    """

    def __init__(self, hash_passwords: bool = False):
        self.hash_passwords = hash_passwords

    def configure(self, hash_passwords: bool = False) -> None:
        self.hash_passwords = hash_passwords

    def find_user_id_by_username(self, username: str) -> Optional[int]:
        """
        Return the id of the user whose username matches case-insensitively.
        """
        try:
            with SessionLocal() as session:
                return session.execute(
                    select(UserCredential.id).where(_username_matches(username)).limit(1)
                ).scalars().first()
        except SQLAlchemyError as exc:
            raise QueryFailed(f'Error processing request: {exc}') from exc

    def insert_user(self, username: str, password: str) -> int:
        """
        Store a new credential and return its id.

        Raises:
            Conflict: the username already exists in any casing (unique index)
            QueryFailed: any other storage failure
        """
        stored = generate_password_hash(password) if self.hash_passwords else password
        try:
            with db_session() as session:
                record = UserCredential(username=username, password=stored)
                session.add(record)
                session.flush()
                return record.id
        except IntegrityError as exc:
            logger.info(f"Duplicate username rejected by unique index: {username}")
            raise Conflict('User already exists!') from exc
        except SQLAlchemyError as exc:
            raise QueryFailed(f'Failed to insert user: {exc}') from exc

    def insert_client(self, status: str, account_id: str, name: str) -> int:
        """Store a client record and return its id."""
        try:
            with db_session() as session:
                record = Client(status=status, account_id=account_id, name=name)
                session.add(record)
                session.flush()
                return record.id
        except SQLAlchemyError as exc:
            raise QueryFailed(f'Failed to insert data: {exc}') from exc

    def find_account_and_password_by_username(self, username: str) -> Optional[dict]:
        """
        Join clients to users on case-insensitive name equality and return the
        first ``{"account_id", "password"}`` pair for ``username``.

        When several clients share the name, which one is returned is up to
        the database. With hashing enabled the password is never returned.
        """
        query = (
            select(Client.account_id, UserCredential.password)
            .select_from(Client)
            .join(UserCredential, func.lower(Client.name) == func.lower(UserCredential.username))
            .where(_username_matches(username))
            .limit(1)
        )
        try:
            with SessionLocal() as session:
                row = session.execute(query).first()
        except SQLAlchemyError as exc:
            raise QueryFailed(f'Error retrieving user: {exc}') from exc

        if row is None:
            return None
        return {
            'account_id': row.account_id,
            'password': None if self.hash_passwords else row.password,
        }

    def verify_credentials(self, username: str, password: str) -> bool:
        """
        Case-insensitive username match and exact password match.
        """
        try:
            with SessionLocal() as session:
                if not self.hash_passwords:
                    match = session.execute(
                        select(UserCredential.id)
                        .where(_username_matches(username), UserCredential.password == password)
                        .limit(1)
                    ).first()
                    return match is not None

                stored_hashes = session.execute(
                    select(UserCredential.password).where(_username_matches(username))
                ).scalars().all()
        except SQLAlchemyError as exc:
            raise QueryFailed(f'Error verifying user: {exc}') from exc

        return any(check_password_hash(stored, password) for stored in stored_hashes)


account_service = AccountService()
