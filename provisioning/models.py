"""
Database models for client provisioning records and user credentials.

The two tables are related only by name: ``LOWER(clients.name) =
LOWER(user.username)``. No foreign key is declared.
"""
from sqlalchemy import Column, Index, Integer, Text, func

from provisioning.database import Base


class Client(Base):
    """
    Outcome of an account provisioning run, linking an account id to a name.
    """

    __tablename__ = "clients"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    status = Column(Text)
    account_id = Column(Text)
    name = Column(Text)


class UserCredential(Base):
    """
    Username/password pair used for verification and account lookup.
    """

    __tablename__ = "user"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(Text, nullable=False)
    password = Column(Text, nullable=False)

    __table_args__ = (
        # Usernames are unique regardless of case
        Index("ix_user_username_lower", func.lower(username), unique=True),
        {"sqlite_autoincrement": True},
    )
