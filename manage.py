#!/usr/bin/env python3
"""
Management commands for the Kanban Board API.

Usage:
    python manage.py init_db
    python manage.py check_db
    python manage.py reset_db
    python manage.py create_user <name> <email> <password>
    python manage.py check_positions
"""

import sys
from sqlmodel import SQLModel, Session, select, text
from sqlalchemy.exc import SQLAlchemyError
from database import engine
from settings import logger
from helpers.auth import hash_password
from helpers.ordering import column_order, task_order
# Import all models to ensure tables are created
from models.auth import User, Token
from models.boards import Board, BoardColumn, Task
from models.attachments import Attachment
from models.comments import Comment


def init_db():
    """Initialize database tables."""
    logger.info("Creating database tables...")
    SQLModel.metadata.create_all(engine)
    logger.info("Database tables created successfully")


def check_db():
    """Check database connection and tables."""
    try:
        with Session(engine) as session:
            tables = session.exec(text("SELECT name FROM sqlite_master WHERE type='table'")).fetchall()
            logger.info(f"Database connected. Found {len(tables)} tables: {[t[0] for t in tables]}")
    except SQLAlchemyError as e:
        logger.error(f"Database connection failed: {e}")
        sys.exit(1)


def reset_db():
    """Drop and recreate all database tables."""
    logger.warning("Dropping all database tables...")
    SQLModel.metadata.drop_all(engine)
    logger.info("Creating database tables...")
    SQLModel.metadata.create_all(engine)
    logger.info("Database reset successfully")


def create_user(name: str, email: str, password: str):
    """Create a user account."""
    try:
        with Session(engine) as session:
            if session.exec(select(User).where(User.email == email)).first():
                logger.error(f"A user with email '{email}' already exists")
                sys.exit(1)

            user = User(name=name, email=email, hashed_password=hash_password(password))
            session.add(user)
            session.commit()
            session.refresh(user)

            logger.info(f"User '{email}' created successfully with ID: {user.id}")
    except SQLAlchemyError as e:
        logger.error(f"Failed to create user: {e}")
        sys.exit(1)


def check_positions(session: Session) -> int:
    """Report scopes whose positions are not 0..N-1; return how many were found."""
    problems = 0
    for label, collection in (("Board", column_order), ("Column", task_order)):
        for scope_id, positions in collection.find_gaps(session).items():
            problems += 1
            logger.warning(f"{label} {scope_id} has non-dense positions: {positions}")

    if problems == 0:
        logger.info("All positions are dense")
    return problems


def main():
    if len(sys.argv) < 2:
        print("Usage: python manage.py <command> [args]")
        print("Commands:")
        print("  init_db                               - Initialize database tables")
        print("  check_db                              - Check database connection")
        print("  reset_db                              - Drop and recreate all tables")
        print("  create_user <name> <email> <password> - Create a user account")
        print("  check_positions                       - Report boards/columns with gaps or duplicates")
        sys.exit(1)

    command = sys.argv[1]

    if command == "init_db":
        init_db()
    elif command == "check_db":
        check_db()
    elif command == "reset_db":
        reset_db()
    elif command == "create_user":
        if len(sys.argv) != 5:
            print("Usage: python manage.py create_user <name> <email> <password>")
            sys.exit(1)
        create_user(sys.argv[2], sys.argv[3], sys.argv[4])
    elif command == "check_positions":
        with Session(engine) as session:
            if check_positions(session):
                sys.exit(1)
    else:
        print(f"Unknown command: {command}")
        print("Run 'python manage.py' to see available commands")
        sys.exit(1)


if __name__ == "__main__":
    main()
