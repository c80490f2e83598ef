import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import create_engine, Session, SQLModel
from database import get_session
from main import app
from models.auth import User
from models.boards import Board, BoardColumn, Task
from helpers.auth import hash_password, issue_token
from helpers.ordering import column_order, task_order
from ws_service.manager import manager


@pytest.fixture(name="engine")
def engine_fixture():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="file_engine")
def file_engine_fixture(tmp_path):
    # Separate connections per session, unlike the in-memory engine
    engine = create_engine(
        f"sqlite:///{tmp_path / 'kanban.db'}",
        connect_args={"check_same_thread": False}
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture(name="session")
def session_fixture(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture(name="client")
def client_fixture(session: Session):
    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()
    manager.active_connections.clear()


def create_user(session: Session, name: str, email: str) -> User:
    user = User(name=name, email=email, hashed_password=hash_password("secret123"))
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture(name="user")
def user_fixture(session: Session):
    return create_user(session, "Ada", "ada@example.com")


@pytest.fixture(name="other_user")
def other_user_fixture(session: Session):
    return create_user(session, "Grace", "grace@example.com")


@pytest.fixture(name="auth_headers")
def auth_headers_fixture(session: Session, user: User):
    token = issue_token(user, session)
    return {"Authorization": f"Bearer {token.access_token}"}


def build_board(session: Session, owner: User, layout: dict, name: str = "Roadmap"):
    """Create a board whose columns and tasks are placed through the ordering layer.

    ``layout`` maps column names to task titles, both in the desired order.
    Returns the board and a dict of column name -> (column, {title: task}).
    """
    board = Board(name=name, user_id=owner.id)
    session.add(board)
    session.commit()
    session.refresh(board)

    columns = {}
    for column_name, titles in layout.items():
        column = BoardColumn(name=column_name, board_id=board.id)
        column_order.append(session, board.id, column)
        tasks = {}
        for title in titles:
            task = Task(title=title, column_id=column.id)
            task_order.append(session, column.id, task)
            tasks[title] = task
        columns[column_name] = (column, tasks)
    return board, columns


@pytest.fixture(name="board_builder")
def board_builder_fixture(session: Session):
    def build(owner: User, layout: dict, name: str = "Roadmap", db_session: Session = None):
        return build_board(db_session or session, owner, layout, name)
    return build


@pytest.fixture(name="task_titles")
def task_titles_fixture(session: Session):
    def titles(column_id: str):
        return [task.title for task in task_order.sequence(session, column_id)]
    return titles


@pytest.fixture(name="positions")
def positions_fixture():
    def read(collection, session: Session, scope_id: str):
        return [member.position for member in collection.sequence(session, scope_id)]
    return read
