import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from dms.config import settings
from dms.database import get_db, init_db
from dms.main import app
from dms.models.department import Department
from dms.services.auth_service import auth_service
from dms.services.seed_service import seed_all

PASSWORD = "correct-horse-battery"


def _set_sqlite_pragmas(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture
def tmp_data(tmp_path):
    data_path = tmp_path / "DMSData"
    (data_path / "files").mkdir(parents=True)
    return data_path


@pytest.fixture
def test_db(tmp_data):
    db_path = tmp_data / "dms.sqlite"
    engine = create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False},
    )
    event.listen(engine, "connect", _set_sqlite_pragmas)
    TestSession = sessionmaker(bind=engine, autoflush=False, autocommit=False)

    init_db(db_path)
    db = TestSession()
    try:
        seed_all(db)
    finally:
        db.close()

    def override_get_db():
        db = TestSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestSession
    app.dependency_overrides.clear()
    engine.dispose()


@pytest.fixture
def client(tmp_data, test_db):
    original_data_path = settings.data_path
    settings.data_path = tmp_data
    auth_service.reset()
    c = TestClient(app)
    yield c
    auth_service.reset()
    settings.data_path = original_data_path


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def login(client, email: str, password: str = PASSWORD) -> dict:
    r = client.post("/api/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    # tests authenticate explicitly through headers
    client.cookies.clear()
    return auth_headers(r.json()["token"])


@pytest.fixture
def admin(client):
    return login(client, settings.admin_email, settings.admin_password)


@pytest.fixture
def records_dept(test_db):
    db = test_db()
    try:
        return db.query(Department).filter(Department.code == settings.default_department_code).one().id
    finally:
        db.close()


@pytest.fixture
def finance_dept(client, admin):
    r = client.post("/api/admin/departments", json={"name": "Finance", "code": "fin"}, headers=admin)
    assert r.status_code == 201, r.text
    return r.json()["id"]


@pytest.fixture
def make_user(client, admin, records_dept):
    """Create a user through the API and return ``(user_id, headers)``."""
    counter = {"n": 0}

    def _make(role: str = "USER", department_id: str | None = None, first_name: str = "Test"):
        counter["n"] += 1
        email = f"{role.lower()}{counter['n']}@dms.test"
        r = client.post("/api/users", json={
            "email": email,
            "password": PASSWORD,
            "first_name": first_name,
            "last_name": f"User{counter['n']}",
            "department_id": department_id or records_dept,
            "roles": [role],
        }, headers=admin)
        assert r.status_code == 201, r.text
        return r.json()["id"], login(client, email)

    return _make


def create_document(client, headers, title="Budget Report", **fields):
    data = {"title": title, **fields}
    files = None
    content = data.pop("file_content", None)
    if content is not None:
        files = {"file": (data.pop("filename", "report.pdf"), content, "application/pdf")}
    r = client.post("/api/documents", data=data, files=files, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()
