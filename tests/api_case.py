"""Shared base class for API tests: fresh schema per test and helpers to create users and log in."""

import unittest

from fastapi.testclient import TestClient

from portal.core.database import SessionLocal, engine
from portal.core.security import hash_password
from portal.main import app
from portal.models import Base, LoginSession, User
from portal.services.users import UserStore

PASSWORD = "Passw0rd!"


class ApiTestCase(unittest.TestCase):
    """Each test starts with empty users and sessions tables."""

    def setUp(self) -> None:
        Base.metadata.create_all(bind=engine)
        self.client = TestClient(app)
        self._clients = [self.client]

    def tearDown(self) -> None:
        for client in self._clients:
            client.close()
        Base.metadata.drop_all(bind=engine)

    def new_client(self) -> TestClient:
        client = TestClient(app)
        self._clients.append(client)
        return client

    def create_user(
        self,
        username: str,
        password: str = PASSWORD,
        role: str = "user",
        status: str = "active",
        email: str | None = None,
        password_hash: str | None = None,
    ) -> int:
        """Insert a user directly (bypassing the API) and return its id."""
        with SessionLocal() as db:
            user = UserStore(db).create_user(
                username=username,
                email=email,
                password_hash=password_hash or hash_password(password),
                role=role,
                status=status,
            )
            return user.id

    def login(self, client: TestClient, username: str, password: str = PASSWORD):
        return client.post("/api/login", json={"username": username, "password": password})

    def admin_client(self, username: str = "admin") -> TestClient:
        self.create_user(username, role="admin")
        client = self.new_client()
        response = self.login(client, username)
        self.assertEqual(response.status_code, 200, response.text)
        return client

    def session_count(self, user_id: int) -> int:
        with SessionLocal() as db:
            return db.query(LoginSession).filter(LoginSession.user_id == user_id).count()

    def stored_user(self, user_id: int) -> User | None:
        with SessionLocal() as db:
            user = db.get(User, user_id)
            if user is not None:
                db.expunge(user)
            return user
