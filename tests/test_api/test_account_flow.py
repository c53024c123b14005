"""End-to-end account tests against a real SQLite database."""

from unittest.mock import MagicMock

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from chirper.models.tweet import Tweet
from chirper.models.user import User
from chirper.utils.security import decode_access_token, verify_password

REGISTRATION = {
    "email": "John.Doe@Example.com",
    "username": "JohnDoe",
    "fullname": "John Doe",
    "password": "securepassword123",
}


async def register(client: AsyncClient, mock_mailer: MagicMock) -> tuple[int, str]:
    """Register the sample user and return its id and emailed confirmation hash."""
    response = await client.post("/users", json=REGISTRATION)
    assert response.status_code == 201
    user_id = response.json()["data"]["id"]
    confirm_hash = mock_mailer.send_verification.await_args.args[1]
    return user_id, confirm_hash


class TestAccountFlow:
    """Register, verify, log in and read back through the real ORM."""

    async def test_register_verify_and_fetch(
        self,
        client: AsyncClient,
        sqlite_db: async_sessionmaker[AsyncSession],
        mock_mailer: MagicMock,
    ) -> None:
        """Test the confirmed flag flips and get-by-id reads it back with tweets."""
        user_id, confirm_hash = await register(client, mock_mailer)

        async with sqlite_db() as session:
            stored = await session.get(User, user_id)
            assert stored is not None
            assert stored.email == "john.doe@example.com"
            assert stored.username == "johndoe"
            assert stored.confirmed is False
            assert stored.confirm_hash == confirm_hash
            assert verify_password("securepassword123", stored.password_hash)
            session.add(Tweet(text="first chirp", user_id=user_id))
            await session.commit()

        before = await client.get(f"/users/{user_id}")
        assert before.json()["data"]["confirmed"] is False

        verified = await client.get("/auth/verify", params={"hash": confirm_hash})
        assert verified.status_code == 200
        data = verified.json()["data"]
        assert data["confirmed"] is True
        payload = decode_access_token(data["token"])
        assert payload is not None
        assert payload["sub"] == str(user_id)

        again = await client.get("/auth/verify", params={"hash": confirm_hash})
        assert again.status_code == 200

        fetched = await client.get(f"/users/{user_id}")
        assert fetched.status_code == 200
        user = fetched.json()["data"]
        assert user["confirmed"] is True
        assert [tweet["text"] for tweet in user["tweets"]] == ["first chirp"]
        assert not user["created_at"].endswith("+00:00")

        listed = await client.get("/users")
        assert [u["id"] for u in listed.json()["data"]] == [user_id]

    async def test_unknown_hash_and_ids(
        self,
        client: AsyncClient,
        sqlite_db: async_sessionmaker[AsyncSession],
        mock_mailer: MagicMock,
    ) -> None:
        """Test misses against a populated table."""
        user_id, _ = await register(client, mock_mailer)

        unknown = await client.get("/auth/verify", params={"hash": "0" * 64})
        assert unknown.status_code == 404

        missing = await client.get(f"/users/{user_id + 1}")
        assert missing.status_code == 404

        huge = await client.get("/users/99999999999999999999")
        assert huge.status_code == 404

    async def test_login_with_mixed_case_email(
        self,
        client: AsyncClient,
        sqlite_db: async_sessionmaker[AsyncSession],
        mock_mailer: MagicMock,
    ) -> None:
        """Test email login ignores case once the account is confirmed."""
        _, confirm_hash = await register(client, mock_mailer)
        credentials = {"username": "John.Doe@Example.com", "password": "securepassword123"}

        unconfirmed = await client.post("/auth/login", json=credentials)
        assert unconfirmed.status_code == 403

        await client.get("/auth/verify", params={"hash": confirm_hash})

        response = await client.post("/auth/login", json=credentials)
        assert response.status_code == 200
        token = response.json()["data"]["token"]

        me = await client.get("/users/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["data"]["email"] == "john.doe@example.com"

    @pytest.mark.parametrize("email", ["john.doe@example.com", "JOHN.DOE@EXAMPLE.COM"])
    async def test_duplicate_email_ignores_case(
        self,
        client: AsyncClient,
        sqlite_db: async_sessionmaker[AsyncSession],
        mock_mailer: MagicMock,
        email: str,
    ) -> None:
        """Test a second registration differing only in email case is rejected."""
        await register(client, mock_mailer)

        response = await client.post(
            "/users", json={**REGISTRATION, "username": "someoneelse", "email": email}
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["loc"] == ["body", "email"]

        async with sqlite_db() as session:
            result = await session.execute(select(User))
            assert len(result.scalars().all()) == 1
