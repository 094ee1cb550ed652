import pytest
from datetime import timedelta
from fastapi import HTTPException

from split_ledger.config import Settings
from split_ledger.api.v1.deps import get_current_user_id
from split_ledger.services.auth.jwt_handler import create_access_token, decode_access_token, get_current_user


@pytest.mark.unit
class TestJwtHandler:

    def test_token_round_trip(self):
        token = create_access_token("user-1")
        assert decode_access_token(token)["user_id"] == "user-1"
        assert get_current_user(token) == "user-1"

    def test_expired_token(self):
        token = create_access_token("user-1", expires_delta=timedelta(seconds=-5))
        assert decode_access_token(token) is None
        assert get_current_user(token) is None

    def test_garbage_token(self):
        assert get_current_user("not-a-jwt") is None


@pytest.mark.unit
class TestCurrentUserDependency:

    def test_plain_and_bearer_tokens(self):
        token = create_access_token("user-2")
        assert get_current_user_id(token) == "user-2"
        assert get_current_user_id(f"Bearer {token}") == "user-2"

    def test_invalid_token_is_unauthorized(self):
        with pytest.raises(HTTPException) as exc:
            get_current_user_id("Bearer nope")
        assert exc.value.status_code == 401


@pytest.mark.unit
class TestSettings:

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("MAX_GROUP_MEMBERS", raising=False)
        settings = Settings(_env_file=None)
        assert settings.max_group_members == 3
        assert settings.jwt_algorithm == "HS256"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("MAX_GROUP_MEMBERS", "5")
        monkeypatch.setenv("DATABASE_URL", "postgresql://ledger@db/ledger")
        settings = Settings(_env_file=None)
        assert settings.max_group_members == 5
        assert settings.database_url == "postgresql://ledger@db/ledger"
