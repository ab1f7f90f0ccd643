"""
Tests for login, logout and session handling
"""
import re

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from components.user.models import AuthSession, User
from components.user.repository import UserRepository


class TestLogin:
    """Test POST /login"""

    @pytest.mark.asyncio
    async def test_login_success(self, client: AsyncClient, alice: User):
        """Valid credentials return the user and a 64 hex char token"""
        response = await client.post('/login', json={'username': 'alice', 'password': 'correct'})

        assert response.status_code == 200
        data = response.json()
        assert data['success'] is True
        assert re.fullmatch(r'[0-9a-f]{64}', data['token'])
        assert data['user']['username'] == 'alice'
        assert data['user']['available_balance'] == 5_000_000
        assert 'password' not in data['user']
        assert 'password_hash' not in data['user']

    @pytest.mark.asyncio
    async def test_login_stores_token_hash_only(self, client: AsyncClient, db_session: AsyncSession, alice: User):
        """The raw token is never persisted"""
        response = await client.post('/login', json={'username': 'alice', 'password': 'correct'})
        token = response.json()['token']

        result = await db_session.execute(select(AuthSession).where(AuthSession.user_id == alice.id))
        stored = result.scalar_one()
        assert stored.token_hash != token
        assert len(stored.token_hash) == 64

    @pytest.mark.asyncio
    async def test_wrong_password_and_unknown_user_look_the_same(self, client: AsyncClient, alice: User):
        """No response difference reveals whether a username exists"""
        wrong_password = await client.post('/login', json={'username': 'alice', 'password': 'nope'})
        unknown_user = await client.post('/login', json={'username': 'mallory', 'password': 'correct'})

        assert wrong_password.status_code == unknown_user.status_code == 200
        assert wrong_password.json() == unknown_user.json()
        assert wrong_password.json()['success'] is False
        assert wrong_password.json()['message'] == 'Invalid username or password'
        assert wrong_password.json()['token'] is None

    @pytest.mark.asyncio
    async def test_username_is_trimmed(self, client: AsyncClient, alice: User):
        response = await client.post('/login', json={'username': '  alice ', 'password': 'correct'})
        assert response.json()['success'] is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize('payload', [
        {'username': '', 'password': 'correct'},
        {'username': 'alice', 'password': ''},
        {'username': '   ', 'password': '   '},
        {},
    ])
    async def test_missing_fields_rejected(self, client: AsyncClient, alice: User, payload: dict):
        """Empty input never reaches the credential check"""
        response = await client.post('/login', json=payload)

        assert response.status_code == 400
        data = response.json()
        assert data['success'] is False
        assert data['code'] == 'VALIDATION_ERROR'
        assert data['message'] == 'Username and password are required'

    @pytest.mark.asyncio
    async def test_storage_failure_is_generic(self, client: AsyncClient, alice: User, monkeypatch):
        """Driver errors become a 500 without leaking their text"""
        async def broken_lookup(self, username):
            raise OperationalError('SELECT * FROM users', {}, Exception('db-host-7 refused secret_user'))

        monkeypatch.setattr(UserRepository, 'get_by_username', broken_lookup)
        response = await client.post('/login', json={'username': 'alice', 'password': 'correct'})

        assert response.status_code == 500
        data = response.json()
        assert data['success'] is False
        assert data['code'] == 'SERVER_ERROR'
        assert data['message'] == 'Server error. Please try again later.'
        assert 'secret_user' not in response.text
        assert 'SELECT' not in response.text

    @pytest.mark.asyncio
    async def test_get_not_allowed(self, client: AsyncClient):
        response = await client.get('/login')

        assert response.status_code == 405
        assert response.json()['success'] is False


class TestSession:
    """Test bearer token handling"""

    @pytest.mark.asyncio
    async def test_me_returns_current_user(self, client: AsyncClient, auth_headers: dict):
        response = await client.get('/me', headers=auth_headers)

        assert response.status_code == 200
        assert response.json()['username'] == 'alice'

    @pytest.mark.asyncio
    async def test_missing_token(self, client: AsyncClient):
        response = await client.get('/me')

        assert response.status_code == 401
        assert response.json()['success'] is False

    @pytest.mark.asyncio
    async def test_unknown_token(self, client: AsyncClient):
        response = await client.get('/me', headers={'Authorization': 'Bearer ' + 'ab' * 32})

        assert response.status_code == 401
        assert response.json()['code'] == 'SESSION_INVALID'

    @pytest.mark.asyncio
    async def test_session_expires(self, client: AsyncClient, clock, auth_headers: dict):
        clock.advance(31 * 60)
        response = await client.get('/me', headers=auth_headers)

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_logout_revokes_token(self, client: AsyncClient, auth_headers: dict):
        """After logout the same token is rejected"""
        response = await client.post('/logout', headers=auth_headers)
        assert response.status_code == 200
        assert response.json()['success'] is True

        response = await client.get('/me', headers=auth_headers)
        assert response.status_code == 401
