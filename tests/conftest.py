"""
Campus Tuition Pay - Test Configuration and Fixtures
"""
import os
from datetime import date, datetime, timedelta
from typing import AsyncGenerator, List

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from faker import Faker

# Set testing environment before any settings are loaded
os.environ['DB_URL'] = 'sqlite+aiosqlite:///./test.db'
os.environ['DB_CREATE_ALL'] = 'false'
os.environ['PASSWORD_HASH_ITERATIONS'] = '1000'
os.environ['OTP_SWEEP_INTERVAL_SECONDS'] = '0'

from main import app
from components.core.clock import get_clock
from components.core.database import Base
from components.core.init_db import get_db
from components.otp.delivery import OtpDelivery, get_otp_delivery
from components.student.models import DebtStatus, Student, TuitionDebt
from components.user.models import User
from components.user.repository import UserRepository

fake = Faker()

PASSWORD = 'correct'
TUITION_AMOUNT = 2_500_000


class FakeClock:
    """Controllable replacement for utcnow."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class CapturingDelivery(OtpDelivery):
    """Keeps sent codes so tests can read the payer's 'inbox'."""

    def __init__(self):
        self.sent: List[dict] = []

    async def send(self, email, code, expires_at, payment_id) -> None:
        self.sent.append({
            'email': email,
            'code': code,
            'expires_at': expires_at,
            'payment_id': payment_id,
        })

    def last_code(self) -> str:
        return self.sent[-1]['code']


@pytest.fixture
async def db_session(tmp_path) -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database for each test"""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session
        await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2025, 9, 28, 10, 0, 0))


@pytest.fixture
def outbox() -> CapturingDelivery:
    return CapturingDelivery()


@pytest.fixture
async def client(db_session: AsyncSession, clock: FakeClock, outbox: CapturingDelivery) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database, clock and OTP delivery overrides"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_otp_delivery] = lambda: outbox

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


async def create_payer(db_session: AsyncSession, username: str, balance: int) -> User:
    return await UserRepository(db_session).create(
        username=username,
        password=PASSWORD,
        full_name=fake.name(),
        email=fake.email(),
        available_balance=balance,
        phone_number=fake.numerify('09########'),
        program='Software Engineering',
    )


@pytest.fixture
async def alice(db_session: AsyncSession) -> User:
    """Payer who can afford one semester of tuition"""
    return await create_payer(db_session, 'alice', 5_000_000)


@pytest.fixture
async def bob(db_session: AsyncSession) -> User:
    """Payer whose balance is below the tuition amount"""
    return await create_payer(db_session, 'bob', 2_000_000)


@pytest.fixture
async def student(db_session: AsyncSession) -> Student:
    """Student 523K0077 with one unpaid semester"""
    record = Student(student_id='523K0077', full_name='Saw Baw Mu Thaw', program='Software Engineering')
    db_session.add(record)
    await db_session.flush()
    db_session.add(TuitionDebt(
        student_id=record.student_id,
        amount=TUITION_AMOUNT,
        semester='SEMESTER 1',
        academic_year='2025-2026',
        due_date=date(2025, 12, 30),
        status=DebtStatus.UNPAID,
    ))
    await db_session.commit()
    return record


async def _login(client: AsyncClient, username: str, password: str = PASSWORD) -> dict:
    response = await client.post('/login', json={'username': username, 'password': password})
    data = response.json()
    assert data['success'] is True, data
    return {'Authorization': f"Bearer {data['token']}"}


@pytest.fixture
async def auth_headers(client: AsyncClient, alice: User) -> dict:
    """Bearer header for alice obtained through /login"""
    return await _login(client, 'alice')


@pytest.fixture
async def bob_headers(client: AsyncClient, bob: User) -> dict:
    return await _login(client, 'bob')

