import pytest
from datetime import date
from fastapi.testclient import TestClient

from services.participant_service import ParticipantService
from services.session_service import SessionService
from services.supabase_service import SupabaseService
from services.weight_workflow import WeightUpdateWorkflow
from tests.fake_supabase import FakeSupabaseClient

ADMIN_MOBILE = '9999900000'


@pytest.fixture
def today() -> date:
    return date(2026, 10, 18)


@pytest.fixture
def fake_client() -> FakeSupabaseClient:
    return FakeSupabaseClient()


@pytest.fixture
def supabase(fake_client) -> SupabaseService:
    return SupabaseService(client=fake_client)


@pytest.fixture
def participant_service(supabase) -> ParticipantService:
    return ParticipantService(supabase)


@pytest.fixture
def workflow(supabase) -> WeightUpdateWorkflow:
    return WeightUpdateWorkflow(supabase)


@pytest.fixture
def sessions(supabase) -> SessionService:
    return SessionService(supabase, admin_mobile=ADMIN_MOBILE)


@pytest.fixture
def register(participant_service, today):
    """Register a participant and return the stored users row"""
    async def _register(mobile='9876543210', name='Asha Verma', start_weight=90.0, target_weight=80.0):
        return await participant_service.register(mobile, name, start_weight, target_weight, today)
    return _register


@pytest.fixture
def api_client(monkeypatch, supabase, sessions) -> TestClient:
    """TestClient wired to the fake backend; startup is not run"""
    monkeypatch.setattr('services.supabase_service.supabase_service', supabase)
    monkeypatch.setattr('services.session_service.session_service', sessions)

    from main import app
    return TestClient(app)
