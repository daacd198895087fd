"""
Pytest fixtures for the worker publisher backend.

Provides:
- In-memory SQLite ledger, fresh schema per test
- FakeCloudflareClient recording every platform call
- Reconciler wired on the fake client with a deterministic clock
- FastAPI test client with the database and platform client overridden
"""

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.core.database import Base, get_db
from app.core.events import DeploymentEventEmitter
from app.external.cloudflare_client import CloudflareAPIError
from app.repositories.deployment_repository import WorkerDeploymentRepository
from app.repositories.server_repository import McpServerRepository
from app.services.deployment_reconciler import DeploymentReconciler
from app.services.namespace_provisioner import NamespaceProvisioner
from app.services.script_publisher import ScriptPublisher


test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


class FakeCloudflareClient:
    """In-memory stand-in for CloudflareClient.

    `failures` maps a method name to the exception it should raise.
    """

    def __init__(self, namespaces=None):
        self.namespaces = set(namespaces or [])
        self.scripts = {}
        self.calls = []
        self.failures = {}

    def _call(self, name, *args, **kwargs):
        self.calls.append((name, args, kwargs))
        if name in self.failures:
            raise self.failures[name]

    def call_names(self):
        return [name for name, _, _ in self.calls]

    def calls_to(self, name):
        return [(args, kwargs) for call_name, args, kwargs in self.calls if call_name == name]

    def get_namespace(self, namespace):
        self._call("get_namespace", namespace)
        if namespace not in self.namespaces:
            raise CloudflareAPIError(404, [{"code": 100119, "message": "Namespace not found"}])
        return {"name": namespace}

    def create_namespace(self, namespace):
        self._call("create_namespace", namespace)
        if namespace in self.namespaces:
            raise CloudflareAPIError(409, [{"code": 100120, "message": "Namespace already exists"}])
        self.namespaces.add(namespace)
        return {"name": namespace}

    def upload_script(self, namespace, script_name, metadata, files):
        self._call("upload_script", namespace, script_name, metadata=metadata, files=files)
        self.scripts[(namespace, script_name)] = {"metadata": metadata, "files": files}
        return {"id": script_name}

    def delete_script(self, namespace, script_name):
        self._call("delete_script", namespace, script_name)
        self.scripts.pop((namespace, script_name), None)
        return None


class RecordingEventEmitter(DeploymentEventEmitter):
    """Keeps emitted events in memory instead of logging them."""

    def __init__(self):
        super().__init__()
        self.events = []

    def emit(self, event, **fields):
        self.events.append((event, fields))

    def names(self):
        return [name for name, _ in self.events]


class SteppingClock:
    """Returns a strictly increasing time on every call."""

    def __init__(self, start=datetime(2026, 1, 1, 12, 0, 0), step=timedelta(seconds=1)):
        self.now = start
        self.step = step

    def __call__(self):
        self.now = self.now + self.step
        return self.now


@pytest.fixture(scope="function")
def db_session():
    """Create fresh database for each test."""
    Base.metadata.create_all(bind=test_engine)
    session = TestingSessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def cloudflare():
    return FakeCloudflareClient()


@pytest.fixture
def clock():
    return SteppingClock()


@pytest.fixture
def events():
    return RecordingEventEmitter()


@pytest.fixture
def deployment_repo(db_session):
    return WorkerDeploymentRepository(db_session)


@pytest.fixture
def server_repo(db_session):
    return McpServerRepository(db_session)


@pytest.fixture
def reconciler(deployment_repo, server_repo, cloudflare, clock, events):
    return DeploymentReconciler(
        deployment_repository=deployment_repo,
        server_repository=server_repo,
        provisioner=NamespaceProvisioner(cloudflare),
        publisher=ScriptPublisher(cloudflare),
        namespace="meta-mcp",
        workers_domain="workers.dev",
        clock=clock,
        events=events,
    )


@pytest.fixture(scope="function")
def client(db_session, cloudflare, monkeypatch):
    """Test client with fresh database and the fake platform client."""
    from app.main import app

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    monkeypatch.setattr("app.dependencies.get_cloudflare_client", lambda: cloudflare)
    app.dependency_overrides[get_db] = override_get_db

    yield TestClient(app)

    app.dependency_overrides.clear()


# ============================================================
# Test Data Fixtures
# ============================================================

@pytest.fixture
def sample_script():
    return "export default { async fetch() { return new Response('ok'); } };"


@pytest.fixture
def sample_bindings():
    return [
        {"type": "plain_text", "name": "GREETING", "text": "hello"},
        {"type": "kv_namespace", "name": "CACHE", "namespace_id": "kv-123"},
        {"type": "r2_bucket", "name": "ASSETS", "bucket_name": "assets"},
        {"type": "d1", "name": "DB", "id": "d1-456"},
    ]


@pytest.fixture
def mcp_server(server_repo):
    return server_repo.create({"id": "srv-1", "name": "Weather MCP"})
