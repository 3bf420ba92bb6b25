"""Pytest configuration and shared fixtures."""

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from permissions_manager.config import Settings
from permissions_manager.core.cache import InMemoryPermissionRegistrar, get_registrar
from permissions_manager.core.database import Base, get_db
from permissions_manager.core.permissions import (
    CategoryRegistry,
    DeletionPolicy,
    GuardScopeResolver,
    HolderCounter,
    Permission,
    PermissionChecker,
    Role,
)
from permissions_manager.main import create_app
from permissions_manager.modules.permissions.repos import PermissionRepository
from permissions_manager.modules.permissions.services import PermissionService
from permissions_manager.modules.principals.repos import AssignmentRepository
from permissions_manager.modules.principals.services import PrincipalService
from permissions_manager.modules.roles.repos import RoleRepository
from permissions_manager.modules.roles.services import RoleService


# In-memory database shared by every connection of one engine
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def engine():
    """Create test database engine with a fresh schema."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def db(engine) -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session for tests.

    Services commit their own unit of work, so every test gets a fresh
    in-memory database instead of a rolled-back transaction.
    """
    session_factory = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with session_factory() as session:
        yield session


@pytest.fixture
def settings() -> Settings:
    """Settings with the shipped defaults, ignoring any local .env."""
    return Settings(_env_file=None)


@pytest.fixture
def registrar() -> InMemoryPermissionRegistrar:
    """Provide a fresh in-memory registrar."""
    return InMemoryPermissionRegistrar()


@pytest.fixture
def guards(settings: Settings) -> GuardScopeResolver:
    """Guard resolver with selection disabled ("web" forced)."""
    return GuardScopeResolver.from_settings(settings)


@pytest.fixture
def categories(settings: Settings) -> CategoryRegistry:
    return CategoryRegistry(settings.categories)


@pytest.fixture
def holders(db: AsyncSession) -> HolderCounter:
    return HolderCounter(db)


@pytest.fixture
def policy(holders: HolderCounter, settings: Settings) -> DeletionPolicy:
    return DeletionPolicy(holders, settings.protected_roles)


@pytest.fixture
def checker(db: AsyncSession, registrar: InMemoryPermissionRegistrar) -> PermissionChecker:
    return PermissionChecker(db, registrar)


# ============================================================
# Repositories and Services
# ============================================================


@pytest.fixture
def permission_repo(db: AsyncSession) -> PermissionRepository:
    return PermissionRepository(db)


@pytest.fixture
def role_repo(db: AsyncSession) -> RoleRepository:
    return RoleRepository(db)


@pytest.fixture
def assignment_repo(db: AsyncSession) -> AssignmentRepository:
    return AssignmentRepository(db)


@pytest.fixture
def permission_service(
    permission_repo: PermissionRepository,
    role_repo: RoleRepository,
    guards: GuardScopeResolver,
    categories: CategoryRegistry,
    policy: DeletionPolicy,
    holders: HolderCounter,
    registrar: InMemoryPermissionRegistrar,
    settings: Settings,
) -> PermissionService:
    """Permission service wired to the test session."""
    return PermissionService(
        permission_repo,
        role_repo,
        guards,
        categories,
        policy,
        holders,
        registrar,
        settings,
    )


@pytest.fixture
def role_service(
    role_repo: RoleRepository,
    permission_repo: PermissionRepository,
    guards: GuardScopeResolver,
    policy: DeletionPolicy,
    holders: HolderCounter,
    registrar: InMemoryPermissionRegistrar,
    settings: Settings,
) -> RoleService:
    """Role service wired to the test session."""
    return RoleService(
        role_repo, permission_repo, guards, policy, holders, registrar, settings
    )


@pytest.fixture
def principal_service(
    assignment_repo: AssignmentRepository,
    role_repo: RoleRepository,
    permission_repo: PermissionRepository,
    guards: GuardScopeResolver,
    checker: PermissionChecker,
    registrar: InMemoryPermissionRegistrar,
) -> PrincipalService:
    """Principal service wired to the test session."""
    return PrincipalService(
        assignment_repo, role_repo, permission_repo, guards, checker, registrar
    )


# ============================================================
# Application
# ============================================================


@pytest.fixture
async def app(db: AsyncSession, registrar: InMemoryPermissionRegistrar):
    """Create test application instance."""
    application = create_app()

    # Override database dependency
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    application.dependency_overrides[get_db] = override_get_db
    application.dependency_overrides[get_registrar] = lambda: registrar

    yield application

    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Provide async HTTP client for API testing."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


# ============================================================
# Entity Fixtures
# ============================================================


@pytest.fixture
async def web_permission(db: AsyncSession) -> Permission:
    """Create an "edit articles" permission in the web guard."""
    permission = Permission(
        name="edit articles", category="content", guard_name="web", roles=[]
    )
    db.add(permission)
    await db.commit()
    return permission


@pytest.fixture
async def web_role(db: AsyncSession) -> Role:
    """Create an unprotected "Manager" role in the web guard."""
    role = Role(
        name="Manager", description="Runs the team", guard_name="web", permissions=[]
    )
    db.add(role)
    await db.commit()
    return role


@pytest.fixture
async def api_role(db: AsyncSession) -> Role:
    """Create a role in the api guard."""
    role = Role(name="Integrator", guard_name="api", permissions=[])
    db.add(role)
    await db.commit()
    return role


@pytest.fixture
async def admin_role(db: AsyncSession) -> Role:
    """Create the protected "Admin" role in the web guard."""
    role = Role(name="Admin", guard_name="web", is_protected=True, permissions=[])
    db.add(role)
    await db.commit()
    return role
