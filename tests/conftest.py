import re
from types import SimpleNamespace
from typing import Any, AsyncGenerator
import uuid

import pytest
from beanie import Document, PydanticObjectId
from httpx import ASGITransport, AsyncClient

from medtrack.core.config import settings
from medtrack.core.db import DOCUMENT_MODELS
from medtrack.main import app
from medtrack.modules.patients.models import PatientProfile
from medtrack.modules.permissions.models import Permission
from medtrack.modules.users.models import User
from medtrack.shared.constants import PermissionLevel, PermissionStatus, Role

# Modules that build queries with beanie.operators; the fake store swaps the
# operators for tuples it can evaluate.
_OPERATOR_MODULES = [
    "medtrack.modules.medications.service",
    "medtrack.modules.notifications.service",
    "medtrack.modules.patients.service",
    "medtrack.modules.permissions.service",
    "medtrack.modules.treatments.service",
]


class _FieldProxy:
    """Minimal stand-in for Beanie field proxies used in query expressions."""

    def __init__(self, name: str) -> None:
        self.name = name

    def __eq__(self, other: object) -> tuple[str, str, object]:  # type: ignore[override]
        return ("eq", self.name, other)

    def __ne__(self, other: object) -> tuple[str, str, object]:  # type: ignore[override]
        return ("ne", self.name, other)

    def __ge__(self, other: object) -> tuple[str, str, object]:  # type: ignore[override]
        return ("ge", self.name, other)

    def __le__(self, other: object) -> tuple[str, str, object]:  # type: ignore[override]
        return ("le", self.name, other)

    def __gt__(self, other: object) -> tuple[str, str, object]:  # type: ignore[override]
        return ("gt", self.name, other)

    def __lt__(self, other: object) -> tuple[str, str, object]:  # type: ignore[override]
        return ("lt", self.name, other)


def _install_field_proxies() -> None:
    # These proxies prevent AttributeErrors when code builds expressions like User.email == email
    _dummy_settings = SimpleNamespace(
        pymongo_collection=None, motor_collection=None, use_state_management=False
    )
    for model in DOCUMENT_MODELS:
        for name in model.model_fields:
            setattr(model, name, _FieldProxy(name))
        # Prevent Beanie from requiring real collection initialization
        if getattr(model, "_document_settings", None) is None:
            model._document_settings = _dummy_settings  # type: ignore[attr-defined]


def _same(left: object, right: object) -> bool:
    return left == right or str(left) == str(right)


def _matches(document: Document, expr: tuple) -> bool:
    op, field, value = expr
    if op == "or":
        return any(_matches(document, sub) for sub in value)

    attr = getattr(document, field, None)
    if op == "eq":
        return _same(attr, value)
    if op == "ne":
        return not _same(attr, value)
    if op == "in":
        return any(_same(attr, item) for item in value)
    if op == "regex":
        pattern, options = value
        flags = re.IGNORECASE if "i" in options else 0
        return attr is not None and re.search(pattern, str(attr), flags) is not None
    if attr is None:
        return False
    if op == "ge":
        return attr >= value
    if op == "le":
        return attr <= value
    if op == "gt":
        return attr > value
    if op == "lt":
        return attr < value
    raise AssertionError(f"unsupported filter {expr!r}")


def _sort_key(field: str):
    def _key(document: Document) -> tuple:
        value = getattr(document, field, None)
        return (0, "") if value is None else (1, value)

    return _key


class _FakeQuery:
    def __init__(self, bucket: dict[str, Document], filters: list[tuple]) -> None:
        self.bucket = bucket
        self.filters = filters
        self._sort: list[str] = []
        self._skip = 0
        self._limit: int | None = None

    def find(self, *exprs: tuple) -> "_FakeQuery":
        return _FakeQuery(self.bucket, [*self.filters, *exprs])

    def sort(self, *specs: str) -> "_FakeQuery":
        self._sort = list(specs)
        return self

    def skip(self, count: int) -> "_FakeQuery":
        self._skip = count
        return self

    def limit(self, count: int) -> "_FakeQuery":
        self._limit = count
        return self

    def _matching(self) -> list[Document]:
        return [
            doc
            for doc in self.bucket.values()
            if all(_matches(doc, expr) for expr in self.filters)
        ]

    async def to_list(self) -> list[Document]:
        items = self._matching()
        # Apply keys last-to-first so the first spec wins (stable sort).
        for spec in reversed(self._sort):
            descending = spec.startswith("-")
            field = spec.lstrip("+-")
            items.sort(key=_sort_key(field), reverse=descending)
        if self._skip:
            items = items[self._skip :]
        if self._limit is not None:
            items = items[: self._limit]
        return items

    async def first_or_none(self) -> Document | None:
        items = await self.to_list()
        return items[0] if items else None

    async def count(self) -> int:
        return len(self._matching())

    async def delete(self) -> SimpleNamespace:
        doomed = self._matching()
        for doc in doomed:
            self.bucket.pop(str(doc.id), None)
        return SimpleNamespace(deleted_count=len(doomed))


def _patch_model(
    monkeypatch: pytest.MonkeyPatch, model: type[Document], store: dict[str, Any]
) -> None:
    bucket: dict[str, Document] = store.setdefault(model.__name__, {})

    def _ensure_id(document: Document) -> None:
        if getattr(document, "id", None) is None:
            document.id = PydanticObjectId()

    async def _insert(self: Document) -> Document:
        _ensure_id(self)
        bucket[str(self.id)] = self
        return self

    async def _save(self: Document) -> Document:
        _ensure_id(self)
        bucket[str(self.id)] = self
        return self

    async def _delete(self: Document) -> None:
        bucket.pop(str(self.id), None)

    async def _get(document_id: object) -> Document | None:
        return bucket.get(str(document_id))

    def _find(*exprs: tuple) -> _FakeQuery:
        return _FakeQuery(bucket, list(exprs))

    async def _find_one(*exprs: tuple) -> Document | None:
        return await _find(*exprs).first_or_none()

    monkeypatch.setattr(model, "insert", _insert, raising=False)
    monkeypatch.setattr(model, "save", _save, raising=False)
    monkeypatch.setattr(model, "delete", _delete, raising=False)
    monkeypatch.setattr(model, "get", staticmethod(_get), raising=False)
    monkeypatch.setattr(model, "find", staticmethod(_find), raising=False)
    monkeypatch.setattr(model, "find_one", staticmethod(_find_one), raising=False)


def _patch_operators(monkeypatch: pytest.MonkeyPatch) -> None:
    def _fake_in(field: object, values: list[object]) -> tuple[str, str, list[object]]:
        return ("in", getattr(field, "name", str(field)), list(values))

    def _fake_or(*exprs: tuple) -> tuple[str, None, list[tuple]]:
        return ("or", None, list(exprs))

    def _fake_regex(
        field: object, pattern: str, options: str = ""
    ) -> tuple[str, str, tuple[str, str]]:
        return ("regex", getattr(field, "name", str(field)), (pattern, options))

    for module in _OPERATOR_MODULES:
        monkeypatch.setattr(f"{module}.In", _fake_in, raising=False)
        monkeypatch.setattr(f"{module}.Or", _fake_or, raising=False)
        monkeypatch.setattr(f"{module}.RegEx", _fake_regex, raising=False)


@pytest.fixture(autouse=True)
def mock_security(monkeypatch: pytest.MonkeyPatch) -> None:
    def mock_hash(password: str) -> str:
        return f"hashed_{password}"

    def mock_verify(plain: str, hashed: str) -> bool:
        return hashed == f"hashed_{plain}"

    monkeypatch.setattr("medtrack.core.security.get_password_hash", mock_hash)
    monkeypatch.setattr("medtrack.core.security.verify_password", mock_verify)


@pytest.fixture
async def db(monkeypatch: pytest.MonkeyPatch) -> AsyncGenerator[dict[str, Any], None]:
    """
    Provide an in-memory stand-in for Mongo to keep tests hermetic without a running DB.
    """
    settings.MONGODB_DB_NAME = "test_medtrack_db"
    store: dict[str, Any] = {}

    _install_field_proxies()
    for model in DOCUMENT_MODELS:
        _patch_model(monkeypatch, model, store)
    _patch_operators(monkeypatch)

    # Stub init_db to avoid real connection attempts if invoked elsewhere
    async def _init_db_stub() -> object:
        return SimpleNamespace(close=lambda: None)

    monkeypatch.setattr("medtrack.core.db.init_db", _init_db_stub, raising=False)

    yield store

    store.clear()


@pytest.fixture
async def client(db: dict[str, Any]) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
async def create_user_func(db: dict[str, Any]) -> Any:
    from medtrack.core import security

    async def _create_user(password: str = "password123", **kwargs: Any) -> User:
        user_data = {
            "email": f"test_{uuid.uuid4()}@example.com",
            "hashed_password": security.get_password_hash(password),
            "role": Role.PATIENT,
            "name": "Test User",
        }
        user_data.update(kwargs)  # allow override

        user = User(**user_data)
        await user.insert()
        return user

    return _create_user


@pytest.fixture
async def create_patient_func(create_user_func: Any) -> Any:
    """Create a PATIENT user together with their (empty) profile."""

    async def _create_patient(**kwargs: Any) -> tuple[User, PatientProfile]:
        user = await create_user_func(role=Role.PATIENT, **kwargs)
        profile = PatientProfile(user_id=str(user.id), name=user.name)
        await profile.insert()
        return user, profile

    return _create_patient


@pytest.fixture
async def grant_func(db: dict[str, Any]) -> Any:
    """Store a Permission linking a caregiver to a patient profile."""

    async def _grant(
        profile: PatientProfile,
        caregiver: User,
        level: PermissionLevel = PermissionLevel.READ,
        status: PermissionStatus = PermissionStatus.ACCEPTED,
    ) -> Permission:
        permission = Permission(
            patient_profile_id=str(profile.id),
            caregiver_id=str(caregiver.id),
            level=level,
            status=status,
        )
        await permission.insert()
        return permission

    return _grant
