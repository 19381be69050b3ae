from __future__ import annotations

from argon2 import PasswordHasher as Argon2Hasher

from api.core.security import PasswordHasher
from api.domain.credentials import AuthErrors, AuthSuccess, FieldError, UsernamePasswordInput
from api.repositories.sql_repository import SQLRepository
from api.services import auth_service
from api.services.auth_service import AuthContext
from api.services.session_service import SessionHandle


def _ctx(repo: SQLRepository | None = None, session: SessionHandle | None = None, **kw) -> AuthContext:
    repo = repo or SQLRepository()
    return AuthContext(session=session or SessionHandle(repo), users=repo, **kw)


def _opts(username: str, password: str) -> UsernamePasswordInput:
    return UsernamePasswordInput(username=username, password=password)


class _UntouchableStore:
    def __getattr__(self, name):
        raise AssertionError(f"store should not be used: {name}")


# -------------------------------------- register --------------------------------------
def test_register_rejects_short_username_without_persisting(db_env):
    repo = SQLRepository()
    result = auth_service.register(_ctx(repo), _opts("ab", "xxxx"))

    assert result == AuthErrors([FieldError("username", "length must be greater than 2")])
    assert repo.list_users() == []


def test_register_rejects_short_password_without_persisting(db_env):
    repo = SQLRepository()
    result = auth_service.register(_ctx(repo), _opts("alice", "xyz"))

    assert result == AuthErrors([FieldError("password", "length must be greater than 3")])
    assert repo.list_users() == []


def test_register_accepts_minimum_lengths(db_env):
    result = auth_service.register(_ctx(), _opts("abc", "abcd"))

    assert isinstance(result, AuthSuccess)
    assert result.user.username == "abc"


def test_register_checks_username_before_password(db_env):
    result = auth_service.register(_ctx(), _opts("a", "x"))
    assert [e.field for e in result.errors] == ["username"]


def test_register_stores_hashed_password(db_env):
    repo = SQLRepository()
    result = auth_service.register(_ctx(repo), _opts("alice", "secret1"))

    assert isinstance(result, AuthSuccess)
    assert result.user.username == "alice"
    stored = repo.get_user(result.user.id)
    assert stored.password != "secret1"
    assert PasswordHasher().verify(stored.password, "secret1") is True


def test_register_does_not_log_in(db_env):
    ctx = _ctx()
    auth_service.register(ctx, _opts("alice", "secret1"))
    assert ctx.session.get("userId") is None
    assert ctx.session.token is None


def test_register_duplicate_username(db_env):
    repo = SQLRepository()
    auth_service.register(_ctx(repo), _opts("alice", "secret1"))
    result = auth_service.register(_ctx(repo), _opts("alice", "other"))

    assert result == AuthErrors([FieldError("username", "username already taken")])
    assert len(repo.list_users()) == 1


# -------------------------------------- login --------------------------------------
def test_login_unknown_username(db_env):
    ctx = _ctx()
    result = auth_service.login(ctx, _opts("bob", "x"))

    assert result == AuthErrors([FieldError("username", "that username does not exist")])
    assert ctx.session.get("userId") is None


def test_login_wrong_password_leaves_session_unset(db_env):
    repo = SQLRepository()
    auth_service.register(_ctx(repo), _opts("alice", "secret1"))
    ctx = _ctx(repo)

    result = auth_service.login(ctx, _opts("alice", "wrong"))

    assert result == AuthErrors([FieldError("password", "incorrect password")])
    assert ctx.session.get("userId") is None
    assert ctx.session.token is None


def test_login_success_sets_session_user(db_env):
    repo = SQLRepository()
    registered = auth_service.register(_ctx(repo), _opts("alice", "secret1")).user
    ctx = _ctx(repo)

    result = auth_service.login(ctx, _opts("alice", "secret1"))

    assert isinstance(result, AuthSuccess)
    assert result.user.id == registered.id
    assert ctx.session.user_id == registered.id
    assert ctx.session.issued is True

    reloaded = SessionHandle.load(repo, ctx.session.token)
    assert reloaded.user_id == registered.id


def test_login_rotates_preexisting_session_token(db_env):
    repo = SQLRepository()
    auth_service.register(_ctx(repo), _opts("alice", "secret1"))
    planted = repo.create_user_session({"theme": "dark"}, ttl_seconds=3600)
    session = SessionHandle.load(repo, planted)

    auth_service.login(_ctx(repo, session=session), _opts("alice", "secret1"))

    assert session.token != planted
    assert session.issued is True
    assert repo.get_user_session(planted) is None
    rotated = repo.get_user_session(session.token)
    assert rotated.data["theme"] == "dark"
    assert rotated.data["userId"] == session.user_id


def test_login_upgrades_weak_hash(db_env):
    repo = SQLRepository()
    weak = PasswordHasher(Argon2Hasher(time_cost=1, memory_cost=8, parallelism=1))
    user = auth_service.register(_ctx(repo, hasher=weak), _opts("alice", "secret1")).user
    old_digest = repo.get_user(user.id).password

    result = auth_service.login(_ctx(repo), _opts("alice", "secret1"))

    assert isinstance(result, AuthSuccess)
    new_digest = repo.get_user(user.id).password
    assert new_digest != old_digest
    assert PasswordHasher().needs_rehash(new_digest) is False
    assert PasswordHasher().verify(new_digest, "secret1") is True


# -------------------------------------- me / logout --------------------------------------
def test_me_without_session_user_skips_store():
    store = _UntouchableStore()
    ctx = AuthContext(session=SessionHandle(store), users=store)  # type: ignore[arg-type]
    assert auth_service.me(ctx) is None


def test_me_returns_logged_in_user(db_env):
    repo = SQLRepository()
    auth_service.register(_ctx(repo), _opts("alice", "secret1"))
    ctx = _ctx(repo)
    auth_service.login(ctx, _opts("alice", "secret1"))

    user = auth_service.me(_ctx(repo, session=SessionHandle.load(repo, ctx.session.token)))

    assert user is not None
    assert user.username == "alice"


def test_me_with_stale_user_id_returns_none(db_env):
    repo = SQLRepository()
    token = repo.create_user_session({"userId": 999}, ttl_seconds=3600)
    assert auth_service.me(_ctx(repo, session=SessionHandle.load(repo, token))) is None


def test_logout_clears_session(db_env):
    repo = SQLRepository()
    auth_service.register(_ctx(repo), _opts("alice", "secret1"))
    ctx = _ctx(repo)
    auth_service.login(ctx, _opts("alice", "secret1"))
    token = ctx.session.token

    assert auth_service.logout(ctx) is True
    assert repo.get_user_session(token) is None
    assert auth_service.me(ctx) is None
    assert auth_service.logout(ctx) is False


def test_example_walkthrough(db_env):
    repo = SQLRepository()
    ctx = _ctx(repo)

    assert auth_service.register(ctx, _opts("ab", "xxxx")).errors[0].field == "username"
    assert auth_service.register(ctx, _opts("alice", "xy")).errors[0].field == "password"
    alice = auth_service.register(ctx, _opts("alice", "secret1")).user
    assert alice.id == 1
    assert auth_service.register(ctx, _opts("alice", "other")).errors[0].message == "username already taken"
    assert auth_service.login(ctx, _opts("bob", "x")).errors[0].message == "that username does not exist"
    assert auth_service.login(ctx, _opts("alice", "wrong")).errors[0].message == "incorrect password"
    assert auth_service.login(ctx, _opts("alice", "secret1")).user.username == "alice"
    assert ctx.session.get("userId") == 1
