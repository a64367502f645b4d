"""Session resolution: get-or-create, dev user, demo login and signup."""

import asyncio

import pytest

from app.core.exceptions import ConflictError, UnauthorizedError
from app.core.security import Identity
from app.models.user import User
from app.services import users as user_service

pytestmark = pytest.mark.asyncio


async def test_get_or_create_creates_user_with_default_grant(db):
    user = await user_service.get_or_create_user(
        Identity(clerk_id="clerk_new", email="new@example.com", name="New User")
    )
    assert user.id is not None
    assert user.plan == "free"
    assert user.credits_balance == 50
    assert user.credits_used == 0
    assert user.initial_credits == 50
    assert await User.find(User.clerk_id == "clerk_new").count() == 1


async def test_get_or_create_is_idempotent(db):
    identity = Identity(clerk_id="clerk_same", email="same@example.com")
    first = await user_service.get_or_create_user(identity)
    second = await user_service.get_or_create_user(identity)
    assert first.id == second.id
    assert await User.find(User.clerk_id == "clerk_same").count() == 1


async def test_concurrent_resolutions_create_one_record(db):
    identity = Identity(clerk_id="clerk_concurrent", email="c@example.com")
    users = await asyncio.gather(*(user_service.get_or_create_user(identity) for _ in range(5)))
    assert len({u.id for u in users}) == 1
    assert await User.find(User.clerk_id == "clerk_concurrent").count() == 1


async def test_lost_race_returns_existing_record(db, monkeypatch):
    winner = User(clerk_id="clerk_race", email="race@example.com", credits_balance=75)
    await winner.insert()

    real_find_one = User.find_one
    calls = []

    async def _not_found():
        return None

    def racing_find_one(*args, **kwargs):
        # First lookup runs before the other request's insert becomes visible
        calls.append(args)
        if len(calls) == 1:
            return _not_found()
        return real_find_one(*args, **kwargs)

    monkeypatch.setattr(User, "find_one", racing_find_one)
    user = await user_service.get_or_create_user(Identity(clerk_id="clerk_race", email="race@example.com"))
    monkeypatch.undo()

    assert user.id == winner.id
    assert user.credits_balance == 75
    assert await User.find(User.clerk_id == "clerk_race").count() == 1


async def test_dev_user_gets_dev_credits(db):
    user = await user_service.get_or_create_dev_user()
    assert user.clerk_id == "dev_user"
    assert user.email == "dev@canvix.local"
    assert user.credits_balance == 1000
    assert user.initial_credits == 1000
    again = await user_service.get_or_create_dev_user()
    assert again.id == user.id


async def test_login_by_email(db):
    await User(clerk_id="clerk_9", email="a@x.com", name="Ada").insert()
    user = await user_service.login("a@x.com", "anything")
    assert user.email == "a@x.com"
    assert user_service.profile(user) == {
        "userId": str(user.id),
        "name": "Ada",
        "email": "a@x.com",
        "plan": "free",
    }


async def test_login_by_legacy_local_key(db):
    await User(clerk_id="local_old@x.com", email="", name="Old").insert()
    user = await user_service.login("old@x.com", "pw")
    assert user.clerk_id == "local_old@x.com"


async def test_login_unknown_email_is_unauthorized_and_creates_nothing(db):
    with pytest.raises(UnauthorizedError):
        await user_service.login("ghost@x.com", "pw")
    assert await User.find_all().count() == 0


async def test_login_disabled(db, monkeypatch):
    from app.core.config import get_settings
    await User(clerk_id="clerk_9", email="a@x.com").insert()
    monkeypatch.setattr(get_settings(), "demo_login_enabled", False)
    with pytest.raises(UnauthorizedError):
        await user_service.login("a@x.com", "pw")


async def test_signup_creates_local_account(db):
    user = await user_service.signup("Grace", "Hopper", "grace@x.com")
    assert user.clerk_id == "local_grace@x.com"
    assert user.name == "Grace Hopper"
    assert user.credits_balance == 50


async def test_signup_existing_email_conflicts(db):
    await user_service.signup("Grace", "Hopper", "grace@x.com")
    with pytest.raises(ConflictError):
        await user_service.signup("Other", "Person", "grace@x.com")
    assert await User.find(User.email == "grace@x.com").count() == 1


async def test_get_user_with_malformed_id(db):
    assert await user_service.get_user("not-an-object-id") is None


async def test_login_keeps_credit_changes_made_while_it_runs(db, monkeypatch):
    from app.services import credits as credits_service

    await User(clerk_id="clerk_9", email="a@x.com").insert()
    real_find_one = User.find_one
    spent = []

    async def read_then_spend(*args, **kwargs):
        stale = await real_find_one(*args, **kwargs)
        # Another request charges the user after login has read the record
        spent.append(await credits_service.append_entry(stale.id, -10, "usage", action="image-gen"))
        return stale

    def interleaving_find_one(*args, **kwargs):
        if not spent and not kwargs:
            return read_then_spend(*args, **kwargs)
        return real_find_one(*args, **kwargs)

    monkeypatch.setattr(User, "find_one", interleaving_find_one)
    user = await user_service.login("a@x.com", "pw")
    monkeypatch.undo()

    assert spent
    fresh = await User.get(user.id)
    assert (fresh.credits_balance, fresh.credits_used) == (40, 10)
    report = await credits_service.reconcile(user.id)
    assert report["consistent"] is True
