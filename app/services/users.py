from datetime import datetime

from beanie import PydanticObjectId
from beanie.operators import Or, Set
from bson.errors import InvalidId
from pymongo.errors import DuplicateKeyError

from app.core.config import get_settings
from app.core.exceptions import ConflictError, UnauthorizedError
from app.core.logging import get_logger
from app.core.security import Identity
from app.models.user import User

log = get_logger(__name__)

DEV_IDENTITY = Identity(clerk_id="dev_user", email="dev@canvix.local", name="Dev User")


def local_identity_key(email: str) -> str:
    """Identity key for accounts created through email signup."""
    return f"local_{email}"


async def get_or_create_user(identity: Identity, initial_credits: int | None = None) -> User:
    """
    Find the user for an identity key, creating it on first sight.

    Two requests racing on a new identity both try to insert; the unique index
    on clerk_id rejects the loser, which then returns the winner's record.
    """
    user = await User.find_one(User.clerk_id == identity.clerk_id)
    if user:
        return user
    credits = get_settings().default_credits if initial_credits is None else initial_credits
    user = User(
        clerk_id=identity.clerk_id,
        email=identity.email,
        name=identity.name,
        avatar_url=identity.avatar_url,
        credits_balance=credits,
        initial_credits=credits,
    )
    try:
        await user.insert()
    except DuplicateKeyError:
        log.info("user_create_race", clerk_id=identity.clerk_id)
        existing = await User.find_one(User.clerk_id == identity.clerk_id)
        if existing is None:
            raise
        return existing
    log.info("user_created", user_id=str(user.id), clerk_id=user.clerk_id)
    return user


async def get_or_create_dev_user() -> User:
    """Guest account used when no identity provider is configured."""
    return await get_or_create_user(DEV_IDENTITY, initial_credits=get_settings().dev_user_credits)


async def get_user(user_id: str) -> User | None:
    try:
        oid = PydanticObjectId(user_id)
    except (InvalidId, TypeError):
        return None
    return await User.get(oid)


async def login(email: str, password: str) -> User:
    """Demo login: resolves by email or legacy local key. The password is not checked."""
    if not get_settings().demo_login_enabled:
        raise UnauthorizedError("Password login is disabled")
    user = await User.find_one(
        Or(User.email == email, User.clerk_id == local_identity_key(email))
    )
    if not user:
        log.info("login_failed", reason="unknown_email")
        raise UnauthorizedError("Invalid email or password")
    log.warning("demo_login_password_not_verified", user_id=str(user.id))
    # Touch only updated_at so a full save cannot overwrite concurrent credit changes
    await User.find_one(User.id == user.id).update(Set({User.updated_at: datetime.utcnow()}))
    log.info("user_login", user_id=str(user.id))
    return user


async def signup(first_name: str, last_name: str, email: str) -> User:
    if await User.find_one(User.email == email):
        raise ConflictError("An account with this email already exists")
    credits = get_settings().default_credits
    user = User(
        clerk_id=local_identity_key(email),
        email=email,
        name=f"{first_name} {last_name}".strip(),
        credits_balance=credits,
        initial_credits=credits,
    )
    try:
        await user.insert()
    except DuplicateKeyError as e:
        raise ConflictError("An account with this email already exists") from e
    log.info("user_signup", user_id=str(user.id))
    return user


def profile(user: User) -> dict:
    return {
        "userId": str(user.id),
        "name": user.name,
        "email": user.email,
        "plan": user.plan,
    }


def session_payload_for_user(user: User) -> dict:
    return {"user_id": str(user.id)}
