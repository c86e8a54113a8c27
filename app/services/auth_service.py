import logging

from app.core.config import Settings
from app.core.exceptions import AppException, Conflict, NotFound
from app.core.security import create_access_token, hash_password, verify_password
from app.schemas.records import UserRecord
from app.services.serializers import user_to_dict
from app.store import EntityStore, UniqueViolation

logger = logging.getLogger(__name__)


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def _issue_auth_token(user: UserRecord) -> dict:
    return {
        "token": create_access_token(user.id, user.username, user.is_admin),
        "user": user_to_dict(user),
    }


def get_user_or_raise(store: EntityStore, user_id: int) -> UserRecord:
    user = store.get(UserRecord, user_id)
    if not user:
        raise NotFound("User not found")
    return user


def create_user(
    store: EntityStore,
    username: str,
    email: str,
    password: str,
    full_name: str,
    country: str,
    subscribed_to_newsletter: bool = False,
    is_admin: bool = False,
) -> UserRecord:
    username = username.strip()
    email = _normalize_email(email)
    if store.find_one(UserRecord, username=username):
        raise Conflict("Username already exists")
    if store.find_one(UserRecord, email=email):
        raise Conflict("Email already exists")

    try:
        user = store.create(
            UserRecord,
            {
                "username": username,
                "email": email,
                "password_hash": hash_password(password),
                "full_name": full_name,
                "country": country,
                "subscribed_to_newsletter": subscribed_to_newsletter,
                "is_admin": is_admin,
            },
        )
    except UniqueViolation as exc:
        raise Conflict("Username or email already exists") from exc
    logger.info("Created user id=%s username=%s", user.id, user.username)
    return user


def signup(store: EntityStore, **fields) -> dict:
    user = create_user(store, **fields)
    return _issue_auth_token(user)


def login(store: EntityStore, username: str, password: str) -> dict:
    login_key = (username or "").strip()
    user = store.find_one(UserRecord, username=login_key)
    if not user:
        user = store.find_one(UserRecord, email=_normalize_email(login_key))
    if not user or not verify_password(password, user.password_hash):
        raise AppException("Invalid credentials", status_code=401)
    return _issue_auth_token(user)


def list_users(store: EntityStore) -> list[dict]:
    return [user_to_dict(user) for user in store.list(UserRecord)]


def make_admin(store: EntityStore, user_id: int) -> UserRecord:
    user = store.update(UserRecord, user_id, {"is_admin": True})
    if not user:
        raise NotFound("User not found")
    logger.info("Promoted user id=%s to admin", user_id)
    return user


def ensure_admin_user(store: EntityStore, settings: Settings) -> UserRecord | None:
    if not settings.ADMIN_PASSWORD:
        return None
    existing = store.find_one(UserRecord, email=_normalize_email(settings.ADMIN_EMAIL))
    if existing:
        return existing
    try:
        admin = create_user(
            store,
            username=settings.ADMIN_USERNAME,
            email=settings.ADMIN_EMAIL,
            password=settings.ADMIN_PASSWORD,
            full_name="Admin User",
            country="Global",
            is_admin=True,
        )
    except Conflict:
        # Another worker seeded the admin first.
        logger.info("Admin user already present, skipping seed")
        return None
    logger.info("Admin user created: %s", admin.email)
    return admin
