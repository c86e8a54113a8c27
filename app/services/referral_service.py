import logging
import secrets
import string

from app.core.exceptions import Conflict, NotFound, ValidationError
from app.schemas.records import EntryRecord, EntrySource, ReferralCodeRecord, ReferralEntryRecord
from app.services.auth_service import get_user_or_raise
from app.store import EntityStore, UniqueViolation

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_SUFFIX_LENGTH = 8


def _normalize_code(code: str | None) -> str | None:
    if code is None:
        return None
    cleaned = code.strip()
    return cleaned or None


def generate_code(username: str) -> str:
    suffix = "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_SUFFIX_LENGTH))
    return f"{username}-{suffix}"


def issue_code(
    store: EntityStore,
    user_id: int,
    requested_code: str | None = None,
    attempts: int = 5,
) -> ReferralCodeRecord:
    user = get_user_or_raise(store, user_id)
    requested = _normalize_code(requested_code)

    # a caller-chosen code gets exactly one try, generated ones are retried
    candidates = [requested] if requested else [generate_code(user.username) for _ in range(max(attempts, 1))]
    for code in candidates:
        if store.find_one(ReferralCodeRecord, code=code):
            continue
        try:
            row = store.create(ReferralCodeRecord, {"user_id": user.id, "code": code})
        except UniqueViolation:
            continue
        logger.info("Issued referral code %s to user id=%s", row.code, user.id)
        return row
    raise Conflict("Referral code already exists")


def resolve_code(store: EntityStore, code: str | None) -> ReferralCodeRecord | None:
    """Active code with this exact string, or None for unknown and inactive codes."""
    code = _normalize_code(code)
    if not code:
        return None
    row = store.find_one(ReferralCodeRecord, code=code)
    if not row or not row.is_active:
        return None
    return row


def get_code_or_raise(store: EntityStore, referral_code_id: int) -> ReferralCodeRecord:
    row = store.get(ReferralCodeRecord, referral_code_id)
    if not row:
        raise NotFound("Referral code not found")
    return row


def set_code_active(store: EntityStore, referral_code_id: int, is_active: bool) -> ReferralCodeRecord:
    get_code_or_raise(store, referral_code_id)
    row = store.update(ReferralCodeRecord, referral_code_id, {"is_active": is_active})
    logger.info("Referral code id=%s active=%s", referral_code_id, is_active)
    return row


def list_codes_for_user(store: EntityStore, user_id: int) -> list[ReferralCodeRecord]:
    return store.list(ReferralCodeRecord, user_id=user_id)


def _holds_entry(store: EntityStore, user_id: int, giveaway_id: int) -> bool:
    # entry sources are a closed set, so this is one unique-key lookup per source
    return any(
        store.find_one(EntryRecord, user_id=user_id, giveaway_id=giveaway_id, entry_source=source)
        for source in EntrySource
    )


def grant_bonus(
    store: EntityStore,
    referral_code_id: int,
    referred_user_id: int,
    giveaway_id: int,
) -> EntryRecord | None:
    """Record the referral and give the code owner one bonus entry.

    The ReferralEntry audit row is always written. The owner receives a
    ``referral_bonus`` entry only if they hold no entry in the giveaway yet,
    so a referrer earns at most one bonus per giveaway no matter how many
    people use their code. Returns the bonus entry, or None when skipped.
    """
    code = get_code_or_raise(store, referral_code_id)
    if code.user_id == referred_user_id:
        raise ValidationError("Referral codes cannot be used by their owner")

    audit = store.create(
        ReferralEntryRecord,
        {
            "referral_code_id": code.id,
            "referred_user_id": referred_user_id,
            "giveaway_id": giveaway_id,
            "bonus_entries": 1,
        },
    )

    try:
        with store.transaction():
            if _holds_entry(store, code.user_id, giveaway_id):
                logger.info(
                    "Referrer id=%s already entered giveaway id=%s, no bonus", code.user_id, giveaway_id
                )
                return None
            bonus = store.create(
                EntryRecord,
                {
                    "giveaway_id": giveaway_id,
                    "user_id": code.user_id,
                    "referral_code_id": code.id,
                    "entry_source": EntrySource.referral_bonus,
                },
            )
            store.update(ReferralEntryRecord, audit.id, {"entry_id": bonus.id})
    except UniqueViolation:
        logger.info("Concurrent bonus for referrer id=%s giveaway id=%s, skipped", code.user_id, giveaway_id)
        return None

    logger.info(
        "Granted referral bonus entry id=%s to user id=%s for giveaway id=%s",
        bonus.id,
        code.user_id,
        giveaway_id,
    )
    return bonus


def entry_count_for_code(store: EntityStore, referral_code_id: int) -> int:
    return store.count(ReferralEntryRecord, referral_code_id=referral_code_id)


def referral_stats(store: EntityStore, user_id: int) -> list[dict]:
    return [
        {
            "code": code.code,
            "referralCodeId": code.id,
            "entriesGenerated": entry_count_for_code(store, code.id),
            "isActive": code.is_active,
            "createdAt": code.created_at.isoformat() if code.created_at else None,
        }
        for code in list_codes_for_user(store, user_id)
    ]
