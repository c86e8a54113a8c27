import logging

from app.core.exceptions import AppException, DuplicateEntry
from app.schemas.records import EntryRecord, EntrySource, GiveawayRecord, ReferralCodeRecord
from app.services import referral_service
from app.services.auth_service import get_user_or_raise
from app.services.giveaway_service import get_giveaway_or_raise
from app.store import EntityStore, UniqueViolation

logger = logging.getLogger(__name__)


def _require_participants(store: EntityStore, user_id: int, giveaway_id: int) -> GiveawayRecord:
    giveaway = get_giveaway_or_raise(store, giveaway_id)
    get_user_or_raise(store, user_id)
    return giveaway


def _create_direct_entry(
    store: EntityStore,
    user_id: int,
    giveaway_id: int,
    referral_code_id: int | None = None,
) -> EntryRecord:
    existing = store.find_one(
        EntryRecord, user_id=user_id, giveaway_id=giveaway_id, entry_source=EntrySource.direct
    )
    if existing:
        logger.info("Duplicate entry rejected user id=%s giveaway id=%s", user_id, giveaway_id)
        raise DuplicateEntry("User has already entered this giveaway")

    try:
        entry = store.create(
            EntryRecord,
            {
                "giveaway_id": giveaway_id,
                "user_id": user_id,
                "referral_code_id": referral_code_id,
                "entry_source": EntrySource.direct,
            },
        )
    except UniqueViolation as exc:
        # lost the race against a concurrent submission for the same pair
        raise DuplicateEntry("User has already entered this giveaway") from exc

    logger.info("Entry id=%s created user id=%s giveaway id=%s", entry.id, user_id, giveaway_id)
    return entry


def submit_entry(store: EntityStore, user_id: int, giveaway_id: int) -> EntryRecord:
    _require_participants(store, user_id, giveaway_id)
    return _create_direct_entry(store, user_id, giveaway_id)


def _usable_code(store: EntityStore, user_id: int, referral_code: str | None) -> ReferralCodeRecord | None:
    if not referral_code:
        return None
    code = referral_service.resolve_code(store, referral_code)
    if code is None:
        logger.info("Ignoring unknown or inactive referral code %r", referral_code)
        return None
    if code.user_id == user_id:
        logger.info("Ignoring self-referral by user id=%s", user_id)
        return None
    return code


def submit_entry_with_referral(
    store: EntityStore,
    user_id: int,
    giveaway_id: int,
    referral_code: str | None = None,
) -> EntryRecord:
    """Create the user's direct entry, then credit the referrer if the code is usable.

    Referral problems never fail the submission: unknown, inactive and
    self-owned codes are ignored, and a failing bonus grant is logged.
    """
    _require_participants(store, user_id, giveaway_id)
    code = _usable_code(store, user_id, referral_code)
    entry = _create_direct_entry(store, user_id, giveaway_id, referral_code_id=code.id if code else None)

    if code is not None:
        try:
            referral_service.grant_bonus(store, code.id, user_id, giveaway_id)
        except (AppException, UniqueViolation) as exc:
            logger.warning("Referral bonus for code id=%s not granted: %s", code.id, exc)
    return entry


def count_entries(store: EntityStore, giveaway_id: int) -> int:
    return store.count(EntryRecord, giveaway_id=giveaway_id)


def list_entries_for_giveaway(store: EntityStore, giveaway_id: int) -> list[EntryRecord]:
    return store.list(EntryRecord, giveaway_id=giveaway_id)


def list_entries_for_user(store: EntityStore, user_id: int) -> list[EntryRecord]:
    return store.list(EntryRecord, user_id=user_id)
