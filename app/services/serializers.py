from datetime import datetime

from app.schemas.records import (
    EntryRecord,
    GiveawayRecord,
    ReferralCodeRecord,
    ReferralEntryRecord,
    UserRecord,
    WinnerRecord,
)


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def user_to_dict(user: UserRecord) -> dict:
    # password_hash never leaves the service layer
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "fullName": user.full_name,
        "country": user.country,
        "isAdmin": user.is_admin,
        "subscribedToNewsletter": user.subscribed_to_newsletter,
    }


def user_summary(user: UserRecord | None) -> dict | None:
    if user is None:
        return None
    return {
        "id": user.id,
        "username": user.username,
        "fullName": user.full_name,
        "country": user.country,
    }


def giveaway_to_dict(giveaway: GiveawayRecord) -> dict:
    return {
        "id": giveaway.id,
        "title": giveaway.title,
        "description": giveaway.description,
        "imageUrl": giveaway.image_url,
        "prize": giveaway.prize,
        "category": giveaway.category.value,
        "region": giveaway.region.value,
        "eligibilityRequirements": giveaway.eligibility_requirements,
        "value": giveaway.value,
        "targetEntries": giveaway.target_entries,
        "startDate": _iso(giveaway.start_date),
        "endDate": _iso(giveaway.end_date),
        "isActive": giveaway.is_active,
        "isPopular": giveaway.is_popular,
        "isPremium": giveaway.is_premium,
        "isFeatured": giveaway.is_featured,
        "createdByUserId": giveaway.created_by_user_id,
    }


def giveaway_summary(giveaway: GiveawayRecord | None) -> dict | None:
    if giveaway is None:
        return None
    return {
        "id": giveaway.id,
        "title": giveaway.title,
        "prize": giveaway.prize,
        "category": giveaway.category.value,
        "imageUrl": giveaway.image_url,
    }


def entry_to_dict(entry: EntryRecord) -> dict:
    return {
        "id": entry.id,
        "giveawayId": entry.giveaway_id,
        "userId": entry.user_id,
        "entryDate": _iso(entry.entry_date),
        "isWinner": entry.is_winner,
        "referralCodeId": entry.referral_code_id,
        "entrySource": entry.entry_source.value,
    }


def winner_to_dict(winner: WinnerRecord) -> dict:
    return {
        "id": winner.id,
        "giveawayId": winner.giveaway_id,
        "userId": winner.user_id,
        "entryId": winner.entry_id,
        "announcementDate": _iso(winner.announcement_date),
        "testimonial": winner.testimonial,
        "location": winner.location,
    }


def referral_code_to_dict(code: ReferralCodeRecord) -> dict:
    return {
        "id": code.id,
        "userId": code.user_id,
        "code": code.code,
        "createdAt": _iso(code.created_at),
        "isActive": code.is_active,
    }


def referral_entry_to_dict(row: ReferralEntryRecord) -> dict:
    return {
        "id": row.id,
        "referralCodeId": row.referral_code_id,
        "referredUserId": row.referred_user_id,
        "giveawayId": row.giveaway_id,
        "entryId": row.entry_id,
        "createdAt": _iso(row.created_at),
        "bonusEntries": row.bonus_entries,
    }
