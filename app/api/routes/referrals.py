import uuid
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Query

from app.api.dependencies import current_user, require_db, require_self
from app.cqrs.commands import referrals as referrals_commands
from app.cqrs.queries import referrals as referrals_queries
from app.models.schemas import (
    ReferralTierOut,
    ReferralTrackRequest,
    ReferralTrackResponse,
    TierProgressResponse,
)
from app.services.auth import AuthUser
from app.services.referrals import (
    ReferralTier,
    TierConfigurationError,
    compute_tier_progress,
    normalize_tiers,
)

router = APIRouter(tags=["referrals"])


def _load_tiers() -> tuple[ReferralTier, ...]:
    rows = referrals_queries.list_tiers()
    if not rows:
        raise HTTPException(status_code=404, detail="No referral tiers configured")
    try:
        return normalize_tiers(ReferralTier.from_row(row) for row in rows)
    except TierConfigurationError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@router.get("/v2/referrals/tiers", response_model=list[ReferralTierOut])
def list_tiers():
    require_db()
    return [tier.as_dict() for tier in _load_tiers()]


@router.get("/v2/referrals/progress", response_model=TierProgressResponse)
def tier_progress(points: Decimal = Query(..., ge=0)):
    require_db()
    return compute_tier_progress(points, _load_tiers()).as_dict()


@router.get("/v2/users/{user_id}/referrals/progress", response_model=TierProgressResponse)
def user_tier_progress(user_id: uuid.UUID, _: AuthUser = Depends(require_self)):
    require_db()
    tiers = _load_tiers()
    points = referrals_queries.total_points(user_id)
    return compute_tier_progress(points, tiers).as_dict()


@router.post("/v2/referrals/track", response_model=ReferralTrackResponse)
def track_referral(payload: ReferralTrackRequest, user: AuthUser = Depends(current_user)):
    if not payload.referral_code or payload.user_id is None:
        raise HTTPException(status_code=400, detail="Missing referral code or user ID")
    if str(payload.user_id) != user.id.lower():
        raise HTTPException(status_code=403, detail="Cannot track a referral for another user")
    require_db()
    try:
        referrals_commands.track_referral(payload.referral_code, payload.user_id)
    except referrals_commands.InvalidReferralCodeError as exc:
        raise HTTPException(status_code=404, detail="Invalid referral code") from exc
    except referrals_commands.AlreadyReferredError as exc:
        raise HTTPException(status_code=400, detail="User already has a referrer") from exc
    return {"success": True, "message": "Referral tracked successfully"}
