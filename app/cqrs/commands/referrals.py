from __future__ import annotations

import logging
import uuid

from app.db.connection import run_transaction

logger = logging.getLogger("chainraffle.referrals")


class InvalidReferralCodeError(LookupError):
    pass


class AlreadyReferredError(ValueError):
    pass


def track_referral(referral_code: str, referred_id: uuid.UUID) -> None:
    """Link ``referred_id`` to the owner of ``referral_code``; one referrer per user."""

    def _handler(conn):
        cur = conn.cursor()
        cur.execute(
            "SELECT referrer_id FROM referrals WHERE referral_code = %s LIMIT 1",
            (referral_code,),
        )
        found = cur.fetchone()
        if found is None:
            cur.close()
            raise InvalidReferralCodeError(referral_code)
        referrer_id = found[0]

        cur.execute(
            "SELECT id FROM referrals WHERE referred_id = %s FOR UPDATE",
            (referred_id,),
        )
        if cur.fetchone() is not None:
            cur.close()
            raise AlreadyReferredError(str(referred_id))

        cur.execute(
            """
            INSERT INTO referrals (referrer_id, referred_id, referral_code)
            VALUES (%s, %s, %s)
            """,
            (referrer_id, referred_id, referral_code),
        )
        cur.close()
        logger.info("User %s referred by %s", referred_id, referrer_id)

    run_transaction(_handler)
