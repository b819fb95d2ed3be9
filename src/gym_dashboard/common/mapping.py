"""Wire format: dataclasses out as camelCase JSON, request bodies in as drafts.

Dates go out as ISO strings, amounts as floats, enums as their stored value.
"""

from __future__ import annotations

import dataclasses
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional

from ..core.enums import MembershipStatus, PaymentMethod, PaymentRecordStatus, PaymentStatus, SubscriptionType
from ..core.exceptions import ValidationError
from ..members.model import Member, MemberDraft
from ..payments.model import Payment, PaymentDraft
from ..sessions.model import NewSession
from .datetime_utils import as_date, parse_iso_datetime
from .validators import optional_enum, require_amount, require_non_empty, require_non_negative_int

# Columns that stay internal to the store.
_HIDDEN_FIELDS = {"owner_id", "password_hash"}

# Identity fields are exposed as plain "id" like the rest of the API.
_ID_FIELDS = {
    Member: "member_id",
    Payment: "payment_id",
}


def camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(p[:1].upper() + p[1:] for p in rest)


def to_json(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        out: Dict[str, Any] = {}
        id_field = _ID_FIELDS.get(type(value))
        for f in dataclasses.fields(value):
            if f.name in _HIDDEN_FIELDS:
                continue
            key = "id" if f.name == id_field else camel(f.name)
            out[key] = to_json(getattr(value, f.name))
        return out
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, dict):
        return {str(k): to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json(v) for v in value]
    return value


def optional_str(payload: dict, key: str) -> Optional[str]:
    v = payload.get(key)
    if v is None:
        return None
    v = str(v).strip()
    return v or None


def _optional_date(payload: dict, key: str) -> Optional[date]:
    v = payload.get(key)
    if v in (None, ""):
        return None
    try:
        return as_date(v)
    except ValueError:
        raise ValidationError(f"{key} must be a date (YYYY-MM-DD)")


def _optional_datetime(payload: dict, key: str) -> Optional[datetime]:
    v = payload.get(key)
    if v in (None, ""):
        return None
    try:
        return parse_iso_datetime(str(v))
    except ValueError:
        raise ValidationError(f"{key} must be an ISO-8601 timestamp")


def _optional_amount(payload: dict, key: str) -> Optional[Decimal]:
    v = payload.get(key)
    if v in (None, ""):
        return None
    return require_amount(v, key)


def member_draft_from_json(payload: dict) -> MemberDraft:
    return MemberDraft(
        name=require_non_empty(str(payload.get("name") or ""), "name"),
        membership_status=optional_enum(MembershipStatus, payload.get("membershipStatus"), "membershipStatus")
        or MembershipStatus.PENDING,
        last_attendance=_optional_date(payload, "lastAttendance"),
        image_url=optional_str(payload, "imageUrl"),
        phone_number=optional_str(payload, "phoneNumber"),
        email=optional_str(payload, "email"),
        membership_type=optional_str(payload, "membershipType"),
        membership_start_date=_optional_date(payload, "membershipStartDate"),
        membership_end_date=_optional_date(payload, "membershipEndDate"),
        subscription_type=optional_enum(SubscriptionType, payload.get("subscriptionType"), "subscriptionType"),
        sessions_remaining=require_non_negative_int(payload.get("sessionsRemaining") or 0, "sessionsRemaining"),
        subscription_price=_optional_amount(payload, "subscriptionPrice"),
        payment_status=optional_enum(PaymentStatus, payload.get("paymentStatus"), "paymentStatus"),
        note=optional_str(payload, "note"),
    )


def apply_member_changes(existing: Member, payload: dict) -> Member:
    """Overlay the keys present in ``payload`` onto ``existing``."""
    changes: Dict[str, Any] = {}
    if "name" in payload:
        changes["name"] = require_non_empty(str(payload.get("name") or ""), "name")
    if "membershipStatus" in payload:
        changes["membership_status"] = (
            optional_enum(MembershipStatus, payload["membershipStatus"], "membershipStatus")
            or existing.membership_status
        )
    if "lastAttendance" in payload:
        changes["last_attendance"] = _optional_date(payload, "lastAttendance")
    for key, attr in (
        ("imageUrl", "image_url"),
        ("phoneNumber", "phone_number"),
        ("email", "email"),
        ("membershipType", "membership_type"),
        ("note", "note"),
    ):
        if key in payload:
            changes[attr] = optional_str(payload, key)
    if "membershipStartDate" in payload:
        changes["membership_start_date"] = _optional_date(payload, "membershipStartDate")
    if "membershipEndDate" in payload:
        changes["membership_end_date"] = _optional_date(payload, "membershipEndDate")
    if "subscriptionType" in payload:
        changes["subscription_type"] = optional_enum(SubscriptionType, payload["subscriptionType"], "subscriptionType")
    if "sessionsRemaining" in payload:
        changes["sessions_remaining"] = require_non_negative_int(payload["sessionsRemaining"], "sessionsRemaining")
    if "subscriptionPrice" in payload:
        changes["subscription_price"] = _optional_amount(payload, "subscriptionPrice")
    if "paymentStatus" in payload:
        changes["payment_status"] = optional_enum(PaymentStatus, payload["paymentStatus"], "paymentStatus")
    return dataclasses.replace(existing, **changes)


def payment_draft_from_json(payload: dict) -> PaymentDraft:
    member_id = payload.get("memberId")
    return PaymentDraft(
        amount=require_amount(payload.get("amount"), "amount"),
        subscription_type=optional_str(payload, "subscriptionType"),
        payment_method=optional_enum(PaymentMethod, payload.get("paymentMethod"), "paymentMethod")
        or PaymentMethod.CASH,
        member_id=require_non_negative_int(member_id, "memberId") if member_id not in (None, "") else None,
        date=_optional_datetime(payload, "date"),
        notes=optional_str(payload, "notes"),
        receipt_url=optional_str(payload, "receiptUrl"),
    )


def apply_payment_changes(existing: Payment, payload: dict) -> Payment:
    changes: Dict[str, Any] = {}
    if "amount" in payload:
        changes["amount"] = require_amount(payload.get("amount"), "amount")
    if "memberId" in payload:
        v = payload.get("memberId")
        changes["member_id"] = require_non_negative_int(v, "memberId") if v not in (None, "") else None
    if "date" in payload:
        changes["date"] = _optional_datetime(payload, "date") or existing.date
    if "subscriptionType" in payload:
        changes["subscription_type"] = optional_str(payload, "subscriptionType")
    if "paymentMethod" in payload:
        changes["payment_method"] = (
            optional_enum(PaymentMethod, payload["paymentMethod"], "paymentMethod") or existing.payment_method
        )
    if "status" in payload:
        changes["status"] = optional_enum(PaymentRecordStatus, payload["status"], "status") or existing.status
    if "invoiceNumber" in payload:
        changes["invoice_number"] = optional_str(payload, "invoiceNumber") or existing.invoice_number
    if "notes" in payload:
        changes["notes"] = optional_str(payload, "notes")
    if "receiptUrl" in payload:
        changes["receipt_url"] = optional_str(payload, "receiptUrl")
    return dataclasses.replace(existing, **changes)


def session_draft_from_json(member: Member, payload: dict, *, today: date) -> NewSession:
    subscription_type = optional_str(payload, "subscriptionType") or (
        member.subscription_type.value if member.subscription_type else None
    )
    return NewSession(
        member_id=member.member_id,
        member_name=member.name,
        subscription_type=require_non_empty(subscription_type or "", "subscriptionType"),
        total_sessions=require_non_negative_int(payload.get("totalSessions"), "totalSessions"),
        used_sessions=require_non_negative_int(payload.get("usedSessions") or 0, "usedSessions"),
        start_date=_optional_date(payload, "startDate") or today,
        end_date=_optional_date(payload, "endDate"),
        price=_optional_amount(payload, "price"),
        payment_status=optional_enum(PaymentStatus, payload.get("paymentStatus"), "paymentStatus")
        or PaymentStatus.PAID,
        notes=optional_str(payload, "notes"),
    )
