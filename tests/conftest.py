from __future__ import annotations

from dataclasses import fields, replace
from datetime import datetime
from decimal import Decimal
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from gym_dashboard.activities.model import Activity, NewActivity
from gym_dashboard.attendance.model import AttendanceRecord, NewAttendance
from gym_dashboard.auth.model import Owner
from gym_dashboard.container import assemble
from gym_dashboard.core.enums import SessionStatus
from gym_dashboard.core.exceptions import DuplicateKeyError
from gym_dashboard.customers.model import NonSubscribedCustomer
from gym_dashboard.members.model import Member, MemberDraft
from gym_dashboard.payments.model import NewPayment, Payment
from gym_dashboard.sessions.model import NewSession, SubscriptionSession

OWNER_ID = 1


class InMemoryOwners:
    def __init__(self, owners=()):
        self._by_id = {o.owner_id: o for o in owners}

    def get_by_id(self, owner_id: int) -> Optional[Owner]:
        return self._by_id.get(owner_id)

    def get_by_username(self, username: str) -> Optional[Owner]:
        return next((o for o in self._by_id.values() if o.username == username), None)


class InMemoryMembers:
    def __init__(self):
        self.rows: dict[int, Member] = {}
        self._id = 0

    def list_for_owner(self, owner_id):
        items = [m for m in self.rows.values() if m.owner_id == owner_id]
        return sorted(items, key=lambda m: (m.created_at, m.member_id), reverse=True)

    def get(self, owner_id, member_id):
        m = self.rows.get(member_id)
        return m if m and m.owner_id == owner_id else None

    def create(self, owner_id, draft: MemberDraft, *, created_at):
        self._id += 1
        values = {f.name: getattr(draft, f.name) for f in fields(draft)}
        member = Member(member_id=self._id, owner_id=owner_id, created_at=created_at, **values)
        self.rows[member.member_id] = member
        return member

    def update(self, member: Member):
        if self.get(member.owner_id, member.member_id) is None:
            return None
        self.rows[member.member_id] = member
        return member

    def set_sessions_remaining(self, owner_id, member_id, *, sessions_remaining, last_attendance=None):
        m = self.get(owner_id, member_id)
        if m is None:
            return None
        m = replace(m, sessions_remaining=sessions_remaining, last_attendance=last_attendance or m.last_attendance)
        self.rows[member_id] = m
        return m

    def delete(self, owner_id, member_id):
        if self.get(owner_id, member_id) is None:
            return False
        del self.rows[member_id]
        return True

    def count_created_until(self, owner_id, cutoff):
        return sum(1 for m in self.rows.values() if m.owner_id == owner_id and m.created_at <= cutoff)


class InMemorySessions:
    def __init__(self):
        self.rows: dict[int, SubscriptionSession] = {}
        self._id = 0

    def create(self, owner_id, new: NewSession):
        self._id += 1
        s = SubscriptionSession(
            session_id=self._id,
            owner_id=owner_id,
            member_id=new.member_id,
            member_name=new.member_name,
            subscription_type=new.subscription_type,
            total_sessions=new.total_sessions,
            used_sessions=new.used_sessions,
            remaining_sessions=new.remaining_sessions,
            start_date=new.start_date,
            end_date=new.end_date,
            status=new.status,
            price=new.price,
            payment_status=new.payment_status,
            notes=new.notes,
        )
        self.rows[s.session_id] = s
        return s

    def list_active_for_member(self, owner_id, member_id):
        items = [
            s
            for s in self.rows.values()
            if s.owner_id == owner_id and s.member_id == member_id and s.status == SessionStatus.ACTIVE
        ]
        return sorted(items, key=lambda s: s.session_id, reverse=True)

    def get_consumable(self, owner_id, member_id):
        return next((s for s in self.list_active_for_member(owner_id, member_id) if s.remaining_sessions > 0), None)

    def consume_one(self, session_id):
        s = self.rows.get(session_id)
        if not s or s.status != SessionStatus.ACTIVE or s.remaining_sessions <= 0:
            return False
        remaining = s.remaining_sessions - 1
        self.rows[session_id] = replace(
            s,
            used_sessions=s.used_sessions + 1,
            remaining_sessions=remaining,
            status=SessionStatus.COMPLETED if remaining == 0 else s.status,
        )
        return True

    def restore_one(self, session_id):
        s = self.rows.get(session_id)
        if not s or s.used_sessions <= 0 or s.status == SessionStatus.EXPIRED:
            return False
        self.rows[session_id] = replace(
            s,
            used_sessions=s.used_sessions - 1,
            remaining_sessions=s.remaining_sessions + 1,
            status=SessionStatus.ACTIVE,
        )
        return True

    def expire_active_for_member(self, owner_id, member_id):
        n = 0
        for s in self.list_active_for_member(owner_id, member_id):
            self.rows[s.session_id] = replace(s, status=SessionStatus.EXPIRED)
            n += 1
        return n

    def delete_for_member(self, owner_id, member_id):
        ids = [k for k, s in self.rows.items() if s.owner_id == owner_id and s.member_id == member_id]
        for k in ids:
            del self.rows[k]
        return len(ids)


class InMemoryAttendance:
    def __init__(self):
        self.rows: dict[int, AttendanceRecord] = {}
        self._id = 0

    def get_latest_for_member_on(self, owner_id, member_id, day):
        items = [
            r
            for r in self.rows.values()
            if r.owner_id == owner_id and r.member_id == member_id and r.attendance_date == day
        ]
        return max(items, key=lambda r: r.attendance_time, default=None)

    def create(self, owner_id, new: NewAttendance):
        if new.member_id is not None and self.get_latest_for_member_on(owner_id, new.member_id, new.attendance_date):
            raise DuplicateKeyError("Duplicate entry for key 'uq_attendance_member_day'")
        self._id += 1
        r = AttendanceRecord(
            attendance_id=self._id,
            owner_id=owner_id,
            member_id=new.member_id,
            member_name=new.member_name,
            attendance_date=new.attendance_date,
            attendance_time=new.attendance_time,
            session_type=new.session_type,
            customer_id=new.customer_id,
            session_id=new.session_id,
            member_image=new.member_image,
            notes=new.notes,
        )
        self.rows[r.attendance_id] = r
        return r

    def delete(self, owner_id, attendance_id):
        r = self.rows.get(attendance_id)
        if not r or r.owner_id != owner_id:
            return False
        del self.rows[attendance_id]
        return True

    def list_for_day(self, owner_id, day):
        items = [r for r in self.rows.values() if r.owner_id == owner_id and r.attendance_date == day]
        return sorted(items, key=lambda r: r.attendance_time, reverse=True)

    def count_between(self, owner_id, *, start, end):
        return sum(1 for r in self.rows.values() if r.owner_id == owner_id and start <= r.attendance_date < end)

    def delete_for_member(self, owner_id, member_id):
        ids = [k for k, r in self.rows.items() if r.owner_id == owner_id and r.member_id == member_id]
        for k in ids:
            del self.rows[k]
        return len(ids)


class InMemoryPayments:
    def __init__(self):
        self.rows: dict[int, Payment] = {}
        self._id = 0

    def list_for_owner(self, owner_id):
        items = [p for p in self.rows.values() if p.owner_id == owner_id]
        return sorted(items, key=lambda p: p.date, reverse=True)

    def get(self, owner_id, payment_id):
        p = self.rows.get(payment_id)
        return p if p and p.owner_id == owner_id else None

    def create(self, owner_id, new: NewPayment):
        self._id += 1
        values = {f.name: getattr(new, f.name) for f in fields(new)}
        p = Payment(payment_id=self._id, owner_id=owner_id, **values)
        self.rows[p.payment_id] = p
        return p

    def update(self, payment: Payment):
        if self.get(payment.owner_id, payment.payment_id) is None:
            return None
        self.rows[payment.payment_id] = payment
        return payment

    def delete(self, owner_id, payment_id):
        if self.get(owner_id, payment_id) is None:
            return False
        del self.rows[payment_id]
        return True

    def delete_for_member(self, owner_id, member_id):
        ids = [k for k, p in self.rows.items() if p.owner_id == owner_id and p.member_id == member_id]
        for k in ids:
            del self.rows[k]
        return len(ids)


class InMemoryCustomers:
    def __init__(self):
        self.rows: dict[int, NonSubscribedCustomer] = {}
        self._id = 0

    def find_by_identity(self, owner_id, customer_name, phone_number):
        return next(
            (
                c
                for c in self.rows.values()
                if c.owner_id == owner_id and c.customer_name == customer_name and c.phone_number == phone_number
            ),
            None,
        )

    def create(self, owner_id, *, customer_name, phone_number, amount, visit_date):
        self._id += 1
        c = NonSubscribedCustomer(
            customer_id=self._id,
            owner_id=owner_id,
            customer_name=customer_name,
            phone_number=phone_number,
            total_sessions=1,
            total_amount_paid=Decimal(amount),
            last_visit_date=visit_date,
            updated_at=datetime.combine(visit_date, datetime.min.time()),
        )
        self.rows[c.customer_id] = c
        return c

    def record_visit(self, customer_id, *, amount, visit_date):
        c = self.rows[customer_id]
        c = replace(
            c,
            total_sessions=c.total_sessions + 1,
            total_amount_paid=c.total_amount_paid + Decimal(amount),
            last_visit_date=visit_date,
        )
        self.rows[customer_id] = c
        return c

    def list_for_owner(self, owner_id):
        return [c for c in self.rows.values() if c.owner_id == owner_id]

    def list_visited_on(self, owner_id, day):
        return [c for c in self.list_for_owner(owner_id) if c.last_visit_date == day]


class InMemoryActivities:
    def __init__(self):
        self.rows: list[Activity] = []

    def create(self, owner_id, new: NewActivity):
        values = {f.name: getattr(new, f.name) for f in fields(new)}
        a = Activity(activity_id=len(self.rows) + 1, owner_id=owner_id, **values)
        self.rows.append(a)
        return a

    def list_recent(self, owner_id, limit):
        items = [a for a in self.rows if a.owner_id == owner_id]
        return sorted(items, key=lambda a: (a.timestamp, a.activity_id), reverse=True)[:limit]

    def delete_for_member(self, owner_id, member_id):
        before = len(self.rows)
        self.rows = [a for a in self.rows if not (a.owner_id == owner_id and a.member_id == member_id)]
        return before - len(self.rows)


class Repos:
    def __init__(self):
        self.owners = InMemoryOwners(
            [
                Owner(
                    owner_id=OWNER_ID,
                    username="admin",
                    full_name="Gym Owner",
                    password_hash=generate_password_hash("admin123"),
                ),
                Owner(
                    owner_id=2,
                    username="other",
                    full_name="Other Gym",
                    password_hash=generate_password_hash("other123"),
                ),
            ]
        )
        self.members = InMemoryMembers()
        self.sessions = InMemorySessions()
        self.attendance = InMemoryAttendance()
        self.payments = InMemoryPayments()
        self.customers = InMemoryCustomers()
        self.activities = InMemoryActivities()


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 3, 10, 9, 30, 0)


@pytest.fixture
def repos() -> Repos:
    return Repos()


@pytest.fixture
def container(repos):
    return assemble(
        owners_repo=repos.owners,
        members_repo=repos.members,
        sessions_repo=repos.sessions,
        attendance_repo=repos.attendance,
        payments_repo=repos.payments,
        customers_repo=repos.customers,
        activities_repo=repos.activities,
    )


@pytest.fixture
def member_service(container):
    return container.member_service


@pytest.fixture
def payment_service(container):
    return container.payment_service


@pytest.fixture
def app(container, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    from gym_dashboard.main import create_app

    return create_app(container)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def logged_in(client):
    resp = client.post("/api/auth/login", json={"username": "admin", "password": "admin123"})
    assert resp.status_code == 200
    return client
