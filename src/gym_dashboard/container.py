from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from typing import Callable, ContextManager, Optional

from .activities.mysql_activity_repository import MySQLActivityRepository
from .activities.repository import ActivityRepository
from .activities.service import ActivityService
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .auth.mysql_owner_repository import MySQLOwnerRepository
from .auth.repository import OwnerRepository
from .auth.service import AuthService
from .customers.mysql_customer_repository import MySQLCustomerRepository
from .customers.repository import CustomerRepository
from .database.connection import ConnectionFactory, DBConfig
from .database.mysql_base import transaction
from .members.mysql_member_repository import MySQLMemberRepository
from .members.repository import MemberRepository
from .members.service import MemberService
from .payments.mysql_payment_repository import MySQLPaymentRepository
from .payments.repository import PaymentRepository
from .payments.service import PaymentService
from .sessions.mysql_session_repository import MySQLSessionRepository
from .sessions.repository import SessionRepository
from .statistics.service import DashboardStatisticsService


@dataclass(frozen=True)
class Container:
    conn: Optional[ConnectionFactory]

    owners_repo: OwnerRepository
    members_repo: MemberRepository
    sessions_repo: SessionRepository
    attendance_repo: AttendanceRepository
    payments_repo: PaymentRepository
    customers_repo: CustomerRepository
    activities_repo: ActivityRepository

    auth_service: AuthService
    activity_service: ActivityService
    member_service: MemberService
    payment_service: PaymentService
    dashboard_service: DashboardStatisticsService


def assemble(
    *,
    owners_repo: OwnerRepository,
    members_repo: MemberRepository,
    sessions_repo: SessionRepository,
    attendance_repo: AttendanceRepository,
    payments_repo: PaymentRepository,
    customers_repo: CustomerRepository,
    activities_repo: ActivityRepository,
    transaction_factory: Callable[[], ContextManager] | None = None,
    conn: Optional[ConnectionFactory] = None,
) -> Container:
    """Wire services over any set of repositories (MySQL in production, in-memory in tests)."""

    activity_service = ActivityService(activities_repo)
    member_service = MemberService(
        members_repo,
        sessions_repo,
        attendance_repo,
        activity_service,
        payments_repo,
        customers_repo,
        transaction=transaction_factory,
    )
    payment_service = PaymentService(
        payments_repo,
        customers_repo,
        attendance_repo,
        activity_service,
        member_service,
        transaction=transaction_factory,
    )

    return Container(
        conn=conn,
        owners_repo=owners_repo,
        members_repo=members_repo,
        sessions_repo=sessions_repo,
        attendance_repo=attendance_repo,
        payments_repo=payments_repo,
        customers_repo=customers_repo,
        activities_repo=activities_repo,
        auth_service=AuthService(owners_repo),
        activity_service=activity_service,
        member_service=member_service,
        payment_service=payment_service,
        dashboard_service=DashboardStatisticsService(members_repo, attendance_repo),
    )


def build_container(*, db_config: dict) -> Container:
    conn = ConnectionFactory(DBConfig.from_mapping(db_config))

    return assemble(
        owners_repo=MySQLOwnerRepository(conn),
        members_repo=MySQLMemberRepository(conn),
        sessions_repo=MySQLSessionRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        payments_repo=MySQLPaymentRepository(conn),
        customers_repo=MySQLCustomerRepository(conn),
        activities_repo=MySQLActivityRepository(conn),
        transaction_factory=partial(transaction, conn),
        conn=conn,
    )
