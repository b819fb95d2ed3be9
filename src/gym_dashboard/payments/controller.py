from __future__ import annotations

from flask import Flask, g, request

from ..auth.login_state import require_owner
from ..common.http import json_body, ok
from ..common.mapping import apply_payment_changes, optional_str, payment_draft_from_json
from ..common.validators import optional_enum
from ..container import Container
from ..core.enums import PaymentMethod
from ..core.exceptions import PaymentNotFoundError


def register(app: Flask, container: Container) -> None:
    payments = container.payment_service

    @app.route("/api/payments", methods=["GET"], endpoint="api_payments")
    @require_owner
    def list_payments():
        member_id = request.args.get("memberId", type=int)
        if member_id is not None:
            return ok(payments.payments_for_member(g.owner_id, member_id))
        return ok(payments.list_payments(g.owner_id))

    @app.route("/api/payments", methods=["POST"], endpoint="api_payments_create")
    @require_owner
    def create_payment():
        draft = payment_draft_from_json(json_body())
        return ok(payments.add_payment(g.owner_id, draft), 201)

    @app.route("/api/payments/<int:payment_id>", methods=["GET"], endpoint="api_payment")
    @require_owner
    def get_payment(payment_id: int):
        payment = payments.get_payment(g.owner_id, payment_id)
        if payment is None:
            raise PaymentNotFoundError(payment_id)
        return ok(payment)

    @app.route("/api/payments/<int:payment_id>", methods=["PUT"], endpoint="api_payment_update")
    @require_owner
    def update_payment(payment_id: int):
        existing = payments.get_payment(g.owner_id, payment_id)
        if existing is None:
            raise PaymentNotFoundError(payment_id)
        return ok(payments.update_payment(g.owner_id, apply_payment_changes(existing, json_body())))

    @app.route("/api/payments/<int:payment_id>", methods=["DELETE"], endpoint="api_payment_delete")
    @require_owner
    def delete_payment(payment_id: int):
        payments.delete_payment(g.owner_id, payment_id)
        return ok({"id": payment_id})

    @app.route("/api/payments/walk-in", methods=["POST"], endpoint="api_payments_walk_in")
    @require_owner
    def walk_in():
        payload = json_body()
        result = payments.add_walk_in_payment(
            g.owner_id,
            customer_name=optional_str(payload, "customerName"),
            phone_number=optional_str(payload, "phoneNumber"),
            amount=payload.get("amount"),
            payment_method=optional_enum(PaymentMethod, payload.get("paymentMethod"), "paymentMethod"),
        )
        return ok(result, 201)

    @app.route("/api/payments/statistics", methods=["GET"], endpoint="api_payments_statistics")
    @require_owner
    def statistics():
        return ok(payments.payment_statistics(g.owner_id))

    @app.route("/api/payments/price", methods=["GET"], endpoint="api_payments_price")
    @require_owner
    def price():
        subscription_type = request.args.get("type")
        return ok({
            "subscriptionType": subscription_type,
            "price": payments.calculate_subscription_price(subscription_type),
        })

    @app.route("/api/customers/statistics", methods=["GET"], endpoint="api_customers_statistics")
    @require_owner
    def customer_statistics():
        return ok(payments.walk_in_statistics(g.owner_id))
