from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import current_role, current_user_id, error_response, json_body, login_required, optional_str
from ..core.exceptions import DomainError, ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/swaps", methods=["POST"], endpoint="swap_request")
    @login_required
    def swap_request():
        try:
            data = json_body()
            swap_id = container.swap_service.request_swap(
                requester_id=current_user_id(),
                allocation_id=str(data.get("allocation_id") or ""),
                substitute_id=str(data.get("substitute_id") or ""),
                reason=str(data.get("reason") or ""),
                counter_allocation_id=optional_str(data, "counter_allocation_id"),
            )
            return jsonify({"swap_id": swap_id, "message": "Swap requested; waiting for the substitute"}), 201
        except DomainError as e:
            return error_response(e)

    @app.route("/swaps/mine", methods=["GET"], endpoint="swap_mine")
    @login_required
    def swap_mine():
        return jsonify({"swaps": list(container.swap_service.list_swaps_for(person_id=current_user_id()))})

    @app.route("/swaps/<swap_id>/respond", methods=["POST"], endpoint="swap_respond")
    @login_required
    def swap_respond(swap_id: str):
        try:
            data = json_body()
            status = container.swap_service.respond_to_swap(
                swap_id=swap_id,
                responder_id=current_user_id(),
                action=str(data.get("action") or ""),
            )
            return jsonify({"swap_id": swap_id, "status": status.value})
        except DomainError as e:
            return error_response(e)

    @app.route("/swaps/<swap_id>/approve", methods=["POST"], endpoint="swap_approve")
    @login_required
    def swap_approve(swap_id: str):
        try:
            message = container.swap_service.approve_swap(current_role=current_role(), swap_id=swap_id)
            return jsonify({"swap_id": swap_id, "message": message})
        except DomainError as e:
            return error_response(e)

    @app.route("/swaps/<swap_id>/reject", methods=["POST"], endpoint="swap_reject")
    @login_required
    def swap_reject(swap_id: str):
        try:
            container.swap_service.reject_swap(current_role=current_role(), swap_id=swap_id)
            return jsonify({"swap_id": swap_id, "message": "Swap rejected"})
        except DomainError as e:
            return error_response(e)

    @app.route("/debts/mine", methods=["GET"], endpoint="debt_mine")
    @login_required
    def debt_mine():
        return jsonify({"debts": list(container.swap_service.list_debts(person_id=current_user_id()))})

    @app.route("/debts/<debt_id>/settle", methods=["POST"], endpoint="debt_settle")
    @login_required
    def debt_settle(debt_id: str):
        try:
            if not debt_id.isdigit():
                raise ValidationError("Invalid debt id")
            container.swap_service.settle_debt(current_role=current_role(), debt_id=int(debt_id))
            return jsonify({"debt_id": int(debt_id), "message": "Debt settled"})
        except DomainError as e:
            return error_response(e)
