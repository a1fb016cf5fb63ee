from __future__ import annotations

from datetime import date, timedelta

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.http import current_role, current_user_id, date_field, error_response, json_body, login_required
from ..core.exceptions import DomainError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/rosters", methods=["GET"], endpoint="roster_view")
    @login_required
    def roster_view():
        try:
            today = date.today()
            start = parse_iso_date(request.args.get("start") or today.isoformat())
            end = parse_iso_date(request.args.get("end") or (today + timedelta(days=30)).isoformat())
            data = container.roster_service.roster_view(start=start, end=end, viewer_id=current_user_id())
            return jsonify(data)
        except DomainError as e:
            return error_response(e)

    @app.route("/rosters/dashboard", methods=["GET"], endpoint="roster_dashboard")
    @login_required
    def roster_dashboard():
        try:
            return jsonify(container.roster_service.scheduler_dashboard(current_role=current_role()))
        except DomainError as e:
            return error_response(e)

    @app.route("/rosters/generate", methods=["POST"], endpoint="roster_generate_period")
    @login_required
    def roster_generate_period():
        try:
            data = json_body()
            count = container.roster_service.generate_period(
                current_role=current_role(),
                start=date_field(data, "start"),
                end=date_field(data, "end"),
            )
            return jsonify({"days_generated": count})
        except DomainError as e:
            return error_response(e)

    @app.route("/rosters/days/<day>/generate", methods=["POST"], endpoint="roster_generate_day")
    @login_required
    def roster_generate_day(day: str):
        try:
            data = json_body()
            message = container.roster_service.generate_day(
                current_role=current_role(),
                day=parse_iso_date(day),
                duty_type=str(data.get("duty_type") or ""),
            )
            return jsonify({"message": message})
        except DomainError as e:
            return error_response(e)

    @app.route("/rosters/publish", methods=["POST"], endpoint="roster_publish")
    @login_required
    def roster_publish():
        try:
            data = json_body()
            count = container.roster_service.publish(
                current_role=current_role(),
                start=date_field(data, "start"),
                end=date_field(data, "end"),
            )
            return jsonify({"published": count})
        except DomainError as e:
            return error_response(e)

    @app.route("/rosters/days/<day>/reopen", methods=["POST"], endpoint="roster_reopen")
    @login_required
    def roster_reopen(day: str):
        try:
            parsed = parse_iso_date(day)
            container.roster_service.reopen(current_role=current_role(), day=parsed)
            return jsonify({"message": f"Roster for {parsed.isoformat()} reopened as draft"})
        except DomainError as e:
            return error_response(e)
