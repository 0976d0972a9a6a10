from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import format_instant, parse_period_bound
from ..common.http import current_actor, json_body, ok, optional_bool
from ..core.exceptions import ValidationError
from ..container import Container
from .model import Roster


def roster_to_json(r: Roster) -> dict:
    return {
        "id": r.roster_id,
        "companyId": r.company_id,
        "title": r.title,
        "description": r.description,
        "startDate": format_instant(r.start_date),
        "endDate": format_instant(r.end_date),
        "isPublished": r.is_published,
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/rosters", methods=["POST"], endpoint="api_rosters_create")
    def create_roster():
        data = json_body()
        roster = container.roster_service.create(
            current_actor(),
            title=data.get("title") or "",
            start_date=parse_period_bound(data.get("startDate"), "startDate", end=False),
            end_date=parse_period_bound(data.get("endDate"), "endDate", end=True),
            description=data.get("description"),
        )
        return ok(roster_to_json(roster), message="Roster created", status=201)

    @app.route("/api/rosters/<int:roster_id>", methods=["GET"], endpoint="api_rosters_get")
    def get_roster(roster_id: int):
        return ok(roster_to_json(container.roster_service.get(current_actor(), roster_id)))

    @app.route("/api/rosters/<int:roster_id>/publish", methods=["POST"], endpoint="api_rosters_publish")
    def publish_roster(roster_id: int):
        roster = container.roster_service.publish(current_actor(), roster_id)
        return ok(roster_to_json(roster), message="Roster published")

    @app.route("/api/rosters", methods=["GET"], endpoint="api_rosters_list")
    def list_rosters():
        args = request.args
        rows = container.roster_service.list(
            current_actor(),
            is_published=optional_bool(args.get("isPublished"), "isPublished"),
            start=parse_period_bound(args["startDate"], "startDate", end=False) if args.get("startDate") else None,
            end=parse_period_bound(args["endDate"], "endDate", end=True) if args.get("endDate") else None,
        )
        return ok([roster_to_json(r) for r in rows])

    @app.route("/api/rosters/<int:roster_id>", methods=["PATCH"], endpoint="api_rosters_update")
    def update_roster(roster_id: int):
        data = json_body()
        if "isPublished" in data:
            raise ValidationError("isPublished cannot be edited; use the publish action")
        roster = container.roster_service.update(
            current_actor(),
            roster_id,
            title=data.get("title"),
            description=data.get("description"),
            start_date=parse_period_bound(data["startDate"], "startDate", end=False) if data.get("startDate") else None,
            end_date=parse_period_bound(data["endDate"], "endDate", end=True) if data.get("endDate") else None,
        )
        return ok(roster_to_json(roster), message="Roster updated successfully")

    @app.route("/api/rosters/<int:roster_id>", methods=["DELETE"], endpoint="api_rosters_delete")
    def delete_roster(roster_id: int):
        container.roster_service.delete(current_actor(), roster_id)
        return ok(message="Roster deleted successfully")
