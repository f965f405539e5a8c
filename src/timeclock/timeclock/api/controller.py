from __future__ import annotations

import logging
from functools import wraps

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from ..common.datetime_utils import to_utc_iso
from ..core.enums import PunchAction
from ..core.exceptions import (
    ClockInNotAllowedError,
    DomainError,
    InvalidTransitionError,
    NotFoundError,
    PunchConflictError,
    ValidationError,
)
from ..container import Container
from ..punches.model import Punch
from ..punches.service import Coordinates

logger = logging.getLogger(__name__)

_ERROR_CODES = (
    (NotFoundError, "not-found", 404),
    (PunchConflictError, "punch-overlap", 409),
    (InvalidTransitionError, "invalid-transition", 409),
    (ClockInNotAllowedError, "clock-in-not-allowed", 400),
    (ValidationError, "invalid-request", 400),
)


def punch_to_dict(punch: Punch) -> dict:
    return {
        "_id": punch.punch_id,
        "applicantId": punch.applicant_id,
        "jobId": punch.job_id,
        "shiftSlug": punch.shift_slug,
        "timeIn": to_utc_iso(punch.time_in),
        "timeOut": to_utc_iso(punch.time_out),
        "userNote": punch.user_note,
        "flaggedAbandoned": punch.flagged_abandoned,
    }


def _error_response(e: DomainError):
    for exc_type, code, status in _ERROR_CODES:
        if isinstance(e, exc_type):
            body = {"success": False, "error": code, "message": str(e)}
            if isinstance(e, ClockInNotAllowedError):
                body["minutesUntilEligible"] = e.minutes_until_eligible
            return jsonify(body), status
    return jsonify({"success": False, "error": "invalid-request", "message": str(e)}), 400


def _parse_coordinates(raw) -> Coordinates | None:
    if not raw:
        return None
    try:
        return Coordinates(latitude=float(raw["latitude"]), longitude=float(raw["longitude"]))
    except (KeyError, TypeError, ValueError):
        raise ValidationError("Invalid clockInCoordinates object")


def register(app: Flask, container: Container) -> None:
    service = container.punch_service

    def domain_errors(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                return view(*args, **kwargs)
            except DomainError as e:
                logger.info("%s rejected: %s", request.path, e)
                return _error_response(e)

        return wrapper

    def _require(value, name: str) -> str:
        if not value:
            raise ValidationError(f"{name} is required")
        return str(value)

    @app.errorhandler(HTTPException)
    def http_error(e: HTTPException):
        return jsonify({"success": False, "error": e.name.lower().replace(" ", "-"), "message": e.description}), e.code

    @app.route("/api/health", methods=["GET"], endpoint="health")
    def health():
        return jsonify({"success": True, "status": "ok"}), 200

    @app.route("/api/jobs/<job_id>/shift-window", methods=["GET"], endpoint="shift_window")
    @domain_errors
    def shift_window(job_id: str):
        status = service.clock_in_status(
            job_id=job_id,
            applicant_id=_require(request.args.get("applicantId"), "applicantId"),
            now=request.args.get("at") or None,
            shift_slug=request.args.get("shiftSlug") or None,
        )
        window = status.window
        return jsonify({
            "success": True,
            "start": to_utc_iso(window.start) if window else None,
            "end": to_utc_iso(window.end) if window else None,
            "shiftSlug": window.shift.slug if window else None,
            "overnight": window.overnight_from_previous_day if window else False,
        }), 200

    @app.route("/api/jobs/<job_id>/clock-in-status", methods=["GET"], endpoint="clock_in_status")
    @domain_errors
    def clock_in_status(job_id: str):
        status = service.clock_in_status(
            job_id=job_id,
            applicant_id=_require(request.args.get("applicantId"), "applicantId"),
            now=request.args.get("at") or None,
            shift_slug=request.args.get("shiftSlug") or None,
        )
        return jsonify({
            "success": True,
            "canClockIn": status.can_clock_in,
            "minutesUntilEligible": status.minutes_until_eligible,
            "timeIn": to_utc_iso(status.time_in),
        }), 200

    @app.route("/api/jobs/<job_id>/punches", methods=["POST"], endpoint="clock_in")
    @domain_errors
    def clock_in(job_id: str):
        data = request.get_json(silent=True) or {}
        punch = service.clock_in(
            job_id=job_id,
            applicant_id=_require(data.get("applicantId"), "applicantId"),
            now=data.get("at") or None,
            shift_slug=data.get("shiftSlug") or None,
            coordinates=_parse_coordinates(data.get("clockInCoordinates")),
            user_note=data.get("userNote"),
        )
        return jsonify({"success": True, "message": "Clocked in successfully!", "punch": punch_to_dict(punch)}), 201

    @app.route("/api/punches/<punch_id>", methods=["PUT"], endpoint="update_punch")
    @domain_errors
    def update_punch(punch_id: str):
        data = request.get_json(silent=True) or {}
        try:
            action = PunchAction(data.get("action"))
        except ValueError:
            raise ValidationError("Invalid action")

        if action == PunchAction.CLOCK_OUT:
            punch = service.clock_out(punch_id=punch_id, now=data.get("at") or None)
            message = "Clocked out successfully!"
        else:
            punch = service.update_punch(
                punch_id=punch_id,
                time_in=_require(data.get("timeIn"), "timeIn"),
                time_out=data.get("timeOut") or None,
            )
            message = "Punch updated successfully!"
        return jsonify({"success": True, "message": message, "punch": punch_to_dict(punch)}), 200

    @app.route("/api/jobs/<job_id>/punches/sweep", methods=["POST"], endpoint="sweep_abandoned")
    @domain_errors
    def sweep_abandoned(job_id: str):
        data = request.get_json(silent=True) or {}
        result = service.sweep_abandoned(job_id=job_id, now=data.get("at") or None)
        return jsonify({
            "success": True,
            "flagged": [punch_to_dict(p) for p in result.flagged],
            "closed": [punch_to_dict(p) for p in result.closed],
        }), 200
