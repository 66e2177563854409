from __future__ import annotations

import hmac
import logging
from functools import wraps

from flask import Flask, current_app, jsonify, request

from ..common.validators import optional_instant, require_positive_int
from ..core.exceptions import StoreError, ValidationError
from ..container import Container

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    def admin_token_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            expected = current_app.config.get("ADMIN_TOKEN") or ""
            given = request.headers.get("X-Admin-Token") or ""
            if not expected or not hmac.compare_digest(given, expected):
                return jsonify({"success": False, "message": "Unauthorized"}), 401
            return view(*args, **kwargs)

        return wrapper

    def _requested_instant():
        return optional_instant(request.args.get("at"), container.clock.zone)

    @app.route("/admin/break-reminders/run", methods=["POST"], endpoint="admin_break_reminders_run")
    @admin_token_required
    def admin_break_reminders_run():
        try:
            now = _requested_instant()
            dispatched = container.reminder_service.run_once(now)
            return jsonify({"success": True, "dispatched": dispatched})
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 400
        except Exception as e:
            logger.exception("Manual break reminder pass failed")
            return jsonify({"success": False, "message": str(e)}), 500

    @app.route("/api/breaks/<int:agent_id>/due", methods=["GET"], endpoint="api_breaks_due")
    @admin_token_required
    def api_breaks_due(agent_id: int):
        try:
            agent_id = require_positive_int(agent_id, "agent_id")
            now = _requested_instant()
            due = container.reminder_service.evaluate_agent(agent_id, now)
            return jsonify({"success": True, "agent_id": agent_id, "due": [d.as_dict() for d in due]})
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 400
        except StoreError as e:
            return jsonify({"success": False, "message": str(e)}), 503

    @app.route("/api/breaks/<int:agent_id>/status", methods=["GET"], endpoint="api_breaks_status")
    @admin_token_required
    def api_breaks_status(agent_id: int):
        try:
            agent_id = require_positive_int(agent_id, "agent_id")
            now = _requested_instant()
            status = container.reminder_service.describe_agent(agent_id, now)
            return jsonify({"success": True, **status})
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 400
        except StoreError as e:
            return jsonify({"success": False, "message": str(e)}), 503
