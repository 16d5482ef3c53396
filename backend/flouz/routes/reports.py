# Overview: Flask API routes for the daily summary and register closure.

from flask import Blueprint, current_app, g, jsonify

from ..decorators import require_auth
from ..errors import FlouzError, NoEmployeeSelected
from ..services import register_service, reporting_service

reports_bp = Blueprint("reports", __name__, url_prefix="/api")


@reports_bp.get("/reports/daily-summary")
@require_auth
def daily_summary_route():
    """Today's figures (local calendar day) for the selected employee."""
    try:
        if g.employee is None:
            raise NoEmployeeSelected()
        summary = reporting_service.daily_summary(g.employee.id)
        return jsonify(summary.to_dict()), 200

    except FlouzError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to compute daily summary")
        return jsonify({"error": "Internal server error"}), 500


@reports_bp.post("/close-register")
@require_auth
def close_register_route():
    """
    Close the register for the selected employee.

    Sends the daily report to the account's Telegram chat, then ends the
    session. Returns:
    - 200 with the summary once the report was delivered (token is now dead)
    - 400 when no employee is selected or the Telegram channel is not configured
    - 500 when the Telegram API could not be reached or refused the message;
      the session stays open so the close can be retried
    """
    try:
        summary = register_service.close_register(g.session_context)
        return jsonify({
            "message": "Register closed, report sent",
            "summary": summary.to_dict(),
        }), 200

    except FlouzError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to close register")
        return jsonify({"error": "Internal server error"}), 500
