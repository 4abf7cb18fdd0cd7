# gymling/routes/workout_routes.py

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import jwt_required

from .. import db
from ..game.records import records_to_dict
from .common import _safe_int, current_user_id, game_session_for

workouts_bp = Blueprint("workouts", __name__)


# ------------------------------
# GET /api/workouts/log?limit=20
# ------------------------------
@workouts_bp.route("/log", methods=["GET"])
@jwt_required()
def workout_log():
    limit = _safe_int(request.args.get("limit"), 20)
    limit = max(1, min(limit, 200))

    workouts = game_session_for(current_user_id()).workout_log()
    return jsonify({"workouts": [w.to_dict() for w in workouts[:limit]]}), 200


# ------------------------------
# POST /api/workouts
# ------------------------------
@workouts_bp.route("", methods=["POST"])
@jwt_required()
def save_workout():
    """
    Expected body:
    {
      "title": "Push day",
      "notes": "felt strong",
      "exercises": [
        { "name": "Bench Press", "sets": [ { "reps": 5, "weight": 80 } ] },
        { "name": "Rowing", "sets": [], "cardio": [ { "duration": 600, "distance": 2000 } ] }
      ]
    }
    Saving refills energy, clears the battle cooldown and reports any PRs.
    """
    data = request.get_json(silent=True) or {}
    user_id = current_user_id()
    session = game_session_for(user_id)

    try:
        report = session.log_workout(data)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception(f"[workouts] save failed: {e}")
        return jsonify({"message": "Failed to save workout", "error": str(e)}), 500

    if not report.saved:
        return jsonify(report.to_dict()), 400

    current_app.logger.info(
        f"[workouts] user_id={user_id} xp={report.workout.xp_earned} "
        f"prs={len(report.achievements)}"
    )
    return jsonify(report.to_dict()), 201


# ------------------------------
# GET /api/workouts/records
# ------------------------------
@workouts_bp.route("/records", methods=["GET"])
@jwt_required()
def personal_records():
    records = game_session_for(current_user_id()).personal_records()
    return jsonify({"records": records_to_dict(records)}), 200


# ------------------------------
# Templates
# ------------------------------
@workouts_bp.route("/templates", methods=["GET"])
@jwt_required()
def list_templates():
    templates = game_session_for(current_user_id()).list_templates()
    return jsonify({"templates": templates}), 200


@workouts_bp.route("/templates", methods=["POST"])
@jwt_required()
def save_template():
    """
    Body: { "name": "Leg day", "workout": { ...same shape as POST /api/workouts... } }
    """
    data = request.get_json(silent=True) or {}
    session = game_session_for(current_user_id())

    try:
        template = session.save_template(data.get("name"), data.get("workout") or {})
        if template is None:
            return jsonify(
                {"message": "template needs a name and at least one exercise with sets"}
            ), 400
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception(f"[workouts/templates] save failed: {e}")
        return jsonify({"message": "Failed to save template"}), 500

    return jsonify({"template": template}), 201


@workouts_bp.route("/templates/<template_id>", methods=["DELETE"])
@jwt_required()
def delete_template(template_id):
    session = game_session_for(current_user_id())
    try:
        deleted = session.delete_template(template_id)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception(f"[workouts/templates] delete failed: {e}")
        return jsonify({"message": "Failed to delete template"}), 500

    if not deleted:
        return jsonify({"message": "template not found"}), 404
    return jsonify({"deleted": template_id}), 200


@workouts_bp.route("/templates/<template_id>/apply", methods=["POST"])
@jwt_required()
def apply_template(template_id):
    workout = game_session_for(current_user_id()).apply_template(template_id)
    if workout is None:
        return jsonify({"message": "template not found"}), 404
    return jsonify({"workout": workout.to_dict()}), 200
