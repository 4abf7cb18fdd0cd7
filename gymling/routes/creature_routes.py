# gymling/routes/creature_routes.py
from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import jwt_required

from .. import db
from ..game.progression import get_max_energy_for_level
from .common import current_user_id, game_session_for

creature_bp = Blueprint("creature", __name__)


@creature_bp.route("", methods=["GET"])
@jwt_required()
def get_creature():
    """
    Returns:
    {
      "creature": { "name": "", "level": 1, "evolutionStage": 1, "xp": 0,
                    "xpToNext": 100, "stats": {...}, "bag": [...] },
      "player_stats": { "energy": 30, "xp": 0 },
      "max_energy": 30
    }
    """
    session = game_session_for(current_user_id())
    try:
        creature = session.creature()
        stats = session.player_stats()
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception(f"[creature] load failed: {e}")
        return jsonify({"message": "Failed to load creature"}), 500

    return jsonify(
        {
            "creature": creature.to_dict(),
            "player_stats": stats.to_dict(),
            "max_energy": get_max_energy_for_level(creature.level),
        }
    ), 200


@creature_bp.route("/profile", methods=["PUT"])
@jwt_required()
def update_profile():
    """
    Body: { "name": "Sparky", "imageUrl": "https://..." }   # imageUrl optional
    """
    data = request.get_json(silent=True) or {}
    name = data.get("name")
    image_url = data.get("imageUrl", data.get("image_url"))

    if not (name or "").strip():
        return jsonify({"message": "name is required"}), 400

    session = game_session_for(current_user_id())
    try:
        creature = session.update_profile(name, image_url)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception(f"[creature] profile update failed: {e}")
        return jsonify({"message": "Failed to update creature"}), 500

    return jsonify({"creature": creature.to_dict()}), 200


@creature_bp.route("/reset", methods=["POST"])
@jwt_required()
def reset_creature():
    session = game_session_for(current_user_id())
    try:
        creature = session.reset()
        stats = session.player_stats()
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception(f"[creature] reset failed: {e}")
        return jsonify({"message": "Failed to reset progress"}), 500

    current_app.logger.info(f"[creature] user_id={session.kv.user_id} reset to defaults")
    return jsonify({"creature": creature.to_dict(), "player_stats": stats.to_dict()}), 200
