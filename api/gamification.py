import logging
from flask import Blueprint, current_app, jsonify, request

from gamification_engine import ProfileExistsError
from profile_store import ProfileStoreError
from .error_utils import bad_request_error, conflict_error, store_unavailable_error
from .pydantic_models import (
    AwardBadgeRequest, CreateProfileRequest, QuizResultRequest, RecordScanRequest, SortingResultRequest,
)
from .sanitization import BADGE_RULES, SCAN_RULES, sanitize_dict, sanitize_user_id

gamification_bp = Blueprint('gamification_bp', __name__)


def _engine():
    return current_app.extensions["gamification_engine"]


def _user_id_or_none(raw_user_id):
    user_id = sanitize_user_id(raw_user_id)
    return user_id or None


def _json_body():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _outcome_response(outcome):
    return jsonify(outcome.model_dump(mode="json")), 200


@gamification_bp.route('/profiles/<user_id>', methods=['POST'])
def create_profile(user_id):
    """Creates the profile at sign-up; {"demo": true} seeds the demo account."""
    user_id = _user_id_or_none(user_id)
    if not user_id:
        return bad_request_error("Invalid user id")
    req_data = CreateProfileRequest.model_validate(_json_body())
    try:
        profile = _engine().create_profile(user_id, demo=req_data.demo)
    except ProfileExistsError:
        return conflict_error()
    except ProfileStoreError as e:
        logging.error(f"Could not create profile {user_id}: {e}")
        return store_unavailable_error()
    return jsonify(profile.model_dump(mode="json")), 201


@gamification_bp.route('/profiles/<user_id>', methods=['GET'])
def get_profile(user_id):
    """Returns the profile, creating it if needed and applying the weekly challenge reset."""
    user_id = _user_id_or_none(user_id)
    if not user_id:
        return bad_request_error("Invalid user id")
    try:
        profile = _engine().load_profile(user_id)
    except ProfileStoreError as e:
        logging.error(f"Could not load profile {user_id}: {e}")
        return store_unavailable_error()
    return jsonify(profile.model_dump(mode="json")), 200


@gamification_bp.route('/profiles/<user_id>/scans', methods=['POST'])
def record_scan(user_id):
    user_id = _user_id_or_none(user_id)
    if not user_id:
        return bad_request_error("Invalid user id")
    req_data = RecordScanRequest.model_validate(sanitize_dict(_json_body(), SCAN_RULES))
    outcome = _engine().record_scan(user_id, req_data.description, req_data.ecoScore,
                                    req_data.location, req_data.category)
    return _outcome_response(outcome)


@gamification_bp.route('/profiles/<user_id>/badges', methods=['POST'])
def award_badge(user_id):
    user_id = _user_id_or_none(user_id)
    if not user_id:
        return bad_request_error("Invalid user id")
    req_data = AwardBadgeRequest.model_validate(sanitize_dict(_json_body(), BADGE_RULES))
    awarded = _engine().award_badge(user_id, req_data.id, req_data.name, req_data.emoji,
                                    req_data.description, req_data.pointsReward)
    return jsonify({"awarded": awarded}), 200


@gamification_bp.route('/profiles/<user_id>/games/quiz', methods=['POST'])
def record_quiz_result(user_id):
    user_id = _user_id_or_none(user_id)
    if not user_id:
        return bad_request_error("Invalid user id")
    req_data = QuizResultRequest.model_validate(_json_body())
    return _outcome_response(_engine().record_quiz_result(user_id, req_data.percentage))


@gamification_bp.route('/profiles/<user_id>/games/sorting', methods=['POST'])
def record_sorting_result(user_id):
    user_id = _user_id_or_none(user_id)
    if not user_id:
        return bad_request_error("Invalid user id")
    req_data = SortingResultRequest.model_validate(_json_body())
    return _outcome_response(_engine().record_sorting_result(user_id, req_data.accuracy))


@gamification_bp.route('/profiles/<user_id>/games/puzzle', methods=['POST'])
def record_puzzle_solved(user_id):
    user_id = _user_id_or_none(user_id)
    if not user_id:
        return bad_request_error("Invalid user id")
    return _outcome_response(_engine().record_puzzle_solved(user_id))
