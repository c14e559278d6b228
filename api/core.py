import logging
from flask import Blueprint, current_app, jsonify, request

import fallback_generator
from extensions import limiter, ASSISTANT_RATE_LIMIT
from image_resizer import prepare_image_for_model
from .error_utils import missing_input_error
from .pydantic_models import AnalyzeRequest, ChatRequest, QuizRequest
from .sanitization import ANALYZE_RULES, CHAT_RULES, QUIZ_RULES, sanitize_dict

core_bp = Blueprint('core_bp', __name__)


def _assistant():
    return current_app.extensions["eco_assistant"]


def _request_fields():
    """Form fields for multipart uploads, otherwise the JSON body."""
    if request.form or request.files:
        return request.form.to_dict()
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _uploaded_image():
    upload = request.files.get("image")
    if upload is None:
        return None
    image_bytes = upload.read()
    if not image_bytes:
        return None
    return prepare_image_for_model(image_bytes, upload.mimetype)


@core_bp.route('/analyze', methods=['POST'])
@limiter.limit(ASSISTANT_RATE_LIMIT)
def analyze():
    """
    Assess product packaging from a description and/or photo.
    Only a request with neither is rejected; everything else gets an AnalysisResult.
    """
    try:
        fields = sanitize_dict(_request_fields(), ANALYZE_RULES)
        req_data = AnalyzeRequest.model_validate(fields)
        image = _uploaded_image()

        if not req_data.description and image is None:
            return missing_input_error()

        logging.info(f"Analyze request (user={req_data.userId or 'anonymous'}, image={image is not None})")
        result = _assistant().analyze(req_data, image)
        return jsonify(result.payload), 200
    except Exception as e:
        logging.critical(f"Analysis error: {e}", exc_info=True)
        return jsonify(fallback_generator.placeholder_analysis()), 200


@core_bp.route('/chat', methods=['POST'])
@limiter.limit(ASSISTANT_RATE_LIMIT)
def chat():
    """Answer a sustainability question in a couple of friendly sentences."""
    fields = {}
    try:
        fields = sanitize_dict(_request_fields(), CHAT_RULES)
        req_data = ChatRequest.model_validate(fields)
        result = _assistant().chat(req_data)
        return jsonify(result.payload), 200
    except Exception as e:
        logging.error(f"Chat error: {e}", exc_info=True)
        return jsonify(fallback_generator.synthesize_chat_reply(str(fields.get("message") or ""))), 200


@core_bp.route('/quiz', methods=['POST'])
@limiter.limit(ASSISTANT_RATE_LIMIT)
def quiz():
    """Generate a sustainability quiz; difficulty, category and questionCount are optional."""
    try:
        fields = sanitize_dict(_request_fields(), QUIZ_RULES)
        req_data = QuizRequest.model_validate(fields)
        result = _assistant().quiz(req_data)
        return jsonify(result.payload), 200
    except Exception as e:
        logging.error(f"Quiz generation error: {e}", exc_info=True)
        return jsonify(fallback_generator.placeholder_quiz()), 200
