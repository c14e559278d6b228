from flask import Blueprint, current_app, jsonify

from timezone_utils import convert_to_timezone, utc_now

status_bp = Blueprint('status_bp', __name__)

# --- Helper Check Functions ---

def check_profile_store():
    """Checks that the profile store answers a ping."""
    store = current_app.extensions["gamification_engine"].store
    try:
        if not store.ping():
            return {"status": "ERROR", "details": f"{type(store).__name__} did not answer the ping."}
        return {"status": "OK", "details": f"{type(store).__name__} is reachable."}
    except Exception as e:
        return {"status": "ERROR", "details": f"Failed to reach profile store: {str(e)}"}

def check_model_client():
    """Reports whether a model API key is configured. Fallback content is served either way."""
    client = current_app.extensions["eco_assistant"].model_client
    if getattr(client, "configured", True):
        return {"status": "OK", "details": "Model client configured."}
    return {"status": "DEGRADED", "details": "No GEMINI_API_KEY set; serving fallback content."}

# --- Main Endpoint ---
@status_bp.route('/health')
def health():
    checks = {
        "profileStore": check_profile_store(),
        "modelClient": check_model_client(),
    }
    overall = "OK" if checks["profileStore"]["status"] == "OK" else "ERROR"
    timestamp = convert_to_timezone(utc_now()).strftime('%Y-%m-%d %H:%M:%S %Z')
    return jsonify({"status": overall, "timestamp": timestamp, "checks": checks}), 200 if overall == "OK" else 503
