# FILE: ecopack-backend/extensions.py

from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

limiter = Limiter(
    # The default key is the IP address of the user making the request.
    key_func=get_remote_address,
    # The storage backend is taken from RATELIMIT_STORAGE_URI in the app config (see main.py).
    default_limits=["1000 per day", "300 per hour"],
)

# Applied to the endpoints that call the generative model.
ASSISTANT_RATE_LIMIT = "30 per minute"
