import logging
from flask import request, jsonify, Blueprint, current_app
from pool_deriver.core.errors import MissingFieldError
from pool_deriver.core.event_slot import EventSlot
from pool_deriver.core.snapshot import validate_event
from pool_deriver.db.models import AttachDetachEvent, ApplicationAction
from pydantic import ValidationError

# Attach/detach notifications sent by application servers; URL: /events
events_bp = Blueprint('events_api', __name__, url_prefix='/events')
logger = logging.getLogger(__name__)

def _slot() -> EventSlot:
    return current_app.config['EVENT_SLOT']

def _validate_address(event: AttachDetachEvent) -> None:
    """An attach must carry the address HAProxy will send traffic to."""
    if event.action != ApplicationAction.ATTACH:
        return
    if not event.bind_ip:
        raise MissingFieldError("bind_ip")
    if not event.bind_port:
        raise MissingFieldError("bind_port")

@events_bp.route('/', methods=['POST'])
def submit_event():
    """API endpoint to queue an attach/detach event for the next configuration run."""
    data = request.get_json(silent=True)
    if not data:
        return jsonify({"error": "Invalid input"}), 400

    try:
        event = AttachDetachEvent.model_validate(data)
        validate_event(event)
        _validate_address(event)
        _slot().put(event)
    except ValidationError as e:
        return jsonify({"error": e.errors(include_url=False)}), 400
    except MissingFieldError as e:
        return jsonify({"error": str(e)}), 400
    except ConnectionError as e:
        logger.error(f"Error storing event (DB issue): {e}")
        return jsonify({"error": "Database operation failed"}), 500

    logger.info(f"Queued {event.action} event for server {event.server_uuid} in pool {event.pool_name}")
    return jsonify(event.model_dump()), 202

@events_bp.route('/', methods=['GET'])
def get_pending_event():
    """API endpoint to inspect the pending event without consuming it."""
    try:
        event = _slot().peek()
    except ConnectionError as e:
        logger.error(f"Error reading event (DB issue): {e}")
        return jsonify({"error": "Database operation failed"}), 500

    if event is None:
        return jsonify({"error": "No pending event"}), 404
    return jsonify(event.model_dump()), 200
