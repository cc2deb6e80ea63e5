import logging
from flask import jsonify, Blueprint, current_app
from pool_deriver.core.errors import DerivationError
from pool_deriver.core.run import ConfigurationRun

# Derived HAProxy attributes; URL: /config
derive_bp = Blueprint('derive_api', __name__, url_prefix='/config')
logger = logging.getLogger(__name__)

def _run_derivation(consume: bool):
    try:
        run = ConfigurationRun(current_app.config['EVENT_SLOT'])
        attributes = run.execute() if consume else run.preview()
        return jsonify(attributes), 200
    except DerivationError as e:
        return jsonify({"error": str(e)}), 422
    except (ConnectionError, RuntimeError) as e:
        logger.error(f"Error deriving configuration (DB issue): {e}")
        return jsonify({"error": "Database operation failed"}), 500

@derive_bp.route('/', methods=['GET'])
def preview_config():
    """API endpoint to preview the derived configuration; the pending event is left in place."""
    return _run_derivation(consume=False)

@derive_bp.route('/', methods=['POST'])
def apply_config():
    """API endpoint to run a derivation, consuming the pending event."""
    return _run_derivation(consume=True)
