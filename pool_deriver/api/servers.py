import logging
from flask import request, jsonify, Blueprint
from pool_deriver.db import collections as db
from pool_deriver.db.models import ServerRecord
from pymongo.errors import DuplicateKeyError
from pydantic import ValidationError

# Inventory of application servers; URL: /servers
servers_bp = Blueprint('servers_api', __name__, url_prefix='/servers')
logger = logging.getLogger(__name__)

@servers_bp.route('/', methods=['POST'])
def register_server():
    """API endpoint to register an application server in the inventory."""
    data = request.get_json(silent=True)
    if not data:
        return jsonify({"error": "Invalid input"}), 400

    try:
        record = ServerRecord(**data)
        created = db.add_server(record)
        return jsonify(created.model_dump()), 201

    except DuplicateKeyError:
        return jsonify({"error": f"Server with uuid '{data.get('uuid')}' already exists"}), 409
    except ValidationError as e:
        missing_fields = [err['loc'][0] for err in e.errors() if err['type'] == 'missing']
        if missing_fields:
            return jsonify({"error": f"Missing required field(s): {', '.join(map(str, missing_fields))}"}), 400
        return jsonify({"error": e.errors(include_url=False)}), 400
    except (ConnectionError, RuntimeError) as e:
        logger.error(f"Error registering server (DB issue): {e}")
        return jsonify({"error": "Database operation failed"}), 500

@servers_bp.route('/', methods=['GET'])
def list_servers():
    """API endpoint to list application servers, optionally filtered by ?pool=."""
    pool_name = request.args.get('pool')
    try:
        servers = db.get_servers_by_pool(pool_name) if pool_name else db.get_all_servers()
        return jsonify([server.model_dump() for server in servers]), 200
    except ConnectionError as e:
        logger.error(f"Error listing servers (DB issue): {e}")
        return jsonify({"error": "Database operation failed"}), 500

@servers_bp.route('/<string:uuid>', methods=['GET'])
def get_server(uuid: str):
    """API endpoint to retrieve one application server."""
    server = db.get_server(uuid)
    if not server:
        return jsonify({"error": "Server not found"}), 404
    return jsonify(server.model_dump()), 200

@servers_bp.route('/<string:uuid>', methods=['DELETE'])
def deregister_server(uuid: str):
    """API endpoint to remove an application server from the inventory."""
    if db.delete_server(uuid):
        return jsonify({"message": "Server deleted successfully"}), 200
    return jsonify({"error": "Server not found"}), 404
