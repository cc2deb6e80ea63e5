from typing import Optional
from flask import Flask
from pool_deriver.api.servers import servers_bp
from pool_deriver.api.events import events_bp
from pool_deriver.api.derive import derive_bp
from pool_deriver.core.event_slot import EventSlot, MongoEventSlot

def create_api_server(slot: Optional[EventSlot] = None) -> Flask:
    """Creates and configures the Flask API server."""
    app = Flask(__name__)
    app.config['EVENT_SLOT'] = slot if slot is not None else MongoEventSlot()

    # Register Blueprints for API endpoints
    app.register_blueprint(servers_bp)
    app.register_blueprint(events_bp)
    app.register_blueprint(derive_bp)

    @app.route('/')
    def index():
        return "Pool deriver API is running."

    return app
