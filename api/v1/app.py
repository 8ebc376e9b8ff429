from flask import Flask, jsonify, g, current_app
from flask_cors import CORS
from os import getenv
from api.v1.views import app_views
from api.v1.config import Config
from api.v1.auth import load_user_from_jwt
from api.v1.services.hr.leave_store import LeaveDataStore, MemoryRecordStore, SupabaseRecordStore
from api.v1.services.hr.leave_seed import demo_records
import logging

LOG_FORMAT = '%(asctime)s - %(levelname)s %(name)s %(threadName)s - %(message)s'


def configure_logging(config):
    level = getattr(logging, str(config.LOG_LEVEL).upper(), logging.DEBUG)
    if config.LOG_FILE:
        logging.basicConfig(filename=config.LOG_FILE, level=level, format=LOG_FORMAT)
    else:
        logging.basicConfig(level=level, format=LOG_FORMAT)


def build_leave_store(config):
    """Construct the process-wide leave data store for this app."""
    if config.LMS_STORAGE_BACKEND == 'supabase':
        records = SupabaseRecordStore.from_config(config)
    else:
        records = MemoryRecordStore()
    seed = demo_records() if config.LMS_SEED_DEMO_DATA else None
    return LeaveDataStore(records).load(seed=seed)


def attach_leave_store():
    g.leave_data = current_app.extensions['leave_data']


def create_app(config=Config, leave_store=None):
    config.validate()
    configure_logging(config)

    app = Flask(__name__)
    app.config.from_object(config)
    CORS(app, supports_credentials=True)
    app.url_map.strict_slashes = False
    app.extensions['leave_data'] = leave_store or build_leave_store(config)
    app.register_blueprint(app_views)
    app.before_request(attach_leave_store)
    app.before_request(load_user_from_jwt)

    # --- Health Check Route ---
    @app.route('/health', methods=['GET'])
    def health_check():
        """Basic health check endpoint."""
        return jsonify({"status": "ok", "message": "Service is running!"}), 200

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({"error": "Not found"}), 404

    @app.errorhandler(401)
    def unauthorised(error) -> str:
        """
        unauthorised handler
        """
        return jsonify({"error": "Unauthorized"}), 401

    @app.errorhandler(403)
    def handle_forbidden(error) -> str:
        """
        forbidden handler
        """
        return jsonify({"error": "Forbidden"}), 403

    @app.errorhandler(500)
    def internal_server_error(error) -> str:
        """
        internal server error handler
        """
        return jsonify({"error": "Internal Server Error"}), 500

    app.logger.info("Leave management API ready (storage: %s)", config.LMS_STORAGE_BACKEND)
    return app


if __name__ == '__main__':
    host = getenv('FLASK_HOST', '0.0.0.0')
    port = int(getenv('FLASK_PORT', 5000))
    create_app().run(debug=True, port=port, host=host)
