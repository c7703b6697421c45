import argparse
import logging

from flask import Flask, Response, jsonify, request, send_file

from config_manager import get_config
from core.logging_config import setup_logging
from file_handling.service import KIND_CSV, KIND_FILE, FileService, ServiceResponse


def to_flask_response(result: ServiceResponse):
    """Adapt a ServiceResponse to the matching Flask response."""
    if result.kind == KIND_FILE:
        return send_file(result.body)
    if result.kind == KIND_CSV:
        return Response(result.body, status=result.status, mimetype='text/csv')
    return jsonify(result.body), result.status


def create_app(service: FileService) -> Flask:
    """Create the Flask app serving files by logical path and by id."""
    app = Flask(__name__)

    @app.route('/')
    def index():
        return jsonify({'success': {'message': "You've successfully connected to the backend server."}})

    @app.route('/files', defaults={'subpath': ''})
    @app.route('/files/<path:subpath>')
    def get_file(subpath):
        return to_flask_response(service.get_by_path(subpath, request.args))

    # Id lookups decode to a path without any server-side table
    @app.route('/id/<file_id>')
    def get_file_by_id(file_id):
        return to_flask_response(service.get_by_id(file_id, request.args))

    return app


def main():
    parser = argparse.ArgumentParser(description='Basic File Browser backend')
    parser.add_argument('--host', default='127.0.0.1', help='Interface to bind')
    parser.add_argument('--port', type=int, default=4000, help='Port to listen on')
    parser.add_argument('--config', default='config.toml', help='Path to the TOML configuration file')
    parser.add_argument('--debug', action='store_true', help='Run Flask in debug mode')
    args = parser.parse_args()

    config = get_config(args.config)
    setup_logging(level=config.log.level, log_file=config.log.log_file or None)

    app = create_app(FileService.from_config(config))
    logging.info(f"Serving {config.storage.get_root_path()} at http://{args.host}:{args.port}/")
    app.run(host=args.host, port=args.port, debug=args.debug)


if __name__ == '__main__':
    main()
