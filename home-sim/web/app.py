"""
Flask Web GUI for the Home Simulator.
Provides a dashboard page and a REST API for inspection and control.
"""
import os
import logging
import threading
from datetime import datetime
from flask import Flask, render_template, jsonify, request
from flask_cors import CORS
from werkzeug.serving import make_server

from interfaces import ProtocolServer
from models import CommandParseError, HomeEngine, JsonCommandSource, get_simulation_parameters

logger = logging.getLogger("WebGUI")


def create_app(engine: HomeEngine, command_source: JsonCommandSource = None) -> Flask:
    """
    Factory function to create Flask app with injected engine (DIP).
    """
    app = Flask(__name__,
                template_folder='templates',
                static_folder='static')

    app.config['engine'] = engine
    app.config['command_source'] = command_source or JsonCommandSource()
    app.config['observer_port'] = int(os.environ.get("PORT", "3000"))

    CORS(app)

    @app.route('/')
    def index():
        """Render main dashboard."""
        return render_template('index.html', observer_port=app.config['observer_port'])

    # --- Read API ---

    @app.route('/api/status')
    def get_status():
        """Current state snapshot plus engine metadata."""
        eng = app.config['engine']
        return jsonify({
            'state': eng.snapshot().to_dict(),
            'engine': eng.get_status(),
        })

    @app.route('/api/analytics')
    def get_analytics():
        return jsonify(app.config['engine'].get_analytics())

    @app.route('/api/notifications')
    def get_notifications():
        return jsonify(app.config['engine'].get_notifications())

    @app.route('/api/notifications/<int:notification_id>/read', methods=['POST'])
    def mark_notification_read(notification_id):
        if not app.config['engine'].mark_notification_read(notification_id):
            return jsonify({'error': 'Notification not found'}), 404
        return jsonify({'success': True})

    @app.route('/api/devices')
    def get_devices():
        """Device health report."""
        return jsonify(app.config['engine'].get_device_health())

    @app.route('/api/scenes')
    def get_scenes():
        return jsonify(app.config['engine'].get_scenes())

    @app.route('/api/scenes/<name>', methods=['DELETE'])
    def delete_scene(name):
        if not app.config['engine'].delete_scene(name):
            return jsonify({'error': 'Scene not found'}), 404
        logger.info(f"Scene '{name}' deleted via API")
        return jsonify({'success': True})

    # --- Commands ---

    @app.route('/api/command', methods=['POST'])
    def post_command():
        """
        Run one command through the same pipeline observers use.
        Observers see the result on their next update.
        """
        eng = app.config['engine']
        try:
            command = app.config['command_source'].produce(request.get_data())
        except CommandParseError as e:
            return jsonify({'error': str(e)}), 400

        applied = eng.handle_command(command)
        return jsonify({
            'success': True,
            'applied': applied,
            'state': eng.snapshot().to_dict(),
        })

    # --- Admin API ---

    @app.route('/api/admin/params', methods=['GET'])
    def get_simulation_params():
        """Get all simulation parameters with current values and metadata."""
        params = get_simulation_parameters()
        return jsonify({
            'parameters': params.get_all(),
            'by_category': params.get_by_category()
        })

    @app.route('/api/admin/params', methods=['POST'])
    def update_simulation_params():
        """Update simulation parameters."""
        data = request.get_json(silent=True)

        if not data or not isinstance(data, dict):
            return jsonify({'error': 'No data provided'}), 400

        results = get_simulation_parameters().set_multiple(data)
        success_count = sum(1 for v in results.values() if v)
        logger.info(f"Updated {success_count} simulation parameters")

        return jsonify({
            'success': True,
            'results': results,
            'updated_count': success_count
        })

    @app.route('/api/admin/params/reset', methods=['POST'])
    def reset_simulation_params():
        """Reset simulation parameters to defaults."""
        data = request.get_json(silent=True) or {}
        key = data.get('key')  # Optional: reset specific key

        params = get_simulation_parameters()
        if not params.reset(key):
            return jsonify({'error': f"Unknown parameter '{key}'"}), 404

        return jsonify({
            'success': True,
            'parameters': params.get_all()
        })

    @app.route('/api/admin/date', methods=['POST'])
    def set_date():
        """Set the simulated clock."""
        eng = app.config['engine']
        data = request.get_json(silent=True) or {}

        date_str = data.get('date')
        if not date_str:
            return jsonify({'error': 'Date required'}), 400

        try:
            # Expected format: YYYY-MM-DDTHH:MM[:SS]
            new_date = datetime.fromisoformat(date_str)
        except (TypeError, ValueError) as e:
            return jsonify({'error': f'Invalid date format: {e}'}), 400
        eng.set_simulation_date(new_date)
        return jsonify({'success': True, 'message': f"Date set to {new_date}"})

    @app.route('/api/admin/speed', methods=['POST'])
    def set_speed():
        eng = app.config['engine']
        data = request.get_json(silent=True) or {}
        try:
            eng.set_simulation_speed(float(data.get('speed')))
        except (TypeError, ValueError):
            return jsonify({'error': 'Numeric speed required'}), 400
        return jsonify({'success': True, 'speed': eng.simulation_speed})

    return app


class WebServer(ProtocolServer):
    """
    Web server wrapper following ProtocolServer pattern (SRP).
    """

    def __init__(self, engine: HomeEngine, host: str = "0.0.0.0", port: int = 8080):
        self._engine = engine
        self._host = host
        self._port = port
        self._app = None
        self._server = None
        self._thread = None

    def start(self) -> None:
        """Start the web server in a background thread."""
        self._app = create_app(self._engine)
        self._server = make_server(self._host, self._port, self._app, threaded=True)
        self._thread = threading.Thread(
            target=self._server.serve_forever,
            name="web-gui",
            daemon=True
        )
        self._thread.start()
        logger.info(f"Web GUI started on http://{self._host}:{self._port}")

    def stop(self) -> None:
        """Stop the web server."""
        if self._server is not None:
            self._server.shutdown()
            self._server = None
        logger.info("Web server stopped")
