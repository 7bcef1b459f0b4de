"""Flask application factory for the audio processor service."""
import logging
from functools import partial
from typing import Optional

from flask import Flask
from flask_cors import CORS

from audio_processor.clients import AudioExtractor, get_transcription_provider
from audio_processor.services import (
    ArtifactStore,
    InMemoryJobStore,
    Orchestrator,
    RetentionSweeper,
)
from utils.config import AppConfig, get_app_config
from utils.logging import configure_logging


def create_app(config_override: Optional[dict] = None,
               orchestrator: Optional[Orchestrator] = None) -> Flask:
    """Create and configure Flask application using application factory pattern.

    Args:
        config_override: Optional Flask configuration overrides for testing
        orchestrator: Optional pre-built orchestrator (tests inject fakes)

    Returns:
        Flask app instance
    """
    app = Flask(__name__)

    config = get_app_config()

    if config_override:
        for key, value in config_override.items():
            app.config[key] = value

    app.config['APP_CONFIG'] = config

    CORS(app, origins=list(config.allowed_origins))

    configure_logging()

    if orchestrator is None:
        orchestrator = build_orchestrator(config)
    app.extensions['audio_processor'] = orchestrator

    register_blueprints(app)
    register_error_handlers(app)

    if config.retention.enabled and not app.config.get('TESTING'):
        sweeper = RetentionSweeper(
            orchestrator.jobs,
            orchestrator.artifacts,
            max_age=config.retention.max_age_seconds,
            interval=config.retention.sweep_interval_seconds,
        )
        sweeper.start()
        app.extensions['retention_sweeper'] = sweeper

    return app


def build_orchestrator(config: AppConfig) -> Orchestrator:
    """Wire the default stores, extractor and provider factory."""
    artifacts = ArtifactStore(config.audio_dir, extension=config.extraction.audio_format)
    logging.info(f"Audio scratch directory: {artifacts.root}")
    return Orchestrator(
        jobs=InMemoryJobStore(),
        artifacts=artifacts,
        extractor=AudioExtractor(config.extraction),
        provider_factory=partial(get_transcription_provider, config=config),
        default_language=config.default_language,
    )


def register_blueprints(app: Flask) -> None:
    """Register all application blueprints."""
    from audio_processor.api.health import bp as health_bp
    from audio_processor.api.media import bp as media_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(media_bp)


def register_error_handlers(app: Flask) -> None:
    """Register global error handlers."""
    from flask import jsonify
    from werkzeug.exceptions import HTTPException
    from utils.exceptions import InvalidRequestError, NotFoundError

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'error': 'Endpoint not found'}), 404

    @app.errorhandler(500)
    def internal_error(error):
        app.logger.error(f"Internal server error: {error}")
        return jsonify({'error': 'Internal server error'}), 500

    @app.errorhandler(InvalidRequestError)
    def handle_invalid_request(error):
        app.logger.warning(f"Invalid request: {error}")
        return jsonify({'error': str(error)}), 400

    @app.errorhandler(NotFoundError)
    def handle_not_found(error):
        return jsonify({'error': str(error)}), 404

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        return jsonify({'error': error.description}), error.code
