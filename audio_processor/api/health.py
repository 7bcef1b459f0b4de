"""Health check API blueprint."""
from flask import Blueprint, jsonify
import logging

bp = Blueprint('health', __name__)
logger = logging.getLogger(__name__)


@bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint to verify service is running."""
    logger.debug("Health check requested")

    return jsonify({
        "status": "healthy",
        "service": "Audio Processor",
        "version": "1.0.0"
    })


@bp.route('/', methods=['GET'])
def root():
    """Root endpoint with API information."""
    return jsonify({
        "status": "ok",
        "service": "Audio Processor",
        "version": "1.0.0",
        "endpoints": {
            "POST /extract": "Extract audio from YouTube video",
            "POST /transcribe": "Transcribe audio with AssemblyAI or OpenAI",
            "GET /audio/<videoId>": "Get audio file",
            "GET /status/<jobId>": "Check processing status",
            "GET /health": "Health check"
        }
    })
