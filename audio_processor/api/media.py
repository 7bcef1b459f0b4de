"""Extraction, transcription and job status API blueprint."""
import logging
from flask import Blueprint, current_app, jsonify, request, send_file

from audio_processor.services.orchestrator import Orchestrator
from utils.exceptions import InvalidRequestError


bp = Blueprint('media', __name__)
logger = logging.getLogger(__name__)


def get_orchestrator() -> Orchestrator:
    return current_app.extensions['audio_processor']


def _json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


@bp.route('/extract', methods=['POST'])
def extract_audio():
    """Start audio extraction for a YouTube video.

    Accepts JSON with one of:
    - videoId: 11-character video id
    - youtubeUrl: full video URL
    """
    data = _json_body()
    source = data.get('videoId') or data.get('youtubeUrl') or data.get('sourceId') or data.get('url')

    job = get_orchestrator().request_extraction(source)
    return jsonify({'success': True, 'jobId': job.job_id, 'status': job.status})


@bp.route('/audio/<video_id>', methods=['GET'])
def get_audio(video_id):
    """Stream a cached audio file as an attachment."""
    artifacts = get_orchestrator().artifacts
    try:
        found = artifacts.exists(video_id)
    except InvalidRequestError:
        found = False
    if not found:
        return jsonify({'error': 'Audio not found'}), 404

    return send_file(
        artifacts.path_for(video_id),
        mimetype='audio/mpeg',
        as_attachment=True,
        download_name=f"{video_id}.mp3",
    )


@bp.route('/status/<job_id>', methods=['GET'])
def get_status(job_id):
    """Return the full job record; 404 once unknown or expired."""
    job = get_orchestrator().jobs.find(job_id)
    if job is None:
        return jsonify({'error': 'Job not found'}), 404
    return jsonify(job.to_dict())


@bp.route('/transcribe', methods=['POST'])
def transcribe_audio():
    """Start a transcription job.

    Accepts JSON with:
    - videoId: Video id (required)
    - provider: 'assemblyai' or 'openai' (required)
    - apiKey: Provider API key (required, never stored)
    - language: Language code (optional, default from config)
    """
    data = _json_body()
    source_id = data.get('videoId') or data.get('sourceId')
    provider = data.get('provider')

    logger.info(f"Transcription request received: videoId={source_id}, provider={provider}")

    job = get_orchestrator().request_transcription(
        source_id,
        provider,
        data.get('apiKey'),
        language=data.get('language'),
    )
    return jsonify({'success': True, 'jobId': job.job_id, 'status': job.status})
