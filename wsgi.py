"""WSGI entry point for production deployment with gunicorn."""

from audio_processor import create_app

# Jobs and artifacts live in this process's memory: run a single gunicorn
# worker (threads are fine) so status polls reach the process that owns the job.
app = create_app()

application = app
