"""Main application entry point using Flask application factory pattern."""

import os
from audio_processor import create_app

# Create Flask application using application factory
app = create_app()

if __name__ == '__main__':
    # Get port from environment variable (for container deployment) or default to 3001
    port = int(os.environ.get('PORT', 3001))

    # threaded=True keeps status polling responsive while jobs run
    app.run(
        host='0.0.0.0',
        port=port,
        debug=os.environ.get('FLASK_ENV') == 'development',
        use_reloader=False,
        threaded=True,
    )
