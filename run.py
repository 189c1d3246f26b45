"""Development launcher: runs the app from a source checkout without installing it."""

import sys
from pathlib import Path

# Add the src directory to the Python path
SRC_PATH = Path(__file__).parent / "src"
sys.path.insert(0, str(SRC_PATH))

from doc_converter import create_app  # noqa: E402


def print_banner(app):
    debug = bool(app.config.get("DEBUG") or app.config.get("FLASK_DEBUG"))
    print("=" * 60)
    print("Document to PDF Converter")
    print("=" * 60)
    print(f"Address: http://127.0.0.1:{app.config['PORT']}")
    print(f"Debug mode: {debug}")
    print("=" * 60)
    print()


if __name__ == "__main__":
    app = create_app()
    print_banner(app)
    app.logger.info("Application starting...")
    # threaded=True so concurrent uploads are served while a conversion runs
    app.run(host="0.0.0.0", port=app.config["PORT"], threaded=True, use_reloader=False)
