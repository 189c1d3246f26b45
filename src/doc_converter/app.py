"""Flask application entry point."""

from doc_converter import create_app


def main() -> None:
    """Start the built-in development server."""
    app = create_app()
    debug = bool(app.config.get("DEBUG") or app.config.get("FLASK_DEBUG"))
    port = int(app.config.get("PORT") or 3000)
    app.logger.info("Application starting...")
    # Threaded so concurrent uploads share the single LibreOffice engine
    app.run(host="0.0.0.0", port=port, debug=debug, threaded=True, use_reloader=False)


if __name__ == "__main__":
    main()
