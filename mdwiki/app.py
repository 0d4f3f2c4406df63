"""
Markdown Wiki
A Flask application that lists, renders, creates, edits and deletes markdown
documents kept in a single folder.
"""

import logging
from dataclasses import dataclass

from flask import Flask, render_template, request
from werkzeug.exceptions import HTTPException
from werkzeug.serving import WSGIRequestHandler

from mdwiki.config import WikiConfig
from mdwiki.core.errors import StartupFailure, WikiError
from mdwiki.core.index import PageIndex
from mdwiki.core.store import DocumentStore
from mdwiki.version_info import __version__ as VERSION
from mdwiki.views import wiki_bp

logger = logging.getLogger(__name__)


@dataclass
class Wiki:
    config: WikiConfig
    store: DocumentStore
    index: PageIndex


def create_app(config: WikiConfig) -> Flask:
    """
    Build the application for a validated pages directory.

    The initial index scan happens here; if it fails no app is returned and
    StartupFailure is raised.
    """
    config.validate()
    store = DocumentStore(config.pages_dir)
    index = PageIndex(store, lock_timeout=config.lock_timeout)
    try:
        index.rebuild()
    except WikiError as e:
        raise StartupFailure(f"failed to read pages directory: {e}") from e

    app = Flask(__name__)
    app.config.update(config.to_flask_config())
    app.extensions['mdwiki'] = Wiki(config=config, store=store, index=index)
    app.register_blueprint(wiki_bp)
    register_error_handlers(app)

    @app.context_processor
    def inject_global_context():
        return {'version': VERSION}

    logger.info(f"Application ready - Version {VERSION}, pages: {config.pages_dir}, documents: {len(index)}")
    return app


def register_error_handlers(app: Flask) -> None:

    @app.errorhandler(WikiError)
    def wiki_error(error):
        if error.status_code >= 500:
            logger.error(f"{request.method} {request.path} failed: {error}", exc_info=error)
        else:
            logger.warning(f"{request.method} {request.path} rejected ({error.status_code}): {error}")
        body = render_template('error.html', code=error.status_code, message=error.public_message)
        return body, error.status_code

    @app.errorhandler(HTTPException)
    def http_error(error):
        # keep headers such as Allow on 405
        response = error.get_response()
        response.data = render_template('error.html', code=error.code, message=error.name)
        response.content_type = 'text/html; charset=utf-8'
        return response

    @app.errorhandler(Exception)
    def internal_error(error):
        logger.error(f"500 Error on {request.method} {request.path}: {error}", exc_info=error)
        return render_template('error.html', code=500, message='Internal Server Error'), 500


def make_request_handler(timeout: float):
    """WSGIRequestHandler whose connection sockets time out after `timeout` seconds."""
    return type('TimeoutRequestHandler', (WSGIRequestHandler,), {'timeout': timeout})


def run_server(app: Flask, config: WikiConfig) -> None:
    """Serve with one thread per request until interrupted."""
    try:
        app.run(
            host=config.host,
            port=config.port,
            debug=config.debug,
            threaded=True,
            use_reloader=False,
            request_handler=make_request_handler(config.request_timeout),
        )
    except OSError as e:
        raise StartupFailure(f"cannot listen on {config.host}:{config.port}: {e}") from e
    except SystemExit as e:
        # werkzeug reports server_bind() errors (address in use) on stderr and exits 1
        if e.code in (0, None):
            raise
        raise StartupFailure(f"cannot listen on {config.host}:{config.port}") from e
