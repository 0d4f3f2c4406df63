import logging

from flask import Blueprint, Response, abort, current_app, redirect, render_template, request, url_for

from mdwiki.core.errors import NotFound, RenderFailure, StoreUnavailable
from mdwiki.core.names import validate_name
from mdwiki.core.renderer import render_document

wiki_bp = Blueprint('wiki', __name__)
logger = logging.getLogger(__name__)

EDIT_SUFFIX = '/edit'
TRUTHY = {'1', 'true', 'on', 'yes'}


def get_wiki():
    """The Wiki (store + index) attached to the running app."""
    return current_app.extensions['mdwiki']


def require_indexed(name: str) -> None:
    """The index decides existence; a file on disk that was never indexed is not found."""
    if not get_wiki().index.contains(name):
        logger.warning(f"Document not in index: {name}")
        raise NotFound(name)


@wiki_bp.route('/')
def index():
    """Main page listing every indexed document."""
    pages = sorted(get_wiki().index.snapshot())
    logger.info(f"Index route: Found {len(pages)} pages")
    return render_template('index.html', pages=pages)


@wiki_bp.route('/page/<path:name>', methods=['GET', 'POST'])
def page(name):
    # /page/<name>/edit shares the converter, so split it off here
    if name.endswith(EDIT_SUFFIX):
        return edit(name[:-len(EDIT_SUFFIX)])
    if request.method == 'POST':
        abort(405, valid_methods=['GET', 'HEAD', 'OPTIONS'])
    return view(name)


def view(name):
    """Render a single document inside the page frame."""
    wiki = get_wiki()
    validate_name(name)
    require_indexed(name)

    raw = wiki.store.read(name)
    html_content, title = render_document(raw, name)

    logger.info(f"Rendered document: {name}, size: {len(raw)} bytes")
    return render_template('page.html', name=name, title=title, content=html_content)


def edit(name):
    wiki = get_wiki()
    validate_name(name)
    require_indexed(name)

    if request.method == 'POST':
        content = request.form.get('content')
        if content is None:
            abort(400, description='Missing content')
        wiki.store.write(name, content, overwrite=True)
        return redirect(url_for('wiki.page', name=name), code=303)

    raw = wiki.store.read(name)
    try:
        content = raw.decode('utf-8')
    except UnicodeDecodeError as e:
        raise RenderFailure(f"{name} is not valid UTF-8: {e}") from e
    return render_template('edit.html', name=name, content=content)


@wiki_bp.route('/new', methods=['GET', 'POST'])
def new():
    """
    GET serves the creation form, POST writes the document.

    The new document is not added to the index; it appears after the next
    refresh.
    """
    if request.method != 'POST':
        return render_template('new.html')

    fname = request.form.get('fname', '')
    content = request.form.get('content')
    overwrite = request.form.get('overwrite', '').lower() in TRUTHY

    validate_name(fname, require_suffix=True)
    if content is None:
        abort(400, description='Missing content')

    size = get_wiki().store.write(fname, content, overwrite=overwrite)
    return render_template('created.html', name=fname, size=size,
                           fields=list(request.form.items(multi=True))), 201


@wiki_bp.route('/delete/<path:name>', methods=['POST'])
def delete(name):
    """Remove a document from disk. The index keeps it until the next refresh."""
    wiki = get_wiki()
    validate_name(name)
    require_indexed(name)

    wiki.store.delete(name)
    return render_template('deleted.html', name=name)


@wiki_bp.route('/refresh', methods=['POST'])
def refresh():
    wiki = get_wiki()
    try:
        wiki.index.rebuild()
    except StoreUnavailable as e:
        logger.error(f"Refresh failed: {e}", exc_info=True)
        reason = e.__cause__ or e
        return Response(
            f"failed to read pages directory {str(wiki.store.root)!r}: {reason}",
            status=500,
            mimetype='text/plain',
        )
    return Response(status=200)
