import logging
import ntpath
import posixpath

from mdwiki.core.errors import InvalidName

logger = logging.getLogger(__name__)

DOCUMENT_SUFFIX = ".md"


def validate_name(name: str, require_suffix: bool = False) -> str:
    """
    Check a document name taken from a URL or form field.

    Returns the name unchanged, or raises InvalidName when it is empty, could
    escape the backing directory, or (with require_suffix) is not a markdown
    filename.
    """
    if not name or not name.strip():
        raise InvalidName("empty document name")

    # Security: Prevent directory traversal
    if "/" in name or "\\" in name or name in (".", ".."):
        logger.warning(f"Rejected document name with traversal: {name!r}")
        raise InvalidName(f"traversal in document name: {name!r}")

    if "\x00" in name or posixpath.isabs(name) or ntpath.isabs(name) or ntpath.splitdrive(name)[0]:
        logger.warning(f"Rejected document name: {name!r}")
        raise InvalidName(f"absolute or malformed document name: {name!r}")

    if require_suffix and not is_document_name(name):
        raise InvalidName(f"document name must end in {DOCUMENT_SUFFIX}: {name!r}")

    return name


def is_document_name(name: str) -> bool:
    """True for names with the document suffix and something before it."""
    return name.endswith(DOCUMENT_SUFFIX) and len(name) > len(DOCUMENT_SUFFIX)
