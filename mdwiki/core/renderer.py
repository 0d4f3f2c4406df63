import logging
from typing import Tuple
from urllib.parse import urlsplit

import markdown
import pymdownx.superfences
from bs4 import BeautifulSoup

from mdwiki.core.errors import RenderFailure
from mdwiki.core.names import is_document_name

logger = logging.getLogger(__name__)

PAGE_URL_PREFIX = "/page/"

MARKDOWN_EXTENSIONS = [
    'markdown.extensions.wikilinks',  # [[Link]]
    'tables',
    'sane_lists',
    'toc',
    'attr_list',
    'pymdownx.tasklist',
    'pymdownx.tilde',
    'pymdownx.mark',
    'pymdownx.magiclink',
    'pymdownx.superfences',
]

EXTENSION_CONFIGS = {
    'markdown.extensions.wikilinks': {
        'base_url': PAGE_URL_PREFIX,
        'end_url': '.md',
    },
    'pymdownx.superfences': {
        'custom_fences': [
            {
                'name': 'mermaid',
                'class': 'mermaid',
                'format': pymdownx.superfences.fence_div_format,
            }
        ]
    },
}


def render_markdown(md_text: str) -> str:
    """Markdown -> HTML with the wiki's extension set."""
    # Markdown instances keep state between conversions; one per call
    md_instance = markdown.Markdown(
        extensions=MARKDOWN_EXTENSIONS,
        extension_configs=EXTENSION_CONFIGS,
    )
    logger.debug(f"Render markdown: {len(md_text)} chars input")
    return md_instance.convert(md_text)


def process_links_in_html(html_content: str) -> str:
    """
    Point relative links at other documents to their /page/ URL.
    `[intro](intro.md#setup)` becomes `/page/intro.md#setup`.
    """
    soup = BeautifulSoup(html_content, 'html.parser')
    rewrite_page_links(soup)
    return str(soup)


def rewrite_page_links(soup: BeautifulSoup) -> None:
    for link in soup.find_all('a', href=True):
        href = link['href']
        parts = urlsplit(href)
        if parts.scheme or parts.netloc or href.startswith(('/', '#')):
            continue
        if '/' in parts.path or not is_document_name(parts.path):
            continue
        target = PAGE_URL_PREFIX + parts.path
        if parts.fragment:
            target += '#' + parts.fragment
        link['href'] = target
        logger.debug(f"Resolved relative link {href} -> {target}")


def extract_title(soup: BeautifulSoup, default: str) -> str:
    """Text of the first rendered <h1>, else default."""
    heading = soup.find('h1')
    if heading is None:
        return default
    return heading.get_text().strip() or default


def render_document(raw: bytes, name: str) -> Tuple[str, str]:
    """
    Decode and render a stored document, returning (html, title).
    Any decoding or conversion error is raised as RenderFailure.
    """
    try:
        md_text = raw.decode('utf-8')
        soup = BeautifulSoup(render_markdown(md_text), 'html.parser')
        rewrite_page_links(soup)
        return str(soup), extract_title(soup, name)
    except Exception as e:
        raise RenderFailure(f"failed to render {name}: {e}") from e
