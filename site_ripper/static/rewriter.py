"""
Static rewriter for turning a cloned site into a plain offline copy.

Works purely on the filesystem: scripts are removed, each page's local
stylesheets are merged into one file, images are flattened into a single
images/ directory and root-relative links are mapped onto .html files.
Nothing is fetched from the network.
"""

import hashlib
import os
import shutil
from dataclasses import dataclass, field
from typing import Dict, List, Optional
from urllib.parse import urlparse, unquote

from bs4 import BeautifulSoup

from ..utils.html import parse_html, get_rel_values
from ..utils.log import get_logger
from ..utils.paths import ensure_dir, ensure_parent_dir, get_relative_path


BANNER_HTML = (
    '<div class="static-preview-banner" style="background-color:#f8d7da;'
    'color:#721c24;padding:10px 15px;margin:0 0 20px 0;border-radius:4px;'
    'font-size:14px;position:relative;z-index:9999;">'
    '<strong>Static Preview Mode:</strong> This is a simplified static version '
    'of the cloned site. Interactive features are disabled, and some styles may '
    'be missing.'
    '<button onclick="this.parentNode.style.display=\'none\'" '
    'style="float:right;background:none;border:none;cursor:pointer;'
    'font-weight:bold;">&#215;</button>'
    '</div>'
)

BASE_STYLESHEET = """
body {
  font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, Helvetica, Arial, sans-serif;
  line-height: 1.5;
  color: #333;
  max-width: 1200px;
  margin: 0 auto;
  padding: 20px;
}
img { max-width: 100%; height: auto; }
a { color: #0070f3; text-decoration: none; }
a:hover { text-decoration: underline; }
h1, h2, h3, h4, h5, h6 { margin-top: 0; margin-bottom: 0.5rem; font-weight: 600; line-height: 1.2; }
p { margin-top: 0; margin-bottom: 1rem; }
"""


@dataclass
class RewriteResult:
    """Summary of a static rewrite run."""

    pages: List[str] = field(default_factory=list)
    stylesheets: List[str] = field(default_factory=list)
    images_copied: int = 0
    placeholders: int = 0
    errors: List[Dict] = field(default_factory=list)

    @property
    def pages_written(self) -> int:
        return len(self.pages)


def rewrite_href(href: str) -> str:
    """
    Map an anchor href onto the flattened static layout.

    '/' becomes '../index.html', '/foo' and '/foo/' become '../foo.html',
    fragments and http(s) links are kept, anything else becomes '#'.
    """
    if href.startswith('#') or href.startswith('http'):
        return href
    if href == '/':
        return '../index.html'
    if href.startswith('/') and not href.startswith('//'):
        path = href.split('#', 1)[0].split('?', 1)[0].strip('/')
        if not path:
            return '../index.html'
        return f'../{path}.html'
    return '#'


def merged_css_name(relative_path: str) -> str:
    """
    Get the merged stylesheet path for a page, relative to css/.

    Mirrors the page's place in the tree, e.g. 'blog/index.html' ->
    'blog/index.css', so two pages never share a file.
    """
    stem = os.path.splitext(relative_path.replace('\\', '/'))[0]
    return (stem.strip('/') or 'index') + '.css'


def is_external_image(src: str) -> bool:
    return (
        src.startswith(('http://', 'https://', '//'))
        or '_next/image' in src
    )


class StaticRewriter:
    """
    Rewrites every HTML page of a cloned site into a static copy.

    The input tree is never modified. A failing page is logged and
    recorded in the result; the remaining pages are still processed.
    """

    def __init__(self, input_dir: str, output_dir: str, banner: bool = True):
        """
        Initialize the static rewriter.

        Args:
            input_dir: Root of the cloned site
            output_dir: Root of the static copy to write
            banner: Inject the "Static Preview Mode" banner and base styles
        """
        self.input_dir = os.path.abspath(input_dir)
        self.output_dir = os.path.abspath(output_dir)
        self.banner = banner
        self.logger = get_logger("static")

        self.css_dir = os.path.join(self.output_dir, 'css')
        self.images_dir = os.path.join(self.output_dir, 'images')

    def rewrite(self) -> RewriteResult:
        """
        Walk the input tree and rewrite each .html file.

        Returns:
            RewriteResult with the written pages and any per-file errors
        """
        result = RewriteResult()

        if not os.path.isdir(self.input_dir):
            raise FileNotFoundError(f"Site directory not found: {self.input_dir}")

        ensure_dir(self.css_dir)
        ensure_dir(self.images_dir)

        self.logger.info(f"Converting {self.input_dir} -> {self.output_dir}")

        for root, dirs, files in os.walk(self.input_dir):
            dirs.sort()
            for name in sorted(files):
                if not name.lower().endswith('.html'):
                    continue

                input_path = os.path.join(root, name)
                relative = os.path.relpath(input_path, self.input_dir)

                # Never walk into our own output when it sits inside the input
                if os.path.abspath(input_path).startswith(self.output_dir + os.sep):
                    continue

                try:
                    self._rewrite_page(input_path, relative, result)
                except Exception as e:
                    self.logger.error(f"Error processing HTML file {input_path}: {e}")
                    result.errors.append({
                        'file': relative.replace('\\', '/'),
                        'error': str(e),
                        'type': 'rewrite_error'
                    })

        self.logger.info(
            f"Static conversion complete: {result.pages_written} pages, "
            f"{result.images_copied} images, {result.placeholders} placeholders, "
            f"{len(result.errors)} errors"
        )
        return result

    def _rewrite_page(self, input_path: str, relative: str, result: RewriteResult) -> None:
        output_path = os.path.join(self.output_dir, relative)

        with open(input_path, 'r', encoding='utf-8', errors='replace') as f:
            soup = parse_html(f.read())

        for script in soup.find_all('script'):
            script.decompose()

        css_path = self._consolidate_styles(soup, input_path, output_path, relative)
        if css_path:
            result.stylesheets.append(css_path)

        self._rewrite_images(soup, input_path, output_path, result)

        for anchor in soup.find_all('a', href=True):
            anchor['href'] = rewrite_href(anchor['href'].strip())

        if self.banner:
            self._inject_banner(soup)

        ensure_parent_dir(output_path)
        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(str(soup))

        result.pages.append(output_path)
        self.logger.info(f"Processed: {output_path}")

    def _resolve_local(self, reference: str, input_path: str) -> Optional[str]:
        """Resolve a local href/src to a file inside the input tree."""
        path = unquote(urlparse(reference).path)
        if not path:
            return None

        if path.startswith('/'):
            candidate = os.path.join(self.input_dir, path.lstrip('/'))
        else:
            candidate = os.path.join(os.path.dirname(input_path), path)

        candidate = os.path.abspath(candidate)
        if not candidate.startswith(self.input_dir + os.sep):
            return None
        return candidate

    def _consolidate_styles(
        self,
        soup: BeautifulSoup,
        input_path: str,
        output_path: str,
        relative: str
    ) -> Optional[str]:
        """
        Merge a page's local stylesheets into css/<page path>.css.

        Returns:
            Path of the merged stylesheet, or None if the page had none
        """
        chunks = []
        found_local = False

        for link in soup.find_all('link', href=True):
            if 'stylesheet' not in get_rel_values(link):
                continue
            href = link['href'].strip()
            if href.startswith(('http://', 'https://', '//')):
                continue

            found_local = True
            css_file = self._resolve_local(href, input_path)
            if css_file and os.path.isfile(css_file):
                with open(css_file, 'r', encoding='utf-8', errors='replace') as f:
                    chunks.append(f"/* {href} */\n{f.read()}")
            else:
                self.logger.warning(f"Stylesheet not found for {relative}: {href}")
            link.decompose()

        if not found_local:
            return None

        css_path = os.path.join(self.css_dir, merged_css_name(relative))
        ensure_parent_dir(css_path)
        with open(css_path, 'w', encoding='utf-8') as f:
            f.write('\n\n'.join(chunks))

        new_link = soup.new_tag(
            'link',
            rel='stylesheet',
            href=get_relative_path(output_path, css_path)
        )
        self._ensure_head(soup).append(new_link)
        return css_path

    def _rewrite_images(
        self,
        soup: BeautifulSoup,
        input_path: str,
        output_path: str,
        result: RewriteResult
    ) -> None:
        for img in soup.find_all('img', src=True):
            src = img['src'].strip()
            if not src or src.startswith('data:'):
                continue

            if is_external_image(src):
                target = self._write_placeholder(src)
                result.placeholders += 1
            else:
                source_file = self._resolve_local(src, input_path)
                if not source_file or not os.path.isfile(source_file):
                    self.logger.debug(f"Image not found locally: {src}")
                    continue
                target = os.path.join(self.images_dir, os.path.basename(source_file))
                shutil.copyfile(source_file, target)
                result.images_copied += 1

            img['src'] = get_relative_path(output_path, target)

    def _write_placeholder(self, src: str) -> str:
        digest = hashlib.sha1(src.encode('utf-8')).hexdigest()[:10]
        target = os.path.join(self.images_dir, f"placeholder-{digest}.txt")
        with open(target, 'w', encoding='utf-8') as f:
            f.write(f"Placeholder for external image: {src}\n")
        return target

    def _ensure_head(self, soup: BeautifulSoup):
        head = soup.find('head')
        if head is None:
            head = soup.new_tag('head')
            html = soup.find('html')
            if html is not None:
                html.insert(0, head)
            else:
                soup.insert(0, head)
        return head

    def _inject_banner(self, soup: BeautifulSoup) -> None:
        style = soup.new_tag('style')
        style.string = BASE_STYLESHEET
        self._ensure_head(soup).append(style)

        body = soup.find('body')
        if body is None:
            return
        banner = BeautifulSoup(BANNER_HTML, 'html.parser')
        body.insert(0, banner)
