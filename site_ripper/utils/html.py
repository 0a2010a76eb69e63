"""
HTML parsing helpers shared by the crawler and the offline tools.
"""

from typing import List, Union

from bs4 import BeautifulSoup, Tag

from ..errors import ParseError


def parse_html(html: Union[str, bytes], source: str = "document") -> BeautifulSoup:
    """
    Parse HTML with lxml, falling back to the builtin parser.

    Malformed markup normally never raises; the parsers repair what they
    can. ParseError is raised only if neither parser produces a tree.
    """
    try:
        return BeautifulSoup(html, 'lxml')
    except Exception:
        try:
            return BeautifulSoup(html, 'html.parser')
        except Exception as e:
            raise ParseError(source, str(e)) from e


def get_class_string(tag: Tag) -> str:
    """Return the class attribute of a tag as a single space-joined string."""
    classes = tag.get('class', [])
    if isinstance(classes, str):
        return classes.strip()
    return ' '.join(classes)


def get_rel_values(tag: Tag) -> List[str]:
    """Return the lower-cased rel tokens of a tag."""
    rel = tag.get('rel', [])
    if isinstance(rel, str):
        rel = rel.split()
    return [value.lower() for value in rel]
