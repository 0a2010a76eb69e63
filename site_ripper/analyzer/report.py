"""
HTML design report builder.

Builds a standalone design-report.html from the collected colors, fonts,
component samples and libraries.
"""

from typing import Dict, List, Optional

from bs4 import BeautifulSoup, Tag

from .components import ComponentSample
from .typography import TYPOGRAPHY_SCALE, SYSTEM_FONT_STACK
from ..utils.constants import REPORT_SAMPLE_LIMITS


REPORT_CSS = """
:root {
  --report-bg: #f8fafc;
  --card-bg: white;
  --text-color: #334155;
  --heading-color: #0f172a;
  --border-color: #e2e8f0;
}
* { box-sizing: border-box; margin: 0; padding: 0; }
body {
  font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, Helvetica, Arial, sans-serif;
  line-height: 1.5;
  color: var(--text-color);
  background: var(--report-bg);
  padding: 2rem;
}
.report { max-width: 1200px; margin: 0 auto; }
header { margin-bottom: 3rem; text-align: center; }
h1 { font-size: 2.5rem; color: var(--heading-color); margin-bottom: 1rem; }
h2 { font-size: 1.8rem; color: var(--heading-color); margin: 2rem 0 1rem;
     padding-bottom: 0.5rem; border-bottom: 1px solid var(--border-color); }
h3 { font-size: 1.4rem; color: var(--heading-color); margin: 1.5rem 0 1rem; }
p { margin-bottom: 1rem; }
.panel { background: var(--card-bg); border-radius: 0.5rem;
         box-shadow: 0 1px 3px rgba(0,0,0,0.1); padding: 1.5rem; margin-bottom: 1.5rem; }
.color-palette { display: flex; flex-wrap: wrap; gap: 1rem; margin-bottom: 2rem; }
.color-swatch { width: 100px; height: 100px; border-radius: 0.5rem; display: flex;
                flex-direction: column; justify-content: flex-end; padding: 0.5rem;
                font-size: 0.75rem; color: white; text-shadow: 0 0 2px #000;
                border: 1px solid var(--border-color); word-break: break-all; }
.component-grid { display: grid; grid-template-columns: repeat(auto-fill, minmax(300px, 1fr));
                  gap: 1.5rem; margin-bottom: 2rem; }
.component-card { border: 1px solid var(--border-color); border-radius: 0.5rem; overflow: hidden; }
.component-preview { padding: 1.5rem; background: white; border-bottom: 1px solid var(--border-color);
                     min-height: 100px; display: flex; align-items: center; justify-content: center; }
.component-code { padding: 1rem; background: #f1f5f9; font-family: monospace; font-size: 0.85rem;
                  overflow: auto; max-height: 200px; white-space: pre-wrap; }
.font-item { margin-bottom: 1.5rem; }
.font-example { font-size: 1.5rem; margin-bottom: 0.5rem; }
.font-details { font-size: 0.875rem; color: #64748b; }
"""

SECTION_TITLES = {
    "buttons": "Buttons",
    "cards": "Cards",
    "inputs": "Form Elements",
    "alerts": "Alerts & Notifications",
}

PANGRAM = "The quick brown fox jumps over the lazy dog"


class ReportBuilder:
    """Assembles the design report document with BeautifulSoup."""

    def __init__(self, title: str = "Design System Report", sample_limits: Optional[Dict[str, int]] = None):
        self.title = title
        self.sample_limits = dict(REPORT_SAMPLE_LIMITS)
        if sample_limits:
            self.sample_limits.update(sample_limits)

        self.soup = BeautifulSoup(
            '<!DOCTYPE html><html><head><meta charset="utf-8"></head><body></body></html>',
            'html.parser'
        )

    def _tag(self, name: str, text: Optional[str] = None, **attrs) -> Tag:
        if 'class_' in attrs:
            attrs['class'] = attrs.pop('class_')
        tag = self.soup.new_tag(name, attrs=attrs)
        if text is not None:
            tag.string = text
        return tag

    def build(
        self,
        colors: List[str],
        fonts: List[str],
        components: Dict[str, List[ComponentSample]],
        libraries: List[str],
        source: str = ""
    ) -> str:
        """
        Render the report.

        Returns:
            Serialized HTML document
        """
        head = self.soup.head
        head.append(self._tag('title', self.title))
        head.append(self._tag('style', REPORT_CSS))

        container = self._tag('div', class_='report')
        self.soup.body.append(container)

        header = self._tag('header')
        header.append(self._tag('h1', self.title))
        header.append(self._tag('p', f"Extracted from {source}" if source else "Extracted from cloned website"))
        container.append(header)

        container.append(self._color_section(colors))
        container.append(self._typography_section(fonts))
        container.append(self._library_section(libraries))
        container.append(self._components_section(components))

        return str(self.soup)

    def _color_section(self, colors: List[str]) -> Tag:
        section = self._tag('section')
        section.append(self._tag('h2', 'Color Palette'))

        palette = self._tag('div', class_='color-palette')
        for color in colors:
            palette.append(self._tag(
                'div', color, class_='color-swatch', style=f"background-color: {color};"
            ))
        if not colors:
            section.append(self._tag('p', 'No colors detected.'))
        section.append(palette)
        return section

    def _font_item(self, family: str, label: str) -> Tag:
        item = self._tag('div', class_='font-item')
        item.append(self._tag('div', PANGRAM, class_='font-example', style=f"font-family: {family};"))
        item.append(self._tag('div', f"Font Family: {label}", class_='font-details'))
        return item

    def _typography_section(self, fonts: List[str]) -> Tag:
        section = self._tag('section')
        section.append(self._tag('h2', 'Typography'))

        fonts_panel = self._tag('div', class_='panel')
        if fonts:
            for font in fonts:
                fonts_panel.append(self._font_item(font, font))
        else:
            fonts_panel.append(self._tag(
                'p', 'No specific font families detected. The site likely uses system fonts.'
            ))
            fonts_panel.append(self._font_item(SYSTEM_FONT_STACK, 'System font stack'))
        section.append(fonts_panel)

        scale = self._tag('div', class_='panel')
        scale.append(self._tag('h3', 'Typography Scale'))
        for label, size, bold in TYPOGRAPHY_SCALE:
            weight = " font-weight: bold;" if bold else ""
            scale.append(self._tag(
                'div', f"{label} ({size})",
                style=f"font-size: {size};{weight} margin-bottom: 1rem;"
            ))
        section.append(scale)
        return section

    def _library_section(self, libraries: List[str]) -> Tag:
        section = self._tag('section')
        section.append(self._tag('h2', 'Libraries'))
        if not libraries:
            section.append(self._tag('p', 'No common libraries detected.'))
            return section

        listing = self._tag('ul', class_='panel')
        for name in libraries:
            listing.append(self._tag('li', name))
        section.append(listing)
        return section

    def _components_section(self, components: Dict[str, List[ComponentSample]]) -> Tag:
        section = self._tag('section')
        section.append(self._tag('h2', 'UI Components'))

        for category, title in SECTION_TITLES.items():
            samples = components.get(category, [])
            if not samples:
                continue

            block = self._tag('div')
            block.append(self._tag('h3', title))
            grid = self._tag('div', class_='component-grid')

            for sample in samples[:self.sample_limits.get(category, len(samples))]:
                card = self._tag('div', class_='component-card')

                preview = self._tag('div', class_='component-preview')
                preview.append(BeautifulSoup(sample.html, 'html.parser'))
                card.append(preview)

                # Serialized as escaped text
                code = self._tag('pre', class_='component-code')
                code.append(self._tag('code', sample.html))
                card.append(code)

                grid.append(card)

            block.append(grid)
            section.append(block)

        return section


def build_report(
    colors: List[str],
    fonts: List[str],
    components: Dict[str, List[ComponentSample]],
    libraries: List[str],
    source: str = "",
    sample_limits: Optional[Dict[str, int]] = None
) -> str:
    """Build a design report document in one call."""
    return ReportBuilder(sample_limits=sample_limits).build(
        colors, fonts, components, libraries, source
    )
