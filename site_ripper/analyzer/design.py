"""
Design extractor that combines the analyzers over a cloned site.

Scans every stylesheet and page under a site directory and writes the
combined CSS, an essential-styles summary, design tokens as JSON and an
HTML design report.
"""

import os
import json
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any

from .colors import ColorExtractor
from .typography import FontExtractor
from .components import ComponentDetector, ComponentSample, LibraryDetector
from .report import build_report
from ..utils.constants import REPORT_SAMPLE_LIMITS
from ..utils.html import parse_html
from ..utils.log import get_logger
from ..utils.paths import ensure_dir


@dataclass
class DesignReport:
    """Everything extracted from one site."""
    site_dir: str
    colors: List[str] = field(default_factory=list)
    fonts: List[str] = field(default_factory=list)
    components: Dict[str, List[ComponentSample]] = field(default_factory=dict)
    libraries: List[str] = field(default_factory=list)
    css_files: List[str] = field(default_factory=list)
    html_files: List[str] = field(default_factory=list)
    output_files: Dict[str, str] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)


def find_files(root: str, extension: str) -> List[str]:
    """Find files with an extension under root, sorted by path."""
    found = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        for name in filenames:
            if name.lower().endswith(extension):
                found.append(os.path.join(dirpath, name))
    return sorted(found)


class DesignExtractor:
    """
    Extracts colors, fonts, components and libraries from a cloned site.

    Failures reading or parsing individual files are logged and recorded
    in the report; extraction carries on with the remaining files.
    """

    def __init__(self, site_dir: str, output_dir: str, max_samples: Optional[int] = None):
        """
        Initialize the design extractor.

        Args:
            site_dir: Root of the cloned site
            output_dir: Directory for the generated files
            max_samples: Cap on samples per category in the HTML report
        """
        self.site_dir = os.path.abspath(site_dir)
        self.output_dir = os.path.abspath(output_dir)
        self.css_dir = os.path.join(self.output_dir, 'css')
        self.logger = get_logger("design")

        self.sample_limits = dict(REPORT_SAMPLE_LIMITS)
        if max_samples is not None:
            self.sample_limits = {
                category: min(limit, max_samples)
                for category, limit in self.sample_limits.items()
            }

        self.color_extractor = ColorExtractor()
        self.font_extractor = FontExtractor()
        self.component_detector = ComponentDetector()
        self.library_detector = LibraryDetector()

    def extract(self) -> DesignReport:
        """
        Run the extraction and write all outputs.

        Returns:
            DesignReport with the extracted design elements
        """
        if not os.path.isdir(self.site_dir):
            raise FileNotFoundError(f"Site directory not found: {self.site_dir}")

        self.logger.info(f"Extracting design elements from {self.site_dir}")
        ensure_dir(self.css_dir)

        report = DesignReport(site_dir=self.site_dir)

        self._extract_css(report)
        self._extract_components(report)

        report.colors = self.color_extractor.colors
        report.fonts = self.font_extractor.fonts
        report.components = self.component_detector.components
        report.libraries = self.library_detector.libraries

        self._write_outputs(report)

        self.logger.info(
            f"Design extraction complete: {len(report.colors)} colors, "
            f"{len(report.fonts)} fonts, {sum(self.component_detector.counts().values())} components"
        )
        return report

    def _relative(self, path: str) -> str:
        return os.path.relpath(path, self.site_dir).replace('\\', '/')

    def _extract_css(self, report: DesignReport) -> None:
        """Concatenate every stylesheet and run the CSS analyzers over each."""
        chunks = []

        for css_file in find_files(self.site_dir, '.css'):
            # Skip our own output when it lives inside the site
            if css_file.startswith(self.output_dir + os.sep):
                continue
            rel = self._relative(css_file)
            try:
                with open(css_file, 'r', encoding='utf-8', errors='replace') as f:
                    css = f.read()
            except OSError as e:
                self.logger.error(f"Error reading CSS file {css_file}: {e}")
                report.errors.append(f"{rel}: {e}")
                continue

            chunks.append(f"/* From {rel} */\n{css}\n\n")
            report.css_files.append(rel)

            self.color_extractor.extract(css)
            self.font_extractor.extract(css)

        all_styles = os.path.join(self.css_dir, 'all-styles.css')
        with open(all_styles, 'w', encoding='utf-8') as f:
            f.write(''.join(chunks))
        report.output_files['all_styles'] = all_styles
        self.logger.info(f"Extracted CSS to {all_styles}")

    def _extract_components(self, report: DesignReport) -> None:
        for html_file in find_files(self.site_dir, '.html'):
            rel = self._relative(html_file)
            try:
                with open(html_file, 'r', encoding='utf-8', errors='replace') as f:
                    html = f.read()
                soup = parse_html(html)
                self.component_detector.detect(soup)
                self.library_detector.detect(soup, html)
            except Exception as e:
                self.logger.error(f"Error processing HTML file {html_file}: {e}")
                report.errors.append(f"{rel}: {e}")
                continue
            report.html_files.append(rel)

    def generate_essential_css(self, colors: List[str], fonts: List[str]) -> str:
        """Generate the essential-styles stylesheet from colors and fonts."""
        lines = ['/* Essential Design Elements */', '', '/* Colors */', ':root {']
        for index, color in enumerate(colors, start=1):
            lines.append(f"  --color-{index}: {color};")
        lines.extend(['}', '', '/* Typography */'])
        for font in fonts:
            lines.append(f"/* Font Family: {font} */")
        return '\n'.join(lines) + '\n'

    def generate_tokens(self, report: DesignReport) -> Dict[str, Any]:
        return {
            'source': report.site_dir,
            'colors': {
                f"color-{index}": color
                for index, color in enumerate(report.colors, start=1)
            },
            'fonts': report.fonts,
            'components': self.component_detector.counts(),
            'libraries': report.libraries,
            'css_files': report.css_files,
        }

    def _write_outputs(self, report: DesignReport) -> None:
        essential = os.path.join(self.css_dir, 'essential-styles.css')
        with open(essential, 'w', encoding='utf-8') as f:
            f.write(self.generate_essential_css(report.colors, report.fonts))
        report.output_files['essential_styles'] = essential

        tokens = os.path.join(self.output_dir, 'design-tokens.json')
        with open(tokens, 'w', encoding='utf-8') as f:
            json.dump(self.generate_tokens(report), f, indent=2, ensure_ascii=False)
        report.output_files['design_tokens'] = tokens

        report_path = os.path.join(self.output_dir, 'design-report.html')
        try:
            html = build_report(
                report.colors,
                report.fonts,
                report.components,
                report.libraries,
                source=os.path.basename(self.site_dir),
                sample_limits=self.sample_limits
            )
            with open(report_path, 'w', encoding='utf-8') as f:
                f.write(html)
            report.output_files['design_report'] = report_path
            self.logger.info(f"Design report saved to {report_path}")
        except Exception as e:
            self.logger.error(f"Error creating design report: {e}")
            report.errors.append(f"design-report.html: {e}")
