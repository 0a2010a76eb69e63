"""
Shared constants for the site ripper.

Contains common configuration values used across multiple modules.
"""

# Default user agent string for all HTTP requests
DEFAULT_USER_AGENT = "Mozilla/5.0 Website Analysis Tool"

# Accept headers sent with every fetch
DEFAULT_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8"
DEFAULT_ACCEPT_LANGUAGE = "en-US,en;q=0.5"

# Default request timeout in seconds
DEFAULT_TIMEOUT = 15

# Maximum number of redirect hops followed by the fetcher
DEFAULT_MAX_REDIRECTS = 10

# Maximum crawl depth by default (seed page is depth 0)
DEFAULT_MAX_DEPTH = 2

# Default crawl delay before each request in seconds
DEFAULT_CRAWL_DELAY = 0.5

# Number of crawl workers draining the task queue
DEFAULT_WORKERS = 5

# Content types decoded as text; everything else is kept as raw bytes
TEXT_CONTENT_TYPES = (
    "text/",
    "application/javascript",
    "application/json",
    "application/xml",
    "application/xhtml",
)

# Asset buckets under <output>/assets/
ASSET_BUCKETS = ("css", "js", "images", "fonts", "other")

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".svg", ".webp", ".ico", ".avif")
FONT_EXTENSIONS = (".woff", ".woff2", ".ttf", ".eot", ".otf")

# Default directory names used by the CLIs
DEFAULT_OUTPUT_DIR = "./cloned-site"
DEFAULT_SITES_DIR = "./cloned-sites"
DEFAULT_STATIC_DIR = "./static-sites"
DEFAULT_DESIGN_DIR = "./design-elements"
DEFAULT_REPORTS_DIR = "./design-reports"

# Component samples longer than this are truncated in the design report
MAX_SAMPLE_HTML = 1000

# Cards shorter than this are not worth showing
MIN_CARD_HTML = 50

# Number of samples per category rendered in the design report
REPORT_SAMPLE_LIMITS = {
    "buttons": 6,
    "cards": 4,
    "inputs": 6,
    "alerts": 4,
}

# Port for the local preview server
DEFAULT_SERVE_PORT = 8080
