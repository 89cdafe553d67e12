import os
from dotenv import load_dotenv

load_dotenv()


HEADERS = {
    "User-Agent": "Mozilla/5.0 (compatible; link-crawler/0.1; +https://github.com/link-crawler)",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Connection": "keep-alive",
    "Accept-Encoding": "gzip, deflate",
}


# Crawler settings - hops followed after the seed page
MAX_DEPTH = int(os.getenv("CRAWLER_MAX_DEPTH", "1"))
CONCURRENCY = int(os.getenv("CRAWLER_CONCURRENCY", "8"))

# "regex" only understands href="..."; "dom" parses anchors with BeautifulSoup
EXTRACTOR = os.getenv("CRAWLER_EXTRACTOR", "regex")

# Request settings
REQUEST_TIMEOUT = float(os.getenv("CRAWLER_REQUEST_TIMEOUT", "10.0"))  # seconds, per request

# Retry settings
MAX_RETRIES = int(os.getenv("CRAWLER_MAX_RETRIES", "2"))
BASE_DELAY = float(os.getenv("CRAWLER_BASE_DELAY", "1.0"))  # doubled on every retry

LOG_LEVEL = os.getenv("CRAWLER_LOG_LEVEL", "INFO")
