# swiftkey/services/snippets_api.py

import json
import logging
import os
from datetime import date
from typing import List, Optional

import requests
from pydantic import TypeAdapter, ValidationError

from swiftkey.menu.config_manager import ConfigManager
from swiftkey.menu.serializer import serialize
from swiftkey.models.errors import ConfigError, InvalidSnippetError, SnippetFetchError, SnippetMergeError
from swiftkey.models.models import ConfigSnippet, MenuItem, MergeStrategy

logger = logging.getLogger(__name__)

_SNIPPETS_ADAPTER = TypeAdapter(List[ConfigSnippet])

# Shown when neither the repository nor the local cache is reachable
FALLBACK_SNIPPETS = [
    ConfigSnippet(
        id="swiftkey/developer-tools",
        name="Developer Tools",
        description="Quick access to common developer sites and a terminal.",
        author="swiftkey",
        tags=["development", "web"],
        created="2025-01-15",
        content="""\
- key: "d"
  title: "Developer"
  icon: "hammer"
  submenu:
    - key: "g"
      title: "GitHub"
      action: "open://https://github.com"
    - key: "s"
      title: "Stack Overflow"
      action: "open://https://stackoverflow.com"
    - key: "t"
      title: "Terminal"
      action: "launch:///System/Applications/Utilities/Terminal.app"
""",
    ),
    ConfigSnippet(
        id="swiftkey/system-info",
        name="System Info",
        description="Shell commands that report on the machine.",
        author="swiftkey",
        tags=["shell", "system"],
        created="2025-01-15",
        content="""\
- key: "i"
  title: "System Info"
  icon: "info.circle"
  submenu:
    - key: "u"
      title: "Uptime"
      action: "shell://uptime"
      notify: true
    - key: "d"
      title: "Disk usage"
      action: "shell://df -h /"
      notify: true
""",
    ),
]


class SnippetsService:
    """Client for the snippet repository (`<base_url>/index.json`)."""

    def __init__(self, base_url: str = "http://localhost:3000", timeout: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @property
    def index_url(self) -> str:
        return f"{self.base_url}/index.json"

    def fetch_index(self) -> List[ConfigSnippet]:
        """GET the snippet index and decode it."""
        logger.info("Fetching snippets from %s", self.index_url)
        try:
            response = requests.get(
                self.index_url,
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            return _SNIPPETS_ADAPTER.validate_python(response.json())
        except requests.exceptions.RequestException as e:
            error_msg = str(e)
            if getattr(e, "response", None) is not None:
                error_msg = f"HTTP {e.response.status_code} from {self.index_url}"
            raise SnippetFetchError(error_msg) from e
        except (ValueError, ValidationError) as e:
            # ValueError covers an undecodable JSON body
            raise SnippetFetchError(f"invalid snippet index: {e}") from e


class SnippetsStore:
    """Snippet gallery state: the fetched list, its local cache and imports."""

    def __init__(
        self,
        service: SnippetsService,
        cache_path: str,
        config_manager: Optional[ConfigManager] = None,
    ):
        self.service = service
        self.cache_path = cache_path
        self.config_manager = config_manager
        self.snippets: List[ConfigSnippet] = []
        self.last_error: Optional[Exception] = None

    def fetch_snippets(self) -> List[ConfigSnippet]:
        """Remote index first; on failure the cache, then the built-in set."""
        try:
            fetched = self.service.fetch_index()
        except SnippetFetchError as e:
            logger.error("Failed to fetch snippets: %s", e)
            self.last_error = e
            if not self.snippets:
                self.snippets = self.load_cached_snippets() or list(FALLBACK_SNIPPETS)
            return list(self.snippets)

        logger.info("Successfully fetched %d snippets", len(fetched))
        self.last_error = None
        self.snippets = fetched
        self.cache_snippets(fetched)
        return list(fetched)

    def load_cached_snippets(self) -> List[ConfigSnippet]:
        if not os.path.exists(self.cache_path):
            return []
        try:
            with open(self.cache_path, "r", encoding="utf-8") as f:
                cached = _SNIPPETS_ADAPTER.validate_python(json.load(f))
        except (OSError, ValueError, ValidationError) as e:
            logger.error("Failed to load snippets from cache: %s", e)
            return []
        logger.info("Loaded %d snippets from cache", len(cached))
        return cached

    def cache_snippets(self, snippets: List[ConfigSnippet]) -> None:
        try:
            os.makedirs(os.path.dirname(self.cache_path) or ".", exist_ok=True)
            with open(self.cache_path, "w", encoding="utf-8") as f:
                json.dump([s.model_dump(mode="json", by_alias=True) for s in snippets], f, indent=2)
            logger.debug("Cached %d snippets", len(snippets))
        except OSError as e:
            logger.error("Failed to cache snippets: %s", e)

    def search(self, query: str) -> List[ConfigSnippet]:
        return [snippet for snippet in self.snippets if snippet.matches(query)]

    def get(self, snippet_id: str) -> Optional[ConfigSnippet]:
        return next((snippet for snippet in self.snippets if snippet.id == snippet_id), None)

    def import_snippet(self, snippet: ConfigSnippet, strategy: MergeStrategy = MergeStrategy.SMART) -> List[MenuItem]:
        """Merge the snippet into the live configuration and save it."""
        try:
            items = snippet.menu_items()
        except ConfigError as e:
            logger.error("Snippet '%s' has invalid content: %s", snippet.id, e)
            raise InvalidSnippetError(snippet.id, e) from e

        if self.config_manager is None:
            raise SnippetMergeError(ConfigError("no configuration manager is available"))
        try:
            merged = self.config_manager.import_snippet(items, strategy)
        except ConfigError as e:
            logger.error("Failed to import snippet '%s': %s", snippet.id, e)
            raise SnippetMergeError(e) from e

        logger.info("Imported snippet '%s' (%s)", snippet.id, strategy.value)
        return merged

    def create_snippet(
        self,
        items: List[MenuItem],
        name: str,
        description: str,
        author: str,
        tags: Optional[List[str]] = None,
    ) -> ConfigSnippet:
        """Package part of a configuration as a shareable snippet."""
        snippet_id = f"{author.lower()}/{name.lower().replace(' ', '-')}"
        return ConfigSnippet(
            id=snippet_id,
            name=name,
            description=description,
            author=author,
            tags=list(tags or []),
            created=date.today().strftime("%Y-%m-%d"),
            content=serialize(items),
        )
