"""Base service class with shared functionality.

No Rich imports, no console output. Returns structured data; raises typed
exceptions.
"""

import logging

from claude_client import ClaudeClient, CompletionClient
from config_loader import Settings, load_config
from data_store import DataStore, ListingStore, ProfileStore
from models import CandidateProfile
from pipeline_store import PipelineStore
from search_client import FirecrawlSearchClient, SearchClient
from skills import SkillContext

from .exceptions import ConfigurationError, ProfileNotFoundError

logger = logging.getLogger(__name__)


class BaseService:
    """Base class for all services.

    Every collaborator can be injected. The completion and search clients are
    built on first use so that services which never call them (listing and
    profile management) work without credentials.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        data_store: DataStore | None = None,
        pipeline: PipelineStore | None = None,
        client: CompletionClient | None = None,
        search: SearchClient | None = None,
        profiles: ProfileStore | None = None,
        listings: ListingStore | None = None,
    ):
        """Initialize the service.

        Args:
            settings: Settings object. If None, loads from config.json + environment.
            data_store: DataStore used for both stores unless they are given separately.
            pipeline: PipelineStore instance. If None, wraps the listing store.
            client: Completion client. If None, a ClaudeClient is created on first use.
            search: Search client. If None, a FirecrawlSearchClient is created on first use.
            profiles: Profile store override.
            listings: Listing store override.
        """
        self.settings = settings or load_config()

        if data_store is None and (profiles is None or listings is None):
            data_store = DataStore(self.settings)
        self.data_store = data_store
        self.profiles: ProfileStore = profiles or data_store
        self.listings: ListingStore = listings or data_store
        self.pipeline = pipeline or PipelineStore(self.listings)

        self._client = client
        self._search = search

    @property
    def client(self) -> CompletionClient:
        if self._client is None:
            try:
                self._client = ClaudeClient(self.settings)
            except ValueError as e:
                raise ConfigurationError(str(e), setting="anthropic_api_key") from e
        return self._client

    @property
    def search(self) -> SearchClient:
        if self._search is None:
            try:
                self._search = FirecrawlSearchClient(self.settings)
            except ValueError as e:
                raise ConfigurationError(str(e), setting="search_api_key") from e
        return self._search

    def _require_credentials(self, search: bool = False) -> None:
        """Build the clients now so that a missing key raises ConfigurationError
        before any pipeline work starts."""
        self.client
        if search:
            self.search

    async def _require_profile(self, user_id: str) -> CandidateProfile:
        """Load the user's profile or raise ProfileNotFoundError."""
        profile = await self.profiles.get_profile(user_id)
        if not profile:
            raise ProfileNotFoundError(user_id)
        return profile

    def _context(self, profile: CandidateProfile | None = None, **extra) -> SkillContext:
        return SkillContext(settings=self.settings, profile=profile, extra=extra)

    def _log_token_usage(self, operation: str) -> None:
        usage = self.client.get_token_usage()
        logger.info(
            "%s used %d input + %d output tokens",
            operation, usage["input_tokens"], usage["output_tokens"],
        )
