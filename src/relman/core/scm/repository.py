"""Configure SCM repositories and providers from a release configuration."""

import logging
from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Tuple

from relman.core.scm.base import (
    NoSuchScmProviderError,
    ScmProvider,
    ScmRepository,
    ScmRepositoryError,
)

if TYPE_CHECKING:
    from relman.core.release.configuration import ReleaseConfiguration

logger = logging.getLogger(__name__)

SCM_URL_PREFIX = "scm"

ProviderFactory = Callable[[], ScmProvider]


def parse_scm_url(scm_url: Optional[str]) -> Tuple[str, str]:
    """Split an SCM URL into its provider type and provider-specific part.

    Accepts ``scm:<provider>:<url>`` and, for URLs that themselves contain
    colons in awkward places, ``scm|<provider>|<url>``.

    Args:
        scm_url: The full SCM URL

    Returns:
        Tuple of (provider type, provider-specific URL)

    Raises:
        ScmRepositoryError: If the URL is missing or malformed
    """
    if scm_url is None or not scm_url.strip():
        raise ScmRepositoryError("Invalid SCM URL", ["The SCM URL cannot be empty."])

    scm_url = scm_url.strip()
    if len(scm_url) < 4 or not scm_url.startswith(SCM_URL_PREFIX):
        raise ScmRepositoryError(
            "Invalid SCM URL", [f"The SCM URL must start with '{SCM_URL_PREFIX}:': {scm_url}"]
        )

    delimiter = scm_url[3]
    if delimiter not in (":", "|"):
        raise ScmRepositoryError(
            "Invalid SCM URL",
            [f"The SCM URL delimiter must be ':' or '|', found '{delimiter}': {scm_url}"],
        )

    parts = scm_url[4:].split(delimiter, 1)
    if len(parts) != 2 or not parts[0]:
        raise ScmRepositoryError(
            "Invalid SCM URL", [f"The SCM URL does not name a provider: {scm_url}"]
        )

    return parts[0], parts[1]


def _default_providers() -> Dict[str, ProviderFactory]:
    from relman.core.scm.git import GitScmProvider

    return {"git": GitScmProvider}


class ScmRepositoryConfigurator:
    """Build ScmRepository objects and hand out the matching providers.

    Provider instances are created lazily and cached per provider type; call
    ``invalidate()`` to drop the cache (e.g. after changing settings).
    """

    def __init__(self, providers: Optional[Dict[str, ProviderFactory]] = None) -> None:
        """Initialize the configurator.

        Args:
            providers: Mapping of provider type to factory (defaults to git only)
        """
        self._factories: Dict[str, ProviderFactory] = (
            dict(providers) if providers is not None else _default_providers()
        )
        self._instances: Dict[str, ScmProvider] = {}

    def provider_types(self) -> List[str]:
        """Sorted list of supported provider types."""
        return sorted(self._factories.keys())

    def invalidate(self) -> None:
        """Forget cached provider instances."""
        self._instances.clear()

    def _provider_for(self, provider_type: str) -> ScmProvider:
        provider = self._instances.get(provider_type)
        if provider is None:
            factory = self._factories.get(provider_type)
            if factory is None:
                raise NoSuchScmProviderError(
                    f"No SCM provider for type '{provider_type}'. "
                    f"Available: {self.provider_types()}"
                )
            provider = factory()
            self._instances[provider_type] = provider
        return provider

    def get_configured_repository(self, config: "ReleaseConfiguration") -> ScmRepository:
        """Build the repository described by ``config.scm_source_url``.

        Raises:
            ScmRepositoryError: If the URL fails validation
            NoSuchScmProviderError: If the URL names an unknown provider
        """
        provider_type, url = parse_scm_url(config.scm_source_url)
        provider = self._provider_for(provider_type)

        messages = provider.validate_url(url)
        if messages:
            raise ScmRepositoryError(f"Invalid {provider_type} SCM URL: {url}", messages)

        repository = ScmRepository(
            provider=provider_type,
            url=url,
            username=config.scm_username,
            password=config.scm_password,
        )
        logger.debug("Configured %s repository %s", provider_type, url)
        return repository

    def get_repository_provider(self, repository: ScmRepository) -> ScmProvider:
        """Get the provider handling ``repository``.

        Raises:
            NoSuchScmProviderError: If no provider handles the repository type
        """
        return self._provider_for(repository.provider)
