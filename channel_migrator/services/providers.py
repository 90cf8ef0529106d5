"""Auth provider claim extraction."""

from collections.abc import Sequence

from channel_migrator.schemas.source import ProviderInfo

DEFAULT_PROVIDER = "email"


def extract_provider(
    provider_user_info: Sequence[ProviderInfo] | None,
    default: str = DEFAULT_PROVIDER,
) -> str:
    """Canonical provider label for a source user.

    The first linked provider wins and a trailing ``.com`` is dropped, so
    ``google.com`` becomes ``google``. Users without linked providers signed
    up with email and password.
    """
    if not provider_user_info:
        return default
    return provider_user_info[0].provider_id.removesuffix(".com")
