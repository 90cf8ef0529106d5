"""Source export schemas.

The export groups every source user with its channel and tracks. Keys
follow the source store's camelCase naming (``createdAt``,
``providerUserInfo``, ``localId``); Python code uses snake_case.
"""

from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class SourceModel(BaseModel):
    """Base for read-only source records."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class ProviderInfo(SourceModel):
    """One linked sign-in provider, e.g. ``google.com``."""

    provider_id: str


class AuthUserSource(SourceModel):
    """Source auth profile."""

    id: str = Field(validation_alias=AliasChoices("id", "localId", "local_id"))
    email: str | None = None
    created_at: datetime | None = None
    password_hash: str | None = None
    provider_user_info: list[ProviderInfo] = Field(default_factory=list)


class ChannelSource(SourceModel):
    """Source channel."""

    title: str
    slug: str
    body: str | None = None
    created: datetime | None = None
    updated: datetime | None = None
    link: str | None = None
    image: str | None = None


class TrackSource(SourceModel):
    """Source track. Tracks without a url are never migrated."""

    url: str | None = None
    title: str | None = None
    body: str | None = None
    created: datetime | None = None

    @property
    def has_url(self) -> bool:
        return bool(self.url)


class SourceEntity(SourceModel):
    """One user with their optional channel and tracks."""

    user: AuthUserSource
    channel: ChannelSource | None = None
    tracks: list[TrackSource] | None = None

    @property
    def user_id(self) -> str:
        return self.user.id

    @property
    def track_count(self) -> int | None:
        """Number of source tracks, or None when the entity has none."""
        if self.tracks is None:
            return None
        return len(self.tracks)
