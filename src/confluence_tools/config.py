"""Configuration helpers for the Confluence tools."""

from __future__ import annotations

import dataclasses
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, HttpUrl, ValidationError, model_validator

from .confluence.errors import InvalidRequestError, MissingCredentialsError


class ConfluenceCredentials(BaseModel):
    """Connection information for the Confluence REST API."""

    base_url: HttpUrl = Field(..., description="Base URL of the Confluence instance")
    pat: Optional[str] = Field(None, description="Personal access token, sent as a Bearer token")
    email: Optional[str] = Field(None, description="Account email associated with the API token")
    api_token: Optional[str] = Field(None, description="API token generated from Atlassian account")

    @model_validator(mode="after")
    def _require_auth(self) -> "ConfluenceCredentials":
        if not self.pat and not (self.email and self.api_token):
            raise ValueError("either pat or both email and api_token must be provided")
        return self


class PageDefaults(BaseModel):
    """Default context parameters for page operations."""

    space_id: Optional[str] = Field(None, description="Default Confluence space ID")
    space_key: Optional[str] = Field(None, description="Default Confluence space key")
    parent_page_id: Optional[str] = Field(None, description="Default parent page ID for new pages")


class ConfluenceConfig(BaseModel):
    """Aggregate configuration for the CLI."""

    credentials: ConfluenceCredentials
    defaults: PageDefaults = Field(default_factory=PageDefaults)


ENV_PREFIX = "CONFLUENCE"
CREDENTIAL_KEYS = ("BASE_URL", "PAT", "EMAIL", "API_TOKEN")
DEFAULT_KEYS = ("SPACE_ID", "SPACE_KEY", "PARENT_PAGE_ID")
DEFAULT_CONFIG_PATHS = (
    Path.cwd() / "confluence-tools.toml",
    Path.home() / ".config" / "confluence-tools" / "config.toml",
)


@dataclasses.dataclass
class ConfigSource:
    """Result of attempting to resolve configuration data."""

    config: Optional[ConfluenceConfig]
    path: Optional[Path]
    error: Optional[Exception]


def _load_from_env() -> dict[str, dict[str, str]]:
    """Return configuration values extracted from ``CONFLUENCE_*`` environment variables.

    A ``.env`` file in the working directory is loaded first; variables that
    are already set take precedence over it.
    """

    load_dotenv(Path.cwd() / ".env")

    def _section(keys: tuple[str, ...]) -> dict[str, str]:
        section: dict[str, str] = {}
        for key in keys:
            value = os.getenv(f"{ENV_PREFIX}_{key}")
            if value:
                section[key.lower()] = value
        return section

    credentials = _section(CREDENTIAL_KEYS)
    if not credentials:
        return {}
    return {"credentials": credentials, "defaults": _section(DEFAULT_KEYS)}


def _load_toml(path: Path) -> Optional[dict]:
    if not path.exists():
        return None

    try:  # Python 3.11+
        import tomllib  # type: ignore
    except ModuleNotFoundError:  # pragma: no cover - Python <3.11 fallback
        import tomli as tomllib  # type: ignore

    with path.open("rb") as handle:
        return tomllib.load(handle)


def resolve_config(explicit_path: Optional[Path] = None) -> ConfigSource:
    """Discover configuration using the first available source.

    The priority order is:
    1. Explicit path provided via CLI argument.
    2. Default configuration files in the working directory or the user's config directory.
    3. Environment variables with the `CONFLUENCE_` prefix (including a local `.env` file).
    """

    errors: list[Exception] = []
    sources: list[tuple[Optional[Path], dict]] = []

    if explicit_path:
        try:
            data = _load_toml(explicit_path)
            if data is not None:
                sources.append((explicit_path, data))
        except Exception as exc:  # pragma: no cover - configuration loading failure path
            errors.append(exc)

    if not sources:
        for path in DEFAULT_CONFIG_PATHS:
            try:
                data = _load_toml(path)
            except Exception as exc:  # pragma: no cover
                errors.append(exc)
                continue
            if data is not None:
                sources.append((path, data))
                break

    if not sources:
        env_data = _load_from_env()
        if env_data:
            sources.append((None, env_data))

    for path, data in sources:
        try:
            config = ConfluenceConfig.model_validate(data)
            return ConfigSource(config=config, path=path, error=None)
        except ValidationError as exc:
            errors.append(exc)

    error = errors[0] if errors else None
    return ConfigSource(config=None, path=None, error=error)


def ensure_config(
    *,
    base_url: Optional[str] = None,
    pat: Optional[str] = None,
    email: Optional[str] = None,
    api_token: Optional[str] = None,
    space_id: Optional[str] = None,
    space_key: Optional[str] = None,
    parent_page_id: Optional[str] = None,
    config_path: Optional[Path] = None,
) -> ConfluenceConfig:
    """Resolve configuration from precedence order and fall back to explicit CLI options."""

    source = resolve_config(config_path)

    if source.config:
        config = source.config.model_copy(deep=True)
    else:
        if not base_url or not (pat or (email and api_token)):
            hint = f" ({source.error})" if source.error else ""
            raise MissingCredentialsError(
                "Missing Confluence credentials. Provide them via CLI options, environment variables "
                "or a configuration file" + hint
            )
        config = ConfluenceConfig(
            credentials=_build_credentials(base_url=base_url, pat=pat, email=email, api_token=api_token),
            defaults=PageDefaults(space_id=space_id, space_key=space_key, parent_page_id=parent_page_id),
        )

    overrides = {
        key: value
        for key, value in (("base_url", base_url), ("pat", pat), ("email", email), ("api_token", api_token))
        if value
    }
    if overrides:
        data = config.credentials.model_dump(mode="json")
        data.update(overrides)
        config.credentials = _build_credentials(**data)

    # An explicit space replaces the configured one, whether given by ID or by key.
    if space_id or space_key:
        config.defaults.space_id = space_id
        config.defaults.space_key = space_key
    if parent_page_id:
        config.defaults.parent_page_id = parent_page_id

    return config


def _build_credentials(**values: Optional[str]) -> ConfluenceCredentials:
    try:
        return ConfluenceCredentials(**values)
    except ValidationError as exc:
        raise InvalidRequestError(
            f"Invalid Confluence connection settings: {exc}",
            details=exc.errors(),
            remediation="Check the base URL (for example https://your-domain.atlassian.net) and the credentials",
        ) from exc
