"""Centralized configuration for docsite-search using Pydantic Settings."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Literal

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from docsite_search.search.models import IndexField


_LOG_LEVELS = {"debug", "info", "warning", "error", "critical"}


class FieldWeightsConfig(BaseModel):
    """Per-field multipliers for the relevance score."""

    model_config = {"extra": "forbid", "frozen": True}

    title: Annotated[
        float,
        Field(ge=0.0, le=100.0, description="Weight of heading or symbol-name matches"),
    ] = 8.0

    category: Annotated[
        float,
        Field(ge=0.0, le=100.0, description="Weight of category tag matches (function, section, ...)"),
    ] = 4.0

    page: Annotated[
        float,
        Field(ge=0.0, le=100.0, description="Weight of containing-page name matches"),
    ] = 2.0

    text: Annotated[
        float,
        Field(ge=0.0, le=100.0, description="Weight of body text matches"),
    ] = 1.0

    def weight_for(self, index_field: IndexField) -> float:
        return float(getattr(self, index_field.value))

    def as_mapping(self) -> dict[IndexField, float]:
        return {index_field: self.weight_for(index_field) for index_field in IndexField}


class RankingConfig(BaseModel):
    """Ranking parameters. Tunable; not a compatibility contract."""

    model_config = {"extra": "forbid", "frozen": True}

    weights: Annotated[
        FieldWeightsConfig,
        Field(description="Field-level weights"),
    ] = Field(default_factory=FieldWeightsConfig)

    exact_match_weight: Annotated[
        float,
        Field(gt=0.0, le=1.0, description="Multiplier for whole-token matches"),
    ] = 1.0

    prefix_match_weight: Annotated[
        float,
        Field(ge=0.0, le=1.0, description="Multiplier for index tokens that merely start with the query token"),
    ] = 0.5

    term_frequency_saturation: Annotated[
        float | None,
        Field(
            gt=0.0,
            le=10.0,
            description="BM25-style k1 applied to term frequency; None uses the raw frequency",
        ),
    ] = 1.2

    min_prefix_length: Annotated[
        int,
        Field(ge=1, le=64, description="Shortest query token expanded by prefix matching"),
    ] = 1

    @model_validator(mode="after")
    def validate_match_weights(self) -> RankingConfig:
        if self.prefix_match_weight > self.exact_match_weight:
            raise ValueError("prefix_match_weight must not exceed exact_match_weight")
        return self


class SnippetConfig(BaseModel):
    """Snippet preferences."""

    model_config = {"extra": "forbid", "frozen": True}

    max_length: Annotated[
        int,
        Field(ge=0, le=5000, description="Maximum snippet characters including ellipsis markers"),
    ] = 160

    style: Annotated[
        Literal["plain", "html"],
        Field(description="Renderer style: HTML emits <mark> tags; plain uses [[term]]"),
    ] = "plain"


class Settings(BaseSettings):
    """Strictly typed configuration loaded from environment variables.

    Nested values use ``__`` as delimiter, for example
    ``DOCSITE_SEARCH_RANKING__WEIGHTS__TITLE=10``.
    """

    model_config = SettingsConfigDict(
        env_prefix="DOCSITE_SEARCH_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    index_path: Path | None = Field(default=None, description="Path to the generated search index file")
    site_name: str = Field(default="docs", min_length=1, description="Label attached to metrics and logs")
    default_limit: int = Field(default=10, ge=0, le=1000, description="Result count when a caller gives none")

    log_level: str = Field(default="info", description="Logging level")
    json_logs: bool = Field(default=False, description="Emit structured JSON logs")

    ranking: RankingConfig = Field(default_factory=RankingConfig)
    snippet: SnippetConfig = Field(default_factory=SnippetConfig)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        normalized = value.lower()
        if normalized not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(_LOG_LEVELS)}; got: {value}")
        return normalized
