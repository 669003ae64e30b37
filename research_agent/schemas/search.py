"""Schemas for web search results."""

from pydantic import BaseModel, ConfigDict, Field


class SearchResult(BaseModel):
    """One web search hit, in the order the search backend ranked it."""

    model_config = ConfigDict(frozen=True)

    title: str = Field("", description="Page title.")
    snippet: str = Field("", description="Short text excerpt from the page.")
    url: str = Field("", description="Link to the page.")
