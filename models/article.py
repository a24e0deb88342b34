"""Candidate article model for links extracted from newsletter digests."""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CandidateArticle(BaseModel):
    """One newsletter-extracted item eligible for recommendation.

    Candidates are unique by url within a run. Titles are used as lookup
    keys when matching the assistant's reply, so duplicated titles resolve
    to whichever candidate was seen first.

    Example:
        >>> CandidateArticle(
        ...     title="Getting Started with CSS Grid (5 minute read)",
        ...     url="https://css-tricks.com/getting-started-with-css-grid/",
        ...     summary="A walkthrough of grid containers and tracks.",
        ... )
    """

    model_config = ConfigDict(frozen=True)

    title: str = Field(description="Article headline as shown in the newsletter")
    url: str = Field(description="Link to the article")
    summary: str = Field(default="", description="Newsletter blurb for the article")

    @field_validator("url")
    @classmethod
    def _url_not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("url must not be empty")
        return v
