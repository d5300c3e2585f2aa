"""Schemas for learning-resource suggestions."""

from pydantic import Field, field_validator

from homework_helper.schemas.base import BaseSchema


class ResourceLink(BaseSchema):
    title: str = Field(..., min_length=1)
    url: str
    snippet: str | None = None

    @field_validator("url")
    @classmethod
    def url_must_be_http(cls, value: str) -> str:
        if not value.startswith("http"):
            raise ValueError("url must be an http(s) URL")
        return value


class ResourceTopic(BaseSchema):
    """A subject heading with the links that teach it."""

    topic: str = Field(..., min_length=1)
    links: list[ResourceLink] = Field(..., min_length=1)


class ResourcesRequest(BaseSchema):
    """Request for a stateless resource lookup."""

    content: str = Field(..., min_length=1, max_length=10000)


class ResourcesResponse(BaseSchema):
    resources: list[ResourceTopic]
