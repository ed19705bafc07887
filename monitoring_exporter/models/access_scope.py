from pydantic import BaseModel, ConfigDict, Field


class AccessScope(BaseModel):
    """
    Validated (tag, token) pair for one scrape request.

    Created by the access gate, consumed by the exposition endpoint and
    dropped with the request.
    """

    model_config = ConfigDict(frozen=True)

    tag: str = Field(
        ...,
        description="Authorization scope identifier taken from the request path",
    )

    token: str = Field(
        ...,
        description="Token that matched the tag's secret",
        repr=False,
    )
