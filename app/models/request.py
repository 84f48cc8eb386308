from pydantic import BaseModel, Field


class AnalyzeRequest(BaseModel):
    url: str = Field(
        description="Site location as typed by the user, e.g. ``example.com/docs``.",
        examples=["haxtheweb.org", "https://example.com/site.json"],
    )
