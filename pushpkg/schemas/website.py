from pydantic import BaseModel, ConfigDict, Field
from typing import List


class WebsiteDescriptor(BaseModel):
    """website.json as Safari reads it."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    website_name: str = Field(alias="websiteName")
    website_push_id: str = Field(alias="websitePushID")
    allowed_domains: List[str] = Field(alias="allowedDomains")
    url_format_string: str = Field(alias="urlFormatString")
    authentication_token: str = Field(alias="authenticationToken")
    web_service_url: str = Field(alias="webServiceURL")

    def to_json_dict(self) -> dict:
        return self.model_dump(by_alias=True)
