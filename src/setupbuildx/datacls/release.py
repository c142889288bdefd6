from typing import Optional

from pydantic import BaseModel, ConfigDict


class GitHubRelease(BaseModel):
    """
        Release descriptor as found in the buildx release index
    """
    model_config = ConfigDict(extra="ignore")

    id: int
    tag_name: str
    html_url: Optional[str] = None

    @property
    def version(self) -> str:
        """Tag without the surrounding `v`, like `v0.11.2` -> `0.11.2`"""
        return self.tag_name.strip("v")
