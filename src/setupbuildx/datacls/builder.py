"""
Builder and Node models

A Builder always owns an ordered list of Nodes, the first one being the
primary node. Both are snapshots: every inspect call builds new instances.
"""

import json
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..utils.util import uniq


class Node(BaseModel):
    """
        One worker attached to a builder, also the shape of an `append` entry
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: Optional[str] = None
    endpoint: Optional[str] = None
    driver_opts: Optional[List[str]] = Field(None, alias="driver-opts")
    status: Optional[str] = None
    buildkitd_flags: Optional[str] = Field(None, alias="buildkitd-flags")
    buildkit: Optional[str] = None
    platforms: Optional[str] = None
    labels: Optional[Dict[str, str]] = None

    @field_validator("platforms", mode="before")
    @classmethod
    def join_platforms(cls, value: Any) -> Any:
        """Accept a YAML list of platforms as well as a comma-joined string"""
        if isinstance(value, (list, tuple)):
            return ",".join(str(p).strip() for p in value if str(p).strip())
        return value

    @field_validator("driver_opts", mode="before")
    @classmethod
    def listify_driver_opts(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [value]
        return value

    def is_empty(self) -> bool:
        return not self.model_dump(exclude_none=True)

    def platform_list(self) -> List[str]:
        if not self.platforms:
            return []
        return [p for p in self.platforms.split(",") if p]

    def dump(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class Builder(BaseModel):
    """
        Resolved builder instance as reported by `buildx inspect`
    """
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    driver: Optional[str] = None
    last_activity: Optional[str] = Field(None, alias="last-activity")
    nodes: List[Node] = Field(default_factory=list)

    def first_node(self) -> Node:
        """Primary node, used for the deprecated single-value outputs"""
        if not self.nodes:
            return Node()
        return self.nodes[0]

    def platforms(self) -> List[str]:
        """De-duplicated platforms across nodes, first-seen order"""
        return uniq(p for node in self.nodes for p in node.platform_list())

    def nodes_json(self) -> str:
        return json.dumps([node.dump() for node in self.nodes], indent=2)

    def dump(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
