"""
Cross-phase run state

Written through the runner state channel during the main phase and read
back from `STATE_*` variables by the teardown phase.
"""

import logging
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field

from .actions import Runtime

logger = logging.getLogger(__name__)

TRUE_STATE = ("true", "1")


class RunState(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    builder_name: str = Field("", alias="builderName")
    builder_driver: str = Field("", alias="builderDriver")
    standalone: bool = False
    container_name: str = Field("", alias="containerName")
    certs_dir: str = Field("", alias="certsDir")
    tmp_docker_context: str = Field("", alias="tmpDockerContext")
    debug: bool = Field(False, alias="isDebug")
    cleanup: bool = False
    keep_state: bool = Field(False, alias="keepState")

    def save(self, runtime: Runtime, *fields: str):
        """
        Persist `fields` (all of them when none are given) under their state names
        """
        model_fields = type(self).model_fields
        names = fields or tuple(model_fields)
        for name in names:
            key = model_fields[name].alias or name
            runtime.save_state(key, getattr(self, name))

    @classmethod
    def load(cls, runtime: Runtime) -> "RunState":
        data: Dict[str, Any] = {}
        for name, field in cls.model_fields.items():
            key = field.alias or name
            value = runtime.get_state(key)
            if field.annotation is bool:
                data[name] = value.lower() in TRUE_STATE
            else:
                data[name] = value
        state = cls(**data)
        logger.debug(f"[State] Loaded {state.model_dump()}")
        return state
