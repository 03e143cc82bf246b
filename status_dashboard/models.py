"""Shared base model for the JSON views served to the front-end."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class DashboardModel(BaseModel):
    """Base model serializing field names as camelCase for the front-end."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
