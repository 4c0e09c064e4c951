from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class LeagueModel(BaseModel):
    """Base for every persisted league entity.

    Field names are snake_case in Python and camelCase in the JSON documents
    the site reads (``seasons.json``, ``owners.json``).
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )
