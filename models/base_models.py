# models/base_models.py

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    JSON では camelCase（pagesAnalyzed など）、Python 側では snake_case で扱うための基底モデル。
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )
