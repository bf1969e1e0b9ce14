# cashdesk/schemas/common.py
# type: ignore
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Base de los schemas de la API: en JSON los campos viajan en camelCase
    (branchId, cashLimit, totalIncomeApproved...). En Python se siguen
    usando los nombres snake_case.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def strip_text(value):
    """Recorta espacios antes de validar largo mínimo/máximo."""
    return value.strip() if isinstance(value, str) else value
