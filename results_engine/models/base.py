"""
Shared model configuration - Assessment Results Engine
results_engine/models/base.py

Wire names are camelCase (the platform UI and report renderer consume them);
Python attributes stay snake_case. Both spellings are accepted on input.
"""

from decimal import Decimal
from types import MappingProxyType
from typing import Annotated, Dict, TypeVar

from pydantic import AfterValidator, BaseModel, ConfigDict, WrapSerializer
from pydantic.alias_generators import to_camel

from results_engine.scoring.utils import round2


class EngineModel(BaseModel):
    """Base for every engine input and output model."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class FrozenModel(EngineModel):
    """Immutable output model. Collections are tuples so nothing can be appended."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


# Every emitted score carries exactly two decimal places
Score = Annotated[Decimal, AfterValidator(round2)]


def _serialize_as_dict(value, handler):
    return handler(dict(value))


K = TypeVar("K")
V = TypeVar("V")

# Mappings on frozen models are read-only views; they serialize as plain dicts
ReadOnlyDict = Annotated[
    Dict[K, V],
    AfterValidator(MappingProxyType),
    WrapSerializer(_serialize_as_dict),
]
