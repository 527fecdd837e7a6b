from __future__ import annotations

import json
import logging
from decimal import Decimal
from pathlib import Path
from typing import Any, List, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from payopt.models import Order, PaymentMethod, make_method

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class LoaderError(ValueError):
    pass


class OrderRecord(BaseModel):
    # Unknown fields are ignored; numeric ids are read as strings.
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    id: str = Field(..., min_length=1)
    value: Decimal = Field(..., allow_inf_nan=False)
    promotions: list[str] = Field(default_factory=list)

    @field_validator("value")
    @classmethod
    def _positive(cls, value: Decimal) -> Decimal:
        if value <= 0:
            raise ValueError("order value must be positive")
        return value

    @field_validator("promotions", mode="before")
    @classmethod
    def _promotions_list(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return value

    def to_order(self) -> Order:
        return Order(id=self.id, value=self.value, promotions=tuple(self.promotions))


class PaymentMethodRecord(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    id: str = Field(..., min_length=1)
    discount: Decimal = Field(..., ge=0, le=100, allow_inf_nan=False)
    limit: Decimal = Field(..., ge=0, allow_inf_nan=False)

    def to_method(self) -> PaymentMethod:
        return make_method(self.id, self.discount, self.limit)


_ORDER_RECORDS = TypeAdapter(list[OrderRecord])
_METHOD_RECORDS = TypeAdapter(list[PaymentMethodRecord])


def _read_json(path: PathLike) -> Any:
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f, parse_float=Decimal)
    except json.JSONDecodeError as e:
        raise LoaderError(f"{path}: invalid JSON: {e}") from e

    # A single object is accepted as a one-element list.
    if isinstance(data, dict):
        data = [data]
    return data


def _validate(path: PathLike, adapter: TypeAdapter, data: Any) -> List[Any]:
    try:
        return adapter.validate_python(data)
    except ValidationError as e:
        raise LoaderError(f"{path}: {e}") from e


def load_orders(path: PathLike) -> List[Order]:
    records = _validate(path, _ORDER_RECORDS, _read_json(path))
    orders = [record.to_order() for record in records]

    logger.debug("loaded %d orders from %s", len(orders), path)
    return orders


def load_payment_methods(path: PathLike) -> List[PaymentMethod]:
    records = _validate(path, _METHOD_RECORDS, _read_json(path))
    methods = [record.to_method() for record in records]

    logger.debug("loaded %d payment methods from %s", len(methods), path)
    return methods
