"""
Data models for explorer payloads and v2 transactions using Pydantic.

Field names follow Python conventions; the explorer's camelCase names are
kept as aliases so payloads round-trip unchanged. Currency values are plain
ints in Python and decimal strings on the wire.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, field_serializer, field_validator

from siatx.constants import CURRENCY_MAX, UNLOCK_CONDITIONS_POLICY_TYPE
from siatx.encoding import decode_hash


def parse_currency(v: Any) -> int:
    """Parse a currency value given as int or decimal string."""
    if isinstance(v, bool):
        raise ValueError("Currency value must be an integer")
    if isinstance(v, str):
        if not (v.isascii() and v.isdigit()):
            raise ValueError(f"Invalid currency string: {v!r}")
        v = int(v)
    if not isinstance(v, int):
        raise ValueError(f"Invalid currency value: {v!r}")
    if v < 0 or v > CURRENCY_MAX:
        raise ValueError(f"Currency value out of 128-bit range: {v}")
    return v


class SiacoinOutput(BaseModel):
    value: int
    address: str

    @field_validator("value", mode="before")
    @classmethod
    def validate_value(cls, v: Any) -> int:
        return parse_currency(v)

    @field_validator("address")
    @classmethod
    def validate_address(cls, v: str) -> str:
        decode_hash(v)
        return v

    @field_serializer("value")
    def serialize_value(self, v: int) -> str:
        return str(v)

    model_config = {"frozen": True}


class TransactionOutput(SiacoinOutput):
    """Destination of a new transaction (recipient or change)."""


class UnspentOutput(BaseModel):
    """
    A spendable siacoin element as returned by the explorer.

    Extra fields (stateElement and friends) are retained because the
    element is echoed back as the input parent when broadcasting.
    """

    id: str
    siacoin_output: SiacoinOutput = Field(..., alias="siacoinOutput")
    maturity_height: int = Field(default=0, ge=0, alias="maturityHeight")

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        decode_hash(v, exact=True)
        return v

    @property
    def value(self) -> int:
        return self.siacoin_output.value

    @property
    def address(self) -> str:
        return self.siacoin_output.address

    def is_mature(self, height: int) -> bool:
        return self.maturity_height <= height

    def to_api(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")

    model_config = {"frozen": True, "extra": "allow", "populate_by_name": True}


class ChainTip(BaseModel):
    """Current chain tip; the full payload doubles as the consensus basis."""

    height: int = Field(..., ge=0)
    basis: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> ChainTip:
        return cls(height=data["height"], basis=data)

    model_config = {"frozen": True}


class UtxoSnapshot(BaseModel):
    """Siacoin outputs of an address together with the basis they were read at."""

    basis: Any = None
    outputs: list[UnspentOutput] = Field(default_factory=list)

    model_config = {"frozen": True}


class NetworkState(BaseModel):
    height: int = Field(..., ge=0)
    basis: Any = None
    fee_per_byte: int = Field(..., ge=0)

    model_config = {"frozen": True}


class UnlockConditions(BaseModel):
    timelock: int = 0
    public_keys: list[str] = Field(..., min_length=1, alias="publicKeys")
    signatures_required: int = Field(default=1, ge=1, alias="signaturesRequired")

    model_config = {"frozen": True, "populate_by_name": True}


class SpendPolicy(BaseModel):
    type: Literal["uc"] = UNLOCK_CONDITIONS_POLICY_TYPE
    policy: UnlockConditions

    model_config = {"frozen": True}


class SatisfiedPolicy(BaseModel):
    policy: SpendPolicy
    signatures: list[str] = Field(default_factory=list)
    preimages: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}


class SignedInput(BaseModel):
    parent: UnspentOutput
    satisfied_policy: SatisfiedPolicy = Field(..., alias="satisfiedPolicy")

    model_config = {"frozen": True, "populate_by_name": True}


class SignedTransaction(BaseModel):
    """A v2 transaction ready for the transaction pool."""

    siacoin_inputs: list[SignedInput] = Field(..., alias="siacoinInputs")
    siacoin_outputs: list[TransactionOutput] = Field(..., alias="siacoinOutputs")
    miner_fee: int = Field(..., alias="minerFee")

    @field_validator("miner_fee", mode="before")
    @classmethod
    def validate_miner_fee(cls, v: Any) -> int:
        return parse_currency(v)

    @field_serializer("miner_fee")
    def serialize_miner_fee(self, v: int) -> str:
        return str(v)

    def to_api(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")

    model_config = {"frozen": True, "populate_by_name": True}
