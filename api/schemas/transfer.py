from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class TransferRequestBody(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, str_strip_whitespace=True)

    multisigAddress: str = Field(
        min_length=1,
        validation_alias=AliasChoices("multisigAddress", "multisigaddress"),
    )
    amountToInvest: str = Field(
        min_length=1,
        validation_alias=AliasChoices("amountToInvest", "amount_to_invest", "amount"),
    )
    assetAddress: str = Field(
        min_length=1,
        validation_alias=AliasChoices("assetAddress", "assetaddress"),
    )
    network: str = Field(min_length=1)
    destinationAddress: str = Field(min_length=1)

    @field_validator("amountToInvest", mode="before")
    @classmethod
    def _amount_as_text(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class TransferResponse(BaseModel):
    res: str
    link: str
    safeTxHash: str
    nonce: int
