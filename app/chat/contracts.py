from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class ActionKind(str, Enum):
    REPLY = "reply"
    NEWS_SEARCH = "news_search"
    HISTORICAL_DATA = "historical_data"
    TRANSFER = "transfer"


# tags emitted by earlier prompt versions
LEGACY_ACTION_TAGS = {
    "resposta": ActionKind.REPLY.value,
    "pesquisa_noticias": ActionKind.NEWS_SEARCH.value,
    "dados_historicos": ActionKind.HISTORICAL_DATA.value,
    "executar_transacao": ActionKind.TRANSFER.value,
}


class PlainReply(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    action: Literal["reply"] = "reply"
    text: str = Field(validation_alias=AliasChoices("text", "message", "reply"))


class NewsSearch(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    action: Literal["news_search"] = "news_search"
    ticker: str = Field(min_length=1)


class HistoricalData(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    action: Literal["historical_data"] = "historical_data"
    ticker: str = Field(min_length=1)


class TransferRequest(BaseModel):
    """
    A transfer as classified. Fields may still be missing here; the action
    validator decides whether it is executable.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True, str_strip_whitespace=True)

    action: Literal["transfer"] = "transfer"
    multisig_address: str | None = Field(
        default=None,
        validation_alias=AliasChoices("multisigAddress", "multisigaddress", "multisig_address"),
        serialization_alias="multisigAddress",
    )
    destination_address: str | None = Field(
        default=None,
        validation_alias=AliasChoices("destinationAddress", "destinationaddress", "destination_address"),
        serialization_alias="destinationAddress",
    )
    amount: str | None = Field(
        default=None,
        validation_alias=AliasChoices("amount", "amountToInvest", "amount_to_invest"),
    )
    asset_address: str | None = Field(
        default=None,
        validation_alias=AliasChoices("assetAddress", "assetaddress", "asset_address"),
        serialization_alias="assetAddress",
    )
    network: str | None = None

    @field_validator("amount", "network", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return str(value)
        return value


ClassifiedAction = Annotated[
    Union[PlainReply, NewsSearch, HistoricalData, TransferRequest],
    Field(discriminator="action"),
]


# ---------------------------
# /chat request / response
# ---------------------------


class FieldIssue(BaseModel):
    field: str
    problem: str


class ChatRequest(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, str_strip_whitespace=True)

    message: str = Field(min_length=1)
    wallet_id: str = Field(
        min_length=1,
        validation_alias=AliasChoices("walletId", "safeAddress", "wallet_id"),
    )


class TransferResult(BaseModel):
    res: str
    link: str
    safeTxHash: str
    nonce: int
    safeAddress: str
    recipient: str
    amountBaseUnits: str
    network: str


class ChatResponse(BaseModel):
    reply: str
    action: ActionKind
    proposal: TransferResult | None = None
    issues: list[FieldIssue] = Field(default_factory=list)
