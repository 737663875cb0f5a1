from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class CreateWalletRequest(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    ownerAddress: str = Field(min_length=1)


class DeploymentTransaction(BaseModel):
    to: str
    value: str = "0"
    data: str


class CreateWalletResponse(BaseModel):
    message: str = "OK"
    deploymentTransaction: DeploymentTransaction


class SafeInfo(BaseModel):
    address: str
    threshold: int
    owners: list[str]
    modules: list[str] = Field(default_factory=list)


class ListSafesResponse(BaseModel):
    message: str = "OK"
    safeResponse: SafeInfo | None = None
