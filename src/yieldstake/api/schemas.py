from __future__ import annotations

"""Pydantic request schemas for the HTTP API.

`now` is optional everywhere: when omitted the node's clock supplies it.
"""

from typing import Optional

from pydantic import BaseModel, Field


class TimedRequest(BaseModel):
    now: Optional[int] = Field(default=None, ge=0, description="Unix seconds; defaults to node clock")


class RateRequest(TimedRequest):
    rate: int = Field(..., description="Reward units per asset per day")


class MintRequest(TimedRequest):
    to: str = Field(..., min_length=1, description="Owner of the new assets")
    quantity: int = Field(default=1, description="Number of assets to create")


class TransferRequest(TimedRequest):
    sender: str = Field(..., min_length=1)
    recipient: str = Field(..., min_length=1)
