"""Sample structures rendered by ``render-redact demo``."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field

# Fixed so the demo output is reproducible
SAMPLE_TIME = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


@dataclass
class Node:
    """Chain of nodes; every node after the first is masked when redacting."""

    a: Any
    b: Node | None = field(default=None, metadata={"redact": "MASK"})


@dataclass
class Account:
    owner: str
    card_number: str = field(metadata={"redact": "MASK"})
    password: str = field(metadata={"redact": "REMOVE"})
    api_key: str = field(metadata={"redact": "REPLACE"})
    balances: dict[str, float] = field(default_factory=dict)


class Recursive(BaseModel):
    """Message pointing at itself."""

    test_string: str = ""
    secret: str = Field(default="", json_schema_extra={"redact": "MASK"})
    r: Recursive | None = None


def build_chain() -> Node:
    return Node(
        a=1,
        b=Node(
            a=[1, 12, 123, 1234, 12345],
            b=Node(
                a={"key": "value"},
                b=Node(a=SAMPLE_TIME),
            ),
        ),
    )


def build_account() -> Account:
    return Account(
        owner="Ada Lovelace",
        card_number="4111111111111111",
        password="correct horse battery staple",
        api_key="sk-demo-0000",
        balances={"savings": 1250.5, "checking": 99.99},
    )


def build_recursive() -> Recursive:
    message = Recursive(test_string="test", secret="s3cr3t")
    message.r = message
    return message


def format_datetime(value: datetime) -> str:
    return value.isoformat()
