#!/usr/bin/env python3
"""
Basic Rendering Example

This example demonstrates the core functionality of render-redact:
- Rendering annotated dataclasses and pydantic models
- Redacting fields with REMOVE, REPLACE and MASK directives
- Registering a type formatter
- Redacting structured log arguments

Usage:
    python examples/basic_render.py
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from pydantic import BaseModel, Field

from render_redact import Marshaller, MaskDirection
from render_redact.logging import install_redacting_filter


@dataclass
class Card:
    number: str = field(metadata={"redact": "MASK"})
    cvv: str = field(metadata={"redact": "REMOVE"})


@dataclass
class Customer:
    name: str
    email: str = field(metadata={"redact": "REPLACE"})
    cards: list[Card] = field(default_factory=list)
    joined: datetime | None = None


class Session(BaseModel):
    user: str
    token: str = Field(json_schema_extra={"redact": "MASK"})


def main():
    """Run basic rendering examples."""
    customer = Customer(
        name="Ada",
        email="ada@example.com",
        cards=[Card("4111111111111111", "123")],
        joined=datetime(2024, 1, 2, tzinfo=timezone.utc),
    )

    print("=" * 70)
    print("render-redact - Basic Usage Example")
    print("=" * 70)

    # Example 1: Default marshaller
    print("\n[Example 1] Render and redact with default options")
    print("-" * 70)

    marshaller = Marshaller().with_type_formatter(datetime, datetime.isoformat)
    print(f"render: {marshaller.render(customer)}")
    print(f"redact: {marshaller.redact(customer)}")

    # Example 2: Custom masking
    print("\n\n[Example 2] Mask the trailing twelve characters with '*'")
    print("-" * 70)

    masking = marshaller.with_options(
        masking_char="*",
        masking_length=12,
        masking_direction=MaskDirection.SUFFIX,
    )
    print(f"redact: {masking.redact(customer)}")

    # Example 3: Pydantic messages
    print("\n\n[Example 3] Structured messages")
    print("-" * 70)

    session = Session(user="ada", token="tok-0123456789")
    print(f"render_message: {marshaller.render_message(session)}")
    print(f"redact_message: {marshaller.redact_message(session)}")

    # Example 4: Logging
    print("\n\n[Example 4] Redacting log arguments")
    print("-" * 70)

    logging.basicConfig(level=logging.INFO, format="  %(levelname)s %(message)s")
    logger = logging.getLogger("examples.audit")
    install_redacting_filter(logger, marshaller)
    logger.info("customer updated: %s", customer)

    print("\n" + "=" * 70)
    print("Examples complete!")
    print("=" * 70)


if __name__ == "__main__":
    main()
