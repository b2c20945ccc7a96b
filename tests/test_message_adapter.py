"""Tests for rendering structured messages."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, Field

from render_redact import Marshaller, redact_message, render_message
from render_redact.adapters import FieldKind, MessageDescriptor, MessageField

M = __name__


class Status(Enum):
    ACTIVE = 1
    INACTIVE = 2


class Address(BaseModel):
    street: str
    zip_code: str = Field(json_schema_extra={"redact": "MASK"})


class Account(BaseModel):
    id: int
    name: str
    active: bool
    balance: float
    status: Status = Field(json_schema_extra={"redact": "MASK"})
    password: str = Field(json_schema_extra={"redact": "REMOVE"})
    token: bytes = Field(json_schema_extra={"redact": "REPLACE"})
    address: Address | None = None
    tags: list[str] = []
    limits: dict[str, int] = {}
    meta: Any = None


class Recursive(BaseModel):
    test_string: str = ""
    r: Recursive | None = None


class Grouped(BaseModel):
    labels: set[str] = set()
    by_id: dict[int, str] = {}
    secret: Annotated[str, {"redact": "REPLACE"}] = ""


def _account(**overrides: Any) -> Account:
    values: dict[str, Any] = {
        "id": 7,
        "name": "ana",
        "active": True,
        "balance": 12.5,
        "status": Status.ACTIVE,
        "password": "pw",
        "token": b"t",
        "address": Address(street="Main", zip_code="12345"),
        "tags": ["b", "a"],
        "limits": {"z": 1, "a": 2},
        "meta": {"k": [1]},
    }
    values.update(overrides)
    return Account(**values)


@dataclass
class Record:
    values: dict[str, Any]


class RecordAdapter:
    """Adapter describing Record values with a fixed schema."""

    descriptor = MessageDescriptor(
        "demo.Record",
        (
            MessageField("id", FieldKind.INT),
            MessageField("state", FieldKind.ENUM, enum_name="demo.State", symbols={1: "ON"}),
            MessageField("secret", FieldKind.STRING, {"redact": "REPLACE"}),
        ),
    )

    def is_message(self, value: Any) -> bool:
        return isinstance(value, Record)

    def describe(self, message: Any) -> MessageDescriptor:
        return self.descriptor

    def get(self, message: Any, message_field: MessageField) -> Any:
        return message.values.get(message_field.name)


class TestRenderMessage:
    """Tests for render_message."""

    def test_render_all_fields(self):
        """Test every field is written in declaration order."""
        assert render_message(_account()) == (
            f'{M}.Account{{id:7, name:"ana", active:true, balance:12.5, '
            f'status:{M}.Status(ACTIVE), password:"pw", token:b\'t\', '
            f'address:{M}.Address{{street:"Main", zip_code:"12345"}}, '
            f'tags:{{"b", "a"}}, limits:{{"a":2, "z":1}}, meta:dict{{"k":list{{1}}}}}}'
        )

    def test_nil_message_field(self):
        """Test an unset message field renders as nil."""
        assert "address:nil" in render_message(_account(address=None))

    def test_nil_message(self):
        """Test None renders as nil."""
        assert render_message(None) == "nil"

    def test_non_message_delegates(self):
        """Test non-message values use the default renderer."""
        assert render_message([1, "a"]) == 'list{1, "a"}'

    def test_recursive_message(self):
        """Test a self-referencing message writes the recursion placeholder."""
        message = Recursive(test_string="test")
        message.r = message
        assert render_message(message) == (
            f'{M}.Recursive{{test_string:"test", r:<recursive({M}.Recursive)>}}'
        )

    def test_sets_and_typed_keys_are_sorted(self):
        """Test set fields and map keys are ordered by value."""
        message = Grouped(labels={"b", "a"}, by_id={10: "x", 2: "y"})
        assert render_message(message) == (
            f'{M}.Grouped{{labels:{{"a", "b"}}, by_id:{{2:"y", 10:"x"}}, secret:""}}'
        )


class TestRedactMessage:
    """Tests for redact_message."""

    def test_redact_applies_field_options(self):
        """Test REMOVE, REPLACE and MASK options on message fields."""
        assert redact_message(_account()) == (
            f'{M}.Account{{id:7, name:"ana", active:true, balance:12.5, '
            f"status:{M}.Status(####VE), token:<redacted>, "
            f'address:{M}.Address{{street:"Main", zip_code:"####5"}}, '
            f'tags:{{"b", "a"}}, limits:{{"a":2, "z":1}}, meta:dict{{"k":list{{1}}}}}}'
        )

    def test_annotated_option(self):
        """Test options given through Annotated extras."""
        assert redact_message(Grouped(secret="s")).endswith("secret:<redacted>}")

    def test_custom_adapter(self):
        """Test a user-supplied adapter."""
        record = Record({"id": 1, "state": 1, "secret": "x"})
        marshaller = Marshaller()
        assert marshaller.render_message(record, adapter=RecordAdapter()) == (
            'demo.Record{id:1, state:demo.State(ON), secret:"x"}'
        )
        assert marshaller.redact_message(record, adapter=RecordAdapter()) == (
            "demo.Record{id:1, state:demo.State(ON), secret:<redacted>}"
        )

    def test_unknown_enum_value(self):
        """Test an enum value without a symbol renders its number."""
        record = Record({"id": 1, "state": 9, "secret": ""})
        text = Marshaller().render_message(record, adapter=RecordAdapter())
        assert "state:demo.State(9)" in text
