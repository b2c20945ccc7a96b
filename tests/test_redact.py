"""Tests for field redaction and masking."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, Field

from render_redact import MaskDirection, Marshaller, redact, render

M = __name__


class Level(Enum):
    LOW = 1
    HIGH = 2


@dataclass
class Credentials:
    user: str
    password: str = field(metadata={"redact": "REMOVE"})
    token: str = field(metadata={"redact": "REPLACE"})
    card: str = field(metadata={"redact": "MASK"})


@dataclass
class Hidden:
    secret: str = field(metadata={"redact": "REMOVE"})
    visible: int = 1


@dataclass
class AllHidden:
    a: int = field(default=1, metadata={"redact": "REMOVE"})
    b: int = field(default=2, metadata={"redact": "REMOVE"})


@dataclass
class Card:
    number: int
    cvv: int


@dataclass
class Wallet:
    owner: str
    card: Card = field(metadata={"redact": "MASK"})


@dataclass
class Secrets:
    pins: list[int] = field(metadata={"redact": "MASK"})
    raw: bytes = field(default=b"abcdef", metadata={"redact": "MASK"})
    flag: bool = field(default=True, metadata={"redact": "mask"})
    ratio: float = field(default=3.14159, metadata={"redact": "Mask"})
    level: Level = field(default=Level.HIGH, metadata={"redact": "MASK"})
    missing: Card | None = field(default=None, metadata={"redact": "MASK"})


@dataclass
class Tagged:
    value: str = field(metadata={"my-tag": "MASK"})
    other: str = field(default="keep", metadata={"redact": "REMOVE"})


@dataclass
class Unknown:
    value: str = field(metadata={"redact": "HIDE"})


@dataclass
class WithAnnotated:
    user: str
    secret: Annotated[str, {"redact": "REPLACE"}]


@dataclass
class WithCallback:
    callback: object = field(metadata={"redact": "MASK"})


class Login(BaseModel):
    user: str
    password: str = Field(json_schema_extra={"redact": "REMOVE"})


def _callback() -> None:
    pass


def _credentials() -> Credentials:
    return Credentials("ana", "pw", "tok", "4111111111111111")


class TestDirectives:
    """Tests for REMOVE, REPLACE and MASK directives."""

    def test_redact_applies_directives(self):
        """Test all three directives on one struct."""
        assert redact(_credentials()) == (
            f'{M}.Credentials{{user:"ana", token:<redacted>, card:"####111111111111"}}'
        )

    def test_render_ignores_directives(self):
        """Test render writes every field unmasked."""
        assert render(_credentials()) == (
            f'{M}.Credentials{{user:"ana", password:"pw", token:"tok", card:"4111111111111111"}}'
        )

    def test_remove_first_field(self):
        """Test removing the first field leaves no dangling separator."""
        assert redact(Hidden("s")) == f"{M}.Hidden{{visible:1}}"

    def test_remove_every_field(self):
        """Test removing all fields leaves an empty body."""
        assert redact(AllHidden()) == f"{M}.AllHidden{{}}"

    def test_custom_replacement_placeholder(self):
        """Test the replacement placeholder is configurable."""
        text = Marshaller(replacement_placeholder="hidden").redact(_credentials())
        assert "token:<hidden>" in text

    def test_unknown_directive_is_ignored(self):
        """Test an unrecognised directive renders the field normally."""
        assert redact(Unknown("v")) == f'{M}.Unknown{{value:"v"}}'

    def test_annotated_directive(self):
        """Test directives given through Annotated extras."""
        assert redact(WithAnnotated("ana", "s")) == (
            f'{M}.WithAnnotated{{user:"ana", secret:<redacted>}}'
        )

    def test_pydantic_field_directive(self):
        """Test directives given through Field(json_schema_extra=...)."""
        assert redact(Login(user="ana", password="pw")) == f'{M}.Login{{user:"ana"}}'


class TestMasking:
    """Tests for masked subtrees."""

    def test_mask_nested_struct(self):
        """Test MASK propagates into a nested struct."""
        value = Wallet("ana", Card(123456, 123))
        assert redact(value) == (
            f'{M}.Wallet{{owner:"ana", card:{M}.Card{{number:####56, cvv:###}}}}'
        )

    def test_mask_value_kinds(self):
        """Test masking of lists, bytes, bools, floats, enums and nil."""
        value = Secrets(pins=[1234, 12345])
        assert redact(value) == (
            f"{M}.Secrets{{pins:list[int]{{####, ####5}}, raw:b'####ef', flag:####, "
            f"ratio:####159, level:{M}.Level(####), missing:(*{M}.Card)(nil)}}"
        )

    def test_mask_handle(self, marshaller):
        """Test pointer renderer output is masked."""
        assert marshaller.redact(WithCallback(_callback)) == (
            f"{M}.WithCallback{{callback:(function)(###)}}"
        )

    def test_custom_tag_and_suffix_mask(self):
        """Test a custom tag, masking character, length and direction."""
        marshaller = Marshaller(
            redact_tag="my-tag",
            masking_char="-",
            masking_length=2,
            masking_direction=MaskDirection.SUFFIX,
        )
        assert marshaller.redact(Tagged("randomString")) == (
            f'{M}.Tagged{{value:"randomStri--", other:"keep"}}'
        )

    def test_negative_length_masks_everything(self):
        """Test a negative masking length masks the whole value."""
        marshaller = Marshaller(masking_length=-1)
        assert marshaller.redact(Wallet("ana", Card(123456, 1))) == (
            f'{M}.Wallet{{owner:"ana", card:{M}.Card{{number:######, cvv:#}}}}'
        )

    def test_mask_whole_value(self):
        """Test Marshaller.mask masks every value."""
        assert Marshaller().mask(["secret", 123456]) == 'list{"####et", ####56}'

    def test_cycle_under_mask(self):
        """Test the recursion placeholder is written unmasked."""

        @dataclass
        class Loop:
            ref: list = field(metadata={"redact": "MASK"})

        items: list = []
        items.append(items)
        text = redact(Loop(items))
        assert text.endswith("{ref:list{<recursive(list)>}}")
