from .rules import (
    ScopeEnum,
    StyleRule,
    StyleSet,
    decode_style_set,
    encode_style_set,
)

__all__ = [
    "ScopeEnum",
    "StyleRule",
    "StyleSet",
    "encode_style_set",
    "decode_style_set",
]
