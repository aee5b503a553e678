"""Encoder parameter builders and trial encode runners."""

from .params import (
    EncoderProfile,
    build_encoder_params,
    format_encoder_options,
    get_encoder,
    get_encoder_version,
)
from .runner import Av1anRunner, EncoderRunner

__all__ = [
    'EncoderProfile',
    'build_encoder_params',
    'format_encoder_options',
    'get_encoder',
    'get_encoder_version',
    'Av1anRunner',
    'EncoderRunner',
]
