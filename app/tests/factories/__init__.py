"""Test data factories for deterministic test data generation."""

from tests.factories.localization import (
    ControlledFetcher,
    RecordingStorage,
    StaticFetcher,
    drain_loop,
    make_locale,
    make_resolver_options,
    make_translation_table,
    translation_document,
)

__all__ = [
    "make_locale",
    "make_translation_table",
    "make_resolver_options",
    "translation_document",
    "RecordingStorage",
    "StaticFetcher",
    "ControlledFetcher",
    "drain_loop",
]
