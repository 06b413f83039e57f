"""Client-side localization runtime.

Resolves the locale a session should use, persists the choice through a
pluggable storage backend, and loads translation tables either directly
(bundled in memory) or asynchronously (fetched per locale).

Main packages:
- configuration: pydantic settings for locale, storage and loader
- logging: structlog setup shared by every module
- events: per-instance event bus for locale and translation notifications
- storage: storage strategies (disabled, cookie, session, local)
- i18n: locale resolution, translation loading and lookup
"""
