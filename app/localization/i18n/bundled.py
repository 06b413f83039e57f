"""Bundled translation tables read from YAML files.

Expects flat mappings in files named <locale>.yml (or .yaml), e.g.
"en.yml" or "en-US.yml". Tables read here are registered in direct mode.
"""

from pathlib import Path
from typing import Dict

import yaml

from localization.errors import InvalidLocaleError
from localization.i18n.models import Locale, TranslationTable
from localization.logging import get_module_logger

logger = get_module_logger()

YAML_SUFFIXES = (".yml", ".yaml")


def read_bundled_tables(translations_dir: Path) -> Dict[Locale, TranslationTable]:
    """Read every bundled table in a directory.

    Files whose name is not a locale code are skipped.

    Args:
        translations_dir: Directory containing <locale>.yml files.

    Returns:
        Dict mapping each Locale to its TranslationTable.

    Raises:
        ValueError: If the directory is missing, or a file is not valid YAML
            or not a flat string mapping.
    """
    translations_dir = Path(translations_dir)
    if not translations_dir.is_dir():
        raise ValueError(f"Translations directory not found: {translations_dir}")

    tables: Dict[Locale, TranslationTable] = {}
    for yaml_file in sorted(translations_dir.iterdir()):
        if yaml_file.suffix not in YAML_SUFFIXES:
            continue
        try:
            locale = Locale.from_string(yaml_file.stem)
        except InvalidLocaleError:
            logger.warning("skipped_unrecognized_table_file", file=str(yaml_file))
            continue

        try:
            with open(yaml_file, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            logger.error("yaml_parse_error", file=str(yaml_file), error=str(e))
            raise ValueError(f"Failed to parse {yaml_file}: {e}") from e

        tables[locale] = TranslationTable.from_mapping(locale, data)

    logger.info(
        "read_bundled_tables",
        translations_dir=str(translations_dir),
        locales=[str(locale) for locale in tables],
    )
    return tables
