"""
Shared fixtures for the design catalog test suite.

Provides test fixtures for:
- Sample component sources (TSX, JSX, StyleSheet)
- Temporary project trees with config and theme files
- Snapshot construction helpers
"""

import logging
from pathlib import Path

import pytest

from design_catalog.analysis.component_analyzer import ComponentAnalyzer
from design_catalog.analysis.parsing import ParsedSource, SourceParser
from design_catalog.catalog_logging import LOGGER_NAME
from design_catalog.snapshot import SnapshotBuilder, SourceFile

BUTTON_TSX = """\
import React from 'react';

interface ButtonProps {
  label: string;
  variant?: 'primary' | 'secondary';
  onClick?: () => void;
}

export function Button({ label, variant = 'primary', onClick }: ButtonProps) {
  return (
    <button className="px-4 py-2 bg-blue-500" onClick={onClick} type="button">
      {label}
    </button>
  );
}
"""

CARD_TSX = """\
import { Button } from './Button';
import type { Theme } from './theme';

type CardProps = {
  title: string;
  elevated?: boolean;
};

export const Card = ({ title, elevated }: CardProps) => (
  <div className={elevated ? 'shadow-lg rounded' : 'rounded'}>
    <h2 className="text-xl font-bold">{title}</h2>
    <Button label="Open" />
  </div>
);
"""

UTILS_TS = """\
export function formatPrice(value: number): string {
  return `$${value.toFixed(2)}`;
}

export const TAX_RATE = 0.2;
"""

STYLESHEET_JSX = """\
import { StyleSheet, View, Text } from 'react-native';

export default function Badge({ text }) {
  return (
    <View style={styles.container}>
      <Text style={styles.label}>{text}</Text>
    </View>
  );
}

const styles = StyleSheet.create({
  container: {
    padding: 8,
    backgroundColor: '#fff',
    shadowOffset: { width: 0, height: 2 },
  },
  label: {
    fontWeight: 'bold',
    tintColor: 'red',
  },
});
"""

TAILWIND_CONFIG_JS = """\
const brand = {
  500: '#3b82f6',
  600: '#2563eb',
};

module.exports = {
  content: ['./src/**/*.{ts,tsx}'],
  theme: {
    colors: {
      brand,
      white: '#ffffff',
    },
    extend: {
      spacing: { 18: '4.5rem' },
      fontFamily: { sans: ['Inter', 'sans-serif'] },
    },
  },
  plugins: [require('@tailwindcss/forms')],
};
"""


@pytest.fixture()
def parser() -> SourceParser:
    """Shared source parser."""
    return SourceParser()


@pytest.fixture()
def parse(parser):
    """Parse a source string as the given file name."""

    def _parse(content: str, path: str = "Component.tsx") -> ParsedSource:
        return parser.parse(path, content)

    return _parse


@pytest.fixture()
def analyzer() -> ComponentAnalyzer:
    """Analyzer with the default utility-class extractor."""
    return ComponentAnalyzer()


@pytest.fixture()
def builder() -> SnapshotBuilder:
    """Sequential builder so tests are not thread dependent."""
    return SnapshotBuilder(max_workers=1)


@pytest.fixture()
def sample_files() -> list[SourceFile]:
    """A small component set including one non-component module."""
    return [
        SourceFile("src/components/Button.tsx", BUTTON_TSX.encode()),
        SourceFile("src/components/Card.tsx", CARD_TSX.encode()),
        SourceFile("src/lib/utils.ts", UTILS_TS.encode()),
    ]


@pytest.fixture()
def sample_project(tmp_path) -> Path:
    """A project directory with sources, a theme config and a package.json."""
    components = tmp_path / "src" / "components"
    components.mkdir(parents=True)
    (components / "Button.tsx").write_text(BUTTON_TSX)
    (components / "Card.tsx").write_text(CARD_TSX)
    (components / "Button.test.tsx").write_text("export const x = 1;\n")
    (tmp_path / "src" / "lib").mkdir()
    (tmp_path / "src" / "lib" / "utils.ts").write_text(UTILS_TS)
    (tmp_path / "tailwind.config.js").write_text(TAILWIND_CONFIG_JS)
    (tmp_path / "package.json").write_text('{"name": "acme-ui", "version": "2.3.0"}')
    (tmp_path / "design-system.config.json").write_text(
        '{"styleSystem": "tailwind", "categorization": {"atoms": ["Button"], "molecules": ["Card"]}}'
    )
    return tmp_path


@pytest.fixture(autouse=True)
def reset_catalog_logger():
    """Undo setup_logging so caplog sees records in every test."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture()
def button_source() -> str:
    return BUTTON_TSX


@pytest.fixture()
def card_source() -> str:
    return CARD_TSX


@pytest.fixture()
def stylesheet_source() -> str:
    return STYLESHEET_JSX


@pytest.fixture()
def tailwind_config_source() -> str:
    return TAILWIND_CONFIG_JS
