"""Unit tests for design token models."""

import pytest

from design_catalog.tokens import ColorToken, TokenTable, TypographyTokens


class TestColorToken:
    """Tests for ColorToken."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("#ffffff", (255, 255, 255)),
            ("#FFF", (255, 255, 255)),
            ("#3b82f6", (59, 130, 246)),
            ("#3b82f680", (59, 130, 246)),
            ("#0f08", (0, 255, 0)),
            ("rgb(0, 0, 0)", None),
            ("#12345", None),
        ],
    )
    def test_hex_to_rgb(self, value, expected):
        """Test hex parsing for the supported lengths."""
        assert ColorToken.hex_to_rgb(value) == expected

    def test_serialization_roundtrip(self):
        """Test to_dict and from_dict produce equivalent tokens."""
        token = ColorToken("primary-500", "#3b82f6", (59, 130, 246), ("Button",))

        restored = ColorToken.from_dict("primary-500", token.to_dict())

        assert restored == token
        assert token.to_dict()["derivedRgb"] == [59, 130, 246]


class TestTokenTable:
    """Tests for TokenTable."""

    def test_total_tokens_counts_every_category(self):
        """Test total_tokens sums all comparable categories."""
        table = TokenTable(
            colors={"white": ColorToken.from_value("white", "#fff")},
            spacing={"1": "0.25rem"},
            typography=TypographyTokens(font_size={"sm": "0.875rem"}),
        )

        # 5 default breakpoints
        assert table.total_tokens == 8

    def test_comparable_categories_ignore_usage_sites(self):
        """Test usage sites do not affect comparable color values."""
        table = TokenTable(colors={"white": ColorToken.from_value("white", "#fff")})

        used = table.with_usage_sites({"white": ["Card"]})

        assert used.colors["white"].usage_sites == ("Card",)
        assert used.comparable_categories() == table.comparable_categories()

    def test_serialization_roundtrip(self):
        """Test the table survives to_dict and from_dict."""
        table = TokenTable(
            colors={"brand": ColorToken.from_value("brand", "#123456")},
            spacing={"18": "4.5rem"},
            typography=TypographyTokens(font_family={"sans": "Inter, sans-serif"}),
            shadows={"md": "0 4px 6px rgba(0,0,0,0.1)"},
            border_radius={"lg": "0.5rem"},
            custom={"zIndex": {"modal": "50"}},
        )

        assert TokenTable.from_dict(table.to_dict()) == table
