"""Tests for the theme catalog."""

import pytest

from crate_rewards.economy.draw import DRAW_TABLE
from crate_rewards.exceptions import ValidationError
from crate_rewards.themes import DEFAULT_THEME, STARTER_THEMES, THEMES, get_theme


class TestCatalog:
    """Tests for catalog coverage."""

    def test_every_drawable_reward_has_a_theme(self):
        drawable = [reward_id for band in DRAW_TABLE for reward_id in band.pool]
        assert all(reward_id in THEMES for reward_id in drawable)

    def test_starter_themes_are_not_drawable(self):
        drawable = {reward_id for band in DRAW_TABLE for reward_id in band.pool}
        assert STARTER_THEMES == ["light", "dark"]
        assert drawable.isdisjoint(STARTER_THEMES)

    def test_catalog_is_starters_plus_pools(self):
        drawable = {reward_id for band in DRAW_TABLE for reward_id in band.pool}
        assert set(THEMES) == drawable | set(STARTER_THEMES)


class TestGetTheme:
    """Tests for resolving reward ids."""

    def test_known_theme(self):
        theme = get_theme("enderpearl")
        assert theme.name == "Ender Pearl"
        assert theme.background == "#120030"

    def test_none_resolves_to_default(self):
        assert get_theme(None).id == DEFAULT_THEME

    def test_unknown_theme(self):
        with pytest.raises(ValidationError) as exc_info:
            get_theme("rainbow")
        assert exc_info.value.details["field"] == "reward_id"

    def test_to_dict_uses_camel_case(self):
        data = get_theme("dark").to_dict()
        assert data["textPrimary"] == "#FFFFFF"
        assert data["buttonHighlight"] == "#002244"
        assert "text_primary" not in data
