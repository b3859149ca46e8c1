"""
Theme catalog.

Every crate reward is a colour theme. The catalog maps each reward id to
its palette; ``light`` and ``dark`` are the starter themes every account
owns, the rest can only be obtained from crates.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from .exceptions import ValidationError


@dataclass(frozen=True)
class Theme:
    """Palette for one cosmetic theme."""
    id: str
    name: str
    primary: str
    secondary: str
    background: str
    text_primary: str
    text_secondary: str
    button: str
    button_highlight: str

    def to_dict(self) -> dict:
        """Convert to dictionary for the UI layer."""
        return {
            "id": self.id,
            "name": self.name,
            "primary": self.primary,
            "secondary": self.secondary,
            "background": self.background,
            "textPrimary": self.text_primary,
            "textSecondary": self.text_secondary,
            "button": self.button,
            "buttonHighlight": self.button_highlight,
        }


def _night(theme_id: str, name: str) -> Theme:
    # Crate themes without their own palette share the night palette
    return Theme(
        id=theme_id,
        name=name,
        primary="#222222",
        secondary="#555555",
        background="#000000",
        text_primary="#FFFFFF",
        text_secondary="#000000",
        button="#004488",
        button_highlight="#002244",
    )


THEMES: Dict[str, Theme] = {
    theme.id: theme
    for theme in [
        Theme(
            id="light",
            name="Light",
            primary="#D8D8EB",
            secondary="#7A7AA3",
            background="#ffffff",
            text_primary="#000000",
            text_secondary="#FFFFFF",
            button="#007FFF",
            button_highlight="#4691DC",
        ),
        Theme(
            id="dark",
            name="Dark",
            primary="#23232e",
            secondary="#7A7AA3",
            background="#101426",
            text_primary="#FFFFFF",
            text_secondary="#000000",
            button="#004488",
            button_highlight="#002244",
        ),
        _night("good_boy", "Good Boy"),
        Theme(
            id="cca",
            name="CCA",
            primary="#b50202",
            secondary="#555555",
            background="#000000",
            text_primary="#FFFFFF",
            text_secondary="#FFFFFF",
            button="#424242",
            button_highlight="#7d7d7d",
        ),
        _night("spring", "Spring"),
        _night("summer", "Summer"),
        _night("autumn", "Autumn"),
        _night("winter", "Winter"),
        _night("mr_hare", "Mr Hare"),
        _night("nether", "Nether"),
        _night("midnight", "Midnight"),
        Theme(
            id="america",
            name="America",
            primary="#c90000",
            secondary="#1e00ff",
            background="#ffffff",
            text_primary="#000000",
            text_secondary="#ffffff",
            button="#b5231f",
            button_highlight="#ed3934",
        ),
        Theme(
            id="enderpearl",
            name="Ender Pearl",
            primary="#1d0236",
            secondary="#3c0b8f",
            background="#120030",
            text_primary="#FFFFFF",
            text_secondary="#8f8f8f",
            button="#5c3987",
            button_highlight="#a564f5",
        ),
    ]
}

STARTER_THEMES: List[str] = ["light", "dark"]
DEFAULT_THEME = "light"


def is_known_reward(reward_id: str) -> bool:
    return reward_id in THEMES


def get_theme(reward_id: Optional[str]) -> Theme:
    """
    Resolve a reward id to its palette.

    ``None`` resolves to the default theme so an account with nothing
    equipped still renders.

    Raises:
        ValidationError: If the id is not in the catalog
    """
    if reward_id is None:
        return THEMES[DEFAULT_THEME]
    theme = THEMES.get(reward_id)
    if theme is None:
        raise ValidationError(f"Unknown reward '{reward_id}'", field="reward_id")
    return theme
