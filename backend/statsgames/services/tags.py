"""Per-game player tag metadata for the catalog and stats sync."""

# Games whose stats are pulled by player tag; add slugs as upstreams are wired in
GAMES_REQUIRING_TAGS: tuple[str, ...] = ("clash-of-clans",)

_TAG_LABELS = {
    "clash-of-clans": "Player Tag",
    "clash-royale": "Player Tag",
    "fortnite": "Epic ID",
    "rocket-league": "Player ID",
}

_TAG_PLACEHOLDERS = {
    "clash-of-clans": "#ABC123XYZ",
    "clash-royale": "#ABC123XYZ",
    "fortnite": "EpicUsername",
    "rocket-league": "SteamID or PSN",
}

_TAG_DESCRIPTIONS = {
    "clash-of-clans": (
        "Enter your Clash of Clans player tag to load your profile stats. "
        "You can find your tag in-game by tapping your profile."
    ),
    "clash-royale": (
        "Enter your Clash Royale player tag. "
        "You can find it in-game by tapping your profile."
    ),
    "fortnite": "Enter your Epic Games username or account ID.",
    "rocket-league": "Enter your platform ID (Steam, PSN, Xbox Live, or Epic).",
}


def requires_player_tag(slug: str) -> bool:
    return slug in GAMES_REQUIRING_TAGS


def tag_label(slug: str) -> str:
    return _TAG_LABELS.get(slug, "Player Tag")


def tag_placeholder(slug: str) -> str:
    return _TAG_PLACEHOLDERS.get(slug, "#EXAMPLE")


def tag_description(slug: str) -> str:
    return _TAG_DESCRIPTIONS.get(slug, "Enter your player identifier for this game.")
