"""Curated entity dictionaries and the compiled pattern table."""

from __future__ import annotations

import re
from typing import NamedTuple

from depmap.models.graph import EntityType

PEOPLE: tuple[str, ...] = (
    # US politicians
    "Trump", "Biden", "Harris", "DeSantis", "Newsom", "Obama", "Pence",
    "RFK Jr", "Robert Kennedy", "Vivek", "Ramaswamy", "Haley", "Nikki Haley",
    "AOC", "Ocasio-Cortez", "Pelosi", "McConnell", "Schumer", "McCarthy",
    # Tech leaders
    "Musk", "Elon Musk", "Zuckerberg", "Bezos", "Gates", "Bill Gates",
    "Altman", "Sam Altman", "Satya Nadella", "Tim Cook", "Sundar Pichai",
    # World leaders
    "Putin", "Xi Jinping", "Xi", "Zelensky", "Netanyahu", "Modi",
    "Macron", "Scholz", "Trudeau", "Lula", "Milei", "Kim Jong Un",
    # Sports / entertainment
    "Taylor Swift", "Beyonce", "Drake", "Kanye", "Ye", "LeBron",
    "Messi", "Ronaldo", "MrBeast",
)

COMPANIES: tuple[str, ...] = (
    # Big tech
    "Apple", "Google", "Alphabet", "Microsoft", "Amazon", "Tesla", "Meta",
    "Nvidia", "Netflix", "Disney", "Uber", "Airbnb", "Salesforce",
    # AI
    "OpenAI", "Anthropic", "DeepMind", "Midjourney", "Stability AI",
    # Social / media
    "Twitter", "X Corp", "TikTok", "ByteDance", "Reddit", "Snap", "Pinterest",
    "YouTube", "Twitch", "Spotify",
    # Space / auto
    "SpaceX", "Blue Origin", "Virgin Galactic", "Rivian", "Lucid", "Ford", "GM",
    # Finance
    "Goldman Sachs", "JPMorgan", "Morgan Stanley", "BlackRock", "Citadel",
    "Robinhood", "Coinbase", "Binance", "FTX", "Stripe", "Visa", "Mastercard",
    # Pharma / health
    "Pfizer", "Moderna", "Johnson & Johnson", "Merck", "Eli Lilly", "Novo Nordisk",
)

CRYPTO_ASSETS: tuple[str, ...] = (
    "Bitcoin", "BTC", "Ethereum", "ETH", "Solana", "SOL",
    "XRP", "Ripple", "Cardano", "ADA", "Polkadot", "DOT",
    "Avalanche", "AVAX", "Polygon", "MATIC", "Chainlink", "LINK",
    # Meme coins
    "Dogecoin", "DOGE", "Shiba Inu", "SHIB", "Pepe",
    # Stablecoins
    "Tether", "USDT", "USDC", "DAI",
    # DeFi / NFT
    "Uniswap", "UNI", "Aave", "OpenSea", "Blur",
)

COUNTRIES: tuple[str, ...] = (
    "United States", "US", "USA", "America",
    "China", "Chinese", "Russia", "Russian", "Ukraine", "Ukrainian",
    "Israel", "Israeli", "Palestine", "Palestinian", "Gaza",
    "Iran", "Iranian", "North Korea", "South Korea", "Korea",
    "Taiwan", "Japan", "Japanese", "India", "Indian",
    "UK", "Britain", "British", "Germany", "German", "France", "French",
    "Brazil", "Brazilian", "Mexico", "Mexican", "Canada", "Canadian",
    "Australia", "Australian", "Saudi Arabia", "Saudi",
)

ORGANIZATIONS: tuple[str, ...] = (
    # US government
    "Federal Reserve", "Fed", "Treasury", "SEC", "FDA", "FTC", "DOJ",
    "Supreme Court", "SCOTUS", "Congress", "Senate", "House",
    "White House", "Pentagon", "CIA", "FBI", "NSA",
    # International
    "ECB", "Bank of England", "NATO", "UN", "United Nations",
    "WHO", "World Health Organization", "IMF", "World Bank",
    "EU", "European Union", "OPEC", "WTO",
    # Leagues / awards
    "NCAA", "NFL", "NBA", "MLB", "FIFA", "UFC",
    "Academy Awards", "Oscars", "Grammy", "Emmy",
)

DICTIONARIES: tuple[tuple[EntityType, tuple[str, ...]], ...] = (
    ("person", PEOPLE),
    ("company", COMPANIES),
    ("crypto", CRYPTO_ASSETS),
    ("country", COUNTRIES),
    ("organization", ORGANIZATIONS),
)


class EntityPattern(NamedTuple):
    """One compiled dictionary entry."""

    pattern: re.Pattern[str]
    name: str
    type: EntityType
    normalized: str


def compile_alias(alias: str) -> re.Pattern[str]:
    """Case-insensitive whole-word pattern for a dictionary alias."""
    return re.compile(rf"\b{re.escape(alias)}\b", re.IGNORECASE)


def build_table(
    dictionaries: tuple[tuple[EntityType, tuple[str, ...]], ...] = DICTIONARIES,
) -> tuple[EntityPattern, ...]:
    """Compile dictionaries into an immutable table. Normalized keys must be unique."""
    table: list[EntityPattern] = []
    seen: dict[str, EntityType] = {}
    for entity_type, aliases in dictionaries:
        for alias in aliases:
            normalized = alias.lower()
            if normalized in seen:
                raise ValueError(
                    f"duplicate entity key {normalized!r} in {entity_type} (already in {seen[normalized]})"
                )
            seen[normalized] = entity_type
            table.append(EntityPattern(compile_alias(alias), alias, entity_type, normalized))
    return tuple(table)


ENTITY_TABLE: tuple[EntityPattern, ...] = build_table()
