"""
Read-only game catalog.

Each game carries the parameters settlement needs (rtp, volatility tier)
plus the bet limits checked at placement.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional


class Volatility(Enum):
    """Payout volatility tier."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# Payout multiplier applied to a winning bet, before the house edge
VOLATILITY_MULTIPLIERS = {
    Volatility.LOW: 1.5,
    Volatility.MEDIUM: 2.0,
    Volatility.HIGH: 3.0,
}

# Slots carry no explicit limits upstream
SLOTS_MIN_BET = 0.1
SLOTS_MAX_BET = 1000.0


@dataclass(frozen=True)
class GameParameters:
    """Immutable parameters of a single game."""
    game_id: str
    name: str
    category: str  # slots, table, original, live
    rtp: float
    volatility: Volatility
    min_bet: float
    max_bet: float
    lines: Optional[int] = None  # slots only
    reels: Optional[int] = None  # slots only

    @property
    def payout_multiplier(self) -> float:
        return VOLATILITY_MULTIPLIERS[self.volatility]

    def to_dict(self) -> dict:
        data = {
            "game_id": self.game_id,
            "name": self.name,
            "category": self.category,
            "rtp": self.rtp,
            "volatility": self.volatility.value,
            "min_bet": self.min_bet,
            "max_bet": self.max_bet,
        }
        if self.lines is not None:
            data["lines"] = self.lines
            data["reels"] = self.reels
        return data


def _slot(game_id: str, name: str, rtp: float, volatility: str, lines: int, reels: int) -> GameParameters:
    return GameParameters(
        game_id, name, "slots", rtp, Volatility(volatility),
        SLOTS_MIN_BET, SLOTS_MAX_BET, lines=lines, reels=reels,
    )


def _game(game_id: str, name: str, category: str, rtp: float, volatility: str,
          min_bet: float, max_bet: float) -> GameParameters:
    return GameParameters(game_id, name, category, rtp, Volatility(volatility), min_bet, max_bet)


_CATALOG = [
    # SLOT GAMES (1-10)
    _slot("001", "Diamond Rush", 0.96, "medium", 25, 5),
    _slot("002", "Gold Strike", 0.95, "high", 25, 5),
    _slot("003", "Crypto Kings", 0.97, "low", 20, 5),
    _slot("004", "Midnight Riches", 0.96, "medium", 30, 5),
    _slot("005", "Thunder Vault", 0.94, "high", 25, 5),
    _slot("006", "Emerald Flush", 0.97, "low", 15, 3),
    _slot("007", "Lucky Sevens", 0.95, "medium", 5, 3),
    _slot("008", "Aztec Treasures", 0.96, "high", 25, 5),
    _slot("009", "Cosmic Quest", 0.97, "medium", 20, 5),
    _slot("010", "Cartel Fortune", 0.96, "medium", 25, 5),

    # TABLE GAMES (11-25)
    _game("011", "Blackjack", "table", 0.99, "low", 1, 10000),
    _game("012", "European Roulette", "table", 0.973, "low", 1, 5000),
    _game("013", "American Roulette", "table", 0.947, "low", 1, 5000),
    _game("014", "Baccarat", "table", 0.985, "low", 1, 10000),
    _game("015", "Craps", "table", 0.986, "medium", 1, 5000),
    _game("016", "Poker - Texas Hold'em", "table", 0.98, "high", 10, 10000),
    _game("017", "Three Card Poker", "table", 0.966, "medium", 5, 5000),
    _game("018", "Pai Gow Poker", "table", 0.972, "medium", 5, 5000),
    _game("019", "Caribbean Stud", "table", 0.975, "high", 5, 5000),
    _game("020", "Keno", "table", 0.925, "high", 1, 1000),
    _game("021", "Bingo", "table", 0.940, "medium", 1, 500),
    _game("022", "Sic Bo", "table", 0.972, "medium", 1, 5000),
    _game("023", "Red Dog", "table", 0.961, "medium", 1, 1000),
    _game("024", "War Card Game", "table", 0.955, "low", 1, 500),
    _game("025", "Video Poker", "table", 0.99, "medium", 1, 10000),

    # ORIGINAL GAMES (26-37)
    _game("026", "Crash", "original", 0.99, "high", 0.01, 100),
    _game("027", "Plinko", "original", 0.97, "medium", 0.1, 50),
    _game("028", "Dice Roll", "original", 0.99, "medium", 0.01, 100),
    _game("029", "Coin Flip", "original", 0.99, "low", 0.01, 50),
    _game("030", "Wheel of Fortune", "original", 0.96, "high", 1, 100),
    _game("031", "Lucky Numbers", "original", 0.95, "high", 0.1, 100),
    _game("032", "Scratch Cards", "original", 0.94, "high", 0.5, 50),
    _game("033", "Treasure Hunt", "original", 0.97, "medium", 1, 100),
    _game("034", "Rock Paper Scissors", "original", 0.995, "low", 0.01, 50),
    _game("035", "Lightning Link", "original", 0.96, "high", 0.1, 100),
    _game("036", "Mystery Box", "original", 0.97, "high", 1, 100),
    _game("037", "Ladder Climb", "original", 0.96, "medium", 0.5, 50),

    # LIVE GAMES (38-47)
    _game("038", "Live Blackjack", "live", 0.99, "low", 10, 50000),
    _game("039", "Live Roulette", "live", 0.973, "low", 5, 25000),
    _game("040", "Live Baccarat", "live", 0.985, "low", 10, 50000),
    _game("041", "Live Poker", "live", 0.985, "high", 20, 50000),
    _game("042", "Live Craps", "live", 0.986, "medium", 10, 25000),
    _game("043", "Live Sic Bo", "live", 0.972, "medium", 5, 10000),
    _game("044", "Live Dragon Tiger", "live", 0.96, "low", 5, 10000),
    _game("045", "Live Pai Gow", "live", 0.972, "medium", 10, 25000),
    _game("046", "Live Caribbean Stud", "live", 0.975, "high", 10, 25000),
    _game("047", "Cartel VIP Suite", "live", 0.99, "medium", 100, 100000),
]

GAMES: Dict[str, GameParameters] = {game.game_id: game for game in _CATALOG}

CATEGORIES = ("slots", "table", "original", "live")


def get_game(game_id: str) -> Optional[GameParameters]:
    """Get game by ID, or None."""
    return GAMES.get(game_id)


def game_exists(game_id: str) -> bool:
    return game_id in GAMES


def get_games_by_category(category: str) -> List[GameParameters]:
    """All games in a category, in catalog order."""
    return [game for game in _CATALOG if game.category == category]


def list_games() -> List[GameParameters]:
    return list(_CATALOG)
