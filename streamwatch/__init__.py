"""Discord alerts for new Twitch streams of a single game."""

__version__ = "0.1.0"
