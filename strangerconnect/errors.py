class MatchmakingError(Exception):
    """Base class for rejections raised inside the matchmaking core."""


class InvalidPair(MatchmakingError):
    """A room was requested for an identity paired with itself."""


class NoTarget(MatchmakingError):
    """A report named a room with no other participant left in it."""


class NotInRoom(MatchmakingError):
    """An event was addressed to a room the sender is not part of."""


class OversizedPayload(MatchmakingError):
    pass


class DisallowedFileType(MatchmakingError):
    pass


class ConfigError(ValueError):
    pass
