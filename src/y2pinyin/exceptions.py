"""Custom exceptions for Y2Pinyin."""

class Y2PinyinError(Exception):
    """Base exception for Y2Pinyin."""
    pass

class ConfigError(Y2PinyinError):
    """Invalid configuration value."""
    pass

class ValidationError(Y2PinyinError):
    """Invalid input parameters."""
    pass

class LyricsError(Y2PinyinError):
    """Error fetching or processing lyrics."""
    pass

class LyricsFetchError(LyricsError):
    """Lyrics provider could not be reached or returned an error."""
    pass

class LyricsNotFoundError(LyricsFetchError):
    """Lyrics provider has no record for the requested id."""
    pass

class VideoMetadataError(Y2PinyinError):
    """Error looking up YouTube video metadata."""
    pass

class PlayerError(Y2PinyinError):
    """Error controlling the external video player."""
    pass

class PlayerUnavailableError(PlayerError):
    """The player control channel is missing, closed or not answering."""
    pass
