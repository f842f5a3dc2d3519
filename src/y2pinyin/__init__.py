"""Y2Pinyin - follow Chinese songs on YouTube with synced pinyin lyrics."""

__version__ = "1.0.0"
