import os

from dotenv import load_dotenv

# Load from .env if it exists (useful for local development)
load_dotenv()

LOGGING_LEVEL = os.getenv("LOGGING_LEVEL", "INFO").upper() or "INFO"

# Placeholders written when neither the tag nor the oracle knows better
UNKNOWN_ARTIST = os.getenv("TAGFIXER_UNKNOWN_ARTIST", "不明なアーティスト")
UNKNOWN_ALBUM = os.getenv("TAGFIXER_UNKNOWN_ALBUM", "不明なアルバム")

# --- LLM oracle ---
LLM_PROVIDER = os.getenv("TAGFIXER_LLM_PROVIDER", "openai")
LLM_MODEL = os.getenv("TAGFIXER_LLM_MODEL", "gpt-4o-mini")
LLM_TIMEOUT_S = float(os.getenv("TAGFIXER_LLM_TIMEOUT_S", "30"))

# --- ffmpeg ---
FFMPEG_BIN = os.getenv("FFMPEG_BIN", "ffmpeg")
CODEC_TIMEOUT_S = float(os.getenv("TAGFIXER_CODEC_TIMEOUT_S", "600"))
MP3_BITRATE = "192k"
SILENCE_NOISE_DB = "-30dB"
SILENCE_MIN_DURATION_S = 2

# --- batch / output ---
ARCHIVE_NAME = "music_collection.zip"
MAX_WORKERS = int(os.getenv("TAGFIXER_MAX_WORKERS", "1"))
