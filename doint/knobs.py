"""Tunable identifiers used across the doint system."""

# Custom emoji used by the casino games.
EMOJI_FREAKY_CANNY = 1344576228061089914
EMOJI_FERRIS_PARTY = 1207482672927084606
EMOJI_UNCANNY = 1254590987851006003
EMOJI_TRUE = 1144668425432596480
EMOJI_BLUNDER = 1301065330302390324
EMOJI_BOOK = 1301065337688559626
EMOJI_BRILLIANT = 1301065339295236137
EMOJI_ANIMATED_ULTRA_FLUSH = 846049473574207551