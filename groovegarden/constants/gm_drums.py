"""General MIDI Level 1 drum notes used by the rhythm voice.

Standard percussion assignments for channel 10 (0-indexed channel 9).
Only the three voices the engine plays are listed; any GM kit maps them.
"""

KICK_1 = 36
SNARE_1 = 38
HI_HAT_CLOSED = 42
