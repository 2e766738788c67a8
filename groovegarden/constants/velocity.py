"""MIDI velocity constants.

Velocity is the MIDI attack strength (0-127).  Each generated voice has a
fixed velocity so the mix stays stable while the grid evolves.
"""

KICK_VELOCITY = 100
SNARE_VELOCITY = 80
HI_HAT_VELOCITY = 60
MELODY_VELOCITY = 80
BASS_VELOCITY = 70
