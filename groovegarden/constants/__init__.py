"""Constants for Groove Garden.

- ``groovegarden.constants.gm_drums`` - the General MIDI drum notes the engine plays
- ``groovegarden.constants.velocity`` - per-voice velocities

Timing and channel constants live here directly.  Playback is step based
(one tick per 16th note); export works in MIDI ticks at 480 per beat.
"""

GRID_SIZE = 8
STEPS_PER_BAR = 16
BEATS_PER_BAR = 4
STEPS_PER_BEAT = STEPS_PER_BAR // BEATS_PER_BAR

# Export resolution
TICKS_PER_BEAT = 480
TICKS_PER_STEP = TICKS_PER_BEAT // STEPS_PER_BEAT

# Fixed channel assignment (zero-indexed)
MELODY_CHANNEL = 0
BASS_CHANNEL = 1
DRUM_CHANNEL = 9

# GM programs sent when a live port opens
MELODY_PROGRAM = 0   # Acoustic Grand Piano
BASS_PROGRAM = 32    # Acoustic Bass

# Tempo range in BPM
DEFAULT_TEMPO = 120
MIN_TEMPO = 60
MAX_TEMPO = 180

MELODY_HISTORY_LENGTH = 8
MELODY_BASE_OCTAVE = 4
BASS_OCTAVE = 2

# Pulse count reached by a completely full grid
MAX_PULSES = 8
