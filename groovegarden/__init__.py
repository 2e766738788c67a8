"""
Groove Garden - algorithmic music from a growing grid.

An 8x8 grid of cells is the whole score.  Active cells drive the rhythm
(more cells, more pulses) and can be tagged to shape the melody.  A Conway
style cellular automaton grows the grid as it plays, so a few seeds turn
into an evolving groove.  Output is pure MIDI: no audio engine, just note
events for hardware synths, drum machines or software instruments.

How it plays:

- **Rhythm.** Grid density picks a pulse count, and a Euclidean
  distributor spreads the pulses across a 16-step bar.  Kick on the beat,
  snare on the "and", closed hi-hat on every pulse.
- **Melody.** An order-N Markov model walks the degrees of the active
  scale (C Dorian, C Ionian or A Minor), one note per step, rising an
  octave in the second half of each bar.
- **Growth.** Every step runs one generation of B3/S23 over the grid.
  Cells are born but never die, so the groove thickens over time.
- **Scores.** A background engine rates what was played for diversity,
  flow and harmony, about once a second.
- **Export.** Render a fixed number of bars to a standard MIDI file
  without waiting for real-time playback.

Integration:

- **OSC.** Enable with ``garden.osc()`` to control tempo, scale and the
  grid from a mixer, tablet or visuals rig, and to receive bar, tempo and
  score updates.
- **Config.** Settings load from ``groove_garden.yaml``; see
  ``groovegarden.config``.

Minimal example:

    ```python
    import groovegarden

    garden = groovegarden.Garden(tempo=120, scale="C Dorian")

    for col in range(3, 6):
        garden.toggle_cell(4, col)

    garden.play()
    ```

Package-level exports: ``Garden``, ``GridModel``, ``Layer``, ``Scale``,
``Scores``, ``get_scale``, ``load_settings``.
"""

import groovegarden.config
import groovegarden.garden
import groovegarden.grid
import groovegarden.scales
import groovegarden.score_engine


Garden = groovegarden.garden.Garden
GridModel = groovegarden.grid.GridModel
Layer = groovegarden.grid.Layer
Scale = groovegarden.scales.Scale
Scores = groovegarden.score_engine.Scores
get_scale = groovegarden.scales.get_scale
load_settings = groovegarden.config.load_settings
