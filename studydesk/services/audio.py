"""Short audible cue played when a countdown finishes"""

import numpy as np

SAMPLE_RATE = 22050


def chime(frequencies=(880.0, 1320.0), note_seconds: float = 0.18, volume: float = 0.4,
          sample_rate: int = SAMPLE_RATE) -> np.ndarray:
    """Two-note chime as float32 samples in [-1, 1]"""
    samples_per_note = int(note_seconds * sample_rate)
    t = np.arange(samples_per_note) / sample_rate
    # Linear fade-out keeps the note end from clicking
    envelope = np.linspace(1.0, 0.0, samples_per_note)
    notes = [np.sin(2 * np.pi * f * t) * envelope for f in frequencies]
    return (np.concatenate(notes) * volume).astype(np.float32)
