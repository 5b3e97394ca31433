"""
Snowflake Parameter Presets

Each preset defines a lattice size, the three physical parameters and
their randomization spreads, plus how the lattice is seeded. "classic"
matches the long-standing defaults (alpha 1.0, beta 0.4, gamma 0.0001).
"""

PRESETS = {
    "classic": {
        "name": "Classic Dendrite",
        "description": "Six-armed dendrite from a single centre seed",
        "width": 100, "height": 100,
        "alpha": 1.0, "beta": 0.4, "gamma": 0.0001,
        "seed": "center",
    },
    "plate": {
        "name": "Sectored Plate",
        "description": "Slow diffusion, compact plate with faint ridges",
        "width": 100, "height": 100,
        "alpha": 0.5, "beta": 0.35, "gamma": 0.001,
        "seed": "center",
    },
    "fern": {
        "name": "Fernlike Stellar",
        "description": "High vapor, fast side branching",
        "width": 150, "height": 150,
        "alpha": 1.0, "beta": 0.6, "gamma": 0.0001,
        "seed": "center",
    },
    "rough": {
        "name": "Rough Stellar",
        "description": "Randomized diffusion breaks the six-fold symmetry",
        "width": 100, "height": 100,
        "alpha": 0.9, "beta": 0.4, "gamma": 0.0005,
        "alpha_rand": 0.3,
        "seed": "center", "random_seed": 12831321,
    },
    "blank": {
        "name": "Empty Chamber",
        "description": "No seed crystal, place one by hand",
        "width": 100, "height": 100,
        "alpha": 1.0, "beta": 0.4, "gamma": 0.0001,
        "seed": "none",
    },
}

PRESET_ORDER = ["classic", "plate", "fern", "rough", "blank"]


def get_preset(name):
    """Get a copy of a preset by name. Returns None if not found."""
    preset = PRESETS.get(name)
    return dict(preset) if preset is not None else None


def list_presets():
    """Return list of (key, name, description) for presets."""
    return [(k, PRESETS[k]["name"], PRESETS[k]["description"])
            for k in PRESET_ORDER if k in PRESETS]
