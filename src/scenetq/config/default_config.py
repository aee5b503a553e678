"""Default configuration values."""

# Quality targeting defaults
TARGET_QUALITY = 80.0  # Target mean SSIMULACRA2 score per scene
CYCLE = 10  # Trial encodes keep every n-th frame
ENCODER = "svt-av1"
SOURCE_FILTER = "bestsource"  # VapourSynth source plugin: bestsource, lsmash, dgdecnv
PIXEL_FORMAT = "yuv420p10le"
TILES = 8  # rav1e only
WORKERS = 4  # av1an workers

# Per-encoder defaults
ENCODER_DEFAULTS = {
    "svt-av1": {
        "quantizer": 40.0,  # --crf
        "speed": 4,  # final encode --preset
        "search_speed": 8,  # preset for trial encodes
        "quantizer_step": 7.5,
        "quantizer_range": (25.0, 55.0),
        "quality_compensation": 1.0,  # trial preset scores lower than final
    },
    "rav1e": {
        "quantizer": 100.0,  # --quantizer
        "speed": 2,
        "search_speed": 10,
        "quantizer_step": 30.0,
        "quantizer_range": (40.0, 160.0),
        "quality_compensation": 2.0,
    },
}

# Zone override structure
ZONE_PASSES = 1
ZONE_EXTRA_SPLIT_SEC = 10
ZONE_MIN_SCENE_LEN = 24

# Progress display
RUNNING_AVERAGE_WINDOW = 10
