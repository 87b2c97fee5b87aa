"""Constants for the configuration module."""

# Log component names
COMPONENT_CONFIG = "config"
COMPONENT_CLI = "cli"
COMPONENT_PIPELINE = "pipeline"

# Tolerance for ScoreWeights summing to 1.0
WEIGHT_SUM_TOLERANCE = 0.01

# Config file schema version pattern
CONFIG_VERSION_PATTERN = r"^\d+\.\d+$"
