"""powdercast: multi-model mountain forecasts with elevation-corrected snowfall."""

__version__ = "0.1.0"
