"""Timing profile schema."""

from pydantic import BaseModel, Field, model_validator


class TimingProfile(BaseModel):
    """Decay and autosave cadence, loaded from data/profiles/<name>.yaml."""
    name: str
    decay_window_seconds: float = Field(gt=0)  # full gauge -> 0 over this long
    decay_tick_seconds: float = Field(gt=0)
    autosave_interval_seconds: float = Field(gt=0)

    @model_validator(mode="after")
    def _tick_fits_window(self) -> "TimingProfile":
        if self.decay_tick_seconds > self.decay_window_seconds:
            raise ValueError("decay tick cannot be longer than the decay window")
        return self
