"""Paper size scaling used when printing calendar pages."""

from pydantic import BaseModel, ConfigDict

HOUR_HEIGHT = 50
DEFAULT_PAPER_SIZE = "letter"


class PaperScaleConfig(BaseModel):
    """Scale factor and text sizes for one paper size."""

    model_config = ConfigDict(frozen=True)

    scale_factor: float
    shift_text_size: str
    shift_time_size: str


_STANDARD = PaperScaleConfig(scale_factor=0.94, shift_text_size="11px", shift_time_size="10px")

PAPER_SCALE_CONFIG: dict[str, PaperScaleConfig] = {
    "letter": _STANDARD,
    "legal": _STANDARD,
    "a4": _STANDARD,
    "tabloid": PaperScaleConfig(scale_factor=1.25, shift_text_size="16px", shift_time_size="14px"),
}


def get_paper_config(paper_size: str) -> PaperScaleConfig:
    """Scale configuration for ``paper_size``; unknown sizes use letter."""
    return PAPER_SCALE_CONFIG.get(paper_size, PAPER_SCALE_CONFIG[DEFAULT_PAPER_SIZE])
