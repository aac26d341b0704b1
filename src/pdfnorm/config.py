"""Configuration management for the PDF table normalizer."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Grid builder
    axis_tol: float = 2.0  # |dx| < axis_tol -> vertical, |dy| < axis_tol -> horizontal
    min_line_len: float = 2.0
    pos_merge_tol: float = 1.0
    seg_merge_gap: float = 1.0
    cover_slack: float = 1.0

    # Fragment assigner
    line_y_tol: float = 1.8
    min_fragment_overlap_ratio: float = 0.6
    box_inflate: float = 0.5
    word_gap_factor: float = 0.6

    # Table grouper (integer page points)
    edge_tol: int = 2
    overlap_tol: int = 1
    cluster_tol: int = 1

    # Renderers
    big_gap_factor: float = 1.5
    default_line_height: float = 10.0

    # Logging
    log_level: str = "INFO"

    class Config:
        env_prefix = "PDFNORM_"
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
