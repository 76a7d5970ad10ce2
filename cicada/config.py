"""Configuration for the CICADA retrieval engine."""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .models import SearchOptions


@dataclass
class CicadaConfig:
    """Configuration for the CICADA retrieval engine."""

    # Embedding settings (must match the model used at ingestion)
    embedding_provider: str = "openai"
    embedding_model: str = "text-embedding-3-small"
    embedding_dim: int = 1536

    # Search settings
    default_top_k: int = 10
    default_min_score: float = 0.7

    # Passage store root (contains embeddings/<episode>/<chapter>/<id>.json)
    data_dir: str = "data"

    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "CicadaConfig":
        """Build a config from ``CICADA_*`` environment variables."""
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            embedding_provider=env.get("CICADA_EMBEDDING_PROVIDER", defaults.embedding_provider),
            embedding_model=env.get("CICADA_EMBEDDING_MODEL", defaults.embedding_model),
            embedding_dim=int(env.get("CICADA_EMBEDDING_DIM", defaults.embedding_dim)),
            default_top_k=int(env.get("CICADA_TOP_K", defaults.default_top_k)),
            default_min_score=float(env.get("CICADA_MIN_SCORE", defaults.default_min_score)),
            data_dir=env.get("CICADA_DATA_DIR", defaults.data_dir),
            log_level=env.get("CICADA_LOG_LEVEL", defaults.log_level).upper(),
        )

    def default_options(self) -> SearchOptions:
        return SearchOptions(top_k=self.default_top_k, min_score=self.default_min_score)
