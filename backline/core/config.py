from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Configuration for the backline replay engine."""

    # Named parameter set used when a caller does not pick one
    DEFAULT_REPLAY_CONFIG: str = "reference"

    # Reports written by scripts (the engine itself never writes)
    RESULTS_DIR: str = "backtest_results"

    # Grid search parallelism (joblib n_jobs)
    TUNER_N_JOBS: int = 1

    # App
    ENV: str = "local"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(levelname)s %(name)s: %(message)s"

    VERSION: str = "0.1.0"

    model_config = {"env_file": ".env", "env_prefix": "BACKLINE_"}


settings = Settings()
