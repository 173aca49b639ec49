from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── App ──────────────────────────────────────────────
    app_name: str = "reportd"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # ── Backend selection ────────────────────────────────
    backend: Literal["influxdb", "prometheus"] = "influxdb"

    # ── InfluxDB ─────────────────────────────────────────
    influxdb_url: str = "http://localhost:8086"
    influxdb_org: str = "my-org"
    influxdb_bucket: str = "clinic"
    influxdb_token: str = ""
    influxdb_timeout_ms: int = 10_000

    # ── Prometheus-compatible store (VictoriaMetrics) ────
    prometheus_url: str = "http://localhost:8428"
    prometheus_request_timeout: float = 30.0

    # ── Diagnosis ────────────────────────────────────────
    activation_measurement: str = "fast_tune_similarity"
    influxdb_activation_measurement: str = "fast-tune-similarity"
    activation_threshold: float = 0.5
    annotation_measurement: str = "fast_tune_anomaly"
    overview_measurement: str = "diagnosis_overview"
    dependency_graph_file: Path | None = None

    # ── Server ───────────────────────────────────────────
    host: str = "0.0.0.0"
    port: int = 8081


settings = Settings()
