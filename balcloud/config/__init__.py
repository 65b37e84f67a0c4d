from .cloud_toml import CLOUD_TOML, CloudToml, load_cloud_toml

__all__ = ["CLOUD_TOML", "CloudToml", "load_cloud_toml"]
