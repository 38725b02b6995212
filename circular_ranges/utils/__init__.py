from .config import DEFAULT_CONFIG, EditorConfig, load_config, save_config

__all__ = ["DEFAULT_CONFIG", "EditorConfig", "load_config", "save_config"]
