from ollama_pull.download.http import download
from ollama_pull.download.progress import NO_PROGRESS, NoProgress, ObserverProgress, ProgressDisplay
from ollama_pull.download.registry import RegistryConfig

__all__ = ["NO_PROGRESS", "NoProgress", "ObserverProgress", "ProgressDisplay", "RegistryConfig", "download"]
