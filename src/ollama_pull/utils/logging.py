from enum import Enum
import logging
import sys

PACKAGE_LOGGER = "ollama_pull"
LOG_FORMAT = "%(asctime)s %(levelname)-5s | %(name)s | %(message)s"


def get_logger(name: str, level: int = logging.DEBUG) -> logging.Logger:
    logger = logging.getLogger(name)
    logger.setLevel(level)
    return logger


def configure(level: int = logging.INFO, stream=None) -> logging.Handler:
    """Install a stream handler on the package logger and return it.

    The returned handler is the only global state this package creates; pass it
    to :func:`teardown` to remove it again.
    """
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.setLevel(level)
    logging.getLogger(PACKAGE_LOGGER).addHandler(handler)
    return handler


def teardown(handler: logging.Handler) -> None:
    logging.getLogger(PACKAGE_LOGGER).removeHandler(handler)
    handler.close()


class LogKey(str, Enum):
    """Categories emitted by the native inference engine's log callback."""

    KV_CACHE = "kv_cache"
    GRAPH_RESERVE = "graph_reserve"
    CONTEXT = "context"
    MODEL_LOADER = "model_loader"
    MODEL_LOAD = "model_load"
    CREATE_TENSOR = "create_tensor"
    CREATE_MEMORY = "create_memory"
    GGUF_INIT_FILE = "gguf_init_file"
    LOAD = "load"
    LOAD_TENSORS = "load_tensors"
    INIT_TOKENIZER = "init_tokenizer"
    PRINT_INFO = "print_info"
    SET_ABORT_CALLBACK = "set_abort_callback"
    REGISTER_BACKEND = "register_backend"
    REGISTER_DEVICE = "register_device"
    GGML_GALLOCR_RESERVE_N = "ggml_gallocr_reserve_n"
    GGML_METAL_DEVICE_INIT = "ggml_metal_device_init"
    GGML_METAL_LIBRARY_INIT = "ggml_metal_library_init"
    GGML_METAL_INIT = "ggml_metal_init"
    GGML_METAL_LIBRARY_COMPILE_PIPELINE = "ggml_metal_library_compile_pipeline"
    GGML_METAL_LOG_ALLOCATED_SIZE = "ggml_metal_log_allocated_size"
    UNKNOWN = "unknown"


_LOG_KEYS: dict[str, LogKey] = {
    "llama_kv_cache": LogKey.KV_CACHE,
    "llama_context": LogKey.CONTEXT,
    "llama_model_loader": LogKey.MODEL_LOADER,
    "llama_model_load": LogKey.MODEL_LOAD,
    "llama_model_load_from_file_impl": LogKey.MODEL_LOAD,
    "init_tokenizer": LogKey.INIT_TOKENIZER,
    "gguf_init_from_file_impl": LogKey.GGUF_INIT_FILE,
    "ggml_gallocr_reserve_n": LogKey.GGML_GALLOCR_RESERVE_N,
    "set_abort_callback": LogKey.SET_ABORT_CALLBACK,
    "load": LogKey.LOAD,
    "print_info": LogKey.PRINT_INFO,
    "load_tensors": LogKey.LOAD_TENSORS,
    "graph_reserve": LogKey.GRAPH_RESERVE,
    "create_tensor": LogKey.CREATE_TENSOR,
    "create_memory": LogKey.CREATE_MEMORY,
    "register_backend": LogKey.REGISTER_BACKEND,
    "register_device": LogKey.REGISTER_DEVICE,
    "ggml_metal_device_init": LogKey.GGML_METAL_DEVICE_INIT,
    "ggml_metal_library_init": LogKey.GGML_METAL_LIBRARY_INIT,
    "ggml_metal_init": LogKey.GGML_METAL_INIT,
    "ggml_metal_library_compile_pipeline": LogKey.GGML_METAL_LIBRARY_COMPILE_PIPELINE,
    "ggml_metal_log_allocated_size": LogKey.GGML_METAL_LOG_ALLOCATED_SIZE,
}


def classify(category: str) -> LogKey:
    return _LOG_KEYS.get(category, LogKey.UNKNOWN)
