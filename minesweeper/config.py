"""Environment-driven settings and the Temporal client factory."""
import os
import pathlib
import platform
from temporalio.client import Client
from temporalio.envconfig import ClientConfig

from minesweeper.best_times import BestTimeStore, FileStorage


def task_queue() -> str:
    return os.getenv("MINESWEEPER_TASK_QUEUE", "minesweeper-task-queue")


def server_port() -> int:
    return int(os.getenv("PORT", 3000))


def data_dir() -> pathlib.Path:
    configured = os.getenv("MINESWEEPER_DATA_DIR")
    if configured:
        return pathlib.Path(configured)
    return pathlib.Path.home() / ".minesweeper"


def best_time_store() -> BestTimeStore:
    """Best times shared by the worker (writes) and the server (reads)."""
    return BestTimeStore(FileStorage(data_dir()))


# Connects with the default settings, unless TEMPORAL_PROFILE names a
# profile in the Temporal config file.
async def get_temporal_client() -> Client:
    config_file_path = get_config_file_path()
    profile_name = os.getenv("TEMPORAL_PROFILE")
    if profile_name and config_file_path.is_file():
        connect_config = ClientConfig.load_client_connect_config(
            profile=profile_name,
            config_file=str(config_file_path),
        )
        return await Client.connect(**connect_config)
    return await Client.connect(
        os.getenv("TEMPORAL_ADDRESS", "localhost:7233"),
        namespace=os.getenv("TEMPORAL_NAMESPACE", "default"),
    )


# Platform default location of temporal.toml.
def get_config_file_path() -> pathlib.Path:
    home = pathlib.Path.home()
    system = platform.system()

    if system == "Darwin":
        return home / "Library/Application Support/temporalio/temporal.toml"
    if system == "Windows":
        app_data = os.getenv("AppData")
        if app_data is None:
            raise RuntimeError("AppData environment variable not set")
        return pathlib.Path(app_data) / "temporalio/temporal.toml"

    xdg_config_home = os.getenv("XDG_CONFIG_HOME")
    if xdg_config_home:
        return pathlib.Path(xdg_config_home) / "temporalio/temporal.toml"
    return home / ".config/temporalio/temporal.toml"
