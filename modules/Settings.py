from dataclasses import dataclass, field
from typing import Any, TypeVar, cast, get_type_hints
from typing_extensions import get_args, get_origin

from enum import Enum
import json
import dataclasses

from modules.ConfigBase import ConfigBase, ConfigError, config_field
from modules.fluid.FluidConfig import FluidConfig

T = TypeVar("T")


@dataclass
class DriverConfig(ConfigBase):
    """Headless driver: tick budget and the scripted pointer."""

    ticks: int = config_field(600, min=1, description="Number of ticks to run")
    fps: float = config_field(60.0, min=0.0, description="Tick rate, 0 runs as fast as possible")
    orbit_radius: float = config_field(0.25, min=0.0, max=0.5, description="Pointer orbit radius, normalised to the window")
    orbit_speed: float = config_field(0.5, description="Pointer orbit speed in turns per second")
    seed: bool = config_field(True, description="Start with a density blob in the centre")
    seed_radius: float = config_field(16.0, min=0.0, description="Seed blob radius in cells")
    output: str = config_field("", description="Write final fields to this .npz file")

    def __post_init__(self) -> None:
        super().__post_init__()
        self.check_ranges()


@dataclass
class Settings():
    fluid: FluidConfig = field(default_factory=FluidConfig)
    driver: DriverConfig = field(default_factory=DriverConfig)

    def save(self, path: str) -> None:
        with open(path, "w") as f:
            json.dump(Settings.serialize(self), f, indent=2)

    @classmethod
    def load(cls, path: str) -> 'Settings':
        with open(path, "r") as f:
            data = json.load(f)
        return Settings.deserialize(data, Settings)

    @staticmethod
    def serialize(obj) -> Any:
        if isinstance(obj, Enum):
            return obj.name
        if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
            return {k: Settings.serialize(v) for k, v in dataclasses.asdict(obj).items()}
        if isinstance(obj, dict):
            return {k: Settings.serialize(v) for k, v in obj.items()}
        if isinstance(obj, (list, tuple)):
            return [Settings.serialize(v) for v in obj]
        return obj

    @staticmethod
    def deserialize(data: Any, target_type: type[T]) -> T:
        if dataclasses.is_dataclass(target_type):
            if not isinstance(data, dict):
                raise ConfigError(f"expected an object for {target_type.__name__}, got {data!r}")
            field_types: dict[str, Any] = get_type_hints(target_type)
            init_fields: set[str] = {f.name for f in dataclasses.fields(target_type) if f.init}
            kwargs: dict[str, Any] = {}
            for key, value in data.items():
                if key not in init_fields:
                    raise ConfigError(f"unknown setting '{key}' for {target_type.__name__}")
                kwargs[key] = Settings.deserialize(value, field_types[key])
            return cast(T, target_type(**kwargs))

        origin: Any = get_origin(target_type)
        if origin in (list, tuple):
            args: tuple[Any, ...] = get_args(target_type)
            if args:
                items = [Settings.deserialize(item, args[0]) for item in data]
                return cast(T, origin(items))

        if isinstance(target_type, type) and issubclass(target_type, Enum):
            try:
                return target_type[data]
            except KeyError:
                raise ConfigError(f"'{data}' is not a valid {target_type.__name__}") from None

        if target_type is float and isinstance(data, int) and not isinstance(data, bool):
            return cast(T, float(data))

        return cast(T, data)
